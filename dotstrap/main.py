"""
dotstrap — CLI entrypoint.

Usage:
    dotstrap
    dotstrap --verbose
    python -m dotstrap.main --config path/to/dotstrap.yml

One command, no subcommands: every invocation runs the whole
provisioning pipeline. Exit 0 on success, 1 on the first fatal step.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click

from dotstrap import __version__
from dotstrap.core.observability.logging_config import setup_logging, success

logger = logging.getLogger("dotstrap")


@click.command()
@click.version_option(version=__version__, prog_name="dotstrap")
@click.option("--verbose", "-v", is_flag=True, help="Also log external commands.")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to dotstrap.yml (default: auto-detect, else built-in profile).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the run result as JSON.")
def cli(
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    as_json: bool,
) -> None:
    """dotstrap — bootstrap this machine from a dotfiles repository."""
    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "VERBOSE"
    elif quiet:
        level = "WARNING"
    else:
        level = os.environ.get("DOTSTRAP_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("DOTSTRAP_LOG_FILE"),
        log_file_level=os.environ.get("DOTSTRAP_LOG_FILE_LEVEL"),
    )

    from dotstrap.core.use_cases.install import run_install

    try:
        result = run_install(config_path=Path(config_path) if config_path else None)
    except Exception:
        logger.error("Installation failed with an unexpected error", exc_info=debug)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(1)

    pipeline = result.pipeline
    assert pipeline is not None

    if not pipeline.ok:
        failed = pipeline.get(pipeline.aborted_at or "")
        logger.error("Installation aborted at %s", pipeline.aborted_at)
        if failed and failed.output and failed.output not in failed.message:
            click.echo(failed.output, err=True)
        logger.info("Fix the problem above and run dotstrap again; completed steps will be skipped.")
        sys.exit(1)

    click.echo(err=True)
    if pipeline.failed:
        logger.warning(
            "Installation completed with %d non-fatal failure(s)", pipeline.failed
        )
    else:
        success(logger, "Installation completed successfully!")
    logger.info(
        "%d performed, %d already satisfied, %d failed",
        pipeline.performed, pipeline.skipped, pipeline.failed,
    )

    profile = result.profile
    if profile and profile.shell and pipeline.performed:
        shell = profile.shell.command
        click.echo(err=True)
        logger.info("To start using the new configuration:")
        logger.info("  1. Restart your terminal, or")
        for cfg in profile.config_files:
            logger.info("  2. Run: source %s", cfg.target)
        logger.info("  3. Consider changing your default shell: chsh -s /bin/%s", shell)


if __name__ == "__main__":
    cli()
