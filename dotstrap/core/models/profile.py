"""
Profile model — what a run should install, loaded from dotstrap.yml.

Every field has a default, and the defaults describe the stock
dotfiles setup: Arch Linux, zsh + Oh My Zsh with two plugins, a small
CLI toolbox, a Rust toolchain, the ``meow`` binary built from the
``thirdparty/meow`` submodule, and ``.zshrc`` copied into HOME.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

OH_MY_ZSH_INSTALLER = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"


def _parse_mode(value: object) -> object:
    """Accept ``"0644"`` / ``"644"`` strings as octal file modes."""
    if isinstance(value, str):
        return int(value, 8)
    return value


class ToolSpec(BaseModel):
    """An executable expected on PATH, and the package that provides it."""

    command: str
    package: str = ""

    @property
    def provider(self) -> str:
        return self.package or self.command


class FrameworkSpec(BaseModel):
    """A shell framework installed by a fetched installer script."""

    name: str = "oh-my-zsh"
    marker_dir: str = "~/.oh-my-zsh"
    installer_url: str = OH_MY_ZSH_INSTALLER
    installer_args: list[str] = Field(default_factory=lambda: ["--unattended"])


class PluginSpec(BaseModel):
    """A git-hosted shell plugin cloned into the plugins directory."""

    name: str
    repo: str
    fatal: bool = False


class BuildSpec(BaseModel):
    """A binary built from a nested source tree."""

    name: str
    source_dir: str
    manifest: str = "Cargo.toml"
    build_command: list[str] = Field(default_factory=lambda: ["cargo", "build", "--release"])
    output: str = ""
    install_path: str = ""
    mode: int = 0o755
    fatal: bool = True

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, value: object) -> object:
        return _parse_mode(value)

    @property
    def output_rel(self) -> str:
        return self.output or f"target/release/{self.name}"

    @property
    def install_target(self) -> str:
        return self.install_path or f"/usr/local/bin/{self.name}"


class ConfigFileSpec(BaseModel):
    """A configuration file copied from the repository into place."""

    source: str
    target: str
    mode: int = 0o644

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, value: object) -> object:
        return _parse_mode(value)


def _default_plugins() -> list[PluginSpec]:
    return [
        PluginSpec(
            name="zsh-syntax-highlighting",
            repo="https://github.com/zsh-users/zsh-syntax-highlighting.git",
        ),
        PluginSpec(
            name="zsh-autosuggestions",
            repo="https://github.com/zsh-users/zsh-autosuggestions.git",
        ),
    ]


class Profile(BaseModel):
    """Root of dotstrap.yml."""

    version: int = 1
    name: str = "dotfiles"

    package_manager: Literal["pacman", "apt", "dnf", "zypper", "apk", "brew"] = "pacman"
    platform_marker: str | None = "/etc/arch-release"
    assume_yes: bool = False
    system_upgrade: bool = True

    shell: ToolSpec | None = Field(default_factory=lambda: ToolSpec(command="zsh"))
    framework: FrameworkSpec | None = Field(default_factory=FrameworkSpec)
    plugins_dir: str = "~/.oh-my-zsh/custom/plugins"
    plugins: list[PluginSpec] = Field(default_factory=_default_plugins)

    packages: list[str] = Field(
        default_factory=lambda: ["ripgrep", "fzf", "htop", "micro", "git"]
    )
    optional_packages: list[str] = Field(default_factory=list)
    toolchains: list[ToolSpec] = Field(
        default_factory=lambda: [ToolSpec(command="cargo", package="rust")]
    )

    submodules: bool = True
    builds: list[BuildSpec] = Field(
        default_factory=lambda: [BuildSpec(name="meow", source_dir="thirdparty/meow")]
    )
    config_files: list[ConfigFileSpec] = Field(
        default_factory=lambda: [ConfigFileSpec(source=".zshrc", target="~/.zshrc")]
    )
