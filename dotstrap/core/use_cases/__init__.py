"""Use cases — top-level operations invoked by the CLI."""
