"""The three CI flows exposed by the CLI."""
