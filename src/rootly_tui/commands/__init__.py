"""Built-in CLI commands: one-shot data access, cache and config groups."""
