"""Command implementations behind the ``portfolio`` CLI."""
