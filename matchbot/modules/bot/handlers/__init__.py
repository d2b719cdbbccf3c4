"""Bot command handlers."""
