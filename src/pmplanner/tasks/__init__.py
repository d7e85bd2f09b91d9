"""Task model and dependency validation."""
