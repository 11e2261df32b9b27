"""In-memory state owned by channel instances."""
