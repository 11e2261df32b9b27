"""Handlers applying decoded gateway events to client state."""
