"""Runtime helpers for the HTTP application."""
