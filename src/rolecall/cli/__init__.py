"""Command-line interface for Rolecall."""
