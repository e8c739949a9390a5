"""Command-line interface for pomocl."""
