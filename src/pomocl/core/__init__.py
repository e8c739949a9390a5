"""Core timer logic for pomocl."""
