"""Pomocl - work/break interval timer for the command line."""

__version__ = "0.1.0"
