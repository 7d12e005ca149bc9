"""Hyprvoice - voice dictation daemon core: live configuration and text injection."""

__version__ = "0.1.0"
