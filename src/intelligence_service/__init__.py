"""Flashlight intelligence service: preference-matched recommendation runs."""

__version__ = "1.0.0"
