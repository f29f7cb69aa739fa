"""Atelier: conversation core for a styling assistant."""

__version__ = "0.1.0"
