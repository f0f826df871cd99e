"""Live terminal monitor for Icecream distributed compile clusters."""

__version__ = "0.1.0"
