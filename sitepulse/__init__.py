"""sitepulse - command-line front end for sitepulse-core."""

__version__ = "0.1.0"
