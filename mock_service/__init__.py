"""Mock NBA backend serving JSON fixtures with request-dependent transforms."""

__version__ = "0.3.0"
