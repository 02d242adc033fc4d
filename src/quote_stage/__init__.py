"""Quote Stage: quote submission, voting and feed service."""

__version__ = "0.1.0"
