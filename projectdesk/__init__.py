"""projectdesk: challenge catalog, applications, submissions and review."""

__version__ = "0.1.0"
