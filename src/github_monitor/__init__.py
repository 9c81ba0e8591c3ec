"""GitHub Monitor - keep a local database in sync with GitHub commit history."""

__version__ = "0.1.0"
