"""Command-line interface for GitHub Monitor."""
