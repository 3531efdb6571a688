"""Command-line tools for rfcascade."""
