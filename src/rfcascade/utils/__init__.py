"""Shared utilities for rfcascade."""
