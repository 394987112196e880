"""Shared utilities for cinecatalog."""
