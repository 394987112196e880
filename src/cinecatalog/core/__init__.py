"""Catalog engine: parsing, normalization, deduplication and ranking."""
