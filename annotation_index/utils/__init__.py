"""Shared utilities for the annotation indexer."""
