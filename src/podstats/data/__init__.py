"""Bundled default dataset."""
