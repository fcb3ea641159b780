"""
Podcast Episode Metrics

Ingests podcast episode performance exports (CSV) into a structured in-memory
model and derives topic clusters, retention ratios, and performance tiers for
presentation layers. Uploaded datasets are persisted and restored with
corruption recovery.
"""

__version__ = "0.1.0"
