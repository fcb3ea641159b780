"""
CSV ingestion: tokenize, validate, build and sort episode records.
"""

from podstats.ingestion.pipeline import EpisodeParser, parse_episodes
from podstats.ingestion.tokenizer import parse_csv_line

__all__ = ["EpisodeParser", "parse_episodes", "parse_csv_line"]
