"""
End-to-end parse of a CSV payload into an EpisodeParseResult.

Orchestrates tokenize → validate header → validate/build rows → sort. Bad
rows are skipped and counted; only an empty payload aborts the parse.
"""

from typing import Any, Dict, List, Optional

from podstats.config import DEFAULT_INGESTION_CONFIG
from podstats.errors import EmptyInputError
from podstats.ingestion.normalizer import (
    build_episode,
    parse_published_date,
    sort_episodes_by_published,
)
from podstats.ingestion.tokenizer import parse_csv_line, split_lines
from podstats.ingestion.validator import validate_header, validate_row_fields
from podstats.logger import get_default_logger
from podstats.models import EPISODE_COLUMNS, Episode, EpisodeParseResult, RowRejection


logger = get_default_logger()


BYTE_ORDER_MARK = "\ufeff"


def skipped_rows_warning(skipped_count: int) -> str:
    """Aggregate warning appended when at least one row was rejected."""
    noun = "row" if skipped_count == 1 else "rows"
    return f"Skipped {skipped_count} invalid {noun} (missing fields or unparseable dates)"


class EpisodeParser:
    """
    Parser for the episode metrics CSV export.

    Rows are read positionally: slug, title, published, day1, day7, day14,
    day30, day90, spotify, all_time. The header is only checked to produce an
    advisory warning.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize parser.

        Args:
            config: Ingestion configuration (default: built-in ingestion defaults)
        """
        config = config or DEFAULT_INGESTION_CONFIG
        self.accepted_headers: List[str] = list(
            config.get("accepted_headers", DEFAULT_INGESTION_CONFIG["accepted_headers"])
        )
        # Rows are built from ten positional columns, so never accept fewer
        self.min_fields: int = max(
            int(config.get("min_fields", DEFAULT_INGESTION_CONFIG["min_fields"])),
            len(EPISODE_COLUMNS),
        )

    def parse(self, raw_text: str) -> EpisodeParseResult:
        """
        Parse a CSV payload.

        Args:
            raw_text: Full text of the export, header line first

        Returns:
            EpisodeParseResult with episodes sorted newest first

        Raises:
            EmptyInputError: If the payload is empty or whitespace-only

        Example:
            >>> parser = EpisodeParser()
            >>> result = parser.parse(open("metrics.csv").read())
            >>> result.skipped_count
            0
        """
        if raw_text.startswith(BYTE_ORDER_MARK):
            raw_text = raw_text[len(BYTE_ORDER_MARK):]

        if not raw_text.strip():
            raise EmptyInputError("CSV payload is empty")

        lines = split_lines(raw_text)
        warnings: List[str] = []

        header_warning = validate_header(lines[0], self.accepted_headers)
        if header_warning:
            warnings.append(header_warning)

        episodes: List[Episode] = []
        rejections: List[RowRejection] = []

        for line_number, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue

            episode, reason = self._build_row(line)
            if episode is None:
                logger.warning(f"Skipping CSV line {line_number}: {reason}")
                rejections.append(RowRejection(line_number=line_number, reason=reason, line=line))
                continue

            episodes.append(episode)

        if rejections:
            warnings.append(skipped_rows_warning(len(rejections)))

        sorted_episodes = sort_episodes_by_published(episodes)

        logger.info(
            f"Parsed {len(sorted_episodes)} episodes "
            f"({len(rejections)} skipped, {len(warnings)} warnings)"
        )

        return EpisodeParseResult(
            episodes=tuple(sorted_episodes),
            skipped_count=len(rejections),
            warnings=tuple(warnings),
            rejections=tuple(rejections),
        )

    def _build_row(self, line: str):
        """Return (episode, None) for an accepted row or (None, reason)."""
        fields = parse_csv_line(line)

        reason = validate_row_fields(fields, min_fields=self.min_fields)
        if reason:
            return None, reason

        published = parse_published_date(fields[2])
        if published is None:
            return None, f"unparseable published date {fields[2]!r}"

        return build_episode(fields, published), None


_default_parser: Optional[EpisodeParser] = None


def parse_episodes(raw_text: str, config: Optional[Dict[str, Any]] = None) -> EpisodeParseResult:
    """
    Convenience function to parse a CSV payload.

    Args:
        raw_text: Full text of the export
        config: Optional ingestion configuration

    Returns:
        EpisodeParseResult

    Raises:
        EmptyInputError: If the payload is empty
    """
    global _default_parser
    if config is not None:
        return EpisodeParser(config).parse(raw_text)
    if _default_parser is None:
        _default_parser = EpisodeParser()
    return _default_parser.parse(raw_text)
