"""
Header and row validation for the CSV export.

Header validation is advisory: a mismatch produces a warning but rows are
still read positionally. Row validation decides whether a tokenized line can
become an Episode.
"""

from typing import Iterable, List, Optional, Sequence

from podstats.config import DEFAULT_INGESTION_CONFIG
from podstats.logger import get_default_logger


logger = get_default_logger()


MIN_FIELDS = DEFAULT_INGESTION_CONFIG["min_fields"]

# Text fields that must be present for a row to be accepted (positional index)
REQUIRED_TEXT_FIELDS = {
    0: "slug",
    1: "title",
    2: "published",
}


def normalize_header(line: str) -> str:
    """
    Normalize a header line for comparison.

    Quote characters are stripped, each column name is trimmed and lowercased,
    and columns are re-joined with a bare comma.

    Example:
        >>> normalize_header('"Slug", "Title" ,Published')
        'slug,title,published'
    """
    unquoted = line.replace('"', "").strip()
    return ",".join(column.strip().lower() for column in unquoted.split(","))


def validate_header(
    line: str,
    accepted_headers: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """
    Compare a header line against the accepted column-name variants.

    Args:
        line: First line of the payload
        accepted_headers: Accepted header strings (default: configured variants)

    Returns:
        None if the header matches a variant, otherwise a warning message

    Example:
        >>> validate_header("Slug,Title,Published,1 Day,7 Days,14 Days,30 Days,90 Days,Spotify,All Time")
        >>> validate_header("id,name") is not None
        True
    """
    if accepted_headers is None:
        accepted_headers = DEFAULT_INGESTION_CONFIG["accepted_headers"]

    normalized = normalize_header(line)
    accepted = {normalize_header(header) for header in accepted_headers}

    if normalized in accepted:
        return None

    logger.warning(f"Unrecognized CSV header: {line.strip()!r}")
    return (
        "CSV header does not match the expected format; "
        "columns will be read by position "
        "(Slug, Title, Published, Day 1, Day 7, Day 14, Day 30, Day 90, Spotify, All Time)"
    )


def validate_row_fields(
    fields: Sequence[str],
    min_fields: int = MIN_FIELDS,
) -> Optional[str]:
    """
    Check that a tokenized row can be built into an Episode.

    Date parsing is checked separately by the normalizer.

    Args:
        fields: Tokenized, trimmed field values
        min_fields: Minimum number of fields required

    Returns:
        None if the row is structurally valid, otherwise the rejection reason
    """
    if len(fields) < min_fields:
        return f"expected at least {min_fields} fields, found {len(fields)}"

    missing: List[str] = [
        name for index, name in REQUIRED_TEXT_FIELDS.items() if not fields[index].strip()
    ]
    if missing:
        return f"missing required field(s): {', '.join(missing)}"

    return None
