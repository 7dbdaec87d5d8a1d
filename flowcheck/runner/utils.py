import re
from datetime import UTC, datetime


def slugify(text: str) -> str:
    """Lowercase text and collapse anything outside [a-z0-9] into single dashes."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def utc_stamp(moment: datetime | None = None) -> str:
    """Filesystem-safe UTC timestamp, e.g. 2026-01-31T12-00-00-000000+00-00."""
    moment = moment or datetime.now(UTC)
    return re.sub(r"[:.]", "-", moment.isoformat())
