# lexsearch/infrastructure/export_naming.py

from datetime import datetime, timezone
from typing import Optional


EXPORT_PREFIX = "lexical-search-results"


def build_export_filename(extension: str, now: Optional[datetime] = None) -> str:
    """
    Timestamp-suffixed artifact name, e.g.
    lexical-search-results-2024-05-01T13-45-09.pdf (UTC, second precision).
    """
    moment = now or datetime.now(timezone.utc)
    timestamp = moment.strftime("%Y-%m-%dT%H-%M-%S")
    return f"{EXPORT_PREFIX}-{timestamp}.{extension.lstrip('.')}"
