"""
Data models for runalyze_dump.

- ActivityInfo: one activity found in a week of the data browser
- DownloadResult: outcome of materialising one activity as a file
- DownloadSummary: aggregate over a run
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

FILE_TYPE_FIT = "fit"
FILE_TYPE_TCX = "tcx"
FILE_TYPE_NONE = "none"

UNKNOWN_TYPE = "unknown"
UNKNOWN_EMOJI = "❓"


@dataclass(frozen=True)
class ActivityInfo:
    """An activity listed in one Monday-to-Sunday week."""
    id: str
    type: str
    type_emoji: str
    week_start: date
    week_end: date
    date: Optional[str] = None  # YYYY-MM-DD
    distance_km: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "type_emoji": self.type_emoji,
            "date": self.date,
            "distance_km": self.distance_km,
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
        }


@dataclass
class DownloadResult:
    """Result of downloading a single activity."""
    activity_id: str
    success: bool
    file_type: str  # "fit", "tcx" or "none"
    file_path: Optional[str] = None
    error: Optional[Exception] = None
    existed: bool = False  # file was already on disk


@dataclass
class DownloadSummary:
    """Overall download results."""
    since: Optional[date] = None
    until: Optional[date] = None
    processed: int = 0
    errors: int = 0
    results: List[DownloadResult] = field(default_factory=list)

    def add(self, result: DownloadResult) -> None:
        self.results.append(result)
        self.processed += 1
        if not result.success:
            self.errors += 1

    @property
    def downloaded(self) -> int:
        return sum(1 for r in self.results if r.success and not r.existed)

    @property
    def existed(self) -> int:
        return sum(1 for r in self.results if r.existed)

    @property
    def unavailable(self) -> int:
        return sum(1 for r in self.results if r.file_type == FILE_TYPE_NONE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "processed": self.processed,
                "errors": self.errors,
                "downloaded": self.downloaded,
                "existed": self.existed,
                "unavailable": self.unavailable,
            },
            "date_range": {
                "since": self.since.isoformat() if self.since else None,
                "until": self.until.isoformat() if self.until else None,
            },
        }
