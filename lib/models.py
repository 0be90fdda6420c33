from dataclasses import asdict, dataclass, field
from datetime import datetime
from operator import attrgetter
from typing import Any, Dict, Iterable, List


@dataclass(frozen=True)
class Snapshot:
    project_id: str
    project_name: str
    project_number: str
    timestamp: int  # seconds since epoch
    binding_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Ascending-timestamp sort key; the canonical order for time-series consumers.
ORDER_BY_TIMESTAMP = attrgetter("timestamp")


def sort_by_timestamp(snapshots: Iterable[Snapshot]) -> List[Snapshot]:
    return sorted(snapshots, key=ORDER_BY_TIMESTAMP)


@dataclass(frozen=True)
class RawRecord:
    insert_id: str
    timestamp: datetime  # timezone-aware, UTC
    payload: Dict[str, Any] = field(default_factory=dict)  # the entry's protoPayload


@dataclass(frozen=True)
class ProjectIdentification:
    display_name: str
    project_id: str
    project_number: str
