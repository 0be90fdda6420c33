import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from lib.errors import MalformedPayload, SourceUnavailable
from lib.models import RawRecord
from lib.sources.base import AuditLogSource

# 2020-07-01T12:34:56.123456789Z, 2020-07-01T12:34:56Z, 2020-07-01T12:34:56+02:00
_RFC3339 = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))?(?P<tz>Z|[+-]\d{2}:\d{2})$"
)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 log timestamp; sub-microsecond digits are dropped."""
    if not value:
        return None
    m = _RFC3339.match(value.strip())
    if not m:
        return None
    text = m.group("base")
    if m.group("frac"):
        text += "." + m.group("frac")[:6].ljust(6, "0")
    tz = m.group("tz")
    text += "+00:00" if tz == "Z" else tz
    return datetime.fromisoformat(text).astimezone(timezone.utc)


def _to_record(entry: Dict[str, Any]) -> RawRecord:
    insert_id = entry.get("insertId", "")
    ts = parse_timestamp(entry.get("timestamp"))
    if ts is None:
        raise MalformedPayload(f"log entry has no usable timestamp: {entry.get('timestamp')!r}", record_id=insert_id)
    # Audit entries carry protoPayload; recommender state-change entries carry jsonPayload.
    payload = entry.get("protoPayload", entry.get("jsonPayload"))
    return RawRecord(insert_id=insert_id, timestamp=ts, payload=payload)


class LogEntryPages:
    """Restartable view over one entries.list query; each iteration re-pages from the start."""

    def __init__(self, client, body: Dict[str, Any]):
        self.client = client
        self.body = body

    def __iter__(self) -> Iterator[RawRecord]:
        body = dict(self.body)
        project = body["resourceNames"][0]
        while True:
            try:
                resp = self.client.entries().list(body=body).execute()
            except (HttpError, GoogleAuthError, OSError) as e:
                raise SourceUnavailable(f"listing log entries failed: {e}", project_id=project.split("/")[-1]) from e

            entries = resp.get("entries", []) or []
            logging.debug("Fetched %s log entries for %s", len(entries), project)
            for entry in entries:
                yield _to_record(entry)

            token = resp.get("nextPageToken")
            if not token:
                return
            body["pageToken"] = token


class CloudLoggingSource(AuditLogSource):
    def __init__(self, client):
        self.client = client

    def query(self, project_id: str, filter_expression: str, order: str, page_size: int) -> LogEntryPages:
        body = {
            "resourceNames": [f"projects/{project_id}"],
            "filter": filter_expression,
            "orderBy": order,
            "pageSize": page_size,
        }
        return LogEntryPages(self.client, body)
