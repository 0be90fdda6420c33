from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    MALFORMED_PAYLOAD = "malformed_payload"
    CATALOG_UNAVAILABLE = "catalog_unavailable"
    SOURCE_UNAVAILABLE = "source_unavailable"


class AggregationError(Exception):
    """Base for every failure that aborts an aggregation call.

    Callers branch on ``kind`` rather than on the concrete class.
    """

    kind: ErrorKind

    def __init__(self, message: str, project_id: Optional[str] = None, record_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.project_id = project_id
        self.record_id = record_id

    def with_context(self, project_id: Optional[str] = None) -> "AggregationError":
        if project_id and not self.project_id:
            self.project_id = project_id
        return self

    def __str__(self) -> str:
        ctx = []
        if self.project_id:
            ctx.append(f"project={self.project_id}")
        if self.record_id:
            ctx.append(f"record={self.record_id}")
        if not ctx:
            return self.message
        return f"{self.message} ({', '.join(ctx)})"


class MalformedPayload(AggregationError):
    kind = ErrorKind.MALFORMED_PAYLOAD


class CatalogUnavailable(AggregationError):
    kind = ErrorKind.CATALOG_UNAVAILABLE


class SourceUnavailable(AggregationError):
    kind = ErrorKind.SOURCE_UNAVAILABLE
