import logging
from typing import Dict, List

from handlers.binding_count import BindingCountCalculator
from handlers.policy_change import parse
from lib.errors import AggregationError
from lib.logs_filter import ORDER_DESCENDING, logs_query_policy_changes
from lib.models import Snapshot
from lib.sources.base import AuditLogSource

DEFAULT_PAGE_SIZE = 1000


class SnapshotAggregator:
    """Turns a project's SetIamPolicy audit trail into binding-count snapshots.

    Holds no state between calls. Any AggregationError raised by the source,
    the parser or the calculator aborts the whole call; nothing partial is
    returned.
    """

    def __init__(self, source: AuditLogSource, calculator: BindingCountCalculator,
                 page_size: int = DEFAULT_PAGE_SIZE):
        self.source = source
        self.calculator = calculator
        self.page_size = page_size

    def aggregate(self, project_id: str, project_name: str, project_number: str,
                  time_lower_bound: str = "") -> List[Snapshot]:
        """Return one snapshot per distinct event timestamp, in no particular order.

        Records sharing a timestamp collapse to the one processed last.
        Sort with ``lib.models.ORDER_BY_TIMESTAMP`` for chronological order.
        """
        query = logs_query_policy_changes(time_lower_bound)
        try:
            by_time: Dict[int, Dict[str, int]] = {}
            records = self.source.query(project_id, query, ORDER_DESCENDING, self.page_size)
            for record in records:
                ts, membership = parse(record)
                by_time[ts] = membership

            snapshots = [
                Snapshot(
                    project_id=project_id,
                    project_name=project_name or project_id,
                    project_number=project_number,
                    timestamp=ts,
                    binding_count=self.calculator.compute(membership),
                )
                for ts, membership in by_time.items()
            ]
        except AggregationError as e:
            e.with_context(project_id=project_id)
            raise

        logging.debug("Aggregated %s snapshots for %s", len(snapshots), project_id)
        return snapshots
