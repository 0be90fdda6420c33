import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from handlers.aggregate import SnapshotAggregator
from lib.errors import AggregationError
from lib.logs_filter import build_log_url, logs_query_policy_changes
from lib.models import Snapshot, sort_by_timestamp
from lib.sources.base import ProjectDirectory


@dataclass
class RefreshReport:
    snapshots: Dict[str, List[Snapshot]] = field(default_factory=dict)
    failures: Dict[str, AggregationError] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snapshots": {pid: [s.to_dict() for s in snaps] for pid, snaps in self.snapshots.items()},
            "failures": {pid: {"kind": e.kind.value, "error": str(e)} for pid, e in self.failures.items()},
        }


def refresh_projects(
        directory: ProjectDirectory,
        aggregator: SnapshotAggregator,
        project_ids: Optional[Iterable[str]] = None,
        organization_id: Optional[str] = None,
        time_lower_bound: str = "",
) -> RefreshReport:
    """Aggregate every selected project; one project's failure never stops the others."""
    wanted = set(project_ids or [])
    report = RefreshReport()

    for project in directory.list_projects():
        pid = project.project_id
        if wanted and pid not in wanted:
            continue

        try:
            if organization_id and directory.get_top_level_ancestor(pid) != organization_id:
                logging.debug("Skipping %s: outside organization %s", pid, organization_id)
                continue
            snaps = aggregator.aggregate(pid, project.display_name, project.project_number, time_lower_bound)
        except AggregationError as e:
            url = build_log_url(logs_query_policy_changes(time_lower_bound), pid)
            logging.error("Binding refresh failed for %s [%s]: %s. Logs: %s", pid, e.kind.value, e, url)
            report.failures[pid] = e
            continue

        report.snapshots[pid] = sort_by_timestamp(snaps)
        logging.info("Project %s: %s binding snapshots", pid, len(snaps))

    return report
