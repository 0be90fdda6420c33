import base64
import json
import logging
import sys
from typing import Any, Dict, Optional

import functions_framework

from config import Config, load_config
from handlers.aggregate import SnapshotAggregator
from handlers.binding_count import BindingCountCalculator
from handlers.refresh import RefreshReport, refresh_projects
from lib.gcp import crm_client, iam_client, logging_client
from lib.sources.audit_logs import CloudLoggingSource
from lib.sources.projects import ResourceManagerDirectory
from lib.sources.role_catalog import IamRoleCatalog

cfg = load_config()
logging.basicConfig(level=cfg.log_level)


def run_refresh(config: Config, overrides: Optional[Dict[str, Any]] = None) -> RefreshReport:
    overrides = overrides or {}
    catalog = IamRoleCatalog(iam_client(), ttl_seconds=config.role_catalog_ttl)
    aggregator = SnapshotAggregator(
        CloudLoggingSource(logging_client()),
        BindingCountCalculator(catalog),
        page_size=config.page_size,
    )
    return refresh_projects(
        ResourceManagerDirectory(crm_client()),
        aggregator,
        project_ids=overrides.get("projects") or config.project_ids,
        organization_id=overrides.get("organization") or config.organization_id,
        time_lower_bound=overrides.get("since") or config.since,
    )


def _valid_overrides(msg: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    projects = msg.get("projects")
    if projects is not None:
        if not isinstance(projects, list) or not all(isinstance(p, str) for p in projects):
            return None
    since = msg.get("since")
    if since is not None and not isinstance(since, str):
        return None
    org = msg.get("organization")
    if isinstance(org, bool) or not (org is None or isinstance(org, (str, int))):
        return None

    overrides = dict(msg)
    if org is not None:
        # ancestry ids come back as strings
        overrides["organization"] = str(org)
    return overrides


@functions_framework.cloud_event
def refresh_bindings(event):
    raw = base64.b64decode(event.data.get("message", {}).get("data") or b"")

    overrides: Dict[str, Any] = {}
    if raw.strip():
        try:
            overrides = json.loads(raw)
        except json.JSONDecodeError:
            logging.warning("Non-JSON Pub/Sub message received; ignoring. Payload=%r", raw[:200])
            return  # ack and drop
        if isinstance(overrides, dict):
            overrides = _valid_overrides(overrides)
        if not isinstance(overrides, dict):
            logging.warning("Unrecognized message format; ignoring.")
            return

    try:
        report = run_refresh(cfg, overrides)
    except Exception as e:
        # Re-raise so the platform retries the whole refresh
        logging.exception("Unhandled error; will retry: %s", e)
        raise

    logging.info(
        "Binding refresh done: %s projects ok, %s failed",
        len(report.snapshots), len(report.failures),
    )
    return report


if __name__ == "__main__":
    # usage: python main.py [project_id ...]
    result = run_refresh(cfg, {"projects": sys.argv[1:]})
    print(json.dumps(result.to_dict(), indent=2))
