import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_PAGE_SIZE = 1000
DEFAULT_ROLE_CATALOG_TTL = 600


@dataclass(frozen=True)
class Config:
    log_level: int
    page_size: int = DEFAULT_PAGE_SIZE
    role_catalog_ttl: float = DEFAULT_ROLE_CATALOG_TTL
    project_ids: Tuple[str, ...] = ()
    organization_id: Optional[str] = None
    since: str = ""


def _csv(raw: str) -> Tuple[str, ...]:
    return tuple(x.strip() for x in raw.split(",") if x.strip())


def load_config() -> Config:
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    return Config(
        log_level=level,
        page_size=int(os.getenv("LOG_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))),
        role_catalog_ttl=float(os.getenv("ROLE_CATALOG_TTL", str(DEFAULT_ROLE_CATALOG_TTL))),
        project_ids=_csv(os.getenv("PROJECT_IDS", "")),
        # Empty means every project the credentials can see.
        organization_id=os.getenv("ORGANIZATION_ID") or None,
        since=os.getenv("SINCE", ""),
    )
