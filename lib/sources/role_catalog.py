import logging
import time
from typing import Dict, Optional

from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from lib.errors import CatalogUnavailable
from lib.sources.base import RoleCatalog


class IamRoleCatalog(RoleCatalog):
    """Predefined roles from the IAM API, with an optional in-memory TTL cache."""

    def __init__(self, client, ttl_seconds: float = 0, page_size: int = 1000, clock=time.monotonic):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.page_size = page_size
        self.clock = clock
        self._cached: Optional[Dict[str, int]] = None
        self._fetched_at = 0.0

    def list_roles(self) -> Dict[str, int]:
        if self._cached is not None and self.ttl_seconds > 0:
            if self.clock() - self._fetched_at < self.ttl_seconds:
                return self._cached

        roles = self._fetch()
        self._cached = roles
        self._fetched_at = self.clock()
        return roles

    def _fetch(self) -> Dict[str, int]:
        roles: Dict[str, int] = {}
        api = self.client.roles()
        req = api.list(view="FULL", pageSize=self.page_size)
        try:
            while req is not None:
                resp = req.execute()
                for role in resp.get("roles", []) or []:
                    roles[role["name"]] = len(role.get("includedPermissions", []) or [])
                req = api.list_next(previous_request=req, previous_response=resp)
        except (HttpError, GoogleAuthError, OSError) as e:
            raise CatalogUnavailable(f"listing IAM roles failed: {e}") from e

        logging.debug("Loaded %s roles from the IAM catalog", len(roles))
        return roles
