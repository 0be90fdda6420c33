import logging
from typing import Dict

from lib.sources.base import RoleCatalog


class BindingCountCalculator:
    """Weights each role's member count by the number of permissions the role grants."""

    def __init__(self, catalog: RoleCatalog):
        self.catalog = catalog

    def compute(self, membership: Dict[str, int]) -> int:
        # One enumeration per call; CatalogUnavailable propagates to the caller.
        permissions = self.catalog.list_roles()

        total = 0
        for role, member_count in membership.items():
            count = permissions.get(role)
            if count is None:
                # custom or unknown role: deliberately not counted
                logging.debug("Role %s not in catalog; excluded from binding count.", role)
                continue
            total += count * member_count
        return total
