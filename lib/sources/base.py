from abc import ABC, abstractmethod
from typing import Dict, Iterable, List

from lib.models import ProjectIdentification, RawRecord


class AuditLogSource(ABC):
    @abstractmethod
    def query(self, project_id: str, filter_expression: str, order: str, page_size: int) -> Iterable[RawRecord]:
        """Lazy, finite, restartable sequence of policy-change records."""
        ...


class RoleCatalog(ABC):
    @abstractmethod
    def list_roles(self) -> Dict[str, int]:
        """Role name -> number of permissions it grants."""
        ...


class ProjectDirectory(ABC):
    @abstractmethod
    def list_projects(self) -> List[ProjectIdentification]:
        ...

    @abstractmethod
    def get_top_level_ancestor(self, project_id: str) -> str:
        ...
