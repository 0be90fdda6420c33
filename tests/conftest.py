import json
import pathlib
import types
from datetime import datetime, timezone

import pytest

from lib.errors import CatalogUnavailable
from lib.models import ProjectIdentification, RawRecord
from lib.sources.base import AuditLogSource, ProjectDirectory, RoleCatalog

FIXTURES = pathlib.Path(__file__).parent / "fixtures"


@pytest.fixture
def load_fixture():
    def _load(name: str):
        with open(FIXTURES / name, "r") as f:
            return json.load(f)

    return _load


def _record(ts: int, bindings=None, insert_id=None):
    payload = {"methodName": "SetIamPolicy", "response": {"bindings": bindings or []}}
    return RawRecord(
        insert_id=insert_id or f"rec-{ts}",
        timestamp=datetime.fromtimestamp(ts, tz=timezone.utc),
        payload=payload,
    )


@pytest.fixture
def make_record():
    return _record


class FakeSource(AuditLogSource):
    def __init__(self, records, error=None):
        self.records = list(records)
        self.error = error
        self.queries = []

    def query(self, project_id, filter_expression, order, page_size):
        self.queries.append((project_id, filter_expression, order, page_size))
        return self._iter()

    def _iter(self):
        for r in self.records:
            yield r
        if self.error:
            raise self.error


class FakeCatalog(RoleCatalog):
    def __init__(self, roles, reachable=True):
        self.roles = dict(roles)
        self.reachable = reachable
        self.calls = 0

    def list_roles(self):
        self.calls += 1
        if not self.reachable:
            raise CatalogUnavailable("iam.googleapis.com unreachable")
        return dict(self.roles)


class FakeDirectory(ProjectDirectory):
    def __init__(self, projects, ancestors=None):
        self.projects = [ProjectIdentification(*p) for p in projects]
        self.ancestors = ancestors or {}

    def list_projects(self):
        return list(self.projects)

    def get_top_level_ancestor(self, project_id):
        value = self.ancestors[project_id]
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def fakes():
    return types.SimpleNamespace(source=FakeSource, catalog=FakeCatalog, directory=FakeDirectory)


# Fakes shaped like googleapiclient discovery resources: method(...) -> request, request.execute() -> dict.

class FakeLoggingEntries:
    def __init__(self, pages, error=None):
        self.pages = pages  # page token (None for first) -> response dict
        self.error = error
        self.bodies = []

    def list(self, body):
        self.bodies.append(dict(body))

        def _execute():
            if self.error:
                raise self.error
            return self.pages[body.get("pageToken")]

        return types.SimpleNamespace(execute=_execute)


class FakeLoggingClient:
    def __init__(self, pages, error=None):
        self._entries = FakeLoggingEntries(pages, error)

    def entries(self): return self._entries


class FakeIamRoles:
    def __init__(self, pages, error=None):
        self.pages = pages  # list of responses, followed in order via list_next
        self.error = error
        self.requests = 0

    def _request(self, index):
        def _execute():
            self.requests += 1
            if self.error:
                raise self.error
            return self.pages[index]

        return types.SimpleNamespace(index=index, execute=_execute)

    def list(self, view=None, pageSize=None):
        assert view == "FULL"
        return self._request(0)

    def list_next(self, previous_request, previous_response):
        if not previous_response.get("nextPageToken"):
            return None
        return self._request(previous_request.index + 1)


class FakeIamClient:
    def __init__(self, pages, error=None):
        self._roles = FakeIamRoles(pages, error)

    def roles(self): return self._roles


class FakeCRMProjects:
    def __init__(self, pages, ancestry, error=None):
        self.pages = pages
        self.ancestry = ancestry
        self.error = error

    def list(self, pageToken=None):
        def _execute():
            if self.error:
                raise self.error
            return self.pages[pageToken]

        return types.SimpleNamespace(execute=_execute)

    def getAncestry(self, projectId, body):
        def _execute():
            value = self.ancestry[projectId]
            if isinstance(value, Exception):
                raise value
            return value

        return types.SimpleNamespace(execute=_execute)


class FakeCRMClient:
    def __init__(self, pages, ancestry=None, error=None):
        self._projects = FakeCRMProjects(pages, ancestry or {}, error)

    def projects(self): return self._projects


@pytest.fixture
def google_fakes():
    return types.SimpleNamespace(logging=FakeLoggingClient, iam=FakeIamClient, crm=FakeCRMClient)
