from typing import List

from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from lib.errors import SourceUnavailable
from lib.models import ProjectIdentification
from lib.sources.base import ProjectDirectory


class ResourceManagerDirectory(ProjectDirectory):
    """Projects visible to the caller's credentials (resourcemanager.projects.get)."""

    def __init__(self, client):
        self.client = client

    def list_projects(self) -> List[ProjectIdentification]:
        projects: List[ProjectIdentification] = []
        token = None
        try:
            while True:
                resp = self.client.projects().list(pageToken=token).execute()
                for p in resp.get("projects", []) or []:
                    projects.append(ProjectIdentification(
                        display_name=p.get("name") or p["projectId"],
                        project_id=p["projectId"],
                        project_number=str(p.get("projectNumber", "")),
                    ))
                token = resp.get("nextPageToken")
                if not token:
                    break
        except (HttpError, GoogleAuthError, OSError) as e:
            raise SourceUnavailable(f"listing projects failed: {e}") from e
        return projects

    def get_top_level_ancestor(self, project_id: str) -> str:
        try:
            resp = self.client.projects().getAncestry(projectId=project_id, body={}).execute()
        except (HttpError, GoogleAuthError, OSError) as e:
            raise SourceUnavailable(f"ancestry lookup failed: {e}", project_id=project_id) from e

        ancestors = resp.get("ancestor", []) or []
        if not ancestors:
            raise SourceUnavailable("ancestry response is empty", project_id=project_id)
        # Ancestry is ordered from the project itself up to the root.
        return ancestors[-1]["resourceId"]["id"]
