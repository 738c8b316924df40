"""Fetch-or-serve-from-cache for each dashboard resource.

Only the flat API payloads are cached; grouped and sorted views are derived
fresh on every call and never written back.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from core.errors import ApiError
from core.models import DataKind, Resource
from core.settings import DEFAULT_CACHE_TTL
from infrastructure.cache_manager import CacheManager
from infrastructure.github_rest import ApiClient

from .aggregation import sort_by_updated, sorted_groups
from .single_flight import SingleFlight

USER_KEY = "user"
ORGANIZATIONS_KEY = "organizations"
REPOSITORIES_KEY = "repositories"
ISSUES_KEY = "issues_mentioned"
PROJECTS_KEY = "projects"

REPOS_PER_PAGE = 100
MAX_REPO_PAGES = 10
REPO_AFFILIATION = "owner,collaborator,organization_member"
ISSUES_PER_PAGE = 50
PROJECTS_ACCEPT = "application/vnd.github.inertia-preview+json"

logger = logging.getLogger("dashboard.data")


class DataService:
    def __init__(
        self,
        client: ApiClient,
        cache: CacheManager,
        ttl: float = DEFAULT_CACHE_TTL,
        single_flight: Optional[SingleFlight] = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.ttl = ttl
        self._flight = single_flight if single_flight is not None else SingleFlight()

    def _cached(self, key: str, fetch: Callable[[], Any]) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        def load() -> Any:
            # A previous leader may have filled the cache after our miss above.
            cached = self.cache.get(key)
            if cached is not None:
                return cached
            data = fetch()
            if data is None:
                logger.warning("Empty payload for %s; not cached", key)
                return data
            self.cache.set(key, data, self.ttl)
            return data

        return self._flight.do(key, load)

    def fetch_user(self) -> Resource:
        return self._cached(USER_KEY, lambda: self.client.get("/user").data)

    def fetch_organizations(self) -> List[Resource]:
        return self._cached(ORGANIZATIONS_KEY, lambda: self.client.get("/user/orgs").data or [])

    def fetch_repositories(self) -> List[Resource]:
        return self._cached(REPOSITORIES_KEY, self._drain_repository_pages)

    def _drain_repository_pages(self) -> List[Resource]:
        repos: List[Resource] = []
        for page in range(1, MAX_REPO_PAGES + 1):
            batch = self.client.get(
                "/user/repos",
                params={
                    "sort": "updated",
                    "per_page": REPOS_PER_PAGE,
                    "page": page,
                    "affiliation": REPO_AFFILIATION,
                },
            ).data or []
            if not batch:
                break
            repos.extend(batch)
            if len(batch) < REPOS_PER_PAGE:
                break
        else:
            logger.warning("Reached maximum page limit (%s pages)", MAX_REPO_PAGES)
        logger.info("Fetched %s repositories", len(repos))
        return repos

    def fetch_mentioned_issues(self) -> List[Resource]:
        return self._cached(
            ISSUES_KEY,
            lambda: self.client.get(
                "/issues", params={"filter": "mentioned", "state": "all", "per_page": ISSUES_PER_PAGE}
            ).data
            or [],
        )

    def fetch_projects(self) -> List[Resource]:
        """Classic projects; a failed fetch yields [] so the section degrades instead of failing."""
        try:
            return self._cached(
                PROJECTS_KEY, lambda: self.client.get("/user/projects", headers={"Accept": PROJECTS_ACCEPT}).data or []
            )
        except ApiError as exc:
            logger.warning("Failed to fetch projects (%s): %s", exc.status_code, exc.message)
            return []

    def validate_token(self) -> Dict[str, Any]:
        """Check the credential with a live ``/user`` call. Never raises."""
        try:
            user = self.client.get("/user").data or {}
        except Exception as exc:
            logger.warning("Token validation failed: %s", exc)
            return {"valid": False, "message": f"Authentication failed: {exc}"}
        return {"valid": True, "message": f"Authenticated as {user.get('login', '')}", "user": user}

    def get_dashboard_data(self, kind: DataKind = DataKind.ALL) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if kind.includes(DataKind.REPOSITORIES):
            result["repositories"] = [group.to_dict() for group in sorted_groups(self.fetch_repositories())]
        if kind.includes(DataKind.ISSUES):
            result["issues"] = sort_by_updated(self.fetch_mentioned_issues())
        if kind.includes(DataKind.PROJECTS):
            result["projects"] = sort_by_updated(self.fetch_projects())
        return result


__all__ = ["DataService"]
