from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from core.models import PERSONAL_GROUP, GroupedRepositories, Resource

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        return _OLDEST
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _OLDEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_by_updated(records: Iterable[Resource]) -> List[Resource]:
    """Most recently updated first; equal timestamps keep fetch order."""
    # sorted() stays stable with reverse=True
    return sorted(records, key=lambda record: _parse_timestamp(record.get("updated_at")), reverse=True)


def group_key(repository: Resource) -> str:
    owner = repository.get("owner") or {}
    if owner.get("type") == "Organization" and owner.get("login"):
        return owner["login"]
    return PERSONAL_GROUP


def group_repositories_by_organization(repositories: Iterable[Resource]) -> List[GroupedRepositories]:
    groups: Dict[str, GroupedRepositories] = {}
    for repo in repositories:
        key = group_key(repo)
        if key not in groups:
            groups[key] = GroupedRepositories(group_key=key)
        groups[key].items.append(repo)
    return list(groups.values())


def sorted_groups(repositories: Iterable[Resource]) -> List[GroupedRepositories]:
    return [
        GroupedRepositories(group_key=group.group_key, items=sort_by_updated(group.items))
        for group in group_repositories_by_organization(repositories)
    ]


__all__ = ["sort_by_updated", "group_key", "group_repositories_by_organization", "sorted_groups"]
