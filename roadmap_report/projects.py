"""Project board access: locating the board, paging through its items, reading its fields.

Items are read through ``iter_project_items``, an async generator that pulls
one page of up to 100 items at a time. Callers either drain it
(``fetch_all_items``) or stop at the first match (``find_item_for_issue``),
in which case no further pages are requested.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator

from .errors import GitHubAPIError, ProjectNotFound
from .github import GitHubClient

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

FIND_PROJECTS_QUERY = """
query FindProjects($owner: String!, $title: String!) {
  organization(login: $owner) {
    projectsV2(first: 10, query: $title) {
      nodes { id title number url }
    }
  }
}
"""

PROJECT_ITEMS_QUERY = """
query ProjectItems($projectId: ID!, $first: Int!, $after: String) {
  node(id: $projectId) {
    ... on ProjectV2 {
      items(first: $first, after: $after) {
        pageInfo { hasNextPage endCursor }
        nodes {
          id
          content {
            __typename
            ... on Issue {
              id
              number
              title
              url
              state
              createdAt
              updatedAt
              parent { number title url closed }
            }
          }
          fieldValues(first: 100) {
            nodes {
              __typename
              ... on ProjectV2ItemFieldTextValue {
                text
                field { ... on ProjectV2Field { name } }
              }
              ... on ProjectV2ItemFieldSingleSelectValue {
                name
                field { ... on ProjectV2SingleSelectField { name } }
              }
            }
          }
        }
      }
    }
  }
}
"""

PROJECT_FIELDS_QUERY = """
query ProjectFields($projectId: ID!) {
  node(id: $projectId) {
    ... on ProjectV2 {
      fields(first: 50) {
        nodes {
          ... on ProjectV2SingleSelectField {
            id
            name
            options { id name }
          }
        }
      }
    }
  }
}
"""

ISSUE_PROJECTS_QUERY = """
query IssueProjects($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issue(number: $number) {
      id
      parent { number title url closed }
      projectsV2(first: 10) {
        nodes { id title number url createdAt updatedAt shortDescription }
      }
    }
  }
}
"""


def numeric_id(opaque_id: str | None) -> int:
    """Integer embedded in an opaque node id (``PVT_123`` -> 123); 0 if there is none."""
    if not opaque_id:
        return 0
    parts = opaque_id.split("_")
    if len(parts) < 2:
        return 0
    try:
        return int(parts[1])
    except ValueError:
        return 0


# ── Field values ─────────────────────────────────────────────


class FieldValueKind(enum.Enum):
    TEXT = "ProjectV2ItemFieldTextValue"
    SINGLE_SELECT = "ProjectV2ItemFieldSingleSelectValue"


@dataclass(frozen=True)
class FieldValue:
    """One entry of an item's field value union that we know how to read."""

    kind: FieldValueKind
    field_name: str
    value: str | None

    @classmethod
    def from_node(cls, node: dict[str, Any] | None) -> FieldValue | None:
        if not node:
            return None
        try:
            kind = FieldValueKind(node.get("__typename"))
        except ValueError:
            return None
        field_name = (node.get("field") or {}).get("name")
        if not field_name:
            return None
        raw = node.get("text") if kind is FieldValueKind.TEXT else node.get("name")
        return cls(kind=kind, field_name=field_name, value=raw)


def extract_fields(nodes: list[dict[str, Any]] | None, names: tuple[str, ...] = ("status", "team", "kind")) -> dict[str, str | None]:
    """Map lower-cased field names to values; the first occurrence of a name wins."""
    found: dict[str, str | None] = {}
    for node in nodes or []:
        fv = FieldValue.from_node(node)
        if fv is None:
            continue
        key = fv.field_name.lower()
        if key in names and key not in found:
            found[key] = fv.value
    return found


# ── Items ────────────────────────────────────────────────────


@dataclass(frozen=True)
class ParentIssue:
    number: int
    title: str
    url: str
    closed: bool = False

    @classmethod
    def from_node(cls, node: dict[str, Any] | None) -> ParentIssue | None:
        if not node:
            return None
        return cls(
            number=node["number"],
            title=node.get("title", ""),
            url=node.get("url", ""),
            closed=bool(node.get("closed", False)),
        )


@dataclass(frozen=True)
class ProjectItem:
    """An issue as it sits on the board, with the board's own field values."""

    item_id: str
    issue_id: str
    issue_number: int
    title: str
    url: str
    state: str
    created_at: str | None = None
    updated_at: str | None = None
    parent: ParentIssue | None = None
    status: str | None = None
    team: str | None = None
    kind: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> ProjectItem | None:
        """Build from an ``items.nodes`` entry; None for drafts and pull requests."""
        content = node.get("content") or {}
        if content.get("__typename") != "Issue":
            return None
        fields = extract_fields((node.get("fieldValues") or {}).get("nodes"))
        return cls(
            item_id=node["id"],
            issue_id=content.get("id", ""),
            issue_number=content["number"],
            title=content.get("title", ""),
            url=content.get("url", ""),
            state=(content.get("state") or "").lower(),
            created_at=content.get("createdAt"),
            updated_at=content.get("updatedAt"),
            parent=ParentIssue.from_node(content.get("parent")),
            status=fields.get("status"),
            team=fields.get("team"),
            kind=fields.get("kind"),
        )


async def iter_project_items(
    client: GitHubClient, project_id: str, page_size: int = PAGE_SIZE
) -> AsyncIterator[ProjectItem]:
    """Yield every issue item on the board, one page at a time."""
    cursor: str | None = None
    page = 0
    while True:
        data = await client.execute_query(
            PROJECT_ITEMS_QUERY,
            {"projectId": project_id, "first": page_size, "after": cursor},
        )
        items = ((data.get("node") or {}).get("items")) or {}
        nodes = items.get("nodes") or []
        page_info = items.get("pageInfo") or {}
        page += 1
        logger.debug(
            "Page %d: %d items (hasNextPage: %s)", page, len(nodes), page_info.get("hasNextPage")
        )
        for node in nodes:
            if not node:
                continue
            item = ProjectItem.from_node(node)
            if item is not None:
                yield item
        if not page_info.get("hasNextPage"):
            return
        cursor = page_info.get("endCursor")


async def fetch_all_items(client: GitHubClient, project_id: str) -> list[ProjectItem]:
    return [item async for item in iter_project_items(client, project_id)]


async def find_item_for_issue(client: GitHubClient, project_id: str, issue_id: str) -> ProjectItem | None:
    """Scan the board until the item wrapping ``issue_id`` shows up."""
    items = iter_project_items(client, project_id)
    try:
        async for item in items:
            if item.issue_id == issue_id:
                return item
    finally:
        await items.aclose()
    return None


def search_items(
    items: list[ProjectItem],
    team: str | None = None,
    status: str | None = None,
    kind: str | None = None,
) -> list[ProjectItem]:
    """Keep items whose Team/Status/Kind equal the given values (None matches anything)."""
    return [
        i
        for i in items
        if (team is None or i.team == team)
        and (status is None or i.status == status)
        and (kind is None or i.kind == kind)
    ]


# ── Locator ──────────────────────────────────────────────────


class ProjectLocator:
    """Resolves a board title to its node id, caching the answer."""

    def __init__(self, client: GitHubClient, org: str):
        self.client = client
        self.org = org
        self._cache: dict[str, str] = {}

    async def locate(self, title: str) -> str:
        if title in self._cache:
            return self._cache[title]
        data = await self.client.execute_query(FIND_PROJECTS_QUERY, {"owner": self.org, "title": title})
        nodes = ((data.get("organization") or {}).get("projectsV2") or {}).get("nodes") or []
        for node in nodes:
            if node and node.get("title") == title:
                logger.debug("Found project %s (%s)", title, node["id"])
                self._cache[title] = node["id"]
                return node["id"]
        raise ProjectNotFound(self.org, title)


# ── Fields ───────────────────────────────────────────────────


@dataclass(frozen=True)
class FieldOption:
    id: str
    name: str


@dataclass(frozen=True)
class StatusFieldConfig:
    """A single-select field's id and its options, as currently configured."""

    field_id: str
    name: str = ""
    options: tuple[FieldOption, ...] = ()

    def option_names(self) -> list[str]:
        return [o.name for o in self.options]

    def option_id(self, name: str) -> str | None:
        for o in self.options:
            if o.name == name:
                return o.id
        wanted = name.strip().lower()
        for o in self.options:
            if o.name.strip().lower() == wanted:
                return o.id
        return None


async def fetch_single_select_fields(client: GitHubClient, project_id: str) -> dict[str, StatusFieldConfig]:
    """Single-select fields of a board keyed by lower-cased field name."""
    data = await client.execute_query(PROJECT_FIELDS_QUERY, {"projectId": project_id})
    nodes = (((data.get("node") or {}).get("fields")) or {}).get("nodes") or []
    fields: dict[str, StatusFieldConfig] = {}
    for node in nodes:
        # Non single-select fields come back as empty objects
        if not node or "options" not in node:
            continue
        key = node["name"].lower()
        if key in fields:
            continue
        fields[key] = StatusFieldConfig(
            field_id=node["id"],
            name=node["name"],
            options=tuple(FieldOption(id=o["id"], name=o["name"]) for o in node.get("options") or []),
        )
    return fields


# ── Linked projects ──────────────────────────────────────────


@dataclass
class LinkedProject:
    id: int
    node_id: str
    name: str
    number: int | None
    url: str
    created_at: str | None = None
    updated_at: str | None = None
    body: str | None = None
    status: str | None = None
    team: str | None = None
    kind: str | None = None
    parent: ParentIssue | None = None


async def get_linked_roadmap_project(
    client: GitHubClient, owner: str, repo: str, number: int, title: str
) -> list[LinkedProject]:
    """The board named ``title`` as linked to one issue, with the issue's field values.

    Returns an empty list when the issue is not on that board or the lookup fails.
    """
    try:
        data = await client.execute_query(ISSUE_PROJECTS_QUERY, {"owner": owner, "repo": repo, "number": number})
        issue = ((data.get("repository") or {}).get("issue")) or {}
        projects = ((issue.get("projectsV2") or {}).get("nodes")) or []
        if not projects:
            logger.debug("No projects linked to issue #%d", number)
            return []
        board = next((p for p in projects if p and p.get("title") == title), None)
        if board is None:
            logger.debug("Project %s not linked to issue #%d", title, number)
            return []
        item = await find_item_for_issue(client, board["id"], issue.get("id", ""))
    except GitHubAPIError as exc:
        logger.warning("Could not fetch projects for %s/%s#%d: %s", owner, repo, number, exc)
        return []

    if item is None:
        logger.debug("Issue #%d not found on %s after checking all pages", number, title)
        return []

    return [
        LinkedProject(
            id=numeric_id(board["id"]),
            node_id=board["id"],
            name=board["title"],
            number=board.get("number"),
            url=board.get("url", ""),
            created_at=board.get("createdAt"),
            updated_at=board.get("updatedAt"),
            body=board.get("shortDescription"),
            status=item.status,
            team=item.team,
            kind=item.kind,
            parent=ParentIssue.from_node(issue.get("parent")),
        )
    ]
