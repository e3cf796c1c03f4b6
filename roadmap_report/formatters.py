"""Markdown and summary views of a single issue."""

from __future__ import annotations

from typing import Any

from .projects import LinkedProject
from .service import DetailedIssue


def _login(user: dict[str, Any] | None) -> str:
    return (user or {}).get("login", "unknown")


def create_issue_summary(issue: dict[str, Any], linked_projects: list[LinkedProject] | None = None) -> dict[str, Any]:
    return {
        "number": issue.get("number"),
        "title": issue.get("title"),
        "state": issue.get("state"),
        "author": _login(issue.get("user")),
        "assignees": [a.get("login") for a in issue.get("assignees") or []],
        "labels": [lbl.get("name") for lbl in issue.get("labels") or []],
        "milestone": (issue.get("milestone") or {}).get("title"),
        "linkedProjects": [{"id": p.id, "name": p.name, "url": p.url} for p in linked_projects or []],
        "comments": issue.get("comments", 0),
        "created_at": issue.get("created_at"),
        "updated_at": issue.get("updated_at"),
        "closed_at": issue.get("closed_at"),
        "url": issue.get("html_url"),
    }


def _project_line(p: LinkedProject) -> str:
    details = f"[{p.name}]({p.url})"
    fields = []
    if p.status:
        fields.append(f"Status: {p.status}")
    if p.team:
        fields.append(f"Team: {p.team}")
    if p.kind:
        fields.append(f"Kind: {p.kind}")
    if fields:
        details += " { " + ", ".join(fields) + " }"
    return details


def create_markdown_report(detail: DetailedIssue) -> str:
    issue, repo = detail.issue, detail.repository
    lines = [
        f"# Issue #{issue.get('number')}: {issue.get('title')}",
        "",
        "## Repository Information",
        f"- **Repository**: [{repo.get('full_name')}]({repo.get('html_url')})",
        f"- **Language**: {repo.get('language') or 'Not specified'}",
        f"- **Stars**: {repo.get('stargazers_count', 0)}",
        f"- **Forks**: {repo.get('forks_count', 0)}",
        "",
        "## Issue Details",
        f"- **State**: {issue.get('state')}",
        f"- **Author**: {_login(issue.get('user'))}",
        f"- **Created**: {issue.get('created_at')}",
        f"- **Updated**: {issue.get('updated_at')}",
    ]
    if issue.get("closed_at"):
        lines.append(f"- **Closed**: {issue['closed_at']}")
    lines.append(f"- **Comments**: {issue.get('comments', 0)}")
    lines.append("")

    assignees = ", ".join(_login(a) for a in issue.get("assignees") or [])
    labels = ", ".join(f"`{lbl.get('name')}`" for lbl in issue.get("labels") or [])
    milestone = (issue.get("milestone") or {}).get("title")
    projects = ", ".join(_project_line(p) for p in detail.linked_projects)
    lines.append(f"**Assignees**: {assignees or 'None'}")
    lines.append(f"**Labels**: {labels or 'None'}")
    lines.append(f"**Milestone**: {milestone or 'None'}")
    lines.append(f"**Linked Projects**: {projects or 'None'}")
    for p in detail.linked_projects:
        if p.parent:
            lines.append(f"**Parent**: [#{p.parent.number} {p.parent.title}]({p.parent.url})")
            break

    lines += ["", "## Description", issue.get("body") or "*No description provided*", ""]
    lines.append(f"## Comments ({len(detail.comments)})")
    if not detail.comments:
        lines.append("*No comments*")
    for i, c in enumerate(detail.comments, 1):
        lines += [
            "",
            f"### Comment {i}",
            f"**By**: {_login(c.get('user'))}  ",
            f"**Date**: {c.get('created_at')}",
            "",
            c.get("body") or "",
        ]
    lines += ["", "---", f"*[View on GitHub]({issue.get('html_url')})*"]
    return "\n".join(lines) + "\n"
