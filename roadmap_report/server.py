"""Roadmap report: MCP server for the GitHub Roadmap project board.

Exposes report generation and the follow-up bulk status change as MCP tools
so Claude Code / Claude Desktop can produce team reports and move the
reported issues along the board.
"""

import dataclasses
import json
import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from . import config
from .formatters import create_issue_summary, create_markdown_report
from .service import IssueReportService


def _fmt(data: Any) -> str:
    """Format a result as readable JSON."""
    return json.dumps(data, indent=2, default=str)


def create_server(service: IssueReportService) -> FastMCP:
    """Build the MCP server with every tool bound to ``service``."""
    mcp = FastMCP("roadmap-report")

    # ── Read Tools ───────────────────────────────────────────

    @mcp.tool()
    async def roadmap_options() -> str:
        """List the Team and Status values available on the Roadmap board."""
        options = await service.get_roadmap_team_and_status_options()
        lines = ["## Teams"]
        lines += [f"- {t}" for t in options["teamOptions"]] or ["_none_"]
        lines.append("\n## Statuses")
        lines += [f"- {s}" for s in options["statusOptions"]] or ["_none_"]
        return "\n".join(lines)

    @mcp.tool()
    async def get_issue(owner: str, repo: str, issue_number: int, format: str = "markdown") -> str:
        """Get one issue with its comments, repository and Roadmap board fields.

        Args:
            owner: Repository owner (user or organization)
            repo: Repository name
            issue_number: Issue number
            format: markdown (default), summary or json
        """
        detail = await service.get_detailed_issue(owner, repo, issue_number)
        if format == "json":
            return _fmt(dataclasses.asdict(detail))
        if format == "summary":
            return _fmt(create_issue_summary(detail.issue, detail.linked_projects))
        return create_markdown_report(detail)

    # ── Report Tools ─────────────────────────────────────────

    @mcp.tool()
    async def generate_report(team: str, status: str) -> str:
        """Generate a Markdown report of the Roadmap issues with a given Team and Status.

        The verbs follow the status: done/validation reads as finished work,
        in-progress as ongoing work, anything else as planned work. The
        reported issues are remembered for update_last_report_status.

        Args:
            team: Team field value, exactly as on the board (see roadmap_options)
            status: Status field value, exactly as on the board
        """
        return await service.generate_report(team, status)

    @mcp.tool()
    async def generate_monthly_report(team: str, status: str, year: int, month: int) -> str:
        """Generate a month-in-review report for a Team and Status.

        Args:
            team: Team field value
            status: Status field value
            year: Report year, e.g. 2025
            month: Report month, 1-12
        """
        return await service.generate_monthly_report(team, status, year, month)

    # ── Write Tools ──────────────────────────────────────────

    @mcp.tool()
    async def update_last_report_status(new_status: str) -> str:
        """Move every issue of the last generated report to a new Status.

        Epic issues are never moved. Failures are reported per issue; the
        remaining issues are still updated.

        Args:
            new_status: Target Status option name (see roadmap_options)
        """
        result = await service.update_last_report_issues_status(new_status)
        lines = [
            f"Updated {result['updated']} of {result['totalIssues']} issues to '{new_status}'"
            + ("" if result["success"] else f" ({result['failed']} failed)")
        ]
        for e in result["errors"]:
            lines.append(f"  - #{e['issueNumber']}: {e['error']}")
        return "\n".join(lines)

    return mcp


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config.require_token()
    create_server(IssueReportService()).run(transport="stdio")


if __name__ == "__main__":
    main()
