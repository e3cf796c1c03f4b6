"""Team reports from a GitHub Projects board, and bulk Status updates for the reported issues."""

from .classify import ReportData, ReportIssue, classify
from .errors import (
    ConfigError,
    GitHubAPIError,
    GraphQLError,
    IssueUpdateError,
    ProjectNotFound,
    ReportError,
    StatusOptionNotFound,
    TransportError,
)
from .github import GitHubClient
from .render import ReportRenderer, extract_issues_from_report
from .service import IssueReportService
from .state import LastReportEntry, LastReportStore

__all__ = [
    "ConfigError",
    "GitHubAPIError",
    "GitHubClient",
    "GraphQLError",
    "IssueReportService",
    "IssueUpdateError",
    "LastReportEntry",
    "LastReportStore",
    "ProjectNotFound",
    "ReportData",
    "ReportError",
    "ReportIssue",
    "ReportRenderer",
    "StatusOptionNotFound",
    "TransportError",
    "classify",
    "extract_issues_from_report",
]
