"""Exception types raised by the report pipeline."""

from typing import Any


class ReportError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(ReportError):
    """Raised when required configuration is missing."""


class GitHubAPIError(ReportError):
    """Raised when a call to the GitHub API fails."""

    def __init__(self, message: str, status_code: int | None = None, response: Any = None):
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class TransportError(GitHubAPIError):
    """Network failure, timeout or non-success HTTP status."""


class GraphQLError(GitHubAPIError):
    """The GraphQL endpoint answered with an `errors` array."""

    def __init__(self, errors: list[dict[str, Any]], data: Any = None):
        self.errors = errors
        self.data = data
        messages = "; ".join(e.get("message", str(e)) for e in errors) or "unknown error"
        super().__init__(f"GraphQL errors: {messages}", response={"errors": errors, "data": data})


class ProjectNotFound(ReportError):
    """The named project board does not exist in the organization."""

    def __init__(self, org: str, title: str):
        self.org = org
        self.title = title
        super().__init__(f"Project '{title}' not found in organization '{org}'")


class StatusOptionNotFound(ReportError):
    """The Status field has no option with the requested name."""

    def __init__(self, status: str, available: list[str]):
        self.status = status
        self.available = available
        options = ", ".join(available) if available else "none"
        super().__init__(f"Status option '{status}' not found (available: {options})")


class IssueUpdateError(ReportError):
    """A single project item could not be moved to the new status."""

    def __init__(self, issue_number: int, reason: str):
        self.issue_number = issue_number
        self.reason = reason
        super().__init__(f"Issue #{issue_number}: {reason}")
