"""
Error types for Contract Advisor.

Text extraction never raises: a missing section is an empty string or list.
Everything below is a real failure the caller has to handle or surface.
"""


class AdvisorError(Exception):
    """Base class for all application errors."""


class MissingProjectFields(AdvisorError):
    """Generation was requested for an incomplete project."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__("Missing required project fields: " + ", ".join(self.missing))


class UpstreamGenerationFailure(AdvisorError):
    """The language model call failed (credentials, auth, network, empty output)."""


class AlignmentMismatch(AdvisorError):
    """The analysis list does not line up with the project's issues."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected} analyses, got {actual}")


class PersistenceFailure(AdvisorError):
    """The report store could not read or write."""


class OwnershipViolation(AdvisorError):
    """A report id belongs to a different owner."""

    def __init__(self, report_id: str):
        self.report_id = report_id
        super().__init__(f"Report {report_id} belongs to another user")
