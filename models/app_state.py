"""
Application state for one user session.

AppState is a plain value: every operation below returns a new state and
leaves its argument untouched, so the UI can keep a single instance in
its session store and swap it on each interaction.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .schemas import DraftCommunication, Issue, ProjectDetails, Report


class AppState(BaseModel):
    """Consent flag, the project form, and what has been generated from it."""

    has_consented: bool = False
    project_details: ProjectDetails = Field(default_factory=ProjectDetails)
    report: Report | None = None
    draft_communication: DraftCommunication | None = None
    # None until the user answers the "draft a letter?" prompt
    should_generate_letter: bool | None = None


# Issue fields the form may edit, by field name or wire alias
_ISSUE_FIELDS = {
    "description": "description",
    "actions_taken": "actions_taken",
    "actionsTaken": "actions_taken",
}


# =============================================================================
# Consent
# =============================================================================

def give_consent(state: AppState) -> AppState:
    return state.model_copy(update={"has_consented": True})


def revoke_consent(state: AppState) -> AppState:
    return state.model_copy(update={"has_consented": False})


# =============================================================================
# Project form
# =============================================================================

def _with_project(state: AppState, project: ProjectDetails) -> AppState:
    return state.model_copy(update={"project_details": project})


def update_project_details(state: AppState, **fields: Any) -> AppState:
    """Merge fields into the project form. Values are validated (enum strings coerced)."""
    merged = {**state.project_details.model_dump(), **fields}
    return _with_project(state, ProjectDetails.model_validate(merged))


def _issues(state: AppState) -> list[Issue]:
    return [issue.model_copy() for issue in state.project_details.issues]


def _check_index(issues: list[Issue], index: int) -> None:
    # Negative indices are not positions on the form
    if not 0 <= index < len(issues):
        raise IndexError(f"Issue index {index} out of range (0..{len(issues) - 1})")


def add_issue(state: AppState) -> AppState:
    issues = _issues(state) + [Issue()]
    return _with_project(state, state.project_details.model_copy(update={"issues": issues}))


def update_issue(state: AppState, index: int, field: str, value: str) -> AppState:
    issues = _issues(state)
    _check_index(issues, index)
    if field not in _ISSUE_FIELDS:
        raise ValueError(f"Unknown issue field: {field!r}")
    issues[index] = issues[index].model_copy(update={_ISSUE_FIELDS[field]: value})
    return _with_project(state, state.project_details.model_copy(update={"issues": issues}))


def remove_issue(state: AppState, index: int) -> AppState:
    """
    Remove the issue at index; later issues move up one place.

    The form always has at least one issue, so removing the only one
    blanks it instead.
    """
    issues = _issues(state)
    _check_index(issues, index)
    if len(issues) == 1:
        issues = [Issue()]
    else:
        del issues[index]
    return _with_project(state, state.project_details.model_copy(update={"issues": issues}))


# =============================================================================
# Generated output
# =============================================================================

def with_report(state: AppState, report: Report) -> AppState:
    """Attach a new report; any letter for an earlier report is discarded."""
    return state.model_copy(update={
        "report": report,
        "draft_communication": None,
        "should_generate_letter": None,
    })


def with_letter_choice(state: AppState, wanted: bool) -> AppState:
    return state.model_copy(update={"should_generate_letter": wanted})


def with_draft(state: AppState, draft: DraftCommunication) -> AppState:
    return state.model_copy(update={"draft_communication": draft, "should_generate_letter": True})


def reset_project(state: AppState) -> AppState:
    """Start a new project. Consent is kept."""
    return AppState(has_consented=state.has_consented)
