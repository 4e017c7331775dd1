"""
Report and letter generation.

Both entry points run one of two engines:

- template: deterministic rendering from core.templates / core.letters
- llm: one Gemini call, with the free-form answer parsed back into the
  same structures by core.parsers

The LLM boundary is injected (`llm=call_llm`) so tests can substitute a
fake that returns an LLMCallResult.
"""

from __future__ import annotations

import logging
import random
from datetime import date, datetime
from typing import Callable

from config import settings
from config.settings import (
    ANALYSIS_MODE_LLM,
    ANALYSIS_MODE_TEMPLATE,
    LETTER_MODEL,
    LETTER_TEMPERATURE,
    REPORT_MODEL,
    REPORT_TEMPERATURE,
)
from core.errors import AlignmentMismatch, MissingProjectFields, UpstreamGenerationFailure
from core.letters import assemble_letter, parse_letter_response
from core.llm_client import call_llm, require_success
from core.parsers import extract_list_items, extract_section, split_by_issues
from core.prompts import (
    LETTER_SYSTEM_INSTRUCTION,
    REPORT_SYSTEM_INSTRUCTION,
    build_letter_prompt,
    build_report_prompt,
)
from core.templates import build_template_analysis, render_clause_explanations, render_relevant_clauses
from models.schemas import Analysis, DraftCommunication, LLMCallResult, ProjectDetails, Report

logger = logging.getLogger(__name__)

LLMCallable = Callable[..., LLMCallResult]

FALLBACK_RECOMMENDATION = "Seek professional legal advice specific to your contract situation."


# =============================================================================
# Validation
# =============================================================================

def validate_project(project: ProjectDetails) -> None:
    """Raise MissingProjectFields listing every required field that is empty."""
    missing = []
    if not project.project_name.strip():
        missing.append("project_name")
    if project.contract_type is None:
        missing.append("contract_type")
    if project.organization_role is None:
        missing.append("organization_role")
    if not project.issues:
        missing.append("issues")
    for i, issue in enumerate(project.issues):
        if not issue.description.strip():
            missing.append(f"issues[{i}].description")
    if missing:
        raise MissingProjectFields(missing)


def _resolve_mode(mode: str | None) -> str:
    mode = (mode or settings.ANALYSIS_MODE).strip().lower()
    if mode not in (ANALYSIS_MODE_LLM, ANALYSIS_MODE_TEMPLATE):
        raise ValueError(f"Unknown analysis mode: {mode!r}")
    return mode


# =============================================================================
# LLM response parsing
# =============================================================================

def parse_report_response(text: str, project: ProjectDetails) -> list[Analysis]:
    """
    Turn a combined model answer into one Analysis per project issue.

    Missing sections come back empty. Clauses fall back to the template
    catalogue (with catalogue explanations, one per clause) and
    recommendations to a single generic line, so a report
    always has something actionable.
    """
    blocks = split_by_issues(text, len(project.issues))
    analyses = []
    for issue, block in zip(project.issues, blocks):
        clauses = extract_list_items(block, "Relevant Contract Clauses")
        explanations = extract_list_items(block, "Clause Explanations")
        if not clauses:
            logger.info("No clauses parsed for issue %r, using clause catalogue", issue.description[:40])
            clauses = render_relevant_clauses(project.contract_type, issue.description)
            # Explanations must line up with the catalogue clauses
            explanations = render_clause_explanations(clauses, project.contract_type)

        recommendations = extract_list_items(block, "Recommendations") or [FALLBACK_RECOMMENDATION]

        analyses.append(Analysis(
            issue=issue.description,
            actions_taken=issue.actions_taken,
            detailed_analysis=extract_section(block, "Detailed Analysis"),
            legal_context=extract_section(block, "Legal Context"),
            relevant_clauses=clauses,
            clause_explanations=explanations,
            recommendations=recommendations,
            potential_outcomes=extract_section(block, "Potential Outcomes"),
            timeline_suggestions=extract_section(block, "Timeline Suggestions"),
            risk_assessment=extract_section(block, "Risk Assessment"),
        ))
    return analyses


def _generated_text(result: LLMCallResult, agent_name: str) -> str:
    require_success(result, agent_name)
    if not result.text.strip():
        raise UpstreamGenerationFailure(f"{agent_name} returned no text")
    return result.text


# =============================================================================
# Report
# =============================================================================

def _llm_analyses(project: ProjectDetails, llm: LLMCallable) -> list[Analysis]:
    result = llm(
        build_report_prompt(project),
        model=REPORT_MODEL,
        temperature=REPORT_TEMPERATURE,
        system_instruction=REPORT_SYSTEM_INSTRUCTION,
        agent_name="ReportGenerator",
    )
    text = _generated_text(result, "ReportGenerator")
    return parse_report_response(text, project)


def generate_report(
    project: ProjectDetails,
    mode: str | None = None,
    llm: LLMCallable = call_llm,
    clock: Callable[[], datetime] | None = None,
    store=None,
    owner_id: str | None = None,
) -> Report:
    """
    Validate the project, analyse every issue and return a Report.

    Args:
        project: Form contents; copied into the report, never mutated
        mode: "template" or "llm" (defaults to ANALYSIS_MODE)
        llm: LLM boundary, used only in llm mode
        clock: Source of "now" for the id and date
        store: Optional ReportStore; the report is saved when owner_id is also given
        owner_id: Owner to save under

    Raises:
        MissingProjectFields, UpstreamGenerationFailure, AlignmentMismatch,
        and PersistenceFailure/OwnershipViolation from the store
    """
    validate_project(project)
    mode = _resolve_mode(mode)
    now = (clock or datetime.now)()

    snapshot = project.model_copy(deep=True)
    logger.info(
        "Generating %s report for %r (%d issue(s))",
        mode, snapshot.project_name, len(snapshot.issues),
    )

    if mode == ANALYSIS_MODE_LLM:
        analyses = _llm_analyses(snapshot, llm)
    else:
        analyses = [build_template_analysis(snapshot, issue) for issue in snapshot.issues]

    report = Report(
        id=str(int(now.timestamp() * 1000)),
        date=now,
        project_details=snapshot,
        analysis=analyses,
    )
    if not report.is_aligned:
        raise AlignmentMismatch(len(snapshot.issues), len(analyses))

    if store is not None and owner_id:
        store.save(report, owner_id)
    return report


# =============================================================================
# Letter
# =============================================================================

def generate_letter(
    report: Report,
    mode: str | None = None,
    llm: LLMCallable = call_llm,
    rng: random.Random | None = None,
    today: date | None = None,
) -> DraftCommunication:
    """Draft a formal letter for a report with the chosen engine."""
    if not report.is_aligned:
        raise AlignmentMismatch(len(report.project_details.issues), len(report.analysis))
    mode = _resolve_mode(mode)
    logger.info("Drafting %s letter for report %s", mode, report.id)

    if mode == ANALYSIS_MODE_TEMPLATE:
        return assemble_letter(report, rng=rng, today=today)

    result = llm(
        build_letter_prompt(report),
        model=LETTER_MODEL,
        temperature=LETTER_TEMPERATURE,
        system_instruction=LETTER_SYSTEM_INSTRUCTION,
        agent_name="LetterDrafter",
    )
    text = _generated_text(result, "LetterDrafter")
    return parse_letter_response(text, report, rng=rng, today=today)
