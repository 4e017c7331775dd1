"""
Prompt templates for the LLM analysis engine.

The report prompt asks for the same eight numbered sections that
core.parsers knows how to pull back out, so the two must stay in step.
"""

from __future__ import annotations

from core.letters import recipient_for_role
from core.parsers import SECTION_LABELS
from models.schemas import ProjectDetails, Report


# =============================================================================
# System instructions
# =============================================================================

REPORT_SYSTEM_INSTRUCTION = """You are a UK construction contract expert assistant that analyses construction contract issues and provides detailed professional analysis and recommendations.
You provide detailed, well-organised reports that follow a consistent structure. Focus on being thorough and specific to the contract type and issue described.
Your reports are concise yet comprehensive, with practical recommendations that can be implemented.
For each issue, structure your response with clear section headings and well-organised content."""

LETTER_SYSTEM_INSTRUCTION = """You are a UK construction contract expert that drafts professional formal letters regarding contract disputes.
You draft clear, concise and professional letters that follow UK business letter format and reference the appropriate contract clauses.
Your letters are factual and respectful, and aim to resolve issues through the appropriate contractual mechanisms.
Format the letter with To, Subject, Greeting, Body, Closing and Sender information.
Keep a professional tone: firm and clear about contract requirements, never aggressive."""


# =============================================================================
# Report prompt
# =============================================================================

_SECTION_GUIDANCE = {
    "Detailed Analysis": "Specific analysis of the issue focusing on the relevant contract provisions",
    "Legal Context": "Relevant legal framework, legislation, and case law applicable to this specific issue",
    "Relevant Contract Clauses": (
        "List of specific clauses from the contract type that apply to this issue "
        "(provide actual clause numbers and names)"
    ),
    "Clause Explanations": "Brief explanation of how each identified clause applies to this issue",
    "Recommendations": "Specific, actionable recommendations to address the issue",
    "Potential Outcomes": "Realistic assessment of possible outcomes",
    "Timeline Suggestions": "Recommended timeline for addressing the issue",
    "Risk Assessment": "Analysis of risks associated with the issue and different courses of action",
}

REPORT_PROMPT = """I need a detailed UK construction contract analysis for a real project with the following details:

PROJECT INFORMATION:
Project Name: {project_name}
Project Description: {project_description}
Contract Type: {contract_type}
Organization Role: {organization_role}

ISSUES TO ANALYZE:
{issues}

For each issue, please provide a thorough analysis with the following sections:
{sections}

Start the analysis of each issue with a heading of the form "ISSUE N:".
Please be specific, practical, and focused on UK construction contract law and practice. Format your response with clear section headings for each part of the analysis.
"""

ISSUE_BLOCK = """ISSUE {number}:
Description: {description}
Actions Taken: {actions_taken}
"""


def _enum_text(value) -> str:
    return getattr(value, "value", value) or "Not specified"


def build_report_prompt(project: ProjectDetails) -> str:
    issues = "\n".join(
        ISSUE_BLOCK.format(
            number=i,
            description=issue.description,
            actions_taken=issue.actions_taken.strip() or "None",
        )
        for i, issue in enumerate(project.issues, start=1)
    )
    sections = "\n".join(
        f"{i}. {label}: {_SECTION_GUIDANCE[label]}"
        for i, label in enumerate(SECTION_LABELS, start=1)
    )
    return REPORT_PROMPT.format(
        project_name=project.project_name,
        project_description=project.project_description or "Not provided",
        contract_type=_enum_text(project.contract_type),
        organization_role=_enum_text(project.organization_role),
        issues=issues,
        sections=sections,
    )


# =============================================================================
# Letter prompt
# =============================================================================

LETTER_PROMPT = """Draft a formal letter regarding a UK construction contract issue with the following details:

PROJECT INFORMATION:
Project Name: {project_name}
Contract Type: {contract_type}
Your Role: {organization_role}
Recipient: {recipient}

ISSUES TO ADDRESS:
{issues}

The letter should include:
1. Appropriate salutation for the recipient
2. Clear reference to the project and contract
3. Formal introduction stating your role and purpose of the letter
4. Well-structured paragraphs addressing each issue with reference to specific contract clauses
5. Clear requests for action with reasonable timeframes
6. Professional closing
7. Space for signature with your organization role
8. Reference number and date

Format the letter as a complete draft communication with the following structure:
- To
- Subject
- Greeting
- Body (with appropriate paragraphs and formatting)
- Closing
- Sender information

Use formal UK business letter conventions and professional language throughout.
"""

LETTER_ISSUE_BLOCK = """ISSUE {number}:
Description: {description}
Actions Taken: {actions_taken}
Relevant Contract Clauses: {clauses}
Key Recommendations: {recommendations}
"""


def build_letter_prompt(report: Report) -> str:
    details = report.project_details
    issues = "\n".join(
        LETTER_ISSUE_BLOCK.format(
            number=i,
            description=analysis.issue,
            actions_taken=analysis.actions_taken.strip() or "None",
            clauses=", ".join(analysis.relevant_clauses) or "None identified",
            recommendations=" ".join(analysis.recommendations[:2]) or "None",
        )
        for i, analysis in enumerate(report.analysis, start=1)
    )
    return LETTER_PROMPT.format(
        project_name=details.project_name,
        contract_type=_enum_text(details.contract_type),
        organization_role=_enum_text(details.organization_role),
        recipient=recipient_for_role(details.organization_role),
        issues=issues,
    )
