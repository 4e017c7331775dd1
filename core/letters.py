"""
Draft letter assembly.

Two ways to produce a DraftCommunication from a Report:

- assemble_letter: deterministic rendering from the structured analysis
- parse_letter_response: split a model-drafted letter into the same fields,
  falling back to the deterministic defaults for anything not found

The reference number is the only non-deterministic part; callers inject
the random source and the date.
"""

from __future__ import annotations

import logging
import random
import re
from datetime import date
from typing import Callable

from models.schemas import (
    DraftCommunication,
    OrganizationRole,
    Report,
    ROLE_GROUPS,
    RoleGroup,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Recipient and salutation
# =============================================================================

DEFAULT_RECIPIENT = "The Contract Administrator"

_GROUP_RECIPIENTS = {
    RoleGroup.CLIENT: "The Contractor",
    RoleGroup.CONTRACTOR: "The Employer/Client",
    RoleGroup.SUBCONTRACTOR: "The Main Contractor",
}

RECIPIENTS: dict[OrganizationRole, str] = {
    role: _GROUP_RECIPIENTS[group]
    for role, group in ROLE_GROUPS.items()
    if group in _GROUP_RECIPIENTS
}
RECIPIENTS[OrganizationRole.CONTRACT_ADMINISTRATOR] = "The Relevant Party"
RECIPIENTS[OrganizationRole.ARCHITECT] = "The Relevant Party"

# Recipients addressed by title rather than "Sir/Madam"
_NAMED_PROFESSIONAL_ROLES = ("Contract Administrator", "Architect")


def recipient_for_role(role: OrganizationRole | str | None) -> str:
    if role is None:
        return DEFAULT_RECIPIENT
    if not isinstance(role, OrganizationRole):
        try:
            role = OrganizationRole(role)
        except ValueError:
            return DEFAULT_RECIPIENT
    return RECIPIENTS.get(role, DEFAULT_RECIPIENT)


def salutation_for(recipient: str) -> str:
    if any(title in recipient for title in _NAMED_PROFESSIONAL_ROLES):
        return f"Dear {recipient},"
    return "Dear Sir/Madam,"


# =============================================================================
# Phrasing
# =============================================================================

# Recommendations open with an imperative verb
_REQUEST_VERBS = (
    "submit", "provide", "issue", "ensure", "review", "confirm", "assess", "consider",
    "maintain", "document", "compile", "prepare", "implement", "verify", "obtain", "notify",
    "clarify", "establish", "record", "keep", "allow", "give", "value", "respond", "check",
    "inspect", "seek", "request", "calculate",
)

# Applied in order; advisory third person becomes a direct request
REQUEST_SUBSTITUTIONS: list[tuple[re.Pattern, str | Callable[[re.Match], str]]] = [
    (re.compile(r"\bthe contractor's\b", re.IGNORECASE), "your"),
    (re.compile(r"\bthe employer's\b", re.IGNORECASE), "your"),
    (re.compile(r"\byou should\b", re.IGNORECASE), "we ask that you"),
    (re.compile(rf"^({'|'.join(_REQUEST_VERBS)})\b", re.IGNORECASE), lambda m: "please " + m.group(1).lower()),
]


def to_request_phrasing(text: str) -> str:
    """Rewrite a recommendation as a request to the recipient."""
    phrased = (text or "").strip()
    for pattern, replacement in REQUEST_SUBSTITUTIONS:
        phrased = pattern.sub(replacement, phrased)
    if phrased:
        phrased = phrased[0].lower() + phrased[1:]
    return phrased


def _first_sentence(text: str) -> str:
    """Text up to the first full stop that ends a sentence."""
    text = (text or "").strip()
    if not text:
        return ""
    m = re.search(r"\.(?=\s|$)", text)
    sentence = text[: m.start()] if m else text.split("\n")[0]
    return sentence.strip() + "."


def _as_sentence(lead: str, phrase: str) -> str:
    if not phrase.startswith("please"):
        phrase = f"we propose the following: {phrase}"
    sentence = f"{lead}, {phrase}"
    return sentence if sentence.endswith(".") else sentence + "."


# =============================================================================
# Reference number and signature
# =============================================================================

_RESPONSE_WINDOW = re.compile(r"Within (\d+)(-\d+)? days", re.IGNORECASE)


def format_letter_date(today: date) -> str:
    """'7 March 2025' style."""
    return f"{today.day} {today.strftime('%B %Y')}"


def make_reference_number(project_name: str, rng: random.Random, today: date) -> str:
    return f"REF: {project_name[:3].upper()}/{today.year}/{rng.randint(0, 999):03d}"


def default_signature(project_name: str, rng: random.Random, today: date) -> str:
    ref = make_reference_number(project_name, rng, today)
    return f"[NAME]\n[POSITION]\n[COMPANY]\n{ref}\nDate: {format_letter_date(today)}"


def default_subject(report: Report) -> str:
    details = report.project_details
    contract = details.contract_type.value if details.contract_type else "Contract"
    return f"{details.project_name} - {contract} - Contract Notice"


# =============================================================================
# Template letter
# =============================================================================

CLOSING_PARAGRAPH = (
    "Should you require any further information or clarification on the above matters, please do not "
    "hesitate to contact me. I look forward to your response and to resolving these issues in a timely "
    "and amicable manner in accordance with the contract.\n\n"
    "This letter is sent without prejudice to any other rights or remedies available under the contract "
    "or at law."
)


def assemble_letter(
    report: Report,
    rng: random.Random | None = None,
    today: date | None = None,
) -> DraftCommunication:
    """Render a formal letter from a report's analyses, one paragraph per issue."""
    rng = rng or random.Random()
    today = today or date.today()
    details = report.project_details
    recipient = recipient_for_role(details.organization_role)
    contract = details.contract_type.value if details.contract_type else "the contract"
    role = details.organization_role.value if details.organization_role else "a party to the contract"

    matters = (
        "the following contractual matter that requires"
        if len(report.analysis) == 1
        else "the following contractual matters that require"
    )
    paragraphs = [
        f"Re: {details.project_name} - {contract}",
        f"I am writing to you in my capacity as {role} in connection with the above-referenced project. "
        f"I wish to formally raise {matters} your attention and resolution in accordance with the contract.",
    ]

    for index, analysis in enumerate(report.analysis, start=1):
        paragraphs.append(f"**Issue {index}: {analysis.issue}**")

        lines = []
        if analysis.relevant_clauses:
            lines.append(f"In accordance with {', '.join(analysis.relevant_clauses)} of the contract, ")
        if analysis.actions_taken.strip():
            lines.append(f"we have already undertaken the following actions: {analysis.actions_taken.strip().rstrip('.')}. ")
        summary = _first_sentence(analysis.detailed_analysis)
        if summary:
            if lines and lines[-1].endswith(", "):
                summary = summary[0].lower() + summary[1:]
            lines.append(summary)
        if lines:
            paragraphs.append("".join(lines).strip())

        requests = [to_request_phrasing(r) for r in analysis.recommendations[:2] if r.strip()]
        if requests:
            sentences = [_as_sentence("Accordingly", requests[0])]
            if len(requests) > 1:
                sentences.append(_as_sentence("Additionally", requests[1]))
            paragraphs.append(" ".join(sentences))

        window = _RESPONSE_WINDOW.search(analysis.timeline_suggestions or "")
        if window:
            paragraphs.append(
                f"In accordance with contractual timeframes, we request your response within "
                f"{window.group(1)} days of receipt of this communication."
            )
        else:
            paragraphs.append(
                "We request your prompt attention to this matter in accordance with the contractual requirements."
            )

    paragraphs.append(CLOSING_PARAGRAPH)

    return DraftCommunication(
        to=recipient,
        subject=default_subject(report),
        greeting=salutation_for(recipient),
        body="\n\n".join(paragraphs),
        closing="Yours faithfully,",
        sender=default_signature(details.project_name, rng, today),
    )


# =============================================================================
# Parsing a model-drafted letter
# =============================================================================

CLOSING_PHRASES = (
    "Yours sincerely",
    "Yours faithfully",
    "Yours truly",
    "Kind regards",
    "Best regards",
    "Warm regards",
    "Regards",
)

# Longest first, so "Kind regards" is never read as "Regards"
_CLOSING = re.compile(
    r"^\s*(?:%s)\s*[,.!]?\s*$" % "|".join(
        re.escape(p) for p in sorted(CLOSING_PHRASES, key=len, reverse=True)
    ),
    re.IGNORECASE,
)
# "To: ...", "**Subject:** ..."
_HEADER = re.compile(r"^\s*\**\s*(to|subject)\s*\**\s*:\s*\**\s*(.*?)[\s*]*$", re.IGNORECASE)
_GREETING = re.compile(r"^\s*(Dear\s+[^,\n]+?)\s*(?:,|$)(.*)$", re.IGNORECASE)
_LEADING_SUBJECT = re.compile(r"^\s*\**\s*(?:subject|re)\s*\**\s*:\s*\**\s*(.*?)[\s*]*$", re.IGNORECASE)


def parse_letter_response(
    text: str,
    report: Report,
    rng: random.Random | None = None,
    today: date | None = None,
) -> DraftCommunication:
    """
    Split a model-drafted letter into to/subject/greeting/body/closing/sender.

    Headers, greeting and closing are recognised as whole lines. The body
    runs from after the last header or greeting line to the closing line.
    Never raises on malformed input: each missing part falls back to the
    deterministic default used by assemble_letter.
    """
    lines = (text or "").splitlines()
    details = report.project_details

    closing_at = next((i for i, line in enumerate(lines) if _CLOSING.match(line)), None)
    letter_end = closing_at if closing_at is not None else len(lines)

    greeting_at = None
    greeting_rest = ""
    for i, line in enumerate(lines[:letter_end]):
        match = _GREETING.match(line)
        if match:
            greeting_at = i
            greeting_rest = match.group(2).strip()
            break

    # Headers come before the greeting, or lead the text when there is none
    headers: dict[str, str] = {}
    body_start = 0
    for i, line in enumerate(lines[:greeting_at if greeting_at is not None else letter_end]):
        header = _HEADER.match(line)
        if header:
            headers.setdefault(header.group(1).lower(), header.group(2))
            body_start = i + 1
        elif greeting_at is None and line.strip():
            break
    if greeting_at is not None:
        body_start = greeting_at + 1

    body_lines = lines[body_start:letter_end]
    if greeting_rest:
        body_lines.insert(0, greeting_rest)
    while body_lines and not body_lines[0].strip():
        body_lines.pop(0)
    if body_lines:
        leading = _LEADING_SUBJECT.match(body_lines[0])
        if leading:
            headers.setdefault("subject", leading.group(1))
            body_lines.pop(0)
    body = "\n".join(body_lines).strip()

    to = headers.get("to") or recipient_for_role(details.organization_role)
    subject = headers.get("subject") or default_subject(report)
    if greeting_at is not None:
        greeting = _GREETING.match(lines[greeting_at]).group(1) + ","
    else:
        greeting = salutation_for(to)

    closing = "Yours faithfully,"
    sender = ""
    if closing_at is not None:
        closing = lines[closing_at].strip()
        sender = "\n".join(lines[closing_at + 1:]).strip()
    if not sender:
        rng = rng or random.Random()
        today = today or date.today()
        sender = default_signature(details.project_name, rng, today)

    logger.debug("Parsed letter: to=%r, closing=%r, body=%d chars", to, closing, len(body))
    return DraftCommunication(
        to=to,
        subject=subject,
        greeting=greeting,
        body=body,
        closing=closing,
        sender=sender,
    )
