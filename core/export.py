"""
Export module for Contract Advisor.

Formats reports and letters as markdown or plain text, and renders
markdown to a DOCX file with python-docx.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from config.settings import OUTPUTS_FOLDER, PRODUCT_NAME
from models.schemas import DraftCommunication, Report

logger = logging.getLogger(__name__)


# =============================================================================
# Text formats
# =============================================================================

def _display_date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def _enum_text(value) -> str:
    return getattr(value, "value", value) or ""


def export_filename(prefix: str, project_name: str, ext: str) -> str:
    """'Contract_Report', 'My Project', 'docx' -> 'Contract_Report_My_Project.docx'"""
    stem = re.sub(r"\s+", "_", project_name.strip())
    # Keep the name usable as a file name on any OS
    stem = re.sub(r'[\\/:*?"<>|]', "", stem) or "Untitled"
    return f"{prefix}_{stem}.{ext.lstrip('.')}"


def format_report_markdown(report: Report) -> str:
    """Full report as markdown, the content of the Word export."""
    details = report.project_details
    out = [
        f"# Contract Report: {details.project_name}",
        "",
        f"Date: {_display_date(report.date)}",
        "",
        "## Project Details",
        "",
        f"Project: {details.project_name}",
        f"Description: {details.project_description}",
        f"Contract Type: {_enum_text(details.contract_type)}",
        f"Organization Role: {_enum_text(details.organization_role)}",
        "",
        "## Issues Analysis",
        "",
    ]

    for index, analysis in enumerate(report.analysis, start=1):
        out += [
            f"### Issue {index}: {analysis.issue}",
            "",
            f"Actions Taken: {analysis.actions_taken or 'None'}",
            "",
        ]
        if analysis.detailed_analysis:
            out += ["#### Analysis:", analysis.detailed_analysis, ""]
        if analysis.legal_context:
            out += ["#### Legal Context:", analysis.legal_context, ""]

        out.append("#### Relevant Contract Clauses:")
        out += [f"* {clause}" for clause in analysis.relevant_clauses]
        out.append("")

        if analysis.clause_explanations:
            out.append("#### Clause Explanations:")
            out += [f"* {explanation}" for explanation in analysis.clause_explanations]
            out.append("")

        out.append("#### Recommendations:")
        out += [f"* {rec}" for rec in analysis.recommendations]
        out.append("")

        for heading, body in (
            ("Potential Outcomes", analysis.potential_outcomes),
            ("Timeline Suggestions", analysis.timeline_suggestions),
            ("Risk Assessment", analysis.risk_assessment),
        ):
            if body:
                out += [f"#### {heading}:", body, ""]

    return "\n".join(out).rstrip() + "\n"


def format_report_plaintext(report: Report) -> str:
    """Short plain-text summary for copying: clauses, recommendations and outcomes only."""
    details = report.project_details
    out = [
        f"Contract Report: {details.project_name}",
        "",
        f"Date: {_display_date(report.date)}",
        "",
        "Project Details:",
        f"Project: {details.project_name}",
        f"Description: {details.project_description}",
        f"Contract Type: {_enum_text(details.contract_type)}",
        f"Organization Role: {_enum_text(details.organization_role)}",
        "",
        "Issues Analysis:",
        "",
    ]
    for index, analysis in enumerate(report.analysis, start=1):
        out += [
            f"Issue {index}: {analysis.issue}",
            f"Actions Taken: {analysis.actions_taken or 'None'}",
            "",
        ]
        if analysis.detailed_analysis:
            out += [f"Analysis: {analysis.detailed_analysis}", ""]
        out.append("Relevant Contract Clauses:")
        out += [f"- {clause}" for clause in analysis.relevant_clauses]
        out += ["", "Recommendations:"]
        out += [f"- {rec}" for rec in analysis.recommendations]
        out.append("")
        if analysis.potential_outcomes:
            out += [f"Potential Outcomes: {analysis.potential_outcomes}", ""]
    return "\n".join(out).rstrip() + "\n"


def format_letter_text(draft: DraftCommunication) -> str:
    return f"{draft.greeting}\n\n{draft.body}\n\n{draft.closing}\n\n{draft.sender}"


# =============================================================================
# DOCX Generation
# =============================================================================

def generate_docx(
    content: str,
    filename: str,
    title: str = "",
    metadata: dict[str, str] | None = None,
) -> str:
    """
    Render markdown content to a DOCX file in the outputs folder.

    Args:
        content: Markdown (headings, bullets, numbered items, **bold**, *italic*)
        filename: Output filename
        title: Optional title line above the content
        metadata: Optional label -> value pairs shown under the title

    Returns:
        Path to saved file, or "" on error
    """
    try:
        from docx import Document
        from docx.shared import Pt, Inches, RGBColor
        from docx.enum.text import WD_ALIGN_PARAGRAPH

        doc = Document()

        # ---- Page Setup (A4) ----
        section = doc.sections[0]
        section.page_width = Inches(8.27)
        section.page_height = Inches(11.69)
        section.top_margin = Inches(1)
        section.bottom_margin = Inches(0.8)
        section.left_margin = Inches(1)
        section.right_margin = Inches(1)

        # ---- Styles ----
        normal = doc.styles["Normal"]
        normal.font.name = "Calibri"
        normal.font.size = Pt(11)
        normal.paragraph_format.space_after = Pt(6)

        for level, size in enumerate([16, 14, 12, 11], 1):
            hs = doc.styles[f"Heading {level}"]
            hs.font.name = "Calibri"
            hs.font.size = Pt(size)
            hs.font.bold = True
            hs.font.color.rgb = RGBColor(0x2F, 0x54, 0x96) if level < 3 else RGBColor(0x1F, 0x38, 0x64)

        # ---- Title block ----
        if title:
            title_para = doc.add_paragraph()
            title_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
            title_run = title_para.add_run(title)
            title_run.font.size = Pt(20)
            title_run.font.bold = True
            title_run.font.color.rgb = RGBColor(0x2F, 0x54, 0x96)

        for label, value in (metadata or {}).items():
            if not value:
                continue
            p = doc.add_paragraph()
            label_run = p.add_run(f"{label}: ")
            label_run.font.bold = True
            p.add_run(str(value))

        # ---- Content ----
        _render_markdown_to_docx(doc, content)

        # ---- Footer ----
        footer = doc.sections[0].footer
        footer_para = footer.paragraphs[0] if footer.paragraphs else footer.add_paragraph()
        footer_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        footer_run = footer_para.add_run(
            f"{PRODUCT_NAME} - Generated {datetime.now().strftime('%d %B %Y')} - "
            "Not a substitute for legal advice"
        )
        footer_run.font.size = Pt(8)
        footer_run.font.color.rgb = RGBColor(0xA0, 0xA0, 0xA0)

        # ---- Save ----
        output_dir = Path(OUTPUTS_FOLDER)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / filename
        doc.save(str(output_path))

        logger.info("DOCX saved: %s", output_path)
        return str(output_path)

    except ImportError:
        logger.error("python-docx not installed")
        return ""
    except Exception as e:
        logger.error("DOCX generation failed: %s", e, exc_info=True)
        return ""


_NUMBERED = re.compile(r"^(\d+)[.)]\s+(.*)$")


def _render_markdown_to_docx(doc, content: str):
    """Convert markdown lines to DOCX headings, list items and paragraphs."""
    from docx.shared import Inches

    for line in content.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue

        heading = re.match(r"^(#{1,6})\s+(.*)$", stripped)
        if heading:
            level = min(len(heading.group(1)), 4)
            doc.add_heading(heading.group(2).strip(), level=level)
            continue

        if stripped.startswith(("- ", "* ", "• ")):
            bullet_text = stripped[2:].strip()
            try:
                p = doc.add_paragraph(style="List Bullet")
            except KeyError:
                p = doc.add_paragraph()
                p.paragraph_format.left_indent = Inches(0.5)
                bullet_text = f"• {bullet_text}"
            _add_inline_formatted(p, bullet_text)
            continue

        numbered = _NUMBERED.match(stripped)
        if numbered:
            try:
                p = doc.add_paragraph(style="List Number")
                _add_inline_formatted(p, numbered.group(2))
            except KeyError:
                p = doc.add_paragraph()
                p.paragraph_format.left_indent = Inches(0.5)
                _add_inline_formatted(p, stripped)
            continue

        p = doc.add_paragraph()
        _add_inline_formatted(p, stripped)


def _add_inline_formatted(paragraph, text: str):
    """Handle **bold** and *italic* inline formatting."""
    parts = re.split(r"(\*\*[^*]+\*\*)", text)
    for part in parts:
        if part.startswith("**") and part.endswith("**") and len(part) > 4:
            run = paragraph.add_run(part[2:-2])
            run.font.bold = True
        elif part.startswith("*") and part.endswith("*") and len(part) > 2:
            run = paragraph.add_run(part[1:-1])
            run.font.italic = True
        elif part:
            paragraph.add_run(re.sub(r"\*([^*]+)\*", r"\1", part))


def export_report_docx(report: Report) -> str:
    """Word export of a report. Returns the file path, or "" on failure."""
    details = report.project_details
    return generate_docx(
        format_report_markdown(report),
        export_filename("Contract_Report", details.project_name, "docx"),
    )


def export_letter_docx(draft: DraftCommunication, project_name: str) -> str:
    """Word export of a draft letter. Returns the file path, or "" on failure."""
    return generate_docx(
        format_letter_text(draft),
        export_filename("Draft_Communication", project_name, "docx"),
        metadata={"To": draft.to, "Subject": draft.subject},
    )
