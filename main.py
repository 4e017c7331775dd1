"""
Contract Advisor - Main Entry Point

Run with:
    streamlit run ui/app.py

Or to check configuration and render an offline sample report:
    python main.py
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import (
    setup_environment, validate_config, VERSION, PRODUCT_NAME,
    ANALYSIS_MODE, ANALYSIS_MODE_TEMPLATE, PROJECT_ID, REPORTS_FOLDER,
)
from core.export import format_report_plaintext
from core.letters import assemble_letter
from core.pipeline import generate_report
from models.schemas import ContractType, Issue, OrganizationRole, ProjectDetails


SAMPLE_PROJECT = ProjectDetails(
    project_name="Riverside Offices",
    project_description="Four-storey office building with basement car park.",
    contract_type=ContractType.JCT_DESIGN_AND_BUILD,
    organization_role=OrganizationRole.MAIN_CONTRACTOR,
    issues=[
        Issue(
            description="The employer has not paid our interim application and issued no pay less notice.",
            actions_taken="Chased by email twice.",
        ),
    ],
)


def main():
    """Test configuration and show status."""
    setup_environment()

    print("=" * 60)
    print(f"{PRODUCT_NAME} v{VERSION}")
    print("=" * 60)

    print("\n📋 Configuration:")
    config = validate_config()
    for key, ok in config.items():
        if key != "all_ok":
            status = "✅" if ok else "❌"
            print(f"  {status} {key}")

    print(f"\n  Analysis mode: {ANALYSIS_MODE}")
    print(f"  Project ID: {PROJECT_ID or '(not set)'}")
    print(f"  Reports folder: {REPORTS_FOLDER}")

    # Template engine only, so this runs without credentials
    print("\n📄 Sample report (template engine):")
    report = generate_report(SAMPLE_PROJECT, mode=ANALYSIS_MODE_TEMPLATE)
    print(format_report_plaintext(report))

    letter = assemble_letter(report)
    print(f"✉️  Letter to {letter.to}: {letter.subject}")

    print("\n" + "=" * 60)
    print("To start the UI:")
    print("  streamlit run ui/app.py")
    print("=" * 60)


if __name__ == "__main__":
    main()
