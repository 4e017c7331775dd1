"""
Deterministic analysis templates (offline mode).

Every function here is pure string assembly over three inputs: the issue
description, the contract type and the organisation role. The issue is
classified once by ordered keyword rules; the category, the contract
family and the role group then select fixed catalogue entries and prose
blocks. No randomness: the same inputs always render the same text.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from pydantic import BaseModel, Field

from models.schemas import (
    Analysis,
    ContractFamily,
    ContractType,
    DESIGN_AND_BUILD_FORMS,
    Issue,
    OrganizationRole,
    ProjectDetails,
    RoleGroup,
    contract_family,
    role_group,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Classification
# =============================================================================

class IssueCategory(str, Enum):
    PAYMENT = "payment"
    DELAY = "delay"
    VARIATION = "variation"
    DEFECT = "defect"
    DESIGN = "design"
    GENERAL = "general"


# Order matters: a description mentioning payment and delay is a payment issue.
# Keywords match at the start of a word, so "drawings" counts but "withdrawing" does not.
CATEGORY_RULES: list[tuple[IssueCategory, tuple[str, ...]]] = [
    (IssueCategory.PAYMENT, ("payment",)),
    (IssueCategory.DELAY, ("delay",)),
    (IssueCategory.VARIATION, ("variation", "change", "extra work")),
    (IssueCategory.DEFECT, ("defect", "quality", "workmanship")),
    (IssueCategory.DESIGN, ("design", "specification", "drawing")),
]

_CATEGORY_PATTERNS = [
    (category, re.compile(r"\b(?:%s)" % "|".join(re.escape(kw) for kw in keywords)))
    for category, keywords in CATEGORY_RULES
]


def classify_issue(description: str) -> IssueCategory:
    """First matching keyword rule wins; no match is a general issue."""
    text = (description or "").lower()
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return IssueCategory.GENERAL


def _has(text: str, *keywords: str) -> bool:
    return any(kw in text for kw in keywords)


def _coerce_contract(contract_type: ContractType | str | None) -> ContractType | None:
    if isinstance(contract_type, ContractType) or contract_type is None:
        return contract_type
    try:
        return ContractType(contract_type)
    except ValueError:
        return None


def _coerce_role(role: OrganizationRole | str | None) -> OrganizationRole | None:
    if isinstance(role, OrganizationRole) or role is None:
        return role
    try:
        return OrganizationRole(role)
    except ValueError:
        return None


def _family(contract_type: ContractType | None) -> ContractFamily:
    return contract_family(contract_type) if contract_type else ContractFamily.OTHER


def _group(role: OrganizationRole | None) -> RoleGroup:
    return role_group(role) if role else RoleGroup.OTHER


def _label(value: ContractType | OrganizationRole | str | None, default: str) -> str:
    if value is None:
        return default
    return value.value if isinstance(value, Enum) else str(value)


# =============================================================================
# Clause catalogue
# =============================================================================

def _clauses(*numbers: str) -> tuple[str, ...]:
    return tuple(n if n.startswith("Option") else f"Clause {n}" for n in numbers)


CLAUSE_CATALOGUE: dict[tuple[ContractFamily, IssueCategory], tuple[str, ...]] = {
    (ContractFamily.JCT, IssueCategory.PAYMENT): _clauses("4.8", "4.9", "4.10", "4.11", "4.12", "4.13"),
    (ContractFamily.JCT, IssueCategory.DELAY): _clauses("2.26", "2.27", "2.28", "2.29", "2.25"),
    (ContractFamily.JCT, IssueCategory.VARIATION): _clauses("3.14", "3.15", "3.16", "5.6", "5.7"),
    (ContractFamily.JCT, IssueCategory.DEFECT): _clauses("2.38", "2.39", "2.40", "3.18"),
    (ContractFamily.JCT, IssueCategory.DESIGN): _clauses("2.1", "2.2", "2.17", "3.21"),
    (ContractFamily.JCT, IssueCategory.GENERAL): _clauses("1.7", "2.1", "8.4", "8.9"),

    (ContractFamily.NEC, IssueCategory.PAYMENT): _clauses("50.1", "50.2", "50.3", "51.1", "51.2"),
    (ContractFamily.NEC, IssueCategory.DELAY): _clauses("60.1", "61.3", "62.2", "63.3", "63.5"),
    (ContractFamily.NEC, IssueCategory.VARIATION): _clauses("60.1(1)", "60.1(4)", "61.2", "63.1", "63.7"),
    (ContractFamily.NEC, IssueCategory.DEFECT): _clauses("40.1", "42.1", "43.1", "44.1", "45.1"),
    (ContractFamily.NEC, IssueCategory.DESIGN): _clauses("21.1", "21.2", "27.1", "Option X15 (if applicable)"),
    (ContractFamily.NEC, IssueCategory.GENERAL): _clauses("10.1", "15.1", "91.1", "93.1"),

    (ContractFamily.FIDIC, IssueCategory.PAYMENT): _clauses("14.3", "14.6", "14.7", "14.8", "14.9"),
    (ContractFamily.FIDIC, IssueCategory.DELAY): _clauses("8.4", "8.5", "20.1", "3.5", "4.24"),
    (ContractFamily.FIDIC, IssueCategory.VARIATION): _clauses("13.1", "13.2", "13.3", "12.3", "12.4"),
    (ContractFamily.FIDIC, IssueCategory.DEFECT): _clauses("7.5", "7.6", "9.1", "11.1", "11.2"),
    (ContractFamily.FIDIC, IssueCategory.DESIGN): _clauses("4.1", "5.1", "5.2", "5.8", "4.11"),
    (ContractFamily.FIDIC, IssueCategory.GENERAL): _clauses("1.9", "3.5", "4.1", "20.1"),
}

GENERIC_CLAUSES: tuple[str, ...] = (
    "General Contract Provisions",
    "Specific Terms of Agreement",
    "Implied Terms",
    "Variation and Change Provisions",
    "Payment Terms",
)


def render_relevant_clauses(contract_type: ContractType | str | None, description: str) -> list[str]:
    """Clause references for the issue's category under the contract's family."""
    family = _family(_coerce_contract(contract_type))
    if family == ContractFamily.OTHER:
        return list(GENERIC_CLAUSES)
    return list(CLAUSE_CATALOGUE[(family, classify_issue(description))])


# =============================================================================
# Recommendations
# =============================================================================

_CONTRACTOR_SIDE = (RoleGroup.CONTRACTOR, RoleGroup.SUBCONTRACTOR)

RECOMMENDATIONS: dict[tuple[IssueCategory, RoleGroup], tuple[str, ...]] = {
    (IssueCategory.PAYMENT, RoleGroup.CONTRACTOR): (
        "Submit a formal payment notice in accordance with contract terms, ensuring compliance with "
        "contractual requirements for format, content, and submission method.",
        "Compile comprehensive payment documentation including detailed measurements, valuations, "
        "daywork sheets, and records of materials on and off site.",
        "Request a formal meeting with the contract administrator/quantity surveyor to discuss payment "
        "discrepancies with supporting documentation.",
        "Issue a formal notice of intention to suspend performance if payment remains outstanding, "
        "following the contractual procedure and allowing the statutory notice period of 7 days.",
        "Calculate and claim interest on late payment under the contract terms or the Late Payment of "
        "Commercial Debts (Interest) Act 1998 (8% above Bank of England base rate).",
    ),
    (IssueCategory.PAYMENT, RoleGroup.CLIENT): (
        "Review payment application and certification procedures to ensure strict compliance with "
        "contractual and statutory requirements.",
        "Ensure Payment Notices and Pay Less Notices are issued within the required timeframes and state "
        "the amount proposed to be paid and the basis of calculation.",
        "Maintain detailed records of defects or non-compliant work that form the basis of any payment withholding.",
        "Document any set-off or abatement claims with precise calculations and supporting evidence.",
        "Consider whether cash flow pressure is better addressed through a formal contract amendment "
        "than by withholding payment.",
    ),
    (IssueCategory.PAYMENT, RoleGroup.OTHER): (
        "Ensure payment processes and certifications comply with both contractual and statutory "
        "requirements, particularly the timing and content of notices.",
        "Maintain detailed records of all payment-related communications, notices, and certifications.",
        "Advise relevant parties of their rights and obligations under the contract and the Construction Act.",
        "Consider whether independent valuation of disputed items might facilitate resolution.",
        "Ensure delegation of authority for payment certification is clearly documented and understood.",
    ),
    (IssueCategory.DELAY, RoleGroup.CONTRACTOR): (
        "Document all causes of delay with contemporaneous records, including site diaries, progress "
        "reports, photographs, correspondence, and meeting minutes.",
        "Submit extension of time notification strictly in accordance with contractual timeframes, "
        "identifying the cause, likely effect, and contractual basis of the claim.",
        "Prepare a delay analysis using an appropriate methodology (e.g. time impact analysis) with "
        "supporting critical path diagrams.",
        "Implement mitigation measures where reasonably practicable and keep records of those efforts.",
        "For compensable delays, prepare separate loss and expense or compensation event submissions "
        "with detailed quantum evidence.",
    ),
    (IssueCategory.DELAY, RoleGroup.CLIENT): (
        "Review extension of time provisions to confirm entitlement criteria, notice requirements, and "
        "the assessment methodology in the contract.",
        "Assess extension of time claims objectively and within contractual timeframes, avoiding blanket rejections.",
        "Maintain contemporaneous records of project progress, contractor performance, and any employer-caused delays.",
        "Consider independent programming expertise where multiple causes of delay interact.",
        "Ensure liquidated damages provisions have been properly operated, including any required notices "
        "or certificates, before considering deduction.",
    ),
    (IssueCategory.DELAY, RoleGroup.ADMINISTRATOR): (
        "Assess extension of time claims impartially in accordance with the contract, applying the "
        "specified methodology to the evidence presented.",
        "Issue determinations within contractual timeframes, giving clear reasons where claims are "
        "rejected or only partially granted.",
        "Maintain records of your assessment process, including programmes reviewed and methodology applied.",
        "Consider whether recovery measures or acceleration are appropriate, subject to proper instruction "
        "and compensation.",
        "Administer consequential mechanisms such as liquidated damages deduction correctly.",
    ),
    (IssueCategory.DELAY, RoleGroup.OTHER): (
        "Document all delay events with specific dates, duration, and impact on planned activities.",
        "Submit detailed extension of time requests with supporting evidence and critical path analysis.",
        "Implement and document mitigation measures to minimise delay impacts.",
        "Maintain comprehensive records of all project activities, correspondence, and events affecting progress.",
        "Consider appropriate contractual responses if extension of time is not granted as requested.",
    ),
    (IssueCategory.VARIATION, RoleGroup.CONTRACTOR): (
        "Ensure all variations are instructed in writing by an authorised person before proceeding with "
        "varied work, except in emergencies.",
        "Submit variation quotations covering direct costs and time implications before starting varied "
        "work where the contract allows.",
        "Keep variation records separate from general project records, including labour, materials, "
        "plant time, and photographs of the varied work.",
        "Notify promptly if any variation is likely to delay completion, following contractual notification requirements.",
        "Record the cumulative impact of multiple variations on unchanged work to support any disruption claim.",
    ),
    (IssueCategory.VARIATION, RoleGroup.CLIENT): (
        "Ensure variation instructions are issued only by authorised persons following contractual "
        "procedures, typically in writing.",
        "Request quotations for proposed variations before instruction where time permits.",
        "Maintain a variation register recording scope, authorisation, agreed value, and time impact of each change.",
        "Consider the impact of proposed variations on the critical path before instruction.",
        "Be aware that significant scope changes might fall outside the contractual variation mechanism altogether.",
    ),
    (IssueCategory.VARIATION, RoleGroup.ADMINISTRATOR): (
        "Issue variation instructions clearly in writing, specifying exactly what is changed and providing "
        "revised drawings where needed.",
        "Value variations according to the contractual hierarchy: contract rates, pro-rata rates, then fair valuation.",
        "Assess time implications of variations objectively, particularly on critical path activities.",
        "Maintain records of all variations, including instruction, agreed scope, valuation, and disputed elements.",
        "Consider whether substantial changes are better handled by separate agreement.",
    ),
    (IssueCategory.VARIATION, RoleGroup.OTHER): (
        "Verify that all variations are documented and authorised according to contract requirements.",
        "Establish a variation management system to track status, valuation, and impact of all changes.",
        "Ensure variation instructions provide clear scope definition and technical detail.",
        "Check that variation valuations follow the methodology prescribed in the contract.",
        "Assess the cumulative impact of multiple variations on programme and cost.",
    ),
    (IssueCategory.DEFECT, RoleGroup.CONTRACTOR): (
        "Implement a quality management system including inspection and test plans, material "
        "verification, and workmanship checks.",
        "Document any instructions or specifications that may have contributed to alleged defects, "
        "including approvals given by the employer or design team.",
        "Respond promptly to defect notifications, investigating thoroughly and proposing a remedial methodology.",
        "Where defects are accepted, provide a method statement and programme for remedial works.",
        "Where defects are disputed, obtain independent expert opinion before formalising your position.",
    ),
    (IssueCategory.DEFECT, RoleGroup.CLIENT): (
        "Document defects thoroughly with photographs, measurements, and reference to contract "
        "requirements or applicable standards.",
        "Issue formal defect notifications in accordance with contractual procedures, identifying the "
        "nature and location of each defect.",
        "Allow reasonable access for inspection and remediation of accepted defects.",
        "Consider whether alleged defects result from design rather than workmanship, as this affects responsibility.",
        "Give the contractor a reasonable opportunity to rectify before employing others to remedy defects.",
    ),
    (IssueCategory.DEFECT, RoleGroup.OTHER): (
        "Inspect work regularly against specification requirements, documenting any non-compliance promptly.",
        "Issue clear instructions regarding defective work, specifying the defect and required remediation.",
        "Maintain detailed records of all quality-related communications, inspections, and identified defects.",
        "Ensure testing and commissioning procedures are properly implemented and documented.",
        "Consider whether expert determination might resolve technical disputes about alleged defects.",
    ),
    (IssueCategory.DESIGN, RoleGroup.CONTRACTOR): (
        "Review the design obligations in your contract, particularly whether the standard is "
        "\"reasonable skill and care\" or \"fitness for purpose\".",
        "Document design approvals or acceptances by the employer, as these may affect liability.",
        "Ensure professional indemnity insurance covers your design liability and notify insurers of potential issues.",
        "Maintain design development records showing how the design evolved from the employer's requirements.",
        "Consider independent expert review of disputed design elements.",
    ),
    (IssueCategory.DESIGN, RoleGroup.CLIENT): (
        "Review the design responsibility allocation in the contract documents, including limitations or exclusions.",
        "Document design deficiencies with reference to the employer's requirements or objective industry standards.",
        "Consider whether any design approval process under the contract affects liability allocation.",
        "Verify professional indemnity insurance coverage for design liability.",
        "Obtain independent expert assessment of alleged design deficiencies before formalising claims.",
    ),
    (IssueCategory.DESIGN, RoleGroup.ADMINISTRATOR): (
        "Review your appointment terms regarding design liability, particularly the standard of care and "
        "any limitation of liability.",
        "Maintain records of design development, decisions, calculations, and constraints.",
        "Ensure coordination between design disciplines and document the coordination process.",
        "Verify that design output complies with applicable regulations, standards, and contractual requirements.",
        "Notify professional indemnity insurers promptly of circumstances that might give rise to a claim.",
    ),
    (IssueCategory.DESIGN, RoleGroup.OTHER): (
        "Clarify design responsibility allocation between all parties involved in the project.",
        "Document the design development process and key decisions with supporting rationale.",
        "Implement structured design review and approval procedures with clear records.",
        "Ensure design coordination across all disciplines and interfaces.",
        "Verify design compliance with contractual requirements and applicable regulations.",
    ),
}

GENERAL_RECOMMENDATIONS: tuple[str, ...] = (
    "Review all contract documents thoroughly to identify relevant provisions, including any "
    "amendments to standard forms.",
    "Compile a chronology of events with supporting documentation to establish the factual background.",
    "Document your interpretation of the relevant clauses with reference to established legal "
    "principles and industry practice.",
    "Consider whether pre-contract communications are relevant to ambiguous provisions, subject to "
    "any entire agreement clause.",
    "Seek early resolution through direct commercial discussion, weighing the relationship against the issue value.",
    "Consider whether independent expert opinion on technical matters might resolve disputed facts.",
    "Review previous conduct under the contract for established practices or potential estoppel arguments.",
)


def _recommendation_group(
    category: IssueCategory, group: RoleGroup, contract_type: ContractType | None, description: str
) -> RoleGroup:
    """Collapse a role group onto the groups the catalogue has entries for."""
    if group == RoleGroup.SUBCONTRACTOR:
        group = RoleGroup.CONTRACTOR
        if category == IssueCategory.DESIGN:
            return RoleGroup.OTHER
    if category == IssueCategory.DESIGN and group == RoleGroup.CONTRACTOR:
        designs = contract_type in DESIGN_AND_BUILD_FORMS or "contractor design" in description.lower()
        return RoleGroup.CONTRACTOR if designs else RoleGroup.OTHER
    if (category, group) in RECOMMENDATIONS:
        return group
    return RoleGroup.OTHER


def render_recommendations(
    contract_type: ContractType | str | None,
    role: OrganizationRole | str | None,
    description: str,
) -> list[str]:
    """Five recommendations for the category and role, or the general list."""
    category = classify_issue(description)
    if category == IssueCategory.GENERAL:
        return list(GENERAL_RECOMMENDATIONS)
    contract = _coerce_contract(contract_type)
    group = _recommendation_group(category, _group(_coerce_role(role)), contract, description or "")
    return list(RECOMMENDATIONS[(category, group)])


# =============================================================================
# Detailed analysis
# =============================================================================

_CATEGORY_INTROS = {
    IssueCategory.PAYMENT: (
        "This issue pertains to payment obligations under the contract. Payment disputes are among the "
        "most common construction disputes in the UK and engage both the contractual and the statutory "
        "payment framework."
    ),
    IssueCategory.DELAY: (
        "This issue concerns delays to the project programme. Time-related disputes carry significant "
        "financial consequences for every party, through prolongation costs and liquidated damages."
    ),
    IssueCategory.VARIATION: (
        "This issue relates to variations or changes to the originally agreed scope of work. Such disputes "
        "typically turn on whether an instruction is a variation, how the varied work is valued, and its "
        "effect on the programme."
    ),
    IssueCategory.DEFECT: (
        "This issue relates to the quality of the works and the treatment of defects. The contract, the "
        "specification and the applicable standards together define what compliant work looks like."
    ),
    IssueCategory.DESIGN: (
        "This issue concerns design responsibility or the adequacy of design information. These disputes "
        "usually turn on who carries design responsibility and the standard of care that applies to it."
    ),
}

# (keywords, sentence) pairs, first hit wins, last entry is the default
_SUB_TOPICS: dict[IssueCategory, list[tuple[tuple[str, ...], str]]] = {
    IssueCategory.PAYMENT: [
        (("late",), "late payment contrary to the contractual payment terms. The Housing Grants, Construction "
                    "and Regeneration Act 1996 (as amended) gives a statutory right to be paid in accordance "
                    "with the contract or the Scheme, with remedies including suspension and interest."),
        (("certif",), "challenges with the certification process. The contract will specify what makes a valid "
                      "application, who issues certificates, the timeframes for certification, and the "
                      "consequences of failing to certify correctly."),
        (("retention",), "retention monies. The contract should specify the retention percentage, the release "
                         "triggers (typically practical completion and making good defects) and whether "
                         "retention is held in trust."),
        (("final account",), "the final account. Final accounts consolidate every financial adjustment made during "
                             "the project, and the contract should set the procedure and timeframe for agreeing them."),
        ((), "a dispute regarding payment provisions, such as the valuation of work, the timing of payments, "
             "conditions precedent to payment, or the consequences of non-payment."),
    ],
    IssueCategory.DELAY: [
        (("extension", "eot"), "a claim for extension of time. Extension of time provisions allocate delay risk "
                               "between the parties and adjust the completion date when qualifying events occur."),
        (("liquidated", "lad", "damages"), "liquidated damages. These are a pre-agreed sum the employer may deduct "
                                           "for late completion, provided the contractual machinery has been operated."),
        (("concurrent",), "concurrent delay, where an employer-risk event and a contractor-risk event affect "
                          "completion at the same time. Its treatment varies between standard forms and amendments."),
        (("acceleration",), "acceleration measures to recover lost time, which may be instructed formally or arise "
                            "constructively from a failure to grant an appropriate extension of time."),
        ((), "delay-related matters affecting the project timeline, including the causes of delay, the "
             "allocation of responsibility, entitlement to more time, and the cost of late completion."),
    ],
    IssueCategory.VARIATION: [
        (("valuation",), "the valuation of variations. Most contracts apply a hierarchy: contract rates where "
                         "applicable, adjusted rates where reasonable, then fair valuation."),
        (("instruct", "authoris", "authoriz"), "the instruction or authorisation of variations. Work carried out "
                                               "without a valid instruction may carry little or no entitlement "
                                               "to additional payment."),
        (("omission",), "omissions from the original scope. Omitting work in order to give it to another "
                        "contractor is usually a breach and may give rise to a claim for lost profit."),
        (("design", "specification"), "design development or specification changes. Design development within "
                                      "the original obligations must be distinguished from a genuine change to "
                                      "the employer's requirements."),
        ((), "changes to the originally agreed scope of work arising from employer requests, design "
             "development, unforeseen conditions, or statutory requirements."),
    ],
    IssueCategory.DEFECT: [
        (("rectif", "repair", "remed"), "the rectification of defects, including the contractor's obligation "
                                        "and opportunity to make good during the works and the rectification period."),
        (("reject", "remov"), "rejected work or materials. The contract administrator can usually require "
                              "non-compliant work to be removed, and the contractor bears the cost."),
        (("practical completion", "substantial completion"), "practical completion, which generally requires the "
                                                             "works to be complete apart from minor items that do "
                                                             "not prevent use for their intended purpose."),
        ((), "quality-related matters. Work must be completed in accordance with the specification, in a proper "
             "and workmanlike manner, using materials of the standard described in the contract."),
    ],
    IssueCategory.DESIGN: [
        (("error", "mistake", "incorrect"), "errors or inadequacies in the design information. The consequences "
                                            "depend on who carries design responsibility and the applicable "
                                            "standard of care."),
        (("coordination",), "coordination between design elements. Where design responsibility is shared, "
                            "coordination failures lead to abortive work, delay, and additional cost."),
        (("information", "drawing", "detail"), "the provision or adequacy of design information. Late or "
                                               "inadequate information may entitle the contractor to time and "
                                               "money, subject to proper notification."),
        ((), "design-related matters. The allocation of design responsibility drives risk, the standard of "
             "care, and liability for design inadequacies."),
    ],
}

_FAMILY_NOTES: dict[tuple[IssueCategory, ContractFamily], str] = {
    (IssueCategory.PAYMENT, ContractFamily.JCT): (
        "Under JCT contracts, payment provisions are found in clauses 4.8-4.13, which set out application "
        "procedures, certification timeframes, and the Payment Notice and Pay Less Notice regime."
    ),
    (IssueCategory.PAYMENT, ContractFamily.NEC): (
        "In NEC contracts, payment is addressed in clause 50 (assessment) and clause 51 (payment), with "
        "mandatory timeframes for the Project Manager's assessment and certification."
    ),
    (IssueCategory.PAYMENT, ContractFamily.FIDIC): (
        "Under FIDIC, interim payment runs through the Statement (Sub-Clause 14.3), the Engineer's "
        "Interim Payment Certificate (14.6) and payment within the stated period (14.7), with financing "
        "charges for late payment (14.8)."
    ),
    (IssueCategory.DELAY, ContractFamily.JCT): (
        "Under JCT contracts, extension of time operates through 'Relevant Events' (clauses 2.26-2.29), "
        "while 'Relevant Matters' (clauses 4.21-4.22) govern loss and expense. Not every Relevant Event is "
        "also a Relevant Matter: exceptionally adverse weather gives time but not money."
    ),
    (IssueCategory.DELAY, ContractFamily.NEC): (
        "In NEC contracts, delay is handled through Early Warnings and Compensation Events. Clause 61.3 "
        "requires notification within 8 weeks of becoming aware of the event, and clause 63 assesses the "
        "effect on Planned Completion using the Accepted Programme."
    ),
    (IssueCategory.DELAY, ContractFamily.FIDIC): (
        "Under FIDIC, extension of the Time for Completion is available for the events listed in "
        "Sub-Clause 8.4, subject to the claims procedure in Sub-Clause 20.1 and its 28-day notice "
        "requirement, which operates as a condition precedent."
    ),
    (IssueCategory.VARIATION, ContractFamily.JCT): (
        "JCT contracts handle variations through instructions under clauses 3.14-3.16, subject to the "
        "contractor's right of reasonable objection, with valuation under the Valuation Rules in "
        "clauses 5.6-5.7."
    ),
    (IssueCategory.VARIATION, ContractFamily.NEC): (
        "NEC contracts manage change as Compensation Events: an instruction changing the Scope is a "
        "compensation event under clause 60.1(1), quotations follow clause 62, and assessment is "
        "prospective under clause 63."
    ),
    (IssueCategory.VARIATION, ContractFamily.FIDIC): (
        "Under FIDIC, the Engineer may initiate Variations under Sub-Clause 13.1, the Contractor may "
        "propose value engineering under 13.2, and varied work is valued by measurement under Clause 12."
    ),
    (IssueCategory.DEFECT, ContractFamily.JCT): (
        "JCT contracts require the works to be carried out in accordance with the Contract Documents "
        "(clause 2.1). Defects appearing in the Rectification Period are dealt with under clauses "
        "2.38-2.40, and non-compliant work under clause 3.18."
    ),
    (IssueCategory.DEFECT, ContractFamily.NEC): (
        "NEC contracts define a Defect as part of the works not in accordance with the Scope. Clause 43 "
        "requires notification of Defects, clause 44 their correction within the defect correction "
        "period, and clause 45 governs acceptance."
    ),
    (IssueCategory.DEFECT, ContractFamily.FIDIC): (
        "Under FIDIC, the Engineer may reject defective Plant, Materials or workmanship (Sub-Clause 7.5) "
        "and instruct remedial work (7.6); defects after taking over are handled in the Defects "
        "Notification Period under Clause 11."
    ),
    (IssueCategory.DESIGN, ContractFamily.JCT): (
        "Under JCT, design responsibility depends on the form: in Design and Build the Contractor completes "
        "the design (clause 2.1), normally to a reasonable skill and care standard; in traditional forms "
        "design stays with the Employer unless a Contractor's Designed Portion applies."
    ),
    (IssueCategory.DESIGN, ContractFamily.NEC): (
        "In NEC contracts, design responsibility is defined in the Scope (clause 21). Contractor design is "
        "judged against fitness for the purpose stated in the Scope unless Option X15 limits liability to "
        "reasonable skill and care."
    ),
    (IssueCategory.DESIGN, ContractFamily.FIDIC): (
        "Under the FIDIC Yellow and Silver Books the Contractor designs the works (Clause 5) to be fit for "
        "the purposes defined in the Employer's Requirements (Sub-Clause 4.1); under the Red Book design "
        "normally remains with the Employer."
    ),
}

_OTHER_FAMILY_NOTE = (
    "The specific provisions of your contract governing this matter should be reviewed carefully, "
    "including notification requirements, timeframes, the allocation of risk, and any conditions "
    "precedent to entitlement."
)

_ROLE_NOTES: dict[tuple[IssueCategory, RoleGroup], str] = {
    (IssueCategory.PAYMENT, RoleGroup.CONTRACTOR): (
        "As a {role}, your payment rights are governed by the express terms of the contract and by the "
        "Construction Act, whose payment, notice and adjudication provisions cannot be contracted out of."
    ),
    (IssueCategory.PAYMENT, RoleGroup.CLIENT): (
        "As the {role}, your payment obligations are defined by the contract. Failing to follow the payment "
        "provisions can lead to statutory interest, suspension of performance, and liability for the "
        "notified sum."
    ),
    (IssueCategory.DELAY, RoleGroup.CONTRACTOR): (
        "As a {role}, your priorities are proper programming, timely notification of delay events, and "
        "contemporaneous records evidencing both cause and effect."
    ),
    (IssueCategory.DELAY, RoleGroup.CLIENT): (
        "As the {role}, you must ensure extension of time claims are assessed fairly and on time. Failure "
        "to administer them properly could render liquidated damages unenforceable and leave time at large."
    ),
    (IssueCategory.DELAY, RoleGroup.ADMINISTRATOR): (
        "In your role as {role}, you must assess delay claims impartially, on the evidence and within the "
        "contractual timeframes."
    ),
    (IssueCategory.VARIATION, RoleGroup.CONTRACTOR): (
        "As a {role}, you should proceed with varied work only on a valid instruction and keep "
        "contemporaneous records of resources, time impact, and cost."
    ),
    (IssueCategory.VARIATION, RoleGroup.CLIENT): (
        "As the {role}, you should ensure variations are instructed by authorised representatives, ideally "
        "with cost and time agreed before the work proceeds."
    ),
    (IssueCategory.VARIATION, RoleGroup.ADMINISTRATOR): (
        "In your role as {role}, you hold the power to instruct variations and the duty to value them "
        "fairly and assess their time effect in accordance with the contract."
    ),
    (IssueCategory.DEFECT, RoleGroup.CONTRACTOR): (
        "As a {role}, you have primary responsibility for compliant, defect-free work, supported by "
        "quality control, supervision, and prompt remediation."
    ),
    (IssueCategory.DEFECT, RoleGroup.CLIENT): (
        "As the {role}, you are entitled to works that comply with the contract and should notify defects "
        "in accordance with the contractual procedure."
    ),
    (IssueCategory.DEFECT, RoleGroup.ADMINISTRATOR): (
        "In your role as {role}, you are responsible for inspecting the works, identifying defects, and "
        "instructing remedial work where required."
    ),
    (IssueCategory.DESIGN, RoleGroup.CONTRACTOR): (
        "As a {role}, check whether you carry any design responsibility under this form. Where you do, "
        "your design must meet the contractual standard of care and be covered by professional indemnity "
        "insurance."
    ),
    (IssueCategory.DESIGN, RoleGroup.CLIENT): (
        "As the {role}, you should confirm how design responsibility has been allocated and whether your "
        "own consultants or the contractor carry the relevant risk."
    ),
    (IssueCategory.DESIGN, RoleGroup.ADMINISTRATOR): (
        "In your role as {role}, you may carry design duties under your appointment as well as contract "
        "administration duties, and the two should be kept distinct in your records."
    ),
    (IssueCategory.GENERAL, RoleGroup.CONTRACTOR): (
        "As a {role}, review the provisions relevant to your issue, gather documents that evidence your "
        "interpretation, and present your position with reference to the contract terms."
    ),
    (IssueCategory.GENERAL, RoleGroup.CLIENT): (
        "As the {role}, ensure your interpretation is consistent with both the wording and the overall "
        "scheme of the agreement."
    ),
    (IssueCategory.GENERAL, RoleGroup.ADMINISTRATOR): (
        "In your role as {role}, any determination involving interpretation of the contract should be made "
        "impartially and on a reasonable reading of its commercial context."
    ),
}

_OTHER_ROLE_NOTE = (
    "Your role as {role} requires a clear understanding of the relevant contract provisions. Follow the "
    "contractual procedures and keep clear records of all related communications."
)

_INTERPRETATION_PRINCIPLES = (
    "Based on the information provided, this issue involves contract interpretation and implementation, "
    "which requires careful analysis of the specific terms of your agreement.\n\n"
    "When interpreting construction contracts, courts and adjudicators typically apply established principles:\n\n"
    "• The objective approach: what a reasonable person with the parties' background knowledge would understand;\n"
    "• The whole agreement approach: reading the contract as a whole rather than isolated clauses;\n"
    "• Business efficacy: favouring interpretations that give commercial sense to the agreement;\n"
    "• Contra proferentem: construing ambiguity against the drafting party, as a last resort."
)


def _group_for_notes(group: RoleGroup) -> RoleGroup:
    return RoleGroup.CONTRACTOR if group == RoleGroup.SUBCONTRACTOR else group


def render_detailed_analysis(
    description: str, contract_type: ContractType | None, role: OrganizationRole | None
) -> str:
    category = classify_issue(description)
    text = (description or "").lower()
    family = _family(contract_type)
    role_label = _label(role, "a party to the contract")
    paragraphs: list[str] = []

    if category == IssueCategory.GENERAL:
        paragraphs.append(_INTERPRETATION_PRINCIPLES)
        if family != ContractFamily.OTHER:
            paragraphs.append(
                f"The {_label(contract_type, 'contract')} is a standard form with established "
                "interpretations through case law and industry guidance, which adjudicators and courts "
                "will take into account."
            )
        else:
            paragraphs.append(
                "Your contract should be interpreted according to its own drafting and the circumstances "
                "of your project. Industry practice may assist but will not override clear wording."
            )
    else:
        paragraphs.append(_CATEGORY_INTROS[category])
        for keywords, sentence in _SUB_TOPICS[category]:
            if not keywords or _has(text, *keywords):
                paragraphs.append("Based on the information provided, this appears to involve " + sentence)
                break
        paragraphs.append(_FAMILY_NOTES.get((category, family), _OTHER_FAMILY_NOTE))

    group = _group_for_notes(_group(role))
    template = _ROLE_NOTES.get((category, group), _OTHER_ROLE_NOTE)
    paragraphs.append(template.format(role=role_label))
    return "\n\n".join(paragraphs)


# =============================================================================
# Legal context
# =============================================================================

_STATUTES: dict[IssueCategory, list[str]] = {
    IssueCategory.PAYMENT: [
        "**The Late Payment of Commercial Debts (Interest) Act 1998**: statutory interest on late "
        "commercial payments at 8% above the Bank of England base rate, plus fixed compensation.",
        "**Part II of the Construction Act (Sections 109-113)**: an adequate mechanism for determining "
        "what is due and when, a final date for payment, Pay Less Notices, and the prohibition of "
        "pay-when-paid clauses.",
    ],
    IssueCategory.DEFECT: [
        "**The Defective Premises Act 1972**: a duty, for work on dwellings, to work in a workmanlike or "
        "professional manner with proper materials so the dwelling is fit for habitation.",
        "**The Building Act 1984 and Building Regulations**: minimum technical standards for design and "
        "construction.",
        "**The Supply of Goods and Services Act 1982**: implied terms that services are performed with "
        "reasonable care and skill.",
    ],
    IssueCategory.VARIATION: [
        "**Common law principles on variations**: variations must be instructed in accordance with the "
        "contract, must be of a nature and scale contemplated by it, and substantial changes may fall "
        "outside the variation mechanism.",
    ],
    IssueCategory.DESIGN: [
        "**Common law principles on design responsibility**: 'reasonable skill and care' is measured "
        "against a competent member of the profession, while 'fitness for purpose' is a stricter, "
        "result-based obligation.",
    ],
    IssueCategory.DELAY: [
        "**The prevention principle**: an employer cannot hold a contractor to a completion date that "
        "the employer's own acts have prevented it from meeting, unless the contract extends time for them.",
    ],
}

_CASE_LAW: dict[IssueCategory, list[str]] = {
    IssueCategory.PAYMENT: [
        "*S&T (UK) Ltd v Grove Developments Ltd* [2018] EWCA Civ 2448: the importance of valid payment "
        "and pay less notices;",
        "*ISG Construction Ltd v Seevic College* [2014] EWHC 4007 (TCC): the consequences of failing to "
        "issue payment notices;",
        "*Henia Investments Inc v Beck Interiors Ltd* [2015] EWHC 2433 (TCC): the requirements for a "
        "valid payment application.",
    ],
    IssueCategory.DELAY: [
        "*Walter Lilly & Co Ltd v Mackay* [2012] EWHC 1773 (TCC): extension of time and concurrent delay;",
        "*North Midland Building Ltd v Cyden Homes Ltd* [2018] EWCA Civ 1744: express allocation of "
        "concurrent delay risk;",
        "*Multiplex Constructions (UK) Ltd v Honeywell Control Systems Ltd* [2007] EWHC 447 (TCC): "
        "notice provisions as conditions precedent.",
    ],
    IssueCategory.VARIATION: [
        "*Blue Circle Industries plc v Holland Dredging Co* (1987) 37 BLR 40: work outside the scope of "
        "the variation power;",
        "*Abbey Developments Ltd v PP Brickwork Ltd* [2003] EWHC 1987 (TCC): omitting work to give it to "
        "another contractor.",
    ],
    IssueCategory.DEFECT: [
        "*Robinson v PE Jones (Contractors) Ltd* [2011] EWCA Civ 9: the scope of a builder's duty of care;",
        "*Mears Ltd v Costplan Services (South East) Ltd* [2019] EWCA Civ 502: practical completion and "
        "the effect of non-trivial defects.",
    ],
    IssueCategory.DESIGN: [
        "*MT Højgaard A/S v E.ON Climate & Renewables UK* [2017] UKSC 59: fitness for purpose obligations "
        "in technical requirements;",
        "*Co-operative Insurance Society v Henry Boot Scotland Ltd* [2002] EWHC 1270 (TCC): completing a "
        "design includes checking the existing design.",
    ],
    IssueCategory.GENERAL: [
        "*Arnold v Britton* [2015] UKSC 36: the primacy of the natural meaning of the words used;",
        "*Wood v Capita Insurance Services Ltd* [2017] UKSC 24: textual and contextual interpretation "
        "as complementary tools.",
    ],
}


def render_legal_context(contract_type: ContractType | None, description: str) -> str:
    category = classify_issue(description)
    family = _family(contract_type)
    lines = ["The legal framework for this issue comprises several layers of obligations and rights:"]

    if family != ContractFamily.OTHER:
        lines.append(
            f"• **The {_label(contract_type, 'contract')}**: the primary legal basis for resolving the "
            "issue. The clauses identified establish the parties' rights and obligations and the "
            "procedures for raising and resolving the matter."
        )
    else:
        lines.append(
            "• **Your Specific Contract Agreement**: the primary legal basis for resolving the issue, "
            "read together with any terms implied by statute or common law."
        )

    lines.append(
        "• **The Housing Grants, Construction and Regeneration Act 1996 (as amended)**: the "
        "'Construction Act' gives the right to refer disputes to adjudication at any time, requires "
        "adequate payment mechanisms and notices, and gives a right to suspend for non-payment."
    )
    lines.append(
        "• **The Scheme for Construction Contracts (England and Wales) Regulations 1998 (as amended)**: "
        "default provisions that apply where a construction contract does not comply with the Act."
    )
    for statute in _STATUTES.get(category, []):
        lines.append(f"• {statute}")

    cases = "\n".join(f"   - {case}" for case in _CASE_LAW[category])
    lines.append(f"• **Relevant Case Law**:\n{cases}")
    return "\n\n".join(lines)


# =============================================================================
# Clause explanations
# =============================================================================

_JCT_EXPLANATIONS: list[tuple[tuple[str, ...], str]] = [
    (("4.8", "4.9", "4.10", "4.11", "4.12", "4.13"),
     "part of the interim payment mechanism. It governs applications, Payment Notices, Pay Less Notices "
     "and the final date for payment, and a failure to serve a valid notice can make the notified sum payable."),
    (("2.25", "2.26", "2.27", "2.28", "2.29"),
     "part of the extension of time mechanism. It defines the Relevant Events, the contractor's notice "
     "obligations and how the Architect/Contract Administrator fixes a new Completion Date."),
    (("3.14", "3.15", "3.16"),
     "the power to issue instructions requiring a Variation, the contractor's right of reasonable "
     "objection and the treatment of provisional sums."),
    (("5.6", "5.7"),
     "the Valuation Rules for Variations: contract rates for similar work, adjusted rates where conditions "
     "change, and fair valuation otherwise."),
    (("2.38", "2.39", "2.40"),
     "the Rectification Period after practical completion, the schedule of defects and the Certificate "
     "of Making Good."),
    (("3.18",),
     "the power to instruct the removal of work, materials or goods not in accordance with the contract."),
    (("2.1",),
     "the contractor's general obligation to carry out and complete the works in accordance with the "
     "Contract Documents and statutory requirements."),
    (("2.2",),
     "the standard of materials, goods and workmanship, by reference to the Contract Bills or Employer's Requirements."),
    (("2.17",),
     "discrepancies and divergences between the contract documents and how they are corrected."),
    (("3.21",),
     "instructions and directions relating to the design documents and their effect on the works."),
    (("1.7",),
     "the giving and service of notices, which determines whether a notice is valid and when it takes effect."),
    (("8.4",),
     "termination by the Employer for specified defaults after a warning notice."),
    (("8.9",),
     "termination by the Contractor for specified defaults, including non-payment."),
]

_NEC_EXPLANATIONS: dict[str, str] = {
    "10": "the obligation to act as stated in the contract and in a spirit of mutual trust and co-operation.",
    "15": "the Early Warning procedure for matters that could increase cost, delay completion or impair performance.",
    "21": "the Contractor's design obligations and the acceptance of design submissions.",
    "27": "the Contractor's other responsibilities, including obtaining approval of its design from others.",
    "40": "tests and inspections required by the Scope.",
    "42": "testing and inspection before delivery.",
    "43": "searching for and notifying Defects.",
    "44": "the correction of Defects within the defect correction period.",
    "45": "acceptance of a Defect in exchange for a change to the Prices or Completion Date.",
    "50": "the assessment of the amount due at each assessment date.",
    "51": "certification and payment of the amount due within the stated period.",
    "60": "the list of Compensation Events entitling the Contractor to more time and/or money.",
    "61": "the notification of Compensation Events, including the 8-week time bar.",
    "62": "the submission, reply and acceptance of quotations for Compensation Events.",
    "63": "the prospective assessment of Compensation Events by reference to Defined Cost and Planned Completion.",
    "91": "the reasons either Party may rely on to terminate.",
    "93": "the payment due on termination.",
}

_FIDIC_EXPLANATIONS: dict[str, str] = {
    "1": "general provisions, including the consequences of delayed drawings or instructions.",
    "3": "the Engineer's agreement or determination of matters in dispute.",
    "4": "the Contractor's general obligations, including the sufficiency of the Accepted Contract Amount "
         "and unforeseeable physical conditions.",
    "5": "design obligations and the review of Contractor's Documents.",
    "7": "the rejection of defective Plant, Materials or workmanship and remedial work.",
    "8": "extension of the Time for Completion and delays caused by authorities.",
    "9": "Tests on Completion.",
    "11": "the Defects Notification Period and the remedying of defects after taking over.",
    "12": "measurement and evaluation of the works, including new rates.",
    "13": "the right to vary and the Variation procedure.",
    "14": "Statements, Interim Payment Certificates, payment and financing charges.",
    "20": "the claims procedure and its notice requirements.",
}

_GENERIC_EXPLANATIONS: dict[str, str] = {
    "General Contract Provisions": "the definitions, interpretation and order of precedence of the contract documents.",
    "Specific Terms of Agreement": "the negotiated terms particular to this project, which override standard wording.",
    "Implied Terms": "terms implied by statute or common law, such as reasonable skill and care and co-operation.",
    "Variation and Change Provisions": "how changes are instructed, valued and reflected in the programme.",
    "Payment Terms": "the payment mechanism, notices and timing of payments.",
}


def _clause_number(clause: str) -> str:
    return clause.replace("Clause", "").strip()


def explain_clause(clause: str, contract_type: ContractType | None) -> str:
    family = _family(contract_type)
    number = _clause_number(clause)
    main = number.split(".")[0].split("(")[0]

    if family == ContractFamily.JCT:
        for numbers, text in _JCT_EXPLANATIONS:
            if number in numbers:
                return f"{clause}: This clause covers {text}"
        return (f"{clause}: This standard JCT provision should be read in the context of the contract "
                "as a whole and its commercial purpose.")
    if family == ContractFamily.NEC:
        if number.startswith("Option X15"):
            return (f"{clause}: Where incorporated, the Contractor's design liability is limited to "
                    "reasonable skill and care rather than fitness for purpose.")
        if main in _NEC_EXPLANATIONS:
            return f"{clause}: This clause covers {_NEC_EXPLANATIONS[main]}"
        return (f"{clause}: This provision should be applied in line with NEC principles of clarity, "
                "proactive management and mutual co-operation.")
    if family == ContractFamily.FIDIC:
        if main in _FIDIC_EXPLANATIONS:
            return f"{clause}: This Sub-Clause covers {_FIDIC_EXPLANATIONS[main]}"
        return (f"{clause}: This FIDIC provision should be read together with the Particular "
                "Conditions, which frequently amend the General Conditions.")
    text = _GENERIC_EXPLANATIONS.get(clause, "the provisions of your agreement relevant to this issue.")
    return f"{clause}: Review the provisions dealing with {text}"


def render_clause_explanations(clauses: list[str], contract_type: ContractType | None) -> list[str]:
    """One explanation per clause, index-aligned."""
    return [explain_clause(clause, contract_type) for clause in clauses]


# =============================================================================
# Potential outcomes
# =============================================================================

_OUTCOMES: dict[IssueCategory, list[tuple[str, str]]] = {
    IssueCategory.PAYMENT: [
        ("Negotiated Resolution (Most Common)",
         "The parties agree the disputed sum through commercial discussion, often at a compromise."),
        ("Application of Contractual Mechanisms",
         "The notice regime may make the notified or applied sum payable where valid notices were not served."),
        ("Suspension of Performance",
         "After a 7-day notice of intention to suspend, the payee may suspend, with time and costs protected."),
        ("Formal Dispute Resolution",
         "Adjudication is the usual route for payment disputes, producing a binding decision in 28 days."),
    ],
    IssueCategory.DELAY: [
        ("Extension of Time Granted",
         "The completion date is adjusted, relieving the contractor of liquidated damages for the period."),
        ("Partial Extension",
         "Time is granted for some events but not others, leaving a residual exposure to damages."),
        ("Liquidated Damages Applied",
         "Where no entitlement is shown, the employer may deduct damages at the contract rate."),
        ("Formal Dispute Resolution",
         "Delay disputes frequently need expert programming evidence in adjudication or arbitration."),
    ],
    IssueCategory.VARIATION: [
        ("Variation Agreed and Valued",
         "The change is accepted as a variation and valued under the contract rules."),
        ("Variation Accepted, Valuation Disputed",
         "Entitlement is accepted but the valuation method or quantum remains in dispute."),
        ("Variation Rejected",
         "The work is treated as within the original scope or as unauthorised."),
        ("Formal Dispute Resolution",
         "Unresolved valuation disputes are commonly referred to adjudication."),
    ],
    IssueCategory.DEFECT: [
        ("Remedial Works by the Contractor",
         "The defect is accepted and corrected at the contractor's cost."),
        ("Accepted Defect with Price Reduction",
         "The employer accepts the defect in exchange for a reduction in the contract sum."),
        ("Remedial Works by Others",
         "After a reasonable opportunity to rectify, the employer engages others and recovers the cost."),
        ("Formal Dispute Resolution",
         "Technical disputes may be resolved by expert determination or adjudication."),
    ],
    IssueCategory.DESIGN: [
        ("Design Clarified Without Change",
         "The design information is clarified and the work proceeds without a variation."),
        ("Design Change Treated as a Variation",
         "The change is instructed and valued, with any time effect assessed."),
        ("Liability Attributed to the Designer",
         "Costs fall on the party carrying design responsibility, often through its insurers."),
        ("Formal Dispute Resolution",
         "Design liability disputes usually require independent expert evidence."),
    ],
    IssueCategory.GENERAL: [
        ("Agreed Interpretation",
         "The parties agree how the provision applies and record it."),
        ("Interpretation Determined by a Third Party",
         "An adjudicator, expert or court determines the meaning of the disputed terms."),
        ("Commercial Settlement",
         "The issue is settled on commercial terms without a determination of rights."),
    ],
}


def render_potential_outcomes(
    description: str, contract_type: ContractType | None, role: OrganizationRole | None
) -> str:
    category = classify_issue(description)
    blocks = ["The potential outcomes for this issue include:"]
    for i, (title, detail) in enumerate(_OUTCOMES[category], start=1):
        blocks.append(f"**{i}. {title}**\n   • {detail}")
    if _group(role) in _CONTRACTOR_SIDE and category == IssueCategory.PAYMENT:
        blocks.append("Your statutory payment protections make outcomes 2 and 3 realistic levers.")
    elif _group(role) == RoleGroup.CLIENT and category == IssueCategory.DELAY:
        blocks.append("Outcome 3 depends on the contractual machinery for damages having been operated correctly.")
    if _family(contract_type) == ContractFamily.NEC:
        blocks.append("Under NEC, most of these outcomes run through the compensation event process.")
    return "\n\n".join(blocks)


# =============================================================================
# Timeline
# =============================================================================

_TIMELINE_PHASES = (
    "Immediate Actions (1-3 days)",
    "Short-Term Actions (3-7 days)",
    "Medium-Term Actions (7-14 days)",
    "Longer-Term Actions (14-28 days)",
    "Follow-Up Actions (28+ days)",
)

_TIMELINE_STEPS: dict[IssueCategory, tuple[str, str, str, str, str]] = {
    IssueCategory.PAYMENT: (
        "Review the payment terms, verify the status of every application and notice, and quantify the sum claimed.",
        "Issue formal correspondence stating your position with reference to the contract and the Construction Act.",
        "If unresolved, give notice of intention to suspend and consider claiming statutory interest.",
        "Suspend performance following proper notice, or refer the dispute to adjudication.",
        "Implement the adjudicator's decision and review payment processes to prevent recurrence.",
    ),
    IssueCategory.DELAY: (
        "Record the cause and extent of delay and check the programme impact on the critical path.",
        "Issue the formal delay notification required by the contract.",
        "Submit a substantiated extension of time application with a delay analysis.",
        "Escalate to senior management and consider adjudication if the assessment is unreasonable.",
        "Update the programme and monitor mitigation measures.",
    ),
    IssueCategory.VARIATION: (
        "Confirm whether the instruction is a variation and who gave it, and record the work affected.",
        "Request or issue written confirmation of the instruction.",
        "Submit or request a quotation for the cost and time effect.",
        "Agree the valuation or refer the disagreement to the dispute process.",
        "Update the variation register and the programme.",
    ),
    IssueCategory.DEFECT: (
        "Inspect and record the alleged defect with photographs and measurements.",
        "Issue or respond to the formal defect notification.",
        "Agree the remedial method statement and programme.",
        "Complete and inspect the remedial works.",
        "Close out the defect and update the quality records.",
    ),
    IssueCategory.DESIGN: (
        "Identify the design information in question and who is responsible for it.",
        "Raise a formal request for information or design clarification.",
        "Agree whether the outcome is a variation and record its cost and time effect.",
        "Obtain independent design review if responsibility remains disputed.",
        "Record lessons learned for the design review process.",
    ),
    IssueCategory.GENERAL: (
        "Collect the contract documents and the correspondence relevant to the issue.",
        "Prepare a written statement of your interpretation.",
        "Meet the other party to discuss the competing interpretations.",
        "Consider mediation or expert determination if discussions stall.",
        "Record the agreed interpretation for future reference.",
    ),
}

# Window the other party is asked to respond in
RESPONSE_WINDOW_DAYS: dict[IssueCategory, int] = {
    IssueCategory.PAYMENT: 7,
    IssueCategory.DELAY: 14,
    IssueCategory.VARIATION: 14,
    IssueCategory.DEFECT: 14,
    IssueCategory.DESIGN: 14,
    IssueCategory.GENERAL: 14,
}


def render_timeline_suggestions(description: str) -> str:
    category = classify_issue(description)
    blocks = ["Recommended timeline for addressing this issue:"]
    for phase, step in zip(_TIMELINE_PHASES, _TIMELINE_STEPS[category]):
        blocks.append(f"**{phase}**\n• {step}")
    blocks.append(
        f"Seek a substantive written response from the other party within "
        f"{RESPONSE_WINDOW_DAYS[category]} days of your formal notice."
    )
    return "\n\n".join(blocks)


# =============================================================================
# Risk assessment
# =============================================================================

_STRATEGIES = (
    ("Negotiated Settlement", "Low to Medium", "2-4 weeks"),
    ("Formal Contractual Mechanisms", "Medium", "2-8 weeks"),
    ("Adjudication", "Medium to High", "28 days from referral"),
    ("Mediation", "Low to Medium", "2-3 weeks to arrange"),
    ("Litigation/Arbitration", "High", "9-18 months"),
)


def _probability(category: IssueCategory, group: RoleGroup, text: str) -> str:
    if category == IssueCategory.PAYMENT and group in _CONTRACTOR_SIDE:
        return ("**Medium to High Probability of Favourable Resolution**: payment disputes carry strong "
                "statutory protection, particularly where applications were valid and no Pay Less Notice "
                "was served in time.")
    if category == IssueCategory.PAYMENT and group == RoleGroup.CLIENT:
        return ("**Variable Probability Based on Procedural Compliance**: the paying party's position "
                "depends mainly on whether valid notices were issued in time with the required content.")
    if category == IssueCategory.DELAY and "weather" in text:
        return ("**Medium Probability of Partial Success**: weather-related claims usually support "
                "additional time more readily than additional money.")
    if category == IssueCategory.VARIATION and "verbal" in text:
        return ("**Low to Medium Probability of Full Recovery**: verbal instructions face evidential "
                "difficulty where the contract requires written instructions.")
    return ("**Medium Probability Based on Contractual Merits**: the outcome depends on the clarity of "
            "the provisions, the quality of contemporaneous records, and compliance with notice requirements.")


def _recommended_approach(category: IssueCategory, group: RoleGroup, text: str) -> list[str]:
    if category == IssueCategory.PAYMENT and group in _CONTRACTOR_SIDE:
        return [
            "Robust correspondence citing your statutory and contractual rights",
            "Senior-level negotiation with clear settlement parameters",
            "Adjudication if unresolved within 14 days, keeping settlement channels open",
        ]
    if category == IssueCategory.DELAY and "weather" in text:
        return [
            "A detailed extension of time application with weather data and impact analysis",
            "Priority on time relief over financial recovery",
            "Formal dispute rights reserved while negotiating",
        ]
    if category == IssueCategory.VARIATION and "verbal" in text:
        return [
            "Compile all evidence supporting the verbal instruction",
            "Seek retrospective written confirmation of the instruction",
            "Propose a without-prejudice settlement before considering adjudication",
        ]
    return [
        "Detailed contractual analysis and evidence compilation",
        "A clear written position statement with a settlement proposal",
        "Structured negotiation with a defined escalation timeline",
        "Mediation if direct negotiation stalls, with adjudication as a contingency",
    ]


def render_risk_assessment(
    description: str, contract_type: ContractType | None, role: OrganizationRole | None
) -> str:
    category = classify_issue(description)
    text = (description or "").lower()
    group = _group(role)
    blocks = [
        "Risk assessment for this issue:",
        _probability(category, group, text),
        "**Cost-Benefit Analysis:**\n"
        "• Internal management time for document review, correspondence and meetings\n"
        "• Professional fees for quantity surveyors, delay analysts or legal advisors\n"
        "• Formal process costs: adjudication (£5,000-£15,000+), mediation (£3,000-£8,000+), "
        "litigation or arbitration (£25,000-£100,000+)",
    ]
    strategy_lines = ["**Alternative Strategy Risk Comparison:**"]
    for i, (name, level, timeframe) in enumerate(_STRATEGIES, start=1):
        strategy_lines.append(f"{i}. {name}: risk {level}, timeframe {timeframe}")
    blocks.append("\n".join(strategy_lines))

    approach = _recommended_approach(category, group, text)
    blocks.append("**Recommended Approach:**\n" + "\n".join(
        f"{i}. {step}" for i, step in enumerate(approach, start=1)
    ))
    if contract_type in DESIGN_AND_BUILD_FORMS and category == IssueCategory.DESIGN:
        blocks.append("Under a design and build form, the contractor's design liability is the key variable.")
    return "\n\n".join(blocks)


# =============================================================================
# Assembly
# =============================================================================

class RenderedAnalysis(BaseModel):
    """The prose fields of a template analysis."""
    detailed_analysis: str = ""
    legal_context: str = ""
    clause_explanations: list[str] = Field(default_factory=list)
    potential_outcomes: str = ""
    timeline_suggestions: str = ""
    risk_assessment: str = ""


def render_analysis(
    description: str,
    contract_type: ContractType | str | None,
    role: OrganizationRole | str | None,
) -> RenderedAnalysis:
    """Render every prose field for one issue. Pure: same inputs, same output."""
    contract = _coerce_contract(contract_type)
    org_role = _coerce_role(role)
    clauses = render_relevant_clauses(contract, description)
    return RenderedAnalysis(
        detailed_analysis=render_detailed_analysis(description, contract, org_role),
        legal_context=render_legal_context(contract, description),
        clause_explanations=render_clause_explanations(clauses, contract),
        potential_outcomes=render_potential_outcomes(description, contract, org_role),
        timeline_suggestions=render_timeline_suggestions(description),
        risk_assessment=render_risk_assessment(description, contract, org_role),
    )


def build_template_analysis(project: ProjectDetails, issue: Issue) -> Analysis:
    """Full Analysis for one issue from the deterministic templates."""
    rendered = render_analysis(issue.description, project.contract_type, project.organization_role)
    logger.debug("Template analysis for %r: %s", issue.description[:60], classify_issue(issue.description).value)
    return Analysis(
        issue=issue.description,
        actions_taken=issue.actions_taken,
        detailed_analysis=rendered.detailed_analysis,
        legal_context=rendered.legal_context,
        relevant_clauses=render_relevant_clauses(project.contract_type, issue.description),
        clause_explanations=rendered.clause_explanations,
        recommendations=render_recommendations(
            project.contract_type, project.organization_role, issue.description
        ),
        potential_outcomes=rendered.potential_outcomes,
        timeline_suggestions=rendered.timeline_suggestions,
        risk_assessment=rendered.risk_assessment,
    )
