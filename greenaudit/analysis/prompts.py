"""Prompt builders for claim extraction and per-criterion assessment.

Prompt wording is tuned for JSON-only output; the parsing side of each
contract lives with the agent or assessor that consumes it.
"""

from __future__ import annotations

import json
from typing import List, Sequence

from greenaudit.analysis.criteria_catalog import get_criterion_definition
from greenaudit.models.assessment import CriterionConfig
from greenaudit.models.claims import Claim, ClaimCategory

EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert analyst of corporate environmental disclosures under "
    "Canadian competition law. Extract every environmental or sustainability "
    "claim from the document. Return only a JSON object."
)

CRITERION_SYSTEM_PROMPT = (
    "You are an expert in Canadian environmental law and the Competition Act "
    "amendments introduced by Bill C-59. You assess environmental claims against "
    "the Competition Bureau's guidance on greenwashing. Return only a JSON object."
)

SCORING_RUBRIC = (
    "- 90-100: Fully compliant, exemplary practice\n"
    "- 75-89: Compliant with minor improvements possible\n"
    "- 50-74: Needs attention, moderate issues present\n"
    "- 25-49: High risk, significant issues\n"
    "- 0-24: Critical violations, likely non-compliant"
)

_VAGUE_TERMS = ("sustainable", "eco-friendly", "green", "natural", "clean")


def build_extraction_prompt(document_text: str) -> str:
    """Build the single claim-extraction request for a document."""
    categories = ", ".join(ClaimCategory.ALL)
    vague = ", ".join(f'"{t}"' for t in _VAGUE_TERMS)
    return (
        "Identify all environmental claims in the document below.\n\n"
        "INCLUDE:\n"
        "- Emissions and carbon statements, net-zero or carbon-neutral targets\n"
        "- Renewable energy use, waste reduction and circularity, water use\n"
        "- Biodiversity, sustainable sourcing, ESG performance statements\n"
        "- Percentages, quantities and dated targets about environmental impact\n"
        "- Certifications and standards (ISO 14001, B Corp, LEED, SBTi), awards\n"
        "- Product or operational impact statements and climate disclosures\n"
        "- Environmental goals and commitments\n\n"
        "EXCLUDE:\n"
        "- Generic corporate values with no environmental content\n"
        "- Purely aspirational statements with no claim attached\n"
        "- Claims that are not about the environment\n\n"
        f"Flag vague terms such as {vague} in vaguenessFlags.\n\n"
        "Return a JSON object with:\n"
        '- claims: array of {"id", "text", "page", "section", "category", '
        '"claimType", "vaguenessFlags"}\n'
        f"  category is one of: {categories}\n"
        "  claimType is one of: factual, commitment, comparison\n"
        "  page is the page number where the claim appears, if known\n"
        "- totalClaimsFound: integer\n"
        "- documentCoverage: short description of how much of the document was covered\n\n"
        f"DOCUMENT:\n{document_text}"
    )


def _numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


def build_criterion_prompt(
    criterion: CriterionConfig,
    claims: List[Claim],
    document_context: str,
    max_claims: int = 40,
    max_context_chars: int = 2500,
) -> str:
    """Build the bounded assessment request for one criterion.

    Claims are capped at ``max_claims`` and the document context is truncated
    to ``max_context_chars`` so every request stays within a fixed size.
    """
    definition = get_criterion_definition(criterion.criterion_id)
    claims_json = json.dumps(
        [c.to_prompt_dict() for c in claims[:max_claims]], indent=2, ensure_ascii=False
    )
    context = document_context[:max_context_chars]

    sections = [
        f"PRINCIPLE: {criterion.category_name}",
        f"CRITERION: {criterion.name}",
        "",
        "EVALUATION CRITERIA:",
        criterion.description or "Assess the claims against this criterion.",
    ]
    if definition is not None and definition.evaluation_steps:
        sections += ["", "EVALUATION STEPS:", _numbered(definition.evaluation_steps)]
    sections += ["", "SCORING RUBRIC:", SCORING_RUBRIC]
    if definition is not None and definition.red_flags:
        sections += ["", "RED FLAGS:", "\n".join(f"- {f}" for f in definition.red_flags)]
    sections += [
        "",
        f"CLAIMS ({min(len(claims), max_claims)} of {len(claims)}):",
        claims_json,
        "",
        "DOCUMENT CONTEXT:",
        context,
        "",
        "Return a JSON object with:",
        "- score: integer 0-100",
        '- status: "Compliant", "Needs Attention", or "High Risk"',
        "- rationale: 2-4 sentences explaining the score",
        '- findings: array of {"claimId", "issue", "severity"} with severity '
        "High, Medium, or Low",
        "- recommendations: array of strings",
        '- evidenceUsed: array of {"quote", "pageReference", "context"}',
    ]
    return "\n".join(sections)
