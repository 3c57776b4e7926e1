"""Default assessment framework: the Competition Bureau's six principles for
environmental claims, three criteria each.

Each criterion carries its evaluation steps and red flags, which the prompt
builder renders into a chain-of-thought rubric. Callers may override the
description (prompt body) and weight per criterion via the criteria loader.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from config.defaults import DEFAULT_CRITERION_WEIGHT
from greenaudit.models.assessment import CriterionConfig


@dataclass(frozen=True)
class CriterionDefinition:
    criterion_id: str
    name: str
    description: str
    evaluation_steps: Tuple[str, ...] = ()
    red_flags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CategoryDefinition:
    category_id: str
    name: str
    criteria: Tuple[CriterionDefinition, ...]


DEFAULT_CATEGORIES: Tuple[CategoryDefinition, ...] = (
    CategoryDefinition(
        category_id="principle1_truthful",
        name="Principle 1: Be Truthful",
        criteria=(
            CriterionDefinition(
                criterion_id="literal_accuracy",
                name="Literal Accuracy",
                description=(
                    "The literal meaning of every environmental claim must be accurate "
                    "and verifiable."
                ),
                evaluation_steps=(
                    "Identify factual claims (numbers, percentages, achievements)",
                    "Check whether each claim is specific enough to be verified",
                    "Look for claims that are technically true but misleading",
                    "Note whether data sources or methodologies are referenced",
                ),
                red_flags=(
                    'Round numbers without methodology ("100% sustainable")',
                    "Claims without time periods or baselines",
                    "Absolute claims (always, never, completely)",
                    "Claims contradicted elsewhere in the document",
                ),
            ),
            CriterionDefinition(
                criterion_id="general_impression",
                name="General Impression",
                description=(
                    "The overall impression created by environmental claims must match "
                    "actual environmental performance, not only their literal meaning."
                ),
                evaluation_steps=(
                    "Read the claims from a consumer's perspective",
                    "Compare the impression created with the substantiation provided",
                    "Check whether small achievements are framed as major ones",
                    "Check whether negative impacts are disclosed alongside positives",
                ),
                red_flags=(
                    "Green imagery or language without substantive claims",
                    "Prominent positive claims with buried negative disclosures",
                    "Aspirational language presented as achievement",
                    "Industry-standard practice presented as exceptional",
                ),
            ),
            CriterionDefinition(
                criterion_id="no_exaggeration",
                name="No Exaggeration",
                description=(
                    "Claims must not overstate environmental benefits; technically true "
                    "statements can still create an exaggerated impression."
                ),
                evaluation_steps=(
                    "Identify claims that emphasize environmental benefits",
                    "Assess whether the magnitude of the benefit is represented accurately",
                    "Look for superlatives and absolute terms",
                    "Compare claimed benefits with industry norms",
                ),
                red_flags=(
                    'Superlatives such as "industry-leading" or "revolutionary"',
                    "Pilot projects described as company-wide initiatives",
                    "Future targets presented as current achievements",
                ),
            ),
        ),
    ),
    CategoryDefinition(
        category_id="principle2_substantiated",
        name="Principle 2: Be Substantiated",
        criteria=(
            CriterionDefinition(
                criterion_id="adequate_testing",
                name="Adequate Testing",
                description=(
                    "Claims must rest on adequate and proper testing carried out before "
                    "the claim was made, suited to the circumstances of the claim."
                ),
                evaluation_steps=(
                    "Identify claims that require testing or measurement",
                    "Check whether the testing methodology is disclosed",
                    "Assess whether the testing is adequate for the claim made",
                    "Check whether testing preceded publication of the claim",
                ),
                red_flags=(
                    "No reference to any measurement methodology",
                    "Self-reported data without verification",
                    "Testing methods inappropriate for the claim type",
                ),
            ),
            CriterionDefinition(
                criterion_id="recognized_methodology",
                name="Recognized Methodology",
                description=(
                    "Business-activity claims such as emissions reductions or net-zero "
                    "commitments must use internationally recognized methodology (GHG "
                    "Protocol, ISO standards, Science Based Targets)."
                ),
                evaluation_steps=(
                    "Identify claims about business environmental performance",
                    "Check for references to recognized standards (GHG Protocol, ISO, SBTi)",
                    "Assess whether the methodology fits the claim type",
                    "Check whether the methodology appears to be applied correctly",
                ),
                red_flags=(
                    "Proprietary methodologies without external validation",
                    "Outdated standards where newer versions exist",
                    "Misapplication of recognized standards",
                ),
            ),
            CriterionDefinition(
                criterion_id="third_party_verification",
                name="Third-Party Verification",
                description=(
                    "Where a recognized methodology calls for independent verification, "
                    "that verification must be obtained and disclosed."
                ),
                evaluation_steps=(
                    "Identify claims that warrant third-party verification",
                    "Check whether verification is disclosed and by whom",
                    "Assess the independence and credibility of verifiers",
                    "Check that the verification scope matches the claims",
                ),
                red_flags=(
                    "Self-certification without external validation",
                    "Verification scope narrower than the claims suggest",
                    "Expired certifications presented as current",
                ),
            ),
        ),
    ),
    CategoryDefinition(
        category_id="principle3_specific",
        name="Principle 3: Be Specific About Comparisons",
        criteria=(
            CriterionDefinition(
                criterion_id="comparison_basis",
                name="Clear Comparison Basis",
                description=(
                    'Comparative claims such as "50% less emissions" must state what is '
                    "being compared: previous version, competitor, industry average, or "
                    "regulatory baseline."
                ),
                evaluation_steps=(
                    "Identify comparative claims (more, less, better, improved)",
                    "Check whether the baseline is clearly stated",
                    "Check whether the comparison timeframe is specified",
                ),
                red_flags=(
                    '"X% reduction" without saying from what',
                    "Comparisons to worst-case or outdated baselines",
                    '"Improved" without quantification',
                ),
            ),
            CriterionDefinition(
                criterion_id="extent_of_difference",
                name="Extent of Difference",
                description=(
                    "Claims must state the extent of the environmental difference; "
                    'unquantified comparisons like "better for the environment" are '
                    "problematic."
                ),
                evaluation_steps=(
                    "Identify claims about environmental improvement",
                    "Check whether improvements are quantified with units and timeframes",
                    "Assess whether the extent is meaningful in context",
                ),
                red_flags=(
                    '"Better", "improved", or "enhanced" without numbers',
                    '"Significant reduction" without defining significant',
                    "Percentages without absolute figures",
                ),
            ),
            CriterionDefinition(
                criterion_id="fair_comparisons",
                name="Fair Comparisons",
                description=(
                    "Comparisons must be against relevant alternatives, not outdated "
                    "products, cherry-picked competitors, or irrelevant benchmarks."
                ),
                evaluation_steps=(
                    "Identify the basis of each comparison",
                    "Assess whether comparisons are to relevant alternatives",
                    "Look for selectively favorable comparisons",
                ),
                red_flags=(
                    "Comparisons to products no longer on the market",
                    "Comparisons to the worst performers only",
                    "Self-comparisons to artificially low baselines",
                ),
            ),
        ),
    ),
    CategoryDefinition(
        category_id="principle4_proportionate",
        name="Principle 4: Be Proportionate",
        criteria=(
            CriterionDefinition(
                criterion_id="proportionate_claims",
                name="Proportionate Claims",
                description=(
                    "Environmental marketing must be proportionate to the actual benefit; "
                    "a 2% reduction is not a major environmental achievement."
                ),
                evaluation_steps=(
                    "Identify claims about environmental achievements",
                    "Assess the actual magnitude of each benefit",
                    "Compare marketing emphasis with actual impact",
                ),
                red_flags=(
                    "Headline claims for marginal improvements",
                    "Extensive promotion of pilot projects",
                    "No context for the claimed improvement",
                ),
            ),
            CriterionDefinition(
                criterion_id="materiality",
                name="Materiality of Claims",
                description=(
                    "Claims should concern material environmental improvements rather "
                    "than trivial changes with negligible impact."
                ),
                evaluation_steps=(
                    "Identify the environmental issues most material to the business",
                    "Check whether claims address those material issues",
                    "Check whether a materiality assessment is disclosed",
                ),
                red_flags=(
                    "Office recycling emphasized while manufacturing impacts are ignored",
                    "Packaging focus when product use is the main impact",
                    "No materiality assessment disclosed",
                ),
            ),
            CriterionDefinition(
                criterion_id="no_cherry_picking",
                name="No Cherry-Picking",
                description=(
                    "Minor positives must not be highlighted while significant negatives "
                    "or trade-offs are left out."
                ),
                evaluation_steps=(
                    "Identify the positive environmental claims made",
                    "Look for disclosure of negative impacts and trade-offs",
                    "Check for selective reporting of metrics or time periods",
                ),
                red_flags=(
                    "Only metrics that improved are reported",
                    "Scope 3 emissions missing while Scope 1 and 2 are highlighted",
                    "Time periods selected to favor positive trends",
                ),
            ),
        ),
    ),
    CategoryDefinition(
        category_id="principle5_clear",
        name="Principle 5: When in Doubt, Spell it Out",
        criteria=(
            CriterionDefinition(
                criterion_id="avoid_vague_terms",
                name="Avoid Vague Terms",
                description=(
                    'Vague terms like "eco-friendly", "green", or "sustainable" must not '
                    "be used without specific substantiation (ISO 14021)."
                ),
                evaluation_steps=(
                    "Identify vague environmental terms",
                    "Check whether each term is defined or substantiated",
                    "Check whether specific claims accompany general terms",
                ),
                red_flags=(
                    '"Eco-friendly" or "green" without specific criteria',
                    '"Sustainable" without a definition',
                    '"Natural", "clean", or "planet-positive" without evidence',
                ),
            ),
            CriterionDefinition(
                criterion_id="scope_clarity",
                name="Scope Clarity",
                description=(
                    "Claims must make clear whether they apply to the whole product or "
                    "business or only a part of it."
                ),
                evaluation_steps=(
                    "Identify the scope of each environmental claim",
                    "Check whether partial claims could be read as total",
                    "Check whether organizational scope (subsidiary vs parent) is clear",
                ),
                red_flags=(
                    "Packaging claims implying product-wide sustainability",
                    "Single product-line claims suggesting company-wide practice",
                    "Subsidiary achievements presented as group-level claims",
                ),
            ),
            CriterionDefinition(
                criterion_id="accessible_information",
                name="Accessible Information",
                description=(
                    "Substantiation must be readily accessible, not buried in fine print "
                    "or hard-to-find documents."
                ),
                evaluation_steps=(
                    "Identify claims that need supporting information",
                    "Check whether substantiation is easy to find",
                    "Check whether material caveats are prominently disclosed",
                ),
                red_flags=(
                    "Material qualifications hidden in footnotes",
                    "Technical jargon without explanation",
                    "References to supporting data that is not provided",
                ),
            ),
        ),
    ),
    CategoryDefinition(
        category_id="principle6_future",
        name="Principle 6: Substantiate Future Claims",
        criteria=(
            CriterionDefinition(
                criterion_id="concrete_plan",
                name="Concrete Plan",
                description=(
                    "Net-zero and other future commitments must be backed by a concrete "
                    "plan showing how the goal will be reached."
                ),
                evaluation_steps=(
                    "Identify future environmental commitments",
                    "Check whether specific, actionable plans are disclosed",
                    "Distinguish vague intentions from detailed roadmaps",
                ),
                red_flags=(
                    "Net-zero commitment without a transition plan",
                    '"We will" statements without "how"',
                    "Reliance on unproven technologies",
                ),
            ),
            CriterionDefinition(
                criterion_id="interim_targets",
                name="Interim Targets",
                description=(
                    "Long-term commitments must include interim targets and milestones "
                    "so progress can be tracked and verified."
                ),
                evaluation_steps=(
                    "Identify long-term environmental commitments",
                    "Check for specific, measurable interim targets",
                    "Check that interim targets are consistent with the final goal",
                ),
                red_flags=(
                    "A 2050 target with no 2030 milestone",
                    "Interim targets that do not add up to the final goal",
                    "No mechanism for tracking progress",
                ),
            ),
            CriterionDefinition(
                criterion_id="meaningful_steps",
                name="Meaningful Steps Underway",
                description=(
                    "Future claims must be accompanied by meaningful steps already "
                    "underway, not only future intentions."
                ),
                evaluation_steps=(
                    "Identify future environmental commitments",
                    "Look for investments, projects, or changes already made",
                    "Check whether progress on earlier commitments is reported",
                ),
                red_flags=(
                    "Commitments with no current spending",
                    "Targets set but no projects started",
                    "No progress reported on previous commitments",
                ),
            ),
        ),
    ),
)

_DEFINITIONS_BY_ID: Dict[str, CriterionDefinition] = {
    criterion.criterion_id: criterion
    for category in DEFAULT_CATEGORIES
    for criterion in category.criteria
}


def get_criterion_definition(criterion_id: str) -> Optional[CriterionDefinition]:
    """Return the built-in definition for a criterion id, if one exists."""
    return _DEFINITIONS_BY_ID.get(criterion_id)


def default_criteria(
    categories: Tuple[CategoryDefinition, ...] = DEFAULT_CATEGORIES,
) -> List[CriterionConfig]:
    """Flatten category definitions into CriterionConfig objects (weight 1.0)."""
    return [
        CriterionConfig(
            criterion_id=criterion.criterion_id,
            name=criterion.name,
            category_id=category.category_id,
            category_name=category.name,
            description=criterion.description,
            weight=DEFAULT_CRITERION_WEIGHT,
        )
        for category in categories
        for criterion in category.criteria
    ]
