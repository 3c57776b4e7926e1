"""Claim data models for greenaudit.

Defines the atomic environmental claim extracted from a document and the
result envelope returned by the claim extraction phase.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class ClaimCategory:
    """Fixed enumeration of environmental claim categories."""

    CARBON_EMISSIONS = "carbon_emissions"
    NET_ZERO = "net_zero"
    RENEWABLE_ENERGY = "renewable_energy"
    WASTE_REDUCTION = "waste_reduction"
    WATER_CONSERVATION = "water_conservation"
    BIODIVERSITY = "biodiversity"
    SUSTAINABLE_SOURCING = "sustainable_sourcing"
    CERTIFICATIONS = "certifications"
    GENERAL_SUSTAINABILITY = "general_sustainability"

    ALL = (
        CARBON_EMISSIONS,
        NET_ZERO,
        RENEWABLE_ENERGY,
        WASTE_REDUCTION,
        WATER_CONSERVATION,
        BIODIVERSITY,
        SUSTAINABLE_SOURCING,
        CERTIFICATIONS,
        GENERAL_SUSTAINABILITY,
    )

    @classmethod
    def normalize(cls, value: Any) -> str:
        """Map an arbitrary value onto the enumeration (unknown → general_sustainability)."""
        text = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
        return text if text in cls.ALL else cls.GENERAL_SUSTAINABILITY


class ClaimType:
    """Kind of assertion a claim makes."""

    FACTUAL = "factual"
    COMMITMENT = "commitment"
    COMPARISON = "comparison"

    ALL = (FACTUAL, COMMITMENT, COMPARISON)

    @classmethod
    def normalize(cls, value: Any) -> str:
        text = str(value or "").strip().lower()
        return text if text in cls.ALL else cls.FACTUAL


@dataclass(frozen=True)
class Claim:
    """An atomic environmental or sustainability assertion.

    Created once per run by the claim extractor and shared read-only by every
    criterion assessor.
    """

    claim_id: str
    text: str
    page: Optional[int] = None
    is_visual: bool = False
    section: str = ""
    category: str = ClaimCategory.GENERAL_SUSTAINABILITY
    claim_type: str = ClaimType.FACTUAL
    vagueness_flags: List[str] = field(default_factory=list)

    @property
    def location_label(self) -> str:
        """Human-readable source location ("Page 4", "Visual (page 2)")."""
        if self.is_visual:
            return f"Visual (page {self.page})" if self.page is not None else "Visual"
        if self.page is None:
            return "Page unknown"
        return f"Page {self.page}"

    def to_prompt_dict(self) -> Dict[str, Any]:
        """Compact dict used when serializing claims into an oracle prompt."""
        return {
            "id": self.claim_id,
            "text": self.text,
            "page": "visual" if self.is_visual else self.page,
            "section": self.section,
            "category": self.category,
            "claimType": self.claim_type,
            "vaguenessFlags": list(self.vagueness_flags),
        }


@dataclass
class ClaimExtractionResult:
    """Output of the claim extraction phase."""

    claims: List[Claim] = field(default_factory=list)
    total_claims_found: int = 0
    document_coverage: str = "Unknown"
    elapsed_seconds: float = 0.0
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    status: str = "OK"   # "OK", "PARTIAL"
