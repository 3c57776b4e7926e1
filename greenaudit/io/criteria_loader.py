"""Criteria configuration loading.

Starts from the built-in catalog and applies per-criterion overrides read
from a JSON or YAML file. The file holds prompt records:

    - criterion_id: avoid_vague_terms
      prompt_template: "Custom evaluation instructions..."
      weight: 2.0
      is_active: true
      user_id: null        # null = applies to everyone

A record with only ``category_id`` and ``is_active: false`` disables a whole
category. Records for the requesting user win over global records. Bad input
never raises; it is logged and the defaults are used instead.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import Any, Dict, List, Optional, Set

from greenaudit.analysis.criteria_catalog import default_criteria
from greenaudit.io.persistence import PathLike, load_structured
from greenaudit.models.assessment import CriterionConfig

logger = logging.getLogger(__name__)


def _extract_records(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, dict):
        data = data.get("prompts", data.get("criteria", []))
    if not isinstance(data, list):
        return []
    return [r for r in data if isinstance(r, dict)]


def _applies_to(record: Dict[str, Any], user_id: Optional[str]) -> bool:
    owner = record.get("user_id")
    return owner in (None, "") or (user_id is not None and str(owner) == str(user_id))


def _is_active(record: Dict[str, Any]) -> bool:
    value = record.get("is_active", True)
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "off")
    return bool(value)


def _valid_weight(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(weight) or math.isinf(weight) or weight <= 0:
        return None
    return weight


def select_overrides(
    records: List[Dict[str, Any]], user_id: Optional[str] = None
) -> Dict[str, Dict[str, Any]]:
    """Pick one override record per criterion id.

    User-specific records beat global ones; among records of the same
    specificity the first one wins.
    """
    selected: Dict[str, Dict[str, Any]] = {}
    user_specific: Set[str] = set()
    for record in records:
        criterion_id = str(record.get("criterion_id") or "").strip()
        if not criterion_id or not _applies_to(record, user_id):
            continue
        is_user = record.get("user_id") not in (None, "")
        if criterion_id not in selected or (is_user and criterion_id not in user_specific):
            selected[criterion_id] = record
            if is_user:
                user_specific.add(criterion_id)
        else:
            logger.debug("Duplicate override for %s ignored", criterion_id)
    return selected


def apply_overrides(
    base: List[CriterionConfig],
    records: List[Dict[str, Any]],
    user_id: Optional[str] = None,
) -> List[CriterionConfig]:
    """Return a new criteria list with overrides applied; ``base`` is untouched."""
    disabled_categories = {
        str(r["category_id"])
        for r in records
        if r.get("category_id") and not r.get("criterion_id")
        and _applies_to(r, user_id) and not _is_active(r)
    }
    overrides = select_overrides(records, user_id)

    known: Set[str] = set()
    criteria: List[CriterionConfig] = []
    for criterion in base:
        if criterion.criterion_id in known:
            logger.warning("Duplicate criterion id %s; keeping the first", criterion.criterion_id)
            continue
        known.add(criterion.criterion_id)

        if criterion.category_id in disabled_categories:
            continue
        record = overrides.get(criterion.criterion_id)
        if record is None:
            criteria.append(criterion)
            continue
        if not _is_active(record):
            logger.info("Criterion %s disabled by configuration", criterion.criterion_id)
            continue

        changes: Dict[str, Any] = {}
        template = record.get("prompt_template")
        if isinstance(template, str) and template.strip():
            changes["description"] = template.strip()
        if "weight" in record:
            weight = _valid_weight(record.get("weight"))
            if weight is None:
                logger.warning(
                    "Criterion %s: invalid weight %r ignored (must be > 0)",
                    criterion.criterion_id,
                    record.get("weight"),
                )
            else:
                changes["weight"] = weight
        criteria.append(dataclasses.replace(criterion, **changes) if changes else criterion)

    for criterion_id in overrides:
        if criterion_id not in known:
            logger.warning("Override for unknown criterion %s ignored", criterion_id)
    return criteria


def load_criteria_config(
    path: Optional[PathLike] = None,
    user_id: Optional[str] = None,
    base: Optional[List[CriterionConfig]] = None,
) -> List[CriterionConfig]:
    """Load the criteria set for a run.

    Args:
        path: Optional JSON/YAML overrides file.
        user_id: Caller whose personal overrides take precedence.
        base: Starting criteria (defaults to the built-in catalog).

    Returns:
        Active criteria with overrides applied.
    """
    criteria = list(base) if base is not None else default_criteria()
    if path is None:
        return apply_overrides(criteria, [], user_id)

    data = load_structured(path)
    if data is None:
        logger.warning("Criteria overrides %s could not be loaded; using defaults", path)
        return apply_overrides(criteria, [], user_id)

    records = _extract_records(data)
    if not records:
        logger.warning("Criteria overrides %s contain no records; using defaults", path)
    result = apply_overrides(criteria, records, user_id)
    logger.info(
        "Loaded %d active criteria (%d override records from %s)",
        len(result),
        len(records),
        path,
    )
    return result
