"""Unit tests for the criteria catalog and greenaudit.io.criteria_loader."""

from __future__ import annotations

import json

import yaml

from greenaudit.analysis.criteria_catalog import DEFAULT_CATEGORIES, get_criterion_definition
from greenaudit.io.criteria_loader import apply_overrides, load_criteria_config


def _write_json(path, records):
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


class TestDefaultCatalog:
    def test_six_principles_three_criteria_each(self, default_criteria_list):
        assert len(DEFAULT_CATEGORIES) == 6
        assert all(len(c.criteria) == 3 for c in DEFAULT_CATEGORIES)
        assert len(default_criteria_list) == 18

    def test_ids_unique_and_weights_default(self, default_criteria_list):
        ids = [c.criterion_id for c in default_criteria_list]
        assert len(set(ids)) == 18
        assert all(c.weight == 1.0 for c in default_criteria_list)

    def test_every_criterion_has_guidance(self, default_criteria_list):
        for criterion in default_criteria_list:
            definition = get_criterion_definition(criterion.criterion_id)
            assert definition is not None
            assert definition.evaluation_steps
            assert definition.red_flags
            assert criterion.description


class TestLoadCriteriaConfig:
    def test_no_path_returns_defaults(self):
        criteria = load_criteria_config()
        assert len(criteria) == 18

    def test_missing_file_returns_defaults(self, tmp_path):
        assert len(load_criteria_config(tmp_path / "absent.json")) == 18

    def test_weight_and_prompt_override(self, tmp_path):
        path = _write_json(
            tmp_path / "overrides.json",
            [{"criterion_id": "avoid_vague_terms", "prompt_template": "Custom body", "weight": 2.5}],
        )
        criteria = {c.criterion_id: c for c in load_criteria_config(path)}
        assert criteria["avoid_vague_terms"].weight == 2.5
        assert criteria["avoid_vague_terms"].description == "Custom body"
        assert criteria["literal_accuracy"].weight == 1.0

    def test_inactive_criterion_skipped(self, tmp_path):
        path = _write_json(
            tmp_path / "overrides.json",
            {"prompts": [{"criterion_id": "materiality", "is_active": False}]},
        )
        ids = [c.criterion_id for c in load_criteria_config(path)]
        assert "materiality" not in ids
        assert len(ids) == 17

    def test_inactive_category_skipped(self, tmp_path):
        path = _write_json(
            tmp_path / "overrides.json",
            [{"category_id": "principle6_future", "is_active": False}],
        )
        criteria = load_criteria_config(path)
        assert len(criteria) == 15
        assert all(c.category_id != "principle6_future" for c in criteria)

    def test_non_positive_weight_ignored(self, tmp_path):
        path = _write_json(
            tmp_path / "overrides.json",
            [
                {"criterion_id": "literal_accuracy", "weight": 0},
                {"criterion_id": "materiality", "weight": -2},
            ],
        )
        criteria = {c.criterion_id: c for c in load_criteria_config(path)}
        assert criteria["literal_accuracy"].weight == 1.0
        assert criteria["materiality"].weight == 1.0

    def test_user_record_beats_global(self, tmp_path):
        path = _write_json(
            tmp_path / "overrides.json",
            [
                {"criterion_id": "concrete_plan", "weight": 2.0, "user_id": None},
                {"criterion_id": "concrete_plan", "weight": 3.0, "user_id": "u1"},
                {"criterion_id": "concrete_plan", "weight": 9.0, "user_id": "u2"},
            ],
        )
        mine = {c.criterion_id: c for c in load_criteria_config(path, user_id="u1")}
        anonymous = {c.criterion_id: c for c in load_criteria_config(path)}
        assert mine["concrete_plan"].weight == 3.0
        assert anonymous["concrete_plan"].weight == 2.0

    def test_duplicate_global_records_keep_first(self, tmp_path):
        path = _write_json(
            tmp_path / "overrides.json",
            [
                {"criterion_id": "interim_targets", "weight": 2.0},
                {"criterion_id": "interim_targets", "weight": 4.0},
            ],
        )
        criteria = {c.criterion_id: c for c in load_criteria_config(path)}
        assert criteria["interim_targets"].weight == 2.0

    def test_unknown_criterion_ignored(self, tmp_path):
        path = _write_json(tmp_path / "overrides.json", [{"criterion_id": "nope", "weight": 3}])
        assert len(load_criteria_config(path)) == 18

    def test_yaml_overrides(self, tmp_path):
        path = tmp_path / "overrides.yaml"
        path.write_text(
            yaml.safe_dump({"criteria": [{"criterion_id": "scope_clarity", "weight": 1.5}]}),
            encoding="utf-8",
        )
        criteria = {c.criterion_id: c for c in load_criteria_config(path)}
        assert criteria["scope_clarity"].weight == 1.5

    def test_base_list_not_mutated(self, default_criteria_list):
        before = list(default_criteria_list)
        apply_overrides(default_criteria_list, [{"criterion_id": "literal_accuracy", "weight": 5}])
        assert default_criteria_list == before
        assert default_criteria_list[0].weight == 1.0
