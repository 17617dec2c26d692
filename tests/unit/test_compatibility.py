"""Tests for activity and specialty compatibility rules."""

import json

import pytest

from carespace.core.scheduling.compatibility import (
    DEFAULT_ACTIVITY_RULES,
    DEFAULT_SPECIALTY_RULES,
    ActivityClassifier,
    ActivityRule,
    SpecialtyMatcher,
    load_rule_tables,
)
from carespace.models.entities import Space


@pytest.fixture
def research_room() -> Space:
    return Space(id="R2", name="Research Lab", category="Research", bookable=True)


@pytest.fixture
def admin_room() -> Space:
    return Space(id="R3", name="Admin Office", category="Admin", bookable=True)


class TestActivityClassifier:
    """Test activity classification against rooms."""

    def test_labwork_admits_only_research(self, research_room, admin_room):
        classifier = ActivityClassifier()
        result = classifier.filter_spaces("labwork", [research_room, admin_room])
        assert result == [research_room]

    @pytest.mark.parametrize("activity", ["", "   ", None, "yoga"])
    def test_empty_or_unknown_admits_all(self, activity, research_room, admin_room):
        classifier = ActivityClassifier()
        result = classifier.filter_spaces(activity, [research_room, admin_room])
        assert result == [research_room, admin_room]

    def test_case_insensitive_substring(self, research_room):
        classifier = ActivityClassifier()
        assert classifier.rule_for("Afternoon LAB WORK session") is DEFAULT_ACTIVITY_RULES[0]
        assert classifier.is_compatible("Lab Work", research_room)

    def test_first_matching_rule_wins(self):
        """"labwork research" matches the labwork rule, not the research rule."""
        classifier = ActivityClassifier()
        assert classifier.rule_for("labwork research") is DEFAULT_ACTIVITY_RULES[0]

    def test_uses_field_admits(self):
        room = Space(id="X", name="Flex", category="Shared", uses="Patient consultation")
        assert ActivityClassifier().is_compatible("consultation", room)

    def test_consultation_rejects_admin(self, admin_room):
        assert not ActivityClassifier().is_compatible("consultation", admin_room)

    def test_room_keywords(self):
        keywords = ActivityClassifier().room_keywords_for("research")
        assert keywords == {"research"}
        assert ActivityClassifier().room_keywords_for("") == set()

    def test_specialty_for(self):
        classifier = ActivityClassifier()
        assert classifier.specialty_for("labwork") == "Research"
        assert classifier.specialty_for("consultation") == "Pediatric"
        assert classifier.specialty_for("teaching") is None
        assert classifier.specialty_for("unknown") is None

    def test_custom_rules_replace_defaults(self, research_room, admin_room):
        classifier = ActivityClassifier([ActivityRule(keywords=("paperwork",), category_keywords=("admin",))])
        assert classifier.filter_spaces("paperwork", [research_room, admin_room]) == [admin_room]
        assert classifier.filter_spaces("labwork", [research_room, admin_room]) == [
            research_room,
            admin_room,
        ]


class TestSpecialtyMatcher:
    """Test specialty to category compatibility."""

    @pytest.mark.parametrize(
        "specialty, category, expected",
        [
            ("Surgery", "Operating", True),
            ("Anesthesiology", "Clinical", True),
            ("Surgery", "Admin", False),
            ("Cardiology", "Diagnostic", True),
            ("Cardiology", "Research", False),
            ("Pediatric", "Education", True),
            ("Pediatric", "Research", False),
            ("General Medicine", "Admin", True),
            ("Research", "Operating", True),
        ],
    )
    def test_default_rules(self, specialty, category, expected):
        assert SpecialtyMatcher().is_compatible(specialty, category) is expected


class TestLoadRuleTables:
    """Test loading rule tables from JSON."""

    def test_none_uses_defaults(self):
        tables = load_rule_tables(None)
        assert tables.activity_rules == list(DEFAULT_ACTIVITY_RULES)

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({
            "activity_rules": [
                {"keywords": ["imaging"], "category_keywords": ["diagnostic"]},
            ],
        }))

        tables = load_rule_tables(path)

        assert len(tables.activity_rules) == 1
        assert tables.activity_rules[0].keywords == ("imaging",)
        # specialty rules keep the built-in table
        assert len(tables.specialty_rules) == 3

    def test_round_trip_through_to_dict(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(load_rule_tables(None).to_dict()))
        assert load_rule_tables(path).to_dict() == load_rule_tables(None).to_dict()

    def test_invalid_file_falls_back(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{not json")
        tables = load_rule_tables(path)
        assert tables.activity_rules == list(DEFAULT_ACTIVITY_RULES)

    def test_missing_file_falls_back(self, tmp_path):
        tables = load_rule_tables(tmp_path / "missing.json")
        assert len(tables.specialty_rules) == 3

    @pytest.mark.parametrize(
        "content",
        [
            {"activity_rules": [{"keywords": "lab", "category_keywords": "research"}]},
            {"activity_rules": ["labwork"]},
            {"activity_rules": [{"keywords": []}]},
            {"specialty_rules": [{"keyword": ["cardiology"]}]},
            ["not", "an", "object"],
        ],
    )
    def test_malformed_rules_fall_back(self, tmp_path, content):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(content))

        tables = load_rule_tables(path)

        assert tables.activity_rules == list(DEFAULT_ACTIVITY_RULES)
        assert tables.specialty_rules == list(DEFAULT_SPECIALTY_RULES)

    def test_string_keywords_do_not_match_everything(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({
            "activity_rules": [{"keywords": "lab", "category_keywords": "research"}],
        }))

        classifier = ActivityClassifier(load_rule_tables(path).activity_rules)

        assert classifier.rule_for("team meeting") is None
