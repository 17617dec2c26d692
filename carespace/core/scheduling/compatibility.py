"""
Activity and specialty compatibility rules.

Both tables are ordered lists of keyword rules. Matching is a
case-insensitive substring test and the first matching rule wins.
No matching rule means "compatible with everything".

The built-in tables can be replaced with a JSON file:

    {
        "activity_rules": [
            {"keywords": ["labwork", "lab work"],
             "category_keywords": ["research", "lab"],
             "uses_keywords": ["lab work", "research"],
             "specialty": "Research"}
        ],
        "specialty_rules": [
            {"keywords": ["cardiology"],
             "category_keywords": ["clinical", "diagnostic"]}
        ]
    }
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from carespace.models.entities import Space

logger = logging.getLogger(__name__)


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    text = (text or "").lower()
    return any(keyword.lower() in text for keyword in keywords)


class ActivityRule(BaseModel):
    """Maps activity keywords to suitable spaces and a doctor specialty."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    keywords: tuple[str, ...] = Field(min_length=1)
    category_keywords: tuple[str, ...] = ()
    uses_keywords: tuple[str, ...] = ()
    specialty: Optional[str] = None

    def matches(self, activity: str) -> bool:
        return _contains_any(activity, self.keywords)

    def admits(self, space: Space) -> bool:
        """Check whether the space's category or declared uses fit."""
        return _contains_any(space.category, self.category_keywords) or _contains_any(
            space.uses, self.uses_keywords
        )


class SpecialtyRule(BaseModel):
    """Restricts doctors of a specialty to spaces of certain categories."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    keywords: tuple[str, ...] = Field(min_length=1)
    category_keywords: tuple[str, ...] = ()

    def matches(self, specialty: str) -> bool:
        return _contains_any(specialty, self.keywords)

    def admits(self, category: str) -> bool:
        return _contains_any(category, self.category_keywords)


# ==================================
# Built-in rule tables
# ==================================

# Order matters: "labwork" must be tested before "research".
DEFAULT_ACTIVITY_RULES: tuple[ActivityRule, ...] = (
    ActivityRule(
        keywords=("labwork", "lab work"),
        category_keywords=("research", "lab"),
        uses_keywords=("lab work", "research"),
        specialty="Research",
    ),
    ActivityRule(
        keywords=("consultation",),
        category_keywords=("clinical", "education"),
        uses_keywords=("patient consultation", "consultation"),
        specialty="Pediatric",
    ),
    ActivityRule(
        keywords=("research",),
        category_keywords=("research",),
        uses_keywords=("research",),
        specialty="Research",
    ),
    ActivityRule(
        keywords=("teaching", "education"),
        category_keywords=("education",),
        uses_keywords=("teaching", "education"),
    ),
    ActivityRule(
        keywords=("administration", "admin"),
        category_keywords=("admin",),
        uses_keywords=("administration", "admin"),
    ),
    ActivityRule(
        keywords=("private",),
        category_keywords=("admin",),
        uses_keywords=("private",),
    ),
)

DEFAULT_SPECIALTY_RULES: tuple[SpecialtyRule, ...] = (
    SpecialtyRule(
        keywords=("surgery", "anesthesiology"),
        category_keywords=("operating", "clinical"),
    ),
    SpecialtyRule(
        keywords=("cardiology",),
        category_keywords=("clinical", "diagnostic"),
    ),
    SpecialtyRule(
        keywords=("pediatric",),
        category_keywords=("clinical", "education"),
    ),
)


class ActivityClassifier:
    """Classifies free-text activity labels against an ordered rule table."""

    def __init__(self, rules: Optional[Sequence[ActivityRule]] = None):
        self.rules: tuple[ActivityRule, ...] = tuple(
            DEFAULT_ACTIVITY_RULES if rules is None else rules
        )

    def rule_for(self, activity: Optional[str]) -> Optional[ActivityRule]:
        """Return the first rule matching the activity, if any."""
        if not activity or not activity.strip():
            return None
        for rule in self.rules:
            if rule.matches(activity):
                return rule
        return None

    def room_keywords_for(self, activity: Optional[str]) -> set[str]:
        """Category and uses keywords acceptable for the activity.

        An empty set means every bookable space is acceptable.
        """
        rule = self.rule_for(activity)
        if rule is None:
            return set()
        return set(rule.category_keywords) | set(rule.uses_keywords)

    def specialty_for(self, activity: Optional[str]) -> Optional[str]:
        rule = self.rule_for(activity)
        return rule.specialty if rule else None

    def is_compatible(self, activity: Optional[str], space: Space) -> bool:
        rule = self.rule_for(activity)
        return True if rule is None else rule.admits(space)

    def filter_spaces(
        self,
        activity: Optional[str],
        spaces: Sequence[Space],
    ) -> list[Space]:
        """Keep the spaces compatible with the activity, preserving order."""
        rule = self.rule_for(activity)
        if rule is None:
            return list(spaces)
        return [space for space in spaces if rule.admits(space)]


class SpecialtyMatcher:
    """Decides whether a doctor's specialty fits a space category."""

    def __init__(self, rules: Optional[Sequence[SpecialtyRule]] = None):
        self.rules: tuple[SpecialtyRule, ...] = tuple(
            DEFAULT_SPECIALTY_RULES if rules is None else rules
        )

    def is_compatible(self, specialty: str, category: str) -> bool:
        for rule in self.rules:
            if rule.matches(specialty):
                return rule.admits(category)
        return True


class RuleTables(BaseModel):
    """Both rule tables, as loaded from configuration."""

    model_config = ConfigDict(extra="forbid")

    activity_rules: list[ActivityRule] = Field(
        default_factory=lambda: list(DEFAULT_ACTIVITY_RULES)
    )
    specialty_rules: list[SpecialtyRule] = Field(
        default_factory=lambda: list(DEFAULT_SPECIALTY_RULES)
    )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


def load_rule_tables(path: Optional[Path] = None) -> RuleTables:
    """Load rule tables from a JSON file.

    A missing key keeps the built-in table for that key. A missing,
    unreadable or invalid file keeps both built-in tables and logs an
    error; a rule whose keyword fields are not lists of strings makes the
    whole file invalid.

    Args:
        path: JSON file path, or None for the built-in tables

    Returns:
        RuleTables
    """
    if path is None:
        return RuleTables()

    try:
        tables = RuleTables.model_validate_json(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        logger.error(f"Failed to read rule tables from {path}: {e}")
        return RuleTables()
    except ValidationError as e:
        logger.error(f"Invalid rule tables in {path}, using built-in rules: {e}")
        return RuleTables()

    logger.info(
        f"Loaded {len(tables.activity_rules)} activity rules and "
        f"{len(tables.specialty_rules)} specialty rules from {path}"
    )
    return tables
