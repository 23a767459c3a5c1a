"""Configuration for Schema Guard

Manages .schemaguard/config.yaml (or config.json) settings: the closed
vocabularies used to build enum constraints, schema limits, scoring bands
and feedback formatting.
"""

import copy
import json
from pathlib import Path
from typing import Any

import yaml

from schemaguard.core.constraints import EnumConstraint, enum
from schemaguard.core.errors import SchemaDefinitionError


def _merge(base: dict, overrides: dict) -> dict:
    """Merge overrides into defaults, one level into each section"""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = {**base[key], **value}
        else:
            base[key] = value
    return base


class SchemaGuardConfig:
    """Manages configuration for Schema Guard"""

    DEFAULT_CONFIG = {
        "vocabularies": {
            "candidate_fit": ["strong_match", "qualified", "potential_fit", "not_qualified"],
            "proficiency_levels": ["beginner", "intermediate", "advanced", "expert"],
            "recommended_actions": [
                "advance_to_interview", "phone_screen_first", "hold_for_review", "reject"
            ],
            "evaluation_categories": [
                "technical_skills", "experience_level", "education", "soft_skills", "culture_fit"
            ],
            "degree_types": [
                "high_school", "associate", "bachelor", "master", "doctorate", "bootcamp", "certification"
            ],
            "relevance_types": ["highly_relevant", "somewhat_relevant", "not_relevant"],
            "experience_levels": ["entry", "mid", "senior", "lead", "executive"],
            "career_progressions": ["ascending", "lateral", "mixed", "early_career"],
            "email_types": [
                "application_received", "phone_screen_invite", "interview_invite",
                "rejection", "offer_letter", "request_more_info"
            ],
            "interview_types": [
                "phone_screen", "technical", "behavioral", "panel", "final_round", "hiring_manager"
            ],
            "flag_reasons": [
                "overqualified", "underqualified_but_potential", "career_changer",
                "internal_candidate", "referral", "incomplete_information", "edge_case"
            ],
            "priority_levels": ["low", "medium", "high", "urgent"],
            "preliminary_findings": ["compliant", "needs_revision", "non_compliant"],
            "review_statuses": ["completed", "failed", "pending"],
        },
        "schema_limits": {
            "min_screening_steps": 3,
            "min_strengths": 1,
            "min_skill_name_length": 1,
            "min_evidence_length": 10,
            "min_reasoning_steps": 2,
        },
        "scoring": {
            "fit_score": {"min": 0, "max": 100},
            "risk_score": {"min": 1, "max": 10},
            "fit_thresholds": {
                "strong_match": 80,
                "qualified": 60,
                "potential_fit": 40,
                "not_qualified": 0,
            },
        },
        "formatter": {
            "max_value_length": 80,
        },
    }

    CONFIG_NAMES = ("config.yaml", "config.yml", "config.json")

    def __init__(self, base_dir: Path | None = None):
        self.base_dir = base_dir or Path.cwd()
        self.config_dir = self.base_dir / ".schemaguard"
        self._config: dict | None = None

    @classmethod
    def from_dict(cls, overrides: dict | None = None) -> "SchemaGuardConfig":
        """In-memory config: defaults merged with ``overrides``, no file access"""
        instance = cls(Path("."))
        instance._config = _merge(copy.deepcopy(cls.DEFAULT_CONFIG), overrides or {})
        return instance

    @property
    def config_file(self) -> Path:
        """First existing config file, or the default YAML location"""
        for name in self.CONFIG_NAMES:
            candidate = self.config_dir / name
            if candidate.exists():
                return candidate
        return self.config_dir / self.CONFIG_NAMES[0]

    def exists(self) -> bool:
        """Check if config file exists"""
        return self.config_file.exists()

    def load(self) -> dict:
        """Load config, returning defaults if not exists"""
        merged = copy.deepcopy(self.DEFAULT_CONFIG)
        if not self.config_file.exists():
            self._config = merged
            return copy.deepcopy(merged)

        with open(self.config_file, encoding="utf-8") as f:
            if self.config_file.suffix == ".json":
                config = json.load(f)
            else:
                config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise SchemaDefinitionError(f"Config file {self.config_file} must contain a mapping")

        merged = _merge(merged, config)
        self._config = merged
        return copy.deepcopy(merged)

    def _loaded(self) -> dict:
        if self._config is None:
            self.load()
        return self._config

    def save(self, config: dict) -> None:
        """Save config to file"""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        target = self.config_file
        with open(target, "w", encoding="utf-8") as f:
            if target.suffix == ".json":
                json.dump(config, f, indent=2, ensure_ascii=False)
            else:
                yaml.dump(config, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
        self._config = None

    def init(self, overrides: dict | None = None) -> dict:
        """Initialize config file with defaults plus overrides"""
        config = _merge(copy.deepcopy(self.DEFAULT_CONFIG), overrides or {})
        self.save(config)
        return config

    def vocabulary(self, name: str) -> tuple[str, ...]:
        """Closed, ordered set of tags for an enum"""
        vocabularies = self._loaded().get("vocabularies", {})
        if name not in vocabularies:
            raise SchemaDefinitionError(
                f"Unknown vocabulary '{name}'. Available: {', '.join(sorted(vocabularies))}"
            )
        values = vocabularies[name]
        if not isinstance(values, list) or not all(isinstance(v, str) and v for v in values):
            raise SchemaDefinitionError(f"Vocabulary '{name}' must be a list of non-empty strings")
        return tuple(values)

    def enum(self, name: str, description: str = "") -> EnumConstraint:
        """Enum constraint built from a configured vocabulary"""
        return enum(self.vocabulary(name), description)

    def limit(self, name: str) -> int:
        limits = self._loaded().get("schema_limits", {})
        if name not in limits:
            raise SchemaDefinitionError(f"Unknown schema limit '{name}'")
        return limits[name]

    def score_range(self, name: str) -> tuple[float, float]:
        bounds = self._loaded().get("scoring", {}).get(name)
        if not isinstance(bounds, dict) or "min" not in bounds or "max" not in bounds:
            raise SchemaDefinitionError(f"Scoring range '{name}' needs 'min' and 'max'")
        return bounds["min"], bounds["max"]

    @property
    def max_value_length(self) -> int:
        return self._loaded().get("formatter", {}).get("max_value_length", 80)

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._loaded().get(key, default))
