"""Profile completion scoring.

A student's completion is the weighted share of filled fields across the
profile sections their batch has made visible. The weights live in a
:class:`CompletionTable`; the built-in table below can be replaced by a JSON
file named by ``settings.completion_weights_path`` with the same shape::

    {"sections": {"personal_details": [{"field": "first_name", "weight": 2}, ...], ...}}
"""
import logging
import math
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from student_erp.core.config import settings
from student_erp.models.batch import FORM_SECTIONS

logger = logging.getLogger(__name__)

FINANCIAL_DOCUMENT_PREFIXES = ["PERSONAL_", "MOTHER_", "FATHER_", "OTHER_SOURCE_"]


class FieldRule(BaseModel):
    field: str
    weight: float = Field(1.0, gt=0)
    # value: non-empty; flag: explicitly answered yes/no; documents: matching upload exists
    kind: Literal["value", "flag", "documents"] = "value"
    # Boolean field gating this rule; the rule only counts when it is True
    requires: str | None = None
    types: list[str] = []
    prefixes: list[str] = []


class CompletionTable(BaseModel):
    sections: dict[str, list[FieldRule]]

    @field_validator("sections")
    @classmethod
    def _known_sections(cls, sections: dict[str, list[FieldRule]]) -> dict[str, list[FieldRule]]:
        unknown = set(sections) - set(FORM_SECTIONS)
        if unknown:
            raise ValueError(f"Unknown profile sections: {sorted(unknown)}")
        return sections


DEFAULT_TABLE = CompletionTable.model_validate(
    {
        "sections": {
            "personal_details": [
                {"field": "first_name", "weight": 2},
                {"field": "last_name", "weight": 2},
                {"field": "phone", "weight": 2},
                {"field": "date_of_birth", "weight": 2},
                {"field": "gender"},
                {"field": "nationality", "weight": 2},
                {"field": "country_of_birth"},
                {"field": "native_language"},
                {"field": "address"},
                {"field": "postal_code"},
                {"field": "passport_number", "weight": 2},
                {"field": "name_as_per_passport"},
                {"field": "passport_issue_location"},
                {"field": "passport_issue_date"},
                {"field": "passport_expiry_date"},
            ],
            "education": [
                {"field": "school", "weight": 2},
                {"field": "school_grade", "weight": 2},
                {"field": "high_school", "weight": 2},
                {"field": "high_school_grade", "weight": 2},
                {"field": "marksheet_10th", "kind": "documents", "weight": 2, "types": ["MARKSHEET_10TH"]},
                {"field": "marksheet_12th", "kind": "documents", "weight": 2, "types": ["MARKSHEET_12TH"]},
                {"field": "gre_taken", "kind": "flag"},
                {"field": "gre_score", "requires": "gre_taken"},
                {"field": "toefl_taken", "kind": "flag"},
                {"field": "toefl_score", "requires": "toefl_taken"},
            ],
            "travel": [
                {"field": "travel_history"},
                {"field": "visa_refused", "kind": "flag", "weight": 2},
            ],
            "work_details": [
                {"field": "has_work_experience", "kind": "flag", "weight": 2},
                {"field": "work_experiences", "weight": 2, "requires": "has_work_experience"},
            ],
            "financials": [
                {"field": "personal_ever_employed"},
                {"field": "mother_income_type"},
                {"field": "father_income_type"},
                {
                    "field": "financial_documents",
                    "kind": "documents",
                    "weight": 3,
                    "prefixes": FINANCIAL_DOCUMENT_PREFIXES,
                },
            ],
            "documents": [
                {"field": "passport_photo", "weight": 2},
                {"field": "passport_copy", "kind": "documents", "weight": 2, "types": ["PASSPORT", "OLD_PASSPORT"]},
                {"field": "cv_resume", "kind": "documents", "types": ["CV_RESUME"]},
                {"field": "sop", "kind": "documents", "types": ["SOP"]},
            ],
            "course_details": [
                {"field": "program"},
                {"field": "intake_year"},
            ],
            # No student-fillable fields yet
            "university": [],
            "post_admission": [],
        }
    }
)


def load_completion_table(path: Path) -> CompletionTable:
    table = CompletionTable.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.info("Loaded profile completion weights from %s", path)
    return table


@lru_cache(maxsize=1)
def get_completion_table() -> CompletionTable:
    if settings.completion_weights_path:
        return load_completion_table(settings.completion_weights_path)
    return DEFAULT_TABLE


def is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


def _document_types(profile: Mapping[str, Any]) -> set[str]:
    types = set()
    for doc in profile.get("documents") or []:
        doc_type = doc.get("type") if isinstance(doc, Mapping) else getattr(doc, "type", doc)
        types.add(getattr(doc_type, "value", doc_type))
    return types


def _rule_satisfied(rule: FieldRule, profile: Mapping[str, Any], doc_types: set[str]) -> bool:
    if rule.requires is not None:
        gate = profile.get(rule.requires)
        if gate is False:
            return True  # not applicable
        if gate is not True:
            return False
    if rule.kind == "flag":
        return isinstance(profile.get(rule.field), bool)
    if rule.kind == "documents":
        return any(
            t in rule.types or any(t.startswith(prefix) for prefix in rule.prefixes)
            for t in doc_types
        )
    return is_filled(profile.get(rule.field))


def calculate_profile_completion(
    profile: Mapping[str, Any],
    visibility: Mapping[str, bool] | None = None,
    table: CompletionTable | None = None,
) -> int:
    """Return the completion percentage (0-100) of ``profile``.

    ``visibility`` maps section name to shown/hidden; ``None`` or a missing
    section means visible. Hidden sections count in neither the filled nor the
    total weight. A rule gated by ``requires`` keeps its weight in the total:
    it is satisfied outright when the gate is answered False and unfilled while
    the gate is unanswered.
    """
    table = table or get_completion_table()
    doc_types = _document_types(profile)

    total = 0.0
    filled = 0.0
    for section, rules in table.sections.items():
        if visibility is not None and not visibility.get(section, True):
            continue
        for rule in rules:
            total += rule.weight
            if _rule_satisfied(rule, profile, doc_types):
                filled += rule.weight

    if total == 0:
        return 0
    return min(100, math.floor(filled * 100 / total + 0.5))


def profile_from_student(student) -> dict[str, Any]:
    """Flatten an ORM ``Student`` (with its documents and work history) for scoring."""
    profile = {
        column.name: getattr(student, column.name)
        for column in student.__table__.columns
    }
    profile["documents"] = [doc.type for doc in student.documents]
    profile["work_experiences"] = [work.id for work in student.work_experiences]
    return profile
