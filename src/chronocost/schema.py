"""
Data schemas for ChronoCost.

Defines:
- Picklist enums: ProjectType, Terrain, Location, Category
- FormInput: the project metadata a user submits
- HistoricalRow: one parsed CSV row (header -> cell)
- HistoricalSummary: aggregates over the uploaded historical rows
- ProjectRecord: what ends up in the document store
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Any, Dict, Mapping, Optional


HistoricalRow = Dict[str, Optional[str]]


class ProjectType(str, Enum):
    CONSTRUCTION = "Construction"
    SOFTWARE = "Software"
    INFRASTRUCTURE = "Infrastructure"
    IT = "IT"
    ENGINEERING = "Engineering"


class Terrain(str, Enum):
    FLAT = "flat"
    HILLY = "hilly"
    MOUNTAINOUS = "mountainous"
    URBAN = "urban"
    NOT_APPLICABLE = "not-applicable"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Terrain"]:
        # Older records spell the software sentinel "na_software".
        if value == "na_software":
            return cls.NOT_APPLICABLE
        return None


class Location(str, Enum):
    DELHI = "Delhi"
    MUMBAI = "Mumbai"
    BANGALORE = "Bangalore"
    CHENNAI = "Chennai"
    KOLKATA = "Kolkata"
    HYDERABAD = "Hyderabad"


class Category(str, Enum):
    RESIDENTIAL = "Residential"
    COMMERCIAL = "Commercial"
    INDUSTRIAL = "Industrial"
    WEB = "Web"
    MOBILE = "Mobile"
    ROAD = "Road"
    BRIDGE = "Bridge"


# Project types with no physical site; their terrain is always NOT_APPLICABLE.
SOFTWARE_LIKE_TYPES = frozenset({ProjectType.SOFTWARE})

# camelCase document key -> FormInput attribute
FORM_FIELD_KEYS: Dict[str, str] = {
    "companyName": "company_name",
    "projectName": "project_name",
    "projectType": "project_type",
    "location": "location",
    "terrain": "terrain",
    "estimatedBudget": "estimated_budget",
    "estimatedDuration": "estimated_duration",
    "scopeDescription": "scope_description",
    "riskFactors": "risk_factors",
    "hasHistoricalData": "has_historical_data",
    "categories": "categories",
}


def allowed_terrains(project_type: str) -> list[Terrain]:
    """Terrain choices offered for a project type."""
    if project_type in SOFTWARE_LIKE_TYPES:
        return [Terrain.NOT_APPLICABLE]
    return [t for t in Terrain if t is not Terrain.NOT_APPLICABLE]


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(value)


@dataclass
class FormInput:
    """
    Project metadata as entered in the submission form.

    Budget is in currency units, duration in whole months.
    Raises ValueError if a picklist value is unknown, a number is out of
    range, or terrain and project type disagree about being software.
    """

    company_name: str = ""
    project_name: str = ""
    project_type: ProjectType = ProjectType.CONSTRUCTION
    location: str = ""
    terrain: Terrain = Terrain.FLAT
    estimated_budget: float = 0.0
    estimated_duration: int = 1
    scope_description: str = ""
    risk_factors: str = ""
    has_historical_data: bool = False
    categories: str = ""

    def __post_init__(self) -> None:
        self.project_type = ProjectType(self.project_type)
        self.terrain = Terrain(self.terrain)
        self.estimated_budget = float(self.estimated_budget)
        # Form inputs arrive as strings such as "12" or "12.0"
        duration = float(self.estimated_duration)
        if not math.isfinite(duration):
            raise ValueError("estimated_duration must be a finite number")
        self.estimated_duration = int(duration)
        self.has_historical_data = _to_bool(self.has_historical_data)
        if self.categories:
            self.categories = Category(self.categories).value
        else:
            self.categories = ""

        if not math.isfinite(self.estimated_budget) or self.estimated_budget < 0:
            raise ValueError("estimated_budget must be a finite non-negative number")
        if self.estimated_duration < 1:
            raise ValueError("estimated_duration must be at least 1 month")

        is_software = self.project_type in SOFTWARE_LIKE_TYPES
        if is_software != (self.terrain is Terrain.NOT_APPLICABLE):
            raise ValueError(
                f"terrain {self.terrain.value!r} is not valid for project type "
                f"{self.project_type.value!r}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FormInput":
        """
        Build a FormInput from a dict keyed either by document (camelCase)
        or attribute (snake_case) names. Unknown keys are ignored.
        """
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            attr = FORM_FIELD_KEYS.get(key, key)
            if attr in FORM_FIELD_KEYS.values() and value is not None:
                kwargs[attr] = value
        return cls(**kwargs)

    def to_fields(self) -> Dict[str, Any]:
        """Document payload for the form part of a record (camelCase keys)."""
        return {
            "companyName": self.company_name,
            "projectName": self.project_name,
            "projectType": self.project_type.value,
            "location": self.location,
            "terrain": self.terrain.value,
            "categories": self.categories,
            "estimatedBudget": self.estimated_budget,
            "estimatedDuration": self.estimated_duration,
            "scopeDescription": self.scope_description,
            "riskFactors": self.risk_factors,
            "hasHistoricalData": self.has_historical_data,
        }


@dataclass
class HistoricalSummary:
    """
    Aggregates over a non-empty list of historical rows.

    average_duration / average_cost are NaN when no row had a usable value.
    """

    project_count: int
    average_duration: float
    average_cost: float
    delay_frequency: float

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {
            "projectCount": self.project_count,
            "averageDuration": _nan_to_none(self.average_duration),
            "averageCost": _nan_to_none(self.average_cost),
            "delayFrequency": _nan_to_none(self.delay_frequency),
        }


def _nan_to_none(value: Optional[float]) -> Optional[float]:
    # NaN and infinities have no JSON representation; the store receives null.
    if value is None or not math.isfinite(value):
        return None
    return float(value)


@dataclass
class ProjectRecord:
    """
    A submitted project: form fields, risk score, and the flattened
    historical summary (all None when no CSV was supplied).
    """

    form: FormInput
    risk_score: float
    user_id: Optional[str] = None
    summary: Optional[HistoricalSummary] = field(default=None)

    def to_document(self) -> Dict[str, Any]:
        """Fields payload handed to DocumentStore.create_document."""
        doc: Dict[str, Any] = {"userId": self.user_id}
        doc.update(self.form.to_fields())
        doc["riskScore"] = self.risk_score

        s = self.summary
        doc["historicalProjectCount"] = s.project_count if s else None
        doc["historicalAvgDuration"] = _nan_to_none(s.average_duration) if s else None
        doc["historicalAvgCost"] = _nan_to_none(s.average_cost) if s else None
        doc["historicalDelayFrequency"] = (
            _nan_to_none(s.delay_frequency) if s else None
        )
        return doc
