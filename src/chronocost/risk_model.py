"""
Pure math for the ChronoCost risk score.

No I/O, no storage. Just:
- Lenient decimal parsing of CSV cells
- Delay / cost-overrun frequencies and averages over historical rows
- The two ways of scoring a project: from history, or from the
  terrain / project-type heuristic when there is no history
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
import re
from typing import Literal, Mapping, Optional, Sequence, Union

import numpy as np

from .schema import FormInput, HistoricalRow, HistoricalSummary
from .weights import BASE_RISK, PROJECT_TYPE_WEIGHTS, TERRAIN_WEIGHTS


# A row counts as overrun when actual cost exceeds estimate by more than 10%.
COST_OVERRUN_FACTOR = 1.1

DELAYED_VALUES = frozenset({"true", "1"})

_DECIMAL_PREFIX = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)


def parse_decimal(value: Optional[str]) -> float:
    """
    Parse the leading decimal number of a cell, ignoring trailing junk.

    "12.5 months" -> 12.5, "abc" -> NaN, None / "" -> NaN.
    """
    if value is None:
        return math.nan
    match = _DECIMAL_PREFIX.match(str(value))
    if match is None:
        return math.nan
    return float(match.group(1))


def _column(rows: Sequence[HistoricalRow], key: str) -> np.ndarray:
    return np.asarray([parse_decimal(row.get(key)) for row in rows], dtype=float)


def delay_frequency(rows: Sequence[HistoricalRow]) -> float:
    """
    Fraction of rows whose `delayed` cell is exactly "true" or "1".

    Rows must be non-empty.
    """
    if not rows:
        raise ValueError("delay_frequency needs at least one historical row.")
    delayed = np.asarray([row.get("delayed") in DELAYED_VALUES for row in rows])
    return float(delayed.mean())


def cost_overrun_frequency(rows: Sequence[HistoricalRow]) -> float:
    """
    Fraction of rows with actualCost > estimatedCost * 1.1.

    A row where either cost does not parse is never an overrun, but it
    still counts in the denominator.
    """
    if not rows:
        raise ValueError("cost_overrun_frequency needs at least one historical row.")
    actual = _column(rows, "actualCost")
    estimated = _column(rows, "estimatedCost")
    # NaN compares False, which is exactly the exclusion we want
    overrun = actual > estimated * COST_OVERRUN_FACTOR
    return float(np.count_nonzero(overrun)) / len(rows)


def _truthy_mean(values: np.ndarray) -> float:
    # Zero is dropped along with NaN: an actual 0 duration or cost is
    # treated as "no value". NaN when nothing survives.
    kept = values[~np.isnan(values) & (values != 0.0)]
    if kept.size == 0:
        return math.nan
    return float(kept.mean())


def average_duration(rows: Sequence[HistoricalRow]) -> float:
    return _truthy_mean(_column(rows, "duration"))


def average_cost(rows: Sequence[HistoricalRow]) -> float:
    return _truthy_mean(_column(rows, "cost"))


def summarize_history(rows: Sequence[HistoricalRow]) -> Optional[HistoricalSummary]:
    """
    Summarize historical rows, or return None when there are none.
    """
    if not rows:
        return None
    return HistoricalSummary(
        project_count=len(rows),
        average_duration=average_duration(rows),
        average_cost=average_cost(rows),
        delay_frequency=delay_frequency(rows),
    )


# --- Scoring ---------------------------------------------------------------


@dataclass(frozen=True)
class HistoricalRiskEstimate:
    score: float
    delay_frequency: float
    cost_overrun_frequency: float
    basis: Literal["historical"] = "historical"


@dataclass(frozen=True)
class HeuristicRiskEstimate:
    score: float
    terrain_weight: float
    project_type_weight: float
    basis: Literal["heuristic"] = "heuristic"


RiskEstimate = Union[HistoricalRiskEstimate, HeuristicRiskEstimate]


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)


def _key(value: object) -> object:
    return value.value if isinstance(value, Enum) else value


def terrain_weight(
    terrain: object,
    weights: Mapping[str, float] = TERRAIN_WEIGHTS,
) -> float:
    return weights.get(_key(terrain), 0.0)


def project_type_weight(
    project_type: object,
    weights: Mapping[str, float] = PROJECT_TYPE_WEIGHTS,
) -> float:
    return weights.get(_key(project_type), 0.0)


def historical_risk(rows: Sequence[HistoricalRow]) -> HistoricalRiskEstimate:
    """
    Score = mean of delay frequency and cost-overrun frequency.
    """
    delays = delay_frequency(rows)
    overruns = cost_overrun_frequency(rows)
    return HistoricalRiskEstimate(
        score=(delays + overruns) / 2,
        delay_frequency=delays,
        cost_overrun_frequency=overruns,
    )


def heuristic_risk(
    terrain: object,
    project_type: object,
    *,
    terrain_weights: Mapping[str, float] = TERRAIN_WEIGHTS,
    type_weights: Mapping[str, float] = PROJECT_TYPE_WEIGHTS,
) -> HeuristicRiskEstimate:
    """
    Score = clamp(0.5 + terrain weight + project type weight, 0, 1).

    Unknown terrains and project types contribute nothing.
    """
    t_weight = terrain_weight(terrain, terrain_weights)
    p_weight = project_type_weight(project_type, type_weights)
    return HeuristicRiskEstimate(
        score=clamp(BASE_RISK + t_weight + p_weight),
        terrain_weight=t_weight,
        project_type_weight=p_weight,
    )


def estimate_risk(
    form: FormInput,
    rows: Sequence[HistoricalRow] = (),
    *,
    type_weights: Mapping[str, float] = PROJECT_TYPE_WEIGHTS,
) -> RiskEstimate:
    """
    Score a project from its history when there is any, otherwise from the
    terrain / project type heuristic.
    """
    if rows:
        return historical_risk(rows)
    return heuristic_risk(form.terrain, form.project_type, type_weights=type_weights)


def estimate_risk_score(
    form: FormInput,
    rows: Sequence[HistoricalRow] = (),
) -> float:
    return estimate_risk(form, rows).score
