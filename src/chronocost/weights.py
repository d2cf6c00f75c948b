"""
Additive weights for the no-history risk heuristic.

Adding a project type or terrain only means adding an entry here; keys
missing from a table weigh 0.
"""

from __future__ import annotations

from typing import Dict

from .schema import ProjectType, Terrain


BASE_RISK = 0.5

TERRAIN_WEIGHTS: Dict[str, float] = {
    Terrain.FLAT.value: 0.0,
    Terrain.HILLY.value: 0.10,
    Terrain.MOUNTAINOUS.value: 0.20,
    Terrain.URBAN.value: 0.15,
    Terrain.NOT_APPLICABLE.value: 0.0,
}

PROJECT_TYPE_WEIGHTS: Dict[str, float] = {
    ProjectType.CONSTRUCTION.value: 0.12,
    ProjectType.SOFTWARE.value: 0.05,
    ProjectType.INFRASTRUCTURE.value: 0.15,
    ProjectType.IT.value: 0.07,
    ProjectType.ENGINEERING.value: 0.10,
}

# Power-grid vocabulary used by the transmission-line variant of the form.
GRID_PROJECT_TYPE_WEIGHTS: Dict[str, float] = {
    "substation": 0.10,
    "overhead_line": 0.15,
    "underground_cable": 0.20,
}
