"""
Shape checks applied to stored project data before it is restored.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class DataValidity(Enum):
    VALID = "VALID"
    EMPTY_PHASES = "EMPTY_PHASES"
    MALFORMED = "MALFORMED"


def check_project_data(project_data: Any) -> DataValidity:
    """
    Classify a snapshot by its ``projectPhases`` list.

    Anything other than a non-empty list is reported so the retrieve flow can
    return the record untouched instead of resetting it.
    """
    if not isinstance(project_data, dict):
        return DataValidity.MALFORMED
    phases = project_data.get("projectPhases")
    if not isinstance(phases, list):
        return DataValidity.MALFORMED
    if not phases:
        return DataValidity.EMPTY_PHASES
    return DataValidity.VALID
