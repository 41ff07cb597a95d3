"""Base model for control API entities.

Every entity model inherits from :class:`MistBaseModel` which provides:

* ``frozen=True`` so snapshot contents are immutable once built.
* A ``model_validator(mode="before")`` that drops ``None`` and
  non-finite float values so the field default is used instead.
* A read-only ``raw`` mapping that captures a deep copy of the original
  wire payload, including any passthrough fields the model does not name.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pymist.models._frozen import FrozenRaw, empty_mapping


class MistBaseModel(BaseModel):
    """Base for models parsed from control API responses."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: FrozenRaw = Field(default_factory=empty_mapping)
    """Original API response, frozen."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = MistBaseModel._clean_dict(original)

        # Only auto-stash raw when the caller did not pass one explicitly.
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned
