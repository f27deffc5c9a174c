"""Base model for records persisted in the save file.

Save files use camelCase keys (``overallRecord``, ``recruitedYear``); the
Python side uses snake_case. Unknown keys are kept so that editing one field
of a record written by a newer or older build does not drop the others.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """A value stored inside a dynasty record."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "allow",
        "coerce_numbers_to_str": True,
    }

    def to_record(self) -> dict[str, Any]:
        """Serialize with save-file (camelCase) keys, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
