"""Field difference representation for diff specs."""

from __future__ import annotations

from typing import Any

from attrs import define


@define(frozen=True)
class FieldChange:
    """A single-field difference between the existing and imported record."""

    from_value: Any
    to_value: Any

    def as_dict(self) -> dict[str, Any]:
        return {"from": self.from_value, "to": self.to_value}
