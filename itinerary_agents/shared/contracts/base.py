"""
Base model and lenient field types shared by all contracts.

Completion-service JSON is camelCase and loosely typed (numbers as
strings, costs with currency symbols, lists where text was asked for).
The annotated types below coerce those shapes at the boundary so the
rest of the pipeline can rely on plain Python types.
"""

import re
from typing import Annotated, Any, List

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


class ContractModel(BaseModel):
    """Base for every contract: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Dump with camelCase keys, JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json")


def coerce_number(value: Any) -> float:
    """Coerce ``"₹2,500"``, ``"1500 per person"`` or None into a float."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    match = NUMBER_PATTERN.search(str(value).replace(",", ""))
    return float(match.group()) if match else 0.0


def coerce_text(value: Any) -> str:
    """Flatten whatever the completion service returned into display text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ", ".join(part for part in (coerce_text(v) for v in value) if part)
    if isinstance(value, dict):
        return "; ".join(f"{k}: {coerce_text(v)}" for k, v in value.items())
    return str(value)


def coerce_text_list(value: Any) -> List[str]:
    """Coerce a scalar, list or None into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [coerce_text(v).strip() for v in value]
        return [item for item in items if item]
    text = coerce_text(value).strip()
    return [text] if text else []


def coerce_int(value: Any) -> int:
    return int(round(coerce_number(value)))


Text = Annotated[str, BeforeValidator(coerce_text)]
TextList = Annotated[List[str], BeforeValidator(coerce_text_list)]
Amount = Annotated[float, BeforeValidator(coerce_number)]
Count = Annotated[int, BeforeValidator(coerce_int)]
