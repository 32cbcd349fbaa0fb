from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemType(str, Enum):
    STRING = "string"
    INT = "int"
    BOOL = "bool"


class ConfigItem(BaseModel):
    """
    A single named, typed setting together with the metadata used to resolve it.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="Unique name, also used as the flag name.")
    type: ItemType = Field(
        ..., frozen=True, description="The declared type of the value."
    )
    shorthand: str = Field("", description="Single letter flag shorthand.")
    description: str = Field("", description="Help text for the item.")
    value: Any = Field(None, description="The current value.")
    default_value: Any = Field(None, description="Value used when nothing resolves.")
    required: bool = False
    sensitive: bool = Field(
        False, description="Sensitive items are never written to the history."
    )
    hidden: bool = False
    deprecated: bool = False
    deprecated_message: str = ""
    history_ignore: bool = Field(
        False, description="Items that are not written to the history."
    )
    resolution_prompt: str = Field(
        "", description="Message shown when resolving the item interactively."
    )
    priority: int = Field(
        0, description="Lower priorities are resolved interactively first."
    )

    def has_value(self) -> bool:
        if self.value is None:
            return False

        if self.type == ItemType.STRING:
            return self.value != ""

        return True

    def value_string(self) -> str:
        return format_value(self.type, self.value)


def format_value(item_type: ItemType, value: Any) -> str:
    if value is None:
        return ""
    if item_type == ItemType.BOOL:
        return "true" if value else "false"
    return str(value)


def parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"'{raw}' is not a valid bool, expected true or false")


def coerce_value(item_type: ItemType, raw: Any) -> Any:
    """
    Coerces a value, usually a string read from a file, to the given item type.

    Args:
        item_type (ItemType): The target type.
        raw (Any): The value to coerce.

    Returns:
        Any: The coerced value.

    Raises:
        ValueError: If the value can't be represented as the target type.
    """
    if item_type == ItemType.STRING:
        if isinstance(raw, bool):
            return format_value(ItemType.BOOL, raw)
        return raw if isinstance(raw, str) else format_value(item_type, raw)

    if item_type == ItemType.INT:
        if isinstance(raw, bool):
            raise ValueError(f"'{raw}' is not a valid int")
        if isinstance(raw, int):
            return raw
        return int(str(raw).strip(), 10)

    if item_type == ItemType.BOOL:
        if isinstance(raw, bool):
            return raw
        return parse_bool(str(raw))

    raise ValueError(f"Unknown item type: {item_type}")


def coerce_item_value(item: ConfigItem, raw: Any) -> Any:
    return coerce_value(item.type, raw)


def new_item(
    name: str,
    item_type: ItemType,
    default_value: Optional[Any] = None,
    description: str = "",
) -> ConfigItem:
    return ConfigItem(
        name=name,
        type=item_type,
        default_value=default_value,
        description=description,
    )
