from __future__ import annotations

import types
from typing import Any, Dict, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel

from kubehop.config.configset import ConfigurationSet
from kubehop.config.item import ItemType, coerce_value
from kubehop.errors import InvalidConfigValueError, UnsupportedFieldTypeError

T = TypeVar("T", bound=BaseModel)

_UNION_TYPES = {Union, getattr(types, "UnionType", Union)}

_SCALAR_TYPES = {
    str: ItemType.STRING,
    int: ItemType.INT,
    bool: ItemType.BOOL,
}


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _item_type_for(field: str, annotation: Any) -> ItemType:
    if get_origin(annotation) in _UNION_TYPES:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            annotation = args[0]

    if annotation in _SCALAR_TYPES:
        return _SCALAR_TYPES[annotation]

    raise UnsupportedFieldTypeError(field, annotation)


def _collect(cs: ConfigurationSet, model_cls: Type[BaseModel]) -> Dict[str, Any]:
    data: Dict[str, Any] = {}

    for field_name, field_info in model_cls.model_fields.items():
        annotation = field_info.annotation

        if _is_model(annotation):
            data[field_info.alias or field_name] = _collect(cs, annotation)
            continue

        name = field_info.alias
        if not name:
            continue

        item_type = _item_type_for(field_name, annotation)
        item = cs.get(name)
        if item is None or not item.has_value():
            continue

        try:
            data[name] = coerce_value(item_type, item.value)
        except ValueError as e:
            raise InvalidConfigValueError(
                name, "binding", item.value_string(), str(e)
            ) from e

    return data


def unmarshal(cs: ConfigurationSet, model_cls: Type[T]) -> T:
    """
    Binds the values of a configuration set to a pydantic model.

    Fields are matched to config items by their alias. Fields without an alias
    keep their default, unless they are models themselves, in which case their
    fields are bound recursively. Inherited fields are bound like any other.

    Args:
        cs (ConfigurationSet): The resolved configuration set.
        model_cls (Type[T]): The model class to create.

    Returns:
        T: The bound model instance.

    Raises:
        UnsupportedFieldTypeError: If an aliased field is not a str, int or
        bool, optional or not.
        InvalidConfigValueError: If a value can't be coerced to its field type.
    """
    return model_cls.model_validate(_collect(cs, model_cls))
