from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from typing_extensions import TypeAlias

from kubehop.config.item import ConfigItem, ItemType, new_item
from kubehop.constants import LIST_PREFIX
from kubehop.errors import DuplicateItemError, ItemNotFoundError

# A resolver fills in the value of the named item, usually by asking the user.
Resolver: TypeAlias = Callable[[str, "ConfigurationSet"], None]


class ConfigurationSet:
    """
    A registry of configuration items keyed by their unique name.

    Commands and provider plugins declare the settings they need in a set. The
    set is then filled from the command line, the history, the application
    defaults and interactive prompts before it is bound to a typed model.
    """

    def __init__(self) -> None:
        self._items: Dict[str, ConfigItem] = {}
        self._resolvers: Dict[str, Resolver] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, name: str) -> Optional[ConfigItem]:
        return self._items.get(name)

    def get_all(self) -> List[ConfigItem]:
        return list(self._items.values())

    def get_resolver(self, name: str) -> Optional[Resolver]:
        return self._resolvers.get(name)

    def exists(self, name: str) -> bool:
        return name in self._items

    def exists_with_value(self, name: str) -> bool:
        item = self.get(name)
        if item is None or not item.has_value():
            return False

        if item.type == ItemType.STRING:
            return not item.value_string().startswith(LIST_PREFIX)

        return True

    def value_is_list(self, name: str) -> bool:
        item = self.get(name)
        if item is None or not item.has_value():
            return False

        return self.value_string(name).startswith(LIST_PREFIX)

    def value_string(self, name: str) -> str:
        item = self.get(name)
        if item is None:
            return ""
        return item.value_string()

    def add(self, item: ConfigItem, resolver: Optional[Resolver] = None) -> ConfigItem:
        if item.name in self._items:
            raise DuplicateItemError(item.name)

        self._items[item.name] = item
        if resolver is not None:
            self._resolvers[item.name] = resolver

        return item

    def merge(self, other: Optional["ConfigurationSet"]) -> None:
        """
        Absorb the items of another set. Items whose name is already present
        are left untouched.
        """
        if other is None:
            return

        for item in other.get_all():
            if item.name in self._items:
                continue
            self.add(item, other.get_resolver(item.name))

    def add_string(
        self, name: str, default: str = "", description: str = ""
    ) -> ConfigItem:
        return self.add(new_item(name, ItemType.STRING, default, description))

    def add_int(self, name: str, default: int = 0, description: str = "") -> ConfigItem:
        return self.add(new_item(name, ItemType.INT, default, description))

    def add_bool(
        self, name: str, default: bool = False, description: str = ""
    ) -> ConfigItem:
        return self.add(new_item(name, ItemType.BOOL, default, description))

    def _must_get(self, name: str) -> ConfigItem:
        item = self.get(name)
        if item is None:
            raise ItemNotFoundError(name)
        return item

    def set_value(self, name: str, value: Any) -> None:
        self._must_get(name).value = value

    def set_required(self, name: str) -> None:
        self._must_get(name).required = True

    def set_sensitive(self, name: str) -> None:
        self._must_get(name).sensitive = True

    def set_hidden(self, name: str) -> None:
        self._must_get(name).hidden = True

    def set_history_ignore(self, name: str) -> None:
        self._must_get(name).history_ignore = True

    def set_deprecated(self, name: str, message: str) -> None:
        item = self._must_get(name)
        item.deprecated = True
        item.deprecated_message = message

    def set_shorthand(self, name: str, shorthand: str) -> None:
        self._must_get(name).shorthand = shorthand

    def set_priority(self, name: str, priority: int) -> None:
        self._must_get(name).priority = priority

    def set_resolution_prompt(self, name: str, prompt: str) -> None:
        self._must_get(name).resolution_prompt = prompt

    def set_resolver(self, name: str, resolver: Resolver) -> None:
        self._must_get(name)
        self._resolvers[name] = resolver
