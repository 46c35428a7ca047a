"""Namespaced side-channel data for records.

Extensions that want to attach their own data to a record without declaring
schema fields store it under a reserved field, grouped by owner::

    {"_mod_data": {"better_loot": {"rarity_bonus": 2}, "hardcore": {"deaths": 3}}}

The reserved field is part of the record's data, so it survives ``to_dict``
and reconstruction, but it is never checked against the record's schema.
"""

import logging
from typing import Any, ClassVar

logger = logging.getLogger(__name__)

NAMESPACE_FIELD = "_mod_data"


class NamespacedDataMixin:
    """Per-owner key/value storage under the reserved namespace field."""

    namespace_field: ClassVar[str] = NAMESPACE_FIELD
    _data: dict[str, Any]

    def _namespaces(self, create: bool = False) -> dict[str, dict[str, Any]] | None:
        store = self._data.get(self.namespace_field)
        if isinstance(store, dict):
            return store
        if not create:
            return None
        if store is not None:
            logger.warning(
                f"Replacing non-mapping value in '{self.namespace_field}' with an empty namespace store"
            )
        store = {}
        self._data[self.namespace_field] = store
        return store

    def set_namespaced_data(self, owner_id: str, key: str, value: Any) -> None:
        """Store a value for an owner, creating the owner's mapping on first write."""
        store = self._namespaces(create=True)
        assert store is not None
        store.setdefault(owner_id, {})[key] = value

    def get_namespaced_data(self, owner_id: str, key: str, default: Any = None) -> Any:
        store = self._namespaces()
        if store is None:
            return default
        return store.get(owner_id, {}).get(key, default)

    def has_namespaced_data(self, owner_id: str) -> bool:
        store = self._namespaces()
        return store is not None and owner_id in store

    def get_all_namespaced_data(self, owner_id: str) -> dict[str, Any]:
        """Copy of everything stored for an owner."""
        store = self._namespaces()
        if store is None:
            return {}
        return dict(store.get(owner_id, {}))

    def clear_namespaced_data(self, owner_id: str) -> None:
        store = self._namespaces()
        if store is None:
            return
        store.pop(owner_id, None)
        if not store:
            del self._data[self.namespace_field]

    def list_namespace_owners(self) -> list[str]:
        store = self._namespaces()
        return list(store) if store is not None else []
