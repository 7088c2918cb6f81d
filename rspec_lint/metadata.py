"""Ignored metadata table and the suppression check built on it."""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, Iterator, Mapping, Optional

from .models import Node
from .node_pattern import Capture, Kind, Shape, match

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_METADATA: Dict[str, tuple] = {"type": ("request", "controller")}

# (pair $sym $sym)
SYMBOL_PAIR = Shape("pair", Capture(Kind("sym")), Capture(Kind("sym")))


class IgnoredMetadataTable(Mapping[str, FrozenSet[str]]):
    """Read-only ``key -> allowed values`` mapping, compared as strings."""

    def __init__(self, entries: Optional[Mapping[Any, Any]] = None):
        table: Dict[str, FrozenSet[str]] = {}
        for key, values in (entries or {}).items():
            if isinstance(values, (str, int, float, bool)):
                values = [values]
            elif not isinstance(values, (list, tuple, set, frozenset)):
                logger.warning("IgnoredMetadata[%r] is not a list of values; ignoring it", key)
                continue
            table[_normalize(key)] = frozenset(_normalize(value) for value in values)
        self._table = table

    @classmethod
    def from_config(cls, value: Any) -> "IgnoredMetadataTable":
        """Build the table from a raw ``IgnoredMetadata`` config value.

        ``None`` means the option was not configured and yields the defaults.
        Anything that is not a table is treated as an empty table.
        """
        if value is None:
            return cls(DEFAULT_IGNORED_METADATA)
        if not isinstance(value, Mapping):
            logger.warning(
                "IgnoredMetadata should be a table, got %s; no metadata will be ignored",
                type(value).__name__,
            )
            return cls()
        return cls(value)

    def __getitem__(self, key: str) -> FrozenSet[str]:
        return self._table[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def allows(self, key: str, value: str) -> bool:
        return value in self._table.get(key, frozenset())

    def to_dict(self) -> Dict[str, list]:
        return {key: sorted(values) for key, values in self._table.items()}

    def __repr__(self) -> str:
        return f"IgnoredMetadataTable({self.to_dict()!r})"


class MetadataSuppressor:
    """Decide whether metadata pairs exempt a group from being flagged."""

    def __init__(self, table: IgnoredMetadataTable):
        self.table = table

    def is_ignored_pair(self, pair: Optional[Node]) -> bool:
        """True when *pair* is ``sym => sym`` and the table allows it.

        Computed keys or values (method calls, ``'a' + 'b'``, strings) are
        never treated as a match.
        """
        captured = match(SYMBOL_PAIR, pair)
        if captured is None:
            return False
        key, value = captured
        return self.table.allows(_normalize(key.value), _normalize(value.value))


def _normalize(value: Any) -> str:
    text = str(value)
    # YAML/TOML users sometimes write symbols as ":request"
    if len(text) > 1 and text.startswith(":"):
        return text[1:]
    return text
