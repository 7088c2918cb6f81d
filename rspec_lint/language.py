"""RSpec DSL vocabulary used to recognise example groups."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional

from .models import CallSite, Node
from .node_pattern import NIL, AnyOf, Kind, Shape, Value, matches

logger = logging.getLogger(__name__)

DEFAULT_EXAMPLE_GROUPS = (
    "describe", "context", "feature", "example_group",
    "xdescribe", "xcontext", "xfeature",
    "fdescribe", "fcontext", "ffeature",
)
DEFAULT_SHARED_GROUPS = ("shared_examples", "shared_examples_for", "shared_context")

# nil, RSpec or ::RSpec
RSPEC_RECEIVER = AnyOf(
    NIL,
    Shape("const", AnyOf(NIL, Kind("cbase")), value=Value("RSpec")),
)


def is_rspec_receiver(node: Optional[Node]) -> bool:
    return matches(RSPEC_RECEIVER, node)


@dataclass(frozen=True)
class Language:
    """Method names that open example groups and shared groups."""

    example_groups: FrozenSet[str] = frozenset(DEFAULT_EXAMPLE_GROUPS)
    shared_groups: FrozenSet[str] = frozenset(DEFAULT_SHARED_GROUPS)

    @classmethod
    def from_config(cls, section: Optional[Dict[str, Any]]) -> "Language":
        section = section or {}
        return cls(
            example_groups=_names(section.get("ExampleGroups"), DEFAULT_EXAMPLE_GROUPS, "ExampleGroups"),
            shared_groups=_names(section.get("SharedGroups"), DEFAULT_SHARED_GROUPS, "SharedGroups"),
        )

    def is_example_group(self, call: CallSite) -> bool:
        return call.method_name in self.example_groups and is_rspec_receiver(call.receiver)

    def is_shared_group(self, call: CallSite) -> bool:
        return call.method_name in self.shared_groups and is_rspec_receiver(call.receiver)

    def is_spec_group(self, call: CallSite) -> bool:
        return self.is_example_group(call) or self.is_shared_group(call)


def _names(value: Any, default: Iterable[str], option: str) -> FrozenSet[str]:
    # an empty list is a valid choice and disables the family
    if value is None:
        return frozenset(default)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        logger.warning("Language.%s should be a list of method names; using defaults", option)
        return frozenset(default)
    return frozenset(str(name) for name in value)
