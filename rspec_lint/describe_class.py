"""RSpec/DescribeClass: the first argument to a top-level describe is a constant.

Bad::

    describe 'Do something' do
    end

Good::

    describe TestedClass do
      subject { described_class }
    end

    describe 'TestedClass::VERSION' do
      subject { Object.const_get(self.class.description) }
    end

    describe 'A feature example', type: :feature do
    end

Strings are accepted when they read like a constant path, and groups are
skipped when they carry metadata listed in ``IgnoredMetadata``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from .language import Language, is_rspec_receiver
from .metadata import IgnoredMetadataTable, MetadataSuppressor
from .models import CallSite, Node, Offense
from .node_pattern import (
    REST,
    AllOf,
    Capture,
    HasChild,
    Kind,
    Not,
    NotKind,
    Predicate,
    Shape,
    Value,
    match,
    matches,
)
from .top_level_group import iter_top_level_groups

logger = logging.getLogger(__name__)

RULE_NAME = "RSpec/DescribeClass"
MSG = "The first argument to describe should be the class or module being tested."

# ^ and $ anchor at line boundaries, as in Ruby
CONSTANT_NAME_RE = re.compile(r"^(?:::)?[A-Z]\w*(?:::[A-Z]\w*)*$", re.MULTILINE | re.ASCII)


def is_string_constant(node: Optional[Node]) -> bool:
    return (
        node is not None
        and node.kind == "str"
        and CONSTANT_NAME_RE.search(node.value or "") is not None
    )


RSPEC = Predicate(is_rspec_receiver, "rspec?")

# (send #rspec? :describe $[!const !#string_constant?] ...)
DESCRIBED_WITH_NON_CONSTANT = Shape(
    "send",
    RSPEC,
    Capture(AllOf(NotKind("const"), Not(Predicate(is_string_constant, "string_constant?")))),
    REST,
    value=Value("describe"),
)


class DescribeClass:
    """Flag top-level describes whose first argument is not a constant."""

    name = RULE_NAME

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        language: Optional[Language] = None,
    ):
        config = config or {}
        self.language = language or Language()
        self.ignored_metadata = IgnoredMetadataTable.from_config(config.get("IgnoredMetadata"))
        self.suppressor = MetadataSuppressor(self.ignored_metadata)
        # (send #rspec? :describe ... (hash <#ignored_metadata? ...>))
        self.call_with_ignored_metadata = Shape(
            "send",
            RSPEC,
            REST,
            AllOf(Kind("hash"), HasChild(Predicate(self.suppressor.is_ignored_pair, "ignored_metadata?"))),
            value=Value("describe"),
        )

    def investigate(self, root: Node, path: Optional[str] = None) -> List[Offense]:
        """Return offenses for one parsed file, in source order."""
        offenses: List[Offense] = []
        for group in iter_top_level_groups(root, self.language):
            offense = self.on_top_level_group(group, path)
            if offense is not None:
                offenses.append(offense)
        return offenses

    def on_top_level_group(self, group: CallSite, path: Optional[str] = None) -> Optional[Offense]:
        send = group.send_node
        if matches(self.call_with_ignored_metadata, send):
            logger.debug("%s:%d: describe skipped by ignored metadata", path or "<source>", send.span.line)
            return None

        captured = match(DESCRIBED_WITH_NON_CONSTANT, send)
        if captured is None:
            return None
        (described,) = captured
        return Offense(location=described.span, message=MSG, rule=RULE_NAME, path=path)
