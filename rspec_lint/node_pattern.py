"""Structural node patterns.

Patterns are immutable data built from a handful of variants and evaluated
by :func:`match`. They compose the way rubocop node patterns do::

    # (send nil? :describe $_ ...)
    Shape("send", NIL, Capture(ANY), REST, value=Value("describe"))

``match`` returns ``None`` when the node does not fit, otherwise a tuple of
the captured nodes in pattern order (empty when nothing is captured).
Absent children are a plain non-match, never an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .models import Node

Captures = List[Optional[Node]]


class Pattern:
    """Base class for pattern variants."""

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Anything(Pattern):
    """``_``: any child, including an empty slot."""

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        return True


@dataclass(frozen=True)
class Nil(Pattern):
    """``nil?``: an empty child slot."""

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        return node is None


@dataclass(frozen=True)
class Rest(Pattern):
    """``...``: any number of children. Only meaningful inside :class:`Shape`."""

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        raise TypeError("REST is only valid as a Shape child")


ANY = Anything()
NIL = Nil()
REST = Rest()


@dataclass(frozen=True)
class Kind(Pattern):
    """Node of exactly one kind, or of any of several kinds."""

    kinds: Tuple[str, ...]

    def __init__(self, *kinds: str):
        object.__setattr__(self, "kinds", kinds)

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        return node is not None and node.kind in self.kinds


@dataclass(frozen=True)
class NotKind(Pattern):
    """Anything whose kind is none of *kinds*. An empty slot qualifies."""

    kinds: Tuple[str, ...]

    def __init__(self, *kinds: str):
        object.__setattr__(self, "kinds", kinds)

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        return node is None or node.kind not in self.kinds


@dataclass(frozen=True)
class Value(Pattern):
    """Literal equality on ``node.value``."""

    value: str

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        return node is not None and node.value == self.value


@dataclass(frozen=True)
class Capture(Pattern):
    """Bind the node matched by *pattern*."""

    pattern: Pattern = ANY

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        trial: Captures = []
        if not self.pattern._match(node, trial):
            return False
        captures.append(node)
        captures.extend(trial)
        return True


@dataclass(frozen=True)
class Not(Pattern):
    pattern: Pattern

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        return not self.pattern._match(node, [])


@dataclass(frozen=True)
class AllOf(Pattern):
    """``[a b]``: every sub-pattern matches the same node."""

    patterns: Tuple[Pattern, ...]

    def __init__(self, *patterns: Pattern):
        object.__setattr__(self, "patterns", patterns)

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        trial: Captures = []
        for pattern in self.patterns:
            if not pattern._match(node, trial):
                return False
        captures.extend(trial)
        return True


@dataclass(frozen=True)
class AnyOf(Pattern):
    """``{a b}``: first sub-pattern that matches wins."""

    patterns: Tuple[Pattern, ...]

    def __init__(self, *patterns: Pattern):
        object.__setattr__(self, "patterns", patterns)

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        for pattern in self.patterns:
            trial: Captures = []
            if pattern._match(node, trial):
                captures.extend(trial)
                return True
        return False


@dataclass(frozen=True)
class Predicate(Pattern):
    """``#name?``: delegate to a callable taking the node (or None)."""

    func: Callable[[Optional[Node]], bool]
    name: str = ""

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        return bool(self.func(node))


@dataclass(frozen=True)
class HasChild(Pattern):
    """``<pattern ...>``: some child of the node matches *pattern*."""

    pattern: Pattern

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        if node is None:
            return False
        for child in node.children:
            trial: Captures = []
            if self.pattern._match(child, trial):
                captures.extend(trial)
                return True
        return False


@dataclass(frozen=True)
class Shape(Pattern):
    """``(kind child...)``: kind, value and positional children.

    *kind* is one kind name or a tuple of alternatives. :data:`REST` may
    appear once among *children* and absorbs zero or more children.
    """

    kind: Tuple[str, ...]
    children: Tuple[Pattern, ...]
    value: Pattern

    def __init__(self, kind, *children: Pattern, value: Pattern = ANY):
        kinds = (kind,) if isinstance(kind, str) else tuple(kind)
        if sum(1 for child in children if isinstance(child, Rest)) > 1:
            raise ValueError("REST may appear at most once in a Shape")
        object.__setattr__(self, "kind", kinds)
        object.__setattr__(self, "children", children)
        object.__setattr__(self, "value", value)

    def _match(self, node: Optional[Node], captures: Captures) -> bool:
        if node is None or node.kind not in self.kind:
            return False
        trial: Captures = []
        if not self.value._match(node, trial):
            return False
        if not _match_sequence(self.children, node.children, trial):
            return False
        captures.extend(trial)
        return True


def _match_sequence(patterns: Sequence[Pattern], nodes: Sequence[Optional[Node]], captures: Captures) -> bool:
    rest_at = next((i for i, p in enumerate(patterns) if isinstance(p, Rest)), None)
    if rest_at is None:
        if len(patterns) != len(nodes):
            return False
        pairs = list(zip(patterns, nodes))
    else:
        head, tail = patterns[:rest_at], patterns[rest_at + 1:]
        if len(nodes) < len(head) + len(tail):
            return False
        pairs = list(zip(head, nodes[:len(head)]))
        if tail:
            pairs += list(zip(tail, nodes[len(nodes) - len(tail):]))
    return all(pattern._match(node, captures) for pattern, node in pairs)


def match(pattern: Pattern, node: Optional[Node]) -> Optional[Tuple[Optional[Node], ...]]:
    """Match *node* against *pattern*; ``None`` on failure, captures on success."""
    captures: Captures = []
    if pattern._match(node, captures):
        return tuple(captures)
    return None


def matches(pattern: Pattern, node: Optional[Node]) -> bool:
    return match(pattern, node) is not None
