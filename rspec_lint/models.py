"""Core data models shared by the parser, matcher and rule layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

CALL_KINDS = ("send", "csend")


@dataclass(frozen=True)
class Span:
    """Source location of a node: byte offsets plus 1-based line, 0-based column."""

    start: int
    end: int
    line: int = 1
    column: int = 0

    def text(self, source: str) -> str:
        return source.encode("utf-8")[self.start:self.end].decode("utf-8")

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Node:
    kind: str
    children: Tuple[Optional["Node"], ...] = ()
    span: Span = field(default=Span(0, 0), compare=False)
    value: Optional[str] = None

    def child_nodes(self) -> Iterator["Node"]:
        """Yield non-empty children in order."""
        for child in self.children:
            if child is not None:
                yield child

    def is_call(self) -> bool:
        return self.kind in CALL_KINDS


class CallSite:
    """Call-shaped view over a ``send`` node and its optional ``block``.

    ``CallSite(node)`` accepts either the ``send``/``csend`` node itself or
    the ``block`` wrapping it.
    """

    __slots__ = ("send_node", "block_node")

    def __init__(self, node: Node):
        if node.kind == "block":
            send = node.children[0] if node.children else None
            if send is None or not send.is_call():
                raise ValueError(f"block node without a call: {node.kind}")
            self.send_node = send
            self.block_node: Optional[Node] = node
        elif node.is_call():
            self.send_node = node
            self.block_node = None
        else:
            raise ValueError(f"not a call-site node: {node.kind}")

    @property
    def node(self) -> Node:
        return self.block_node if self.block_node is not None else self.send_node

    @property
    def receiver(self) -> Optional[Node]:
        return self.send_node.children[0] if self.send_node.children else None

    @property
    def method_name(self) -> str:
        return self.send_node.value or ""

    @property
    def arguments(self) -> Tuple[Node, ...]:
        return tuple(arg for arg in self.send_node.children[1:] if arg is not None)

    @property
    def first_argument(self) -> Optional[Node]:
        args = self.arguments
        return args[0] if args else None

    @property
    def last_argument(self) -> Optional[Node]:
        args = self.arguments
        return args[-1] if args else None

    @property
    def body(self) -> Optional[Tuple[Node, ...]]:
        """Statements of the attached block, or None when there is no block."""
        if self.block_node is None:
            return None
        return tuple(stmt for stmt in self.block_node.children[1:] if stmt is not None)

    def __repr__(self) -> str:
        return f"CallSite({self.method_name!r}, args={len(self.arguments)}, block={self.block_node is not None})"


@dataclass(frozen=True)
class Offense:
    location: Span
    message: str
    rule: str
    path: Optional[str] = None

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    def to_dict(self) -> Dict[str, object]:
        return {
            "path": self.path,
            "rule": self.rule,
            "message": self.message,
            "line": self.location.line,
            "column": self.location.column + 1,
            "start": self.location.start,
            "end": self.location.end,
        }
