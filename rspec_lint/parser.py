"""Ruby front end: Tree-sitter concrete syntax tree -> immutable ``Node`` tree.

Tree-sitter gives an error-tolerant CST that preserves every token. Rules
work on a smaller, rubocop-ast shaped tree instead:

- calls become ``send`` / ``csend`` nodes with ``(receiver, *args)`` children
  and the method name as ``value``; a call with a block is wrapped in a
  ``block`` node ``(send, *body)``
- bare trailing keyword arguments are grouped into a synthetic ``hash``
- ``'str'`` -> ``str``, ``:sym`` / ``key:`` -> ``sym``, ``Foo::Bar`` -> ``const``
- everything else keeps its grammar type and its named children
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import tree_sitter_ruby
from tree_sitter import Language, Parser as TSParser

from .errors import ParseError
from .models import Node, Span

logger = logging.getLogger(__name__)

_SKIPPED_TYPES = {"comment", "block_parameters", "heredoc_end"}
_BODY_WRAPPERS = {"body_statement", "block_body"}
_KEYWORD_ARG_KINDS = {"pair", "hash_splat_argument"}
_ESCAPES = {
    "\\n": "\n", "\\t": "\t", "\\r": "\r", "\\s": " ", "\\0": "\0",
    "\\e": "\x1b", "\\a": "\a", "\\b": "\b", "\\f": "\f", "\\v": "\v",
}


class RubyParser:
    """Parse Ruby source with the Tree-sitter Ruby grammar."""

    def __init__(self) -> None:
        self._language = Language(tree_sitter_ruby.language())
        self._parser = TSParser(self._language)
        self._handlers: Dict[str, Callable[[Any, bytes], Optional[Node]]] = {
            "program": self._convert_program,
            "call": self._convert_call,
            "identifier": self._convert_identifier,
            "constant": self._convert_constant,
            "scope_resolution": self._convert_scope_resolution,
            "string": self._convert_string,
            "simple_symbol": self._convert_simple_symbol,
            "hash_key_symbol": self._convert_hash_key_symbol,
            "delimited_symbol": self._convert_delimited_symbol,
            "hash": self._convert_hash,
            "pair": self._convert_pair,
            "binary": self._convert_binary,
        }
        logger.debug("Loaded tree-sitter parser for ruby")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, source: str, path: Optional[Union[str, Path]] = None) -> Node:
        """Parse *source* into a ``program`` node.

        Raises:
            ParseError: the source contains a syntax error.
        """
        src = source.encode("utf-8")
        tree = self._parser.parse(src)
        root = tree.root_node
        if root.has_error:
            bad = _first_error(root)
            row, col = (bad.start_point[0], bad.start_point[1]) if bad is not None else (0, 0)
            raise ParseError("syntax error", path=path, line=row + 1, column=col)
        return self._convert(root, src)

    def parse_file(self, file_path: Path) -> Node:
        source = file_path.read_text(encoding="utf-8", errors="replace")
        return self.parse(source, path=file_path)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _convert(self, ts_node: Any, src: bytes) -> Optional[Node]:
        if ts_node.type in _SKIPPED_TYPES:
            return None
        handler = self._handlers.get(ts_node.type)
        if handler is not None:
            return handler(ts_node, src)
        return self._convert_generic(ts_node, src)

    def _convert_children(self, ts_nodes: List[Any], src: bytes) -> List[Node]:
        converted = []
        for child in ts_nodes:
            node = self._convert(child, src)
            if node is not None:
                converted.append(node)
        return converted

    def _convert_generic(self, ts_node: Any, src: bytes) -> Node:
        children = self._convert_children(ts_node.named_children, src)
        value = None if ts_node.named_children else _text(ts_node, src)
        return Node(ts_node.type, tuple(children), _span(ts_node), value)

    def _convert_program(self, ts_node: Any, src: bytes) -> Node:
        children = self._convert_children(ts_node.named_children, src)
        return Node("program", tuple(children), _span(ts_node))

    def _convert_call(self, ts_node: Any, src: bytes) -> Node:
        receiver = ts_node.child_by_field_name("receiver")
        operator = ts_node.child_by_field_name("operator")
        method = ts_node.child_by_field_name("method")
        arguments = ts_node.child_by_field_name("arguments")
        block = ts_node.child_by_field_name("block")

        kind = "csend" if operator is not None and _text(operator, src) == "&." else "send"
        # `foo.()` has no method token
        name = _text(method, src) if method is not None else "call"
        recv_node = self._convert(receiver, src) if receiver is not None else None
        args = self._convert_arguments(arguments, src) if arguments is not None else []

        parts = [part for part in (receiver, method, arguments) if part is not None]
        send_end = max(part.end_byte for part in parts) if parts else ts_node.end_byte
        send = Node(
            kind,
            (recv_node, *args),
            _span(ts_node, end=send_end),
            name,
        )
        if block is None:
            return send
        body = self._convert_block_body(block, src)
        return Node("block", (send, *body), _span(ts_node))

    def _convert_arguments(self, ts_node: Any, src: bytes) -> List[Node]:
        args = self._convert_children(ts_node.named_children, src)
        grouped: List[Node] = []
        run: List[Node] = []
        for arg in args:
            if arg.kind in _KEYWORD_ARG_KINDS:
                run.append(arg)
                continue
            if run:
                grouped.append(_keyword_hash(run))
                run = []
            grouped.append(arg)
        if run:
            grouped.append(_keyword_hash(run))
        return grouped

    def _convert_block_body(self, ts_node: Any, src: bytes) -> List[Node]:
        statements: List[Node] = []
        for child in ts_node.named_children:
            if child.type in _BODY_WRAPPERS:
                statements.extend(self._convert_children(child.named_children, src))
                continue
            node = self._convert(child, src)
            if node is not None:
                statements.append(node)
        return statements

    def _convert_identifier(self, ts_node: Any, src: bytes) -> Node:
        # a bare identifier is a receiverless, argumentless call until proven a local
        return Node("send", (None,), _span(ts_node), _text(ts_node, src))

    def _convert_constant(self, ts_node: Any, src: bytes) -> Node:
        return Node("const", (None,), _span(ts_node), _text(ts_node, src))

    def _convert_scope_resolution(self, ts_node: Any, src: bytes) -> Node:
        scope = ts_node.child_by_field_name("scope")
        name = ts_node.child_by_field_name("name")
        if scope is not None:
            scope_node = self._convert(scope, src)
        else:
            start = ts_node.start_byte
            row, col = ts_node.start_point[0], ts_node.start_point[1]
            scope_node = Node("cbase", (), Span(start, start + 2, row + 1, col))
        value = _text(name, src) if name is not None else None
        return Node("const", (scope_node,), _span(ts_node), value)

    def _convert_string(self, ts_node: Any, src: bytes) -> Node:
        parts = ts_node.named_children
        if any(part.type == "interpolation" for part in parts):
            return Node("dstr", tuple(self._convert_children(parts, src)), _span(ts_node))
        return Node("str", (), _span(ts_node), "".join(_literal_text(part, src) for part in parts))

    def _convert_simple_symbol(self, ts_node: Any, src: bytes) -> Node:
        return Node("sym", (), _span(ts_node), _text(ts_node, src)[1:])

    def _convert_hash_key_symbol(self, ts_node: Any, src: bytes) -> Node:
        return Node("sym", (), _span(ts_node), _text(ts_node, src))

    def _convert_delimited_symbol(self, ts_node: Any, src: bytes) -> Node:
        parts = ts_node.named_children
        if any(part.type == "interpolation" for part in parts):
            return Node("dsym", tuple(self._convert_children(parts, src)), _span(ts_node))
        return Node("sym", (), _span(ts_node), "".join(_literal_text(part, src) for part in parts))

    def _convert_hash(self, ts_node: Any, src: bytes) -> Node:
        return Node("hash", tuple(self._convert_children(ts_node.named_children, src)), _span(ts_node))

    def _convert_pair(self, ts_node: Any, src: bytes) -> Node:
        key = ts_node.child_by_field_name("key")
        value = ts_node.child_by_field_name("value")
        key_node = self._convert(key, src) if key is not None else None
        # `"label": value` has a symbol key; only `"key" => value` keeps the string
        if key_node is not None and key.type == "string" and not _has_token(ts_node, "=>"):
            key_node = _as_symbol(key_node)
        return Node(
            "pair",
            (key_node, self._convert(value, src) if value is not None else None),
            _span(ts_node),
        )

    def _convert_binary(self, ts_node: Any, src: bytes) -> Node:
        left = ts_node.child_by_field_name("left")
        operator = ts_node.child_by_field_name("operator")
        right = ts_node.child_by_field_name("right")
        op = _text(operator, src) if operator is not None else ""
        left_node = self._convert(left, src) if left is not None else None
        right_node = self._convert(right, src) if right is not None else None
        if op in ("and", "or", "&&", "||"):
            kind = "and" if op in ("and", "&&") else "or"
            return Node(kind, (left_node, right_node), _span(ts_node))
        return Node("send", (left_node, right_node), _span(ts_node), op)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _text(ts_node: Any, src: bytes) -> str:
    return src[ts_node.start_byte:ts_node.end_byte].decode("utf-8", errors="replace")


def _literal_text(ts_node: Any, src: bytes) -> str:
    text = _text(ts_node, src)
    if ts_node.type != "escape_sequence":
        return text
    return _ESCAPES.get(text, text[1:] if len(text) == 2 else text)


def _has_token(ts_node: Any, token: str) -> bool:
    return any(child.type == token for child in ts_node.children)


def _as_symbol(node: Node) -> Node:
    if node.kind == "dstr":
        return Node("dsym", node.children, node.span)
    if node.kind == "str":
        return Node("sym", (), node.span, node.value)
    return node


def _span(ts_node: Any, end: Optional[int] = None) -> Span:
    row, col = ts_node.start_point[0], ts_node.start_point[1]
    return Span(ts_node.start_byte, ts_node.end_byte if end is None else end, row + 1, col)


def _keyword_hash(pairs: List[Node]) -> Node:
    first, last = pairs[0].span, pairs[-1].span
    return Node("hash", tuple(pairs), Span(first.start, last.end, first.line, first.column))


def _first_error(ts_node: Any) -> Optional[Any]:
    if ts_node.type == "ERROR" or ts_node.is_missing:
        return ts_node
    for child in ts_node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None
