"""Locate top-level example groups in a spec file.

A group is top-level when no enclosing block belongs to another example
group or to a shared group (``shared_examples``, ``shared_context``...).
The walk carries the enclosing block calls as an explicit ancestor tuple
since ``Node`` has no parent links.
"""

from __future__ import annotations

from typing import Iterator, Optional, Tuple

from .language import Language
from .models import CallSite, Node

Ancestors = Tuple[CallSite, ...]


def iter_call_sites(node: Optional[Node], ancestors: Ancestors = ()) -> Iterator[Tuple[CallSite, Ancestors]]:
    """Yield every call site with the block calls enclosing it, in source order."""
    if node is None:
        return
    if node.kind == "block":
        call = CallSite(node)
        yield call, ancestors
        # receiver and arguments are evaluated outside the block
        for child in call.send_node.child_nodes():
            yield from iter_call_sites(child, ancestors)
        inner = ancestors + (call,)
        for statement in call.body or ():
            yield from iter_call_sites(statement, inner)
        return
    if node.is_call():
        yield CallSite(node), ancestors
    for child in node.child_nodes():
        yield from iter_call_sites(child, ancestors)


def is_top_level(ancestors: Ancestors, language: Language) -> bool:
    return not any(language.is_spec_group(ancestor) for ancestor in ancestors)


def iter_top_level_groups(root: Node, language: Optional[Language] = None) -> Iterator[CallSite]:
    """Yield example-group calls that are not nested in another spec group."""
    language = language or Language()
    for call, ancestors in iter_call_sites(root):
        if language.is_example_group(call) and is_top_level(ancestors, language):
            yield call
