"""Walk TypeScript syntax trees and collect dependency references."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Callable, Iterator

try:
    from tree_sitter_language_pack import get_parser
except ImportError as _err:
    raise ImportError(
        "tree-sitter-language-pack is required. Install with: "
        "pip install tree-sitter-language-pack"
    ) from _err

SOURCE_EXTENSIONS = frozenset({".ts"})

LAZY_LOAD_PROPERTY = "loadChildren"

_parser_cache: dict[str, Any] = {}


class NodeKind(Enum):
    IMPORT_DECLARATION = "import_declaration"
    PROPERTY_ASSIGNMENT = "property_assignment"
    OTHER = "other"


_NODE_KINDS: dict[str, NodeKind] = {
    "import_statement": NodeKind.IMPORT_DECLARATION,
    "pair": NodeKind.PROPERTY_ASSIGNMENT,
}


def classify(node: Any) -> NodeKind:
    return _NODE_KINDS.get(node.type, NodeKind.OTHER)


def is_source_file(path: str) -> bool:
    return PurePosixPath(path).suffix in SOURCE_EXTENSIONS


def parse_typescript(source: str) -> Any:
    """Parse TypeScript source text and return the root node."""
    if "typescript" not in _parser_cache:
        _parser_cache["typescript"] = get_parser("typescript")
    tree = _parser_cache["typescript"].parse(source.encode("utf-8"))
    return tree.root_node


def _node_text(node: Any) -> str:
    text = node.text
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="replace")
    return text or ""


def _string_literal_value(node: Any | None) -> str | None:
    if node is None or node.type != "string":
        return None
    # Drop the surrounding quote characters
    return _node_text(node)[1:-1]


def _property_name(node: Any | None) -> str | None:
    if node is None:
        return None
    if node.type == "property_identifier":
        return _node_text(node)
    if node.type == "string":
        return _string_literal_value(node)
    return None


def iter_references(root: Any) -> Iterator[str]:
    """Yield raw reference strings found anywhere under ``root``.

    Recognized shapes:
        - ``import ... from '<specifier>'``: the specifier
        - ``loadChildren: '<path>'``: the path, only when it is a string literal

    Matched nodes are not descended into. Every other node, including a
    property assignment that does not match, is walked generically.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        kind = classify(node)

        if kind is NodeKind.IMPORT_DECLARATION:
            specifier = _string_literal_value(node.child_by_field_name("source"))
            if specifier is not None:
                yield specifier
            continue

        if kind is NodeKind.PROPERTY_ASSIGNMENT:
            if _property_name(node.child_by_field_name("key")) == LAZY_LOAD_PROPERTY:
                value = _string_literal_value(node.child_by_field_name("value"))
                if value is not None:
                    yield value
                # Never descended, so a dynamic loadChildren value yields nothing
                continue
            # Any other assignment is walked like an ordinary node, which
            # reaches routes nested under e.g. ``children: [...]``

        # Reversed so children come off the stack in source order
        stack.extend(reversed(node.children))


def extract_references(
    path: str,
    read_file: Callable[[str], str],
    parse: Callable[[str], Any] = parse_typescript,
) -> list[str]:
    """Return the raw references of one file; non-source files yield nothing."""
    if not is_source_file(path):
        return []
    return list(iter_references(parse(read_file(path))))
