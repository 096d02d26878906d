"""Read-only view over a tree-sitter tree and the text it was parsed from.

tree-sitter reports byte offsets into the UTF-8 encoding; every location that
leaves this module is converted into character based ``Position`` values of
the original text.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterator

from tree_sitter import Node, Tree

from gql_extract.models import Position, SourceRange

NodeKey = tuple[str, int, int]


def node_key(node: Node) -> NodeKey:
    return (node.type, node.start_byte, node.end_byte)


class SyntaxTree:
    def __init__(self, tree: Tree, text: str, file_path: str, language: str) -> None:
        self.tree = tree
        self.text = text
        self.file_path = file_path
        self.language = language
        self.source_bytes = text.encode("utf-8")

        self._line_byte_starts: list[int] = []
        self._line_char_starts: list[int] = []
        byte_pos = 0
        char_pos = 0
        for line in text.split("\n"):
            self._line_byte_starts.append(byte_pos)
            self._line_char_starts.append(char_pos)
            byte_pos += len(line.encode("utf-8")) + 1
            char_pos += len(line) + 1

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text_of(self, node: Node) -> str:
        return self.source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def position_at(self, byte_offset: int) -> Position:
        line_index = bisect_right(self._line_byte_starts, byte_offset) - 1
        line_start = self._line_byte_starts[line_index]
        column = len(self.source_bytes[line_start:byte_offset].decode("utf-8", errors="replace"))
        return Position(
            line=line_index + 1,
            column=column + 1,
            offset=self._line_char_starts[line_index] + column,
        )

    def range_between(self, start_byte: int, end_byte: int) -> SourceRange:
        return SourceRange(start=self.position_at(start_byte), end=self.position_at(end_byte))

    def range_of(self, node: Node) -> SourceRange:
        return self.range_between(node.start_byte, node.end_byte)

    def walk(self, node: Node | None = None) -> Iterator[Node]:
        """Yield ``node`` and its descendants in document order."""
        stack = [node if node is not None else self.root]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))


def find_parse_error(root: Node) -> Node | None:
    """Return the first ERROR or MISSING node, searching only subtrees that contain one."""
    stack = [root]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        stack.extend(reversed([child for child in current.children if child.has_error or child.is_missing]))
    return None


def ancestors(node: Node) -> Iterator[Node]:
    parent = node.parent
    while parent is not None:
        yield parent
        parent = parent.parent


def string_value(tree: SyntaxTree, node: Node) -> str | None:
    """Return the content of a string literal node, or None for anything else."""
    if node.type != "string":
        return None
    return tree.text_of(node)[1:-1]
