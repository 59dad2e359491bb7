import re

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_parser

from gateway_gen.core.errors import SourceValidationError

_BLANK_RUN = re.compile(r"\n{3,}")
_OPEN_BLANK = re.compile(r"([{(]\n)\n+")
_CLOSE_BLANK = re.compile(r"\n\n+(\t*[})])")


class GoSourceFormatter:
    """Check generated Go source for syntax errors and normalize its layout.

    Implements the ``SourceFormatter`` protocol. Parsing uses the tree-sitter
    Go grammar so no Go toolchain is needed at generation time.
    """

    def __init__(self, parser: Parser | None = None) -> None:
        self._parser = parser or get_parser("go")

    def format(self, source: str) -> str:
        tree = self._parser.parse(source.encode("utf-8"))
        if tree.root_node.has_error:
            node = _first_error(tree.root_node)
            row, column = node.start_point if node is not None else tree.root_node.start_point
            raise SourceValidationError(f"{row + 1}:{column + 1}: syntax error in generated source", source)
        return normalize(source)


def normalize(source: str) -> str:
    """Strip trailing whitespace and squeeze blank lines the template leaves behind."""
    lines = [line.rstrip() for line in source.splitlines()]
    text = "\n".join(lines).strip("\n")
    text = _BLANK_RUN.sub("\n\n", text)
    text = _OPEN_BLANK.sub(r"\1", text)
    text = _CLOSE_BLANK.sub(r"\n\1", text)
    return text + "\n"


def _first_error(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error:
            found = _first_error(child)
            if found is not None:
                return found
    return None
