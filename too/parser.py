"""Parse bullet lists into todo trees for bulk add.

    - Groceries
      - Milk
      * Bread
        from the corner shop
    - Laundry

Indentation is counted in spaces (a tab counts as four); every two spaces
is one level. Non-bullet lines continue the previous todo's text; a bullet
with nothing after the marker is skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

TAB_WIDTH = 4
INDENT_WIDTH = 2

_BULLET = re.compile(r"^[-*] (.*)$")
_EMPTY_BULLET = re.compile(r"^[-*]\s*$")


@dataclass
class Node:
    text: str
    children: list[Node] = field(default_factory=list)

    def count(self) -> int:
        return 1 + sum(child.count() for child in self.children)


def is_bullet_line(line: str) -> bool:
    match = _BULLET.match(line.replace("\t", " " * TAB_WIDTH).lstrip(" "))
    return bool(match and match.group(1).strip())


def has_bullets(text: str) -> bool:
    """True if any line of ``text`` is a bullet item."""
    return any(is_bullet_line(line) for line in text.splitlines())


def parse_bullets(text: str) -> list[Node]:
    """Parse ``text`` into a forest of nodes in document order.

    A nested bullet without an ancestor at the level above attaches to the
    deepest open ancestor, or becomes a root when there is none. Text before
    the first bullet has nothing to continue and is dropped.
    """
    roots: list[Node] = []
    # stack[i] is the most recent node at level i
    stack: list[Node] = []

    for raw in text.splitlines():
        line = raw.replace("\t", " " * TAB_WIDTH)
        if not line.strip():
            continue

        body = line.lstrip(" ")
        if _EMPTY_BULLET.match(body):
            continue
        match = _BULLET.match(body)
        if match is None:
            if stack:
                stack[-1].text += "\n" + line.strip()
            continue

        node = Node(match.group(1).strip())
        level = min((len(line) - len(body)) // INDENT_WIDTH, len(stack))
        del stack[level:]
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)

    return roots
