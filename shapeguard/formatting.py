# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Rendering of issue lists.

``treeify`` nests messages by path so they mirror the shape of the input;
``prettify`` renders a flat, human-readable report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .config import get_config
from .validation.base import Issue, Path, PathKey


def _is_index(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


@dataclass
class TreeNode:
    """Messages for one location in the input plus its descendants.

    ``errors`` holds the messages of issues whose path ends here, in arrival
    order. ``properties`` holds named children and ``items`` indexed children.
    """

    errors: List[str] = field(default_factory=list)
    properties: Dict[str, "TreeNode"] = field(default_factory=dict)
    items: Dict[int, "TreeNode"] = field(default_factory=dict)

    def child(self, key: PathKey) -> "TreeNode":
        """Return the child for *key*, creating it when absent."""

        if _is_index(key):
            return self.items.setdefault(key, TreeNode())
        return self.properties.setdefault(str(key), TreeNode())

    def __getitem__(self, key: PathKey) -> "TreeNode":
        if _is_index(key):
            return self.items[key]
        return self.properties[str(key)]

    def __contains__(self, key: PathKey) -> bool:
        if _is_index(key):
            return key in self.items
        return str(key) in self.properties

    def at(self, path: Iterable[PathKey]) -> Optional["TreeNode"]:
        """Navigate to *path*; ``None`` when nothing was reported there."""

        node = self
        for key in path:
            if key not in node:
                return None
            node = node[key]
        return node

    @property
    def is_empty(self) -> bool:
        return not (self.errors or self.properties or self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested mapping; ``items`` becomes a list with ``None`` holes."""

        data: Dict[str, Any] = {"errors": list(self.errors)}
        if self.properties:
            data["properties"] = {key: child.to_dict() for key, child in self.properties.items()}
        if self.items:
            rendered: List[Optional[Dict[str, Any]]] = [None] * (max(self.items) + 1)
            for index, child in self.items.items():
                rendered[index] = child.to_dict()
            data["items"] = rendered
        return data


def treeify(issues: Iterable[Issue]) -> TreeNode:
    """Group issue messages by path into a nested ``TreeNode``.

    Several issues on the same path accumulate in arrival order.
    """

    root = TreeNode()
    for issue in issues:
        node = root
        for key in issue.path:
            node = node.child(key)
        node.errors.append(issue.message)
    return root


def format_path(path: Path) -> str:
    """Render a path as ``a.b[0]["odd key"]``."""

    parts: List[str] = []
    for key in path:
        if _is_index(key):
            parts.append(f"[{key}]")
        elif isinstance(key, str) and key.isidentifier():
            parts.append(f".{key}" if parts else key)
        else:
            parts.append(f'["{key}"]')
    return "".join(parts)


def prettify(issues: Iterable[Issue], *, limit: Optional[int] = None) -> str:
    """Render issues one per block::

        ✖ Invalid input: expected string, received number
          → at user.name
    """

    issues = list(issues)
    if limit is None:
        limit = get_config().max_prettify_issues

    lines: List[str] = []
    shown = issues if limit is None else issues[:limit]
    for issue in shown:
        lines.append(f"✖ {issue.message}")
        if issue.path:
            lines.append(f"  → at {format_path(issue.path)}")
    hidden = len(issues) - len(shown)
    if hidden > 0:
        noun = "issue" if hidden == 1 else "issues"
        lines.append(f"… and {hidden} more {noun}")
    return "\n".join(lines)


__all__ = ["TreeNode", "format_path", "prettify", "treeify"]
