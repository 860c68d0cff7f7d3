"""Model Tree Search Filter.

Filters a built tree by a text query while keeping the ancestor path of
every match.
"""
from __future__ import annotations

from ifc_model_tree.domain import TreeNode


def node_matches(node: TreeNode, query: str) -> bool:
    """Check a node's name and type label against a lower-cased query."""
    if query in node.name.lower():
        return True
    return bool(node.type_label) and query in node.type_label.lower()


def filter_tree(root: TreeNode, query: str) -> TreeNode | None:
    """Filter a tree, keeping matches and the ancestors of matches.

    Matching is a case-insensitive substring test against name and type
    label. A node survives if it matches or any child survives; it keeps
    only surviving children. The input tree is never modified.

    Args:
        root: Tree to filter
        query: Search text matched as given; empty or whitespace-only returns
            ``root`` itself

    Returns:
        Filtered copy, or None if nothing matched
    """
    if not query or not query.strip():
        return root
    return _filter(root, query.lower())


def _filter(node: TreeNode, needle: str) -> TreeNode | None:
    children = [
        kept
        for kept in (_filter(child, needle) for child in node.children)
        if kept is not None
    ]
    if children or node_matches(node, needle):
        return node.with_children(children)
    return None
