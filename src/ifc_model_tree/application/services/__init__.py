"""Application services.

Tree building, name resolution, search and selection.
"""
from __future__ import annotations

# Re-export services for convenient imports
# These will be available as:
#   from ifc_model_tree.application.services import TreeBuilder

__all__ = [
    "ModelTreeService",
    "NameResolver",
    "SelectionChannel",
    "SelectionState",
    "TreeBuilder",
    "build_tree",
    "build_tree_from_result",
    "filter_tree",
    "resolve_names",
]


def __getattr__(name: str):
    """Lazy imports for services."""
    if name == "ModelTreeService":
        from ifc_model_tree.application.services.tree_service import ModelTreeService
        return ModelTreeService
    elif name in ("NameResolver", "resolve_names"):
        from ifc_model_tree.application.services import name_resolver
        return getattr(name_resolver, name)
    elif name in ("SelectionChannel", "SelectionState"):
        from ifc_model_tree.application.services import selection
        return getattr(selection, name)
    elif name in ("TreeBuilder", "build_tree", "build_tree_from_result"):
        from ifc_model_tree.application.services import tree_builder
        return getattr(tree_builder, name)
    elif name == "filter_tree":
        from ifc_model_tree.application.services.search_filter import filter_tree
        return filter_tree
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
