"""IFC Model Tree.

Builds the browsable structure tree of an IFC model: spatial containers,
element types and elements, with resolved names, text search and element
selection.
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "IFC Model Tree Team"

# Re-export main entry point
from ifc_model_tree.presentation import main

__all__ = ["main", "__version__"]
