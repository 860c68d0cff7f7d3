"""IFC Infrastructure.

IfcOpenShell-based classification and property fetch.
"""
from __future__ import annotations

from ifc_model_tree.infrastructure.ifc.classifier import IfcClassifier
from ifc_model_tree.infrastructure.ifc.properties import (
    IfcPropertyFetcher,
    open_model,
)

__all__ = [
    "IfcClassifier",
    "IfcPropertyFetcher",
    "open_model",
]
