"""Presentation Layer.

MCP server and REST API exposing the model tree to renderers.
"""
from __future__ import annotations

from ifc_model_tree.presentation.server import main

__all__ = ["main"]
