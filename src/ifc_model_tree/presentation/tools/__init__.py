"""MCP Tools registration.

All tool modules register their tools with the MCP server.
"""
from __future__ import annotations

from ifc_model_tree.presentation.tools.tree_tools import register_tree_tools

__all__ = [
    "register_tree_tools",
]
