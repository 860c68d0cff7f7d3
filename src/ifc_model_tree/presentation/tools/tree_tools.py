"""Model Tree MCP Tools.

Tools for loading a model, browsing its structure and inspecting elements.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.types import TextContent, Tool

from ifc_model_tree.application.services.selection import format_property_value
from ifc_model_tree.application.services.tree_service import ModelTreeService
from ifc_model_tree.domain import TreeNode
from ifc_model_tree.infrastructure.ifc.properties import open_model
from ifc_model_tree.shared.logging import get_logger

logger = get_logger(__name__)


def register_tree_tools(server: Server, service: ModelTreeService) -> None:
    """Register model tree MCP tools.

    Args:
        server: MCP Server instance
        service: Model tree service backing the tools
    """

    @server.list_tools()
    async def list_tree_tools() -> list[Tool]:
        """List available model tree tools."""
        return [
            Tool(
                name="ifc_load_model",
                description="Load an IFC file and build its model structure tree.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "file_path": {
                            "type": "string",
                            "description": "Path to the IFC file to load",
                        },
                    },
                    "required": ["file_path"],
                },
            ),
            Tool(
                name="ifc_model_tree",
                description=(
                    "Get the structure tree of the loaded model "
                    "(Project > Site > Building > Storey > element types > elements), "
                    "optionally filtered by a search query."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Case-insensitive text matched against names and types",
                            "default": "",
                        },
                        "max_depth": {
                            "type": "integer",
                            "description": "Maximum depth of the returned tree",
                        },
                    },
                },
            ),
            Tool(
                name="ifc_select_element",
                description="Select an element of the loaded model and return its properties.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "element_id": {
                            "type": "integer",
                            "description": "Express id of the element (selectable_id of a tree node)",
                        },
                    },
                    "required": ["element_id"],
                },
            ),
        ]

    @server.call_tool()
    async def call_tree_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle model tree tool calls."""
        try:
            if name == "ifc_load_model":
                return await _load_model(service, arguments)
            elif name == "ifc_model_tree":
                return _model_tree(service, arguments)
            elif name == "ifc_select_element":
                return await _select_element(service, arguments)
            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]
        except Exception as e:
            logger.error("Tool error", tool=name, error=str(e))
            return [TextContent(type="text", text=f"Error: {str(e)}")]


def _text(payload: dict[str, Any]) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


def _truncate(node: dict[str, Any], max_depth: int | None, depth: int = 0) -> dict[str, Any]:
    """Cut a serialized tree below ``max_depth`` levels."""
    if max_depth is None:
        return node
    if depth >= max_depth:
        return {**node, "children": [], "truncated": bool(node["children"])}
    return {
        **node,
        "children": [_truncate(child, max_depth, depth + 1) for child in node["children"]],
    }


async def _load_model(service: ModelTreeService, args: dict[str, Any]) -> list[TextContent]:
    """Load an IFC file."""
    file_path = Path(args["file_path"])

    if not file_path.exists():
        return [TextContent(type="text", text=f"File not found: {file_path}")]

    generation = service.begin_load()
    result, fetch = open_model(file_path, generation=generation)
    tree = await service.load(result, fetch, generation=generation)

    if tree is None:
        return _text({"status": "superseded", "generation": generation})

    return _text({
        "status": "success",
        "generation": generation,
        "classification": type(result).__name__,
        "project": tree.name,
        "node_count": tree.count(),
    })


def _model_tree(service: ModelTreeService, args: dict[str, Any]) -> list[TextContent]:
    """Get the (filtered) model tree."""
    if service.current is None:
        return [TextContent(type="text", text="No model loaded")]

    query = args.get("query") or ""
    filtered: TreeNode | None = service.search(query)

    if filtered is None:
        return _text({"query": query, "tree": None})

    return _text({
        "query": query,
        "generation": service.current_generation,
        "tree": _truncate(filtered.to_dict(), args.get("max_depth")),
    })


async def _select_element(service: ModelTreeService, args: dict[str, Any]) -> list[TextContent]:
    """Select an element and show its properties."""
    element_id = int(args["element_id"])

    if service.current is None:
        return [TextContent(type="text", text="No model loaded")]
    if element_id <= 0:
        return [TextContent(type="text", text=f"Node {element_id} is not selectable")]

    properties = await service.select(element_id)
    if properties is None:
        return [TextContent(type="text", text=f"No properties for element {element_id}")]

    return _text({
        "element_id": element_id,
        "properties": {k: format_property_value(v) for k, v in properties.items()},
    })
