"""IFC Model Tree MCP Server.

Main MCP server setup.
"""
from __future__ import annotations

import asyncio

from mcp.server import Server
from mcp.server.stdio import stdio_server

from ifc_model_tree.application.services.tree_service import ModelTreeService
from ifc_model_tree.presentation.tools import register_tree_tools
from ifc_model_tree.shared.config import settings
from ifc_model_tree.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_server(service: ModelTreeService | None = None) -> Server:
    """Create and configure the MCP server.

    Args:
        service: Model tree service; a fresh one is created if omitted

    Returns:
        Configured MCP Server instance
    """
    server = Server(settings.app_name)
    register_tree_tools(server, service or ModelTreeService())
    return server


async def run_server() -> None:
    """Run the MCP server."""
    setup_logging()
    server = create_server()

    logger.info("Starting IFC Model Tree Server", version=settings.app_version)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        logger.info("IFC Model Tree Server stopped")


def main() -> None:
    """Entry point for the MCP server."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
