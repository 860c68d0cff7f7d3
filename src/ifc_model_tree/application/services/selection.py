"""Element Selection.

One channel carries selected element ids; one consumer updates the
highlighted element and the property panel contents.
"""
from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ifc_model_tree.application.services.name_resolver import PropertyFetch
from ifc_model_tree.domain import TreeNode
from ifc_model_tree.shared.logging import get_logger

logger = get_logger(__name__)


def format_property_value(value: Any) -> str:
    """Render a property value for display.

    IFC attributes arrive as ``{"value": ..., "type": ...}`` records;
    those show their value, other mappings show as JSON.
    """
    if value is None:
        return "-"
    if isinstance(value, Mapping):
        if "value" in value:
            inner = value["value"]
            return "-" if inner is None or inner == "" else str(inner)
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError):
            return "[Complex Object]"
    return str(value)


@dataclass
class SelectionState:
    """Highlight and property panel state for the selected element.

    Attributes:
        highlighted_id: Selected element id, None when nothing is selected
        properties: Fetched properties of the selected element
    """

    highlighted_id: int | None = None
    properties: dict[str, Any] | None = None

    async def apply(self, element_id: int, fetch: PropertyFetch) -> None:
        """Highlight an element and load its properties.

        A failed fetch keeps the highlight and clears the panel.
        """
        self.highlighted_id = element_id
        self.properties = None
        try:
            properties = await fetch(element_id)
        except Exception as e:
            logger.warning(
                "Could not fetch properties for selection",
                element_id=element_id,
                error=str(e),
            )
            return

        # A newer selection may have landed while fetching
        if self.highlighted_id == element_id:
            self.properties = dict(properties or {})

    def clear(self) -> None:
        """Clear highlight and properties."""
        self.highlighted_id = None
        self.properties = None

    def formatted_properties(self) -> dict[str, str]:
        """Properties of the selected element rendered for display."""
        return {
            key: format_property_value(value)
            for key, value in (self.properties or {}).items()
        }


class SelectionChannel:
    """Queue of element selection requests with a single consumer."""

    def __init__(self, state: SelectionState | None = None) -> None:
        self.state = state or SelectionState()
        self._queue: asyncio.Queue[int | None] = asyncio.Queue()

    def publish(self, element_id: int | None) -> bool:
        """Request selection of an element.

        Ids <= 0 belong to synthetic nodes and are ignored.

        Returns:
            True if the request was queued
        """
        if element_id is None or element_id <= 0:
            return False
        self._queue.put_nowait(element_id)
        return True

    def publish_node(self, node: TreeNode) -> bool:
        """Request selection of the element behind a tree node."""
        if not node.is_selectable:
            return False
        return self.publish(node.selectable_id)

    def request_clear(self) -> None:
        """Request clearing of the current selection."""
        self._queue.put_nowait(None)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def drain(self, fetch: PropertyFetch) -> int:
        """Apply all queued requests in order.

        Returns:
            Number of requests processed
        """
        processed = 0
        while not self._queue.empty():
            element_id = self._queue.get_nowait()
            await self._handle(element_id, fetch)
            self._queue.task_done()
            processed += 1
        return processed

    async def run(self, fetch: PropertyFetch) -> None:
        """Consume requests until cancelled."""
        while True:
            element_id = await self._queue.get()
            try:
                await self._handle(element_id, fetch)
            finally:
                self._queue.task_done()

    async def _handle(self, element_id: int | None, fetch: PropertyFetch) -> None:
        if element_id is None:
            self.state.clear()
            return
        await self.state.apply(element_id, fetch)
