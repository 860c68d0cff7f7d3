"""Model Tree Service.

Runs the load pipeline for one viewer: name resolution, tree build, search
and selection. Each model load gets a generation token; results of a load
that was superseded while resolving names are dropped.
"""
from __future__ import annotations

import asyncio
from typing import Any

from ifc_model_tree.application.services.name_resolver import NameResolver, PropertyFetch
from ifc_model_tree.application.services.search_filter import filter_tree
from ifc_model_tree.application.services.selection import SelectionChannel
from ifc_model_tree.application.services.tree_builder import (
    TreeBuilder,
    build_tree_from_result,
)
from ifc_model_tree.domain import ClassificationResult, ErrorResult, TreeNode
from ifc_model_tree.shared.logging import get_logger, load_context

logger = get_logger(__name__)


class ModelTreeService:
    """Holds the current model tree and serializes rebuilds."""

    def __init__(
        self,
        builder: TreeBuilder | None = None,
        batch_size: int | None = None,
    ) -> None:
        """Initialize service.

        Args:
            builder: Tree builder (defaults to one configured from settings)
            batch_size: Name resolution chunk size
        """
        self._builder = builder or TreeBuilder()
        self._batch_size = batch_size
        self._generation = 0
        self._lock = asyncio.Lock()

        self._current: TreeNode | None = None
        self._current_generation: int | None = None
        self._fetch: PropertyFetch | None = None

        self.selection = SelectionChannel()

    @property
    def generation(self) -> int:
        """Latest generation token handed out."""
        return self._generation

    @property
    def current(self) -> TreeNode | None:
        """Tree of the latest completed load."""
        return self._current

    @property
    def current_generation(self) -> int | None:
        return self._current_generation

    def begin_load(self) -> int:
        """Start a new model load and return its generation token."""
        self._generation += 1
        logger.debug("Model load started", generation=self._generation)
        return self._generation

    def is_current(self, generation: int) -> bool:
        """Check if no newer load has started since the given one."""
        return generation == self._generation

    async def load(
        self,
        result: ClassificationResult,
        fetch: PropertyFetch,
        *,
        generation: int | None = None,
    ) -> TreeNode | None:
        """Resolve names and build the tree for a classified model.

        Args:
            result: Tagged classification result
            fetch: Property fetch for the model
            generation: Token from ``begin_load``; a new one is taken if omitted

        Returns:
            The new tree, or None if a newer load superseded this one
        """
        if generation is None:
            generation = self.begin_load()

        with load_context(generation):
            return await self._load(result, fetch, generation)

    async def _load(
        self,
        result: ClassificationResult,
        fetch: PropertyFetch,
        generation: int,
    ) -> TreeNode | None:
        names: dict[int, str] = {}
        if not isinstance(result, ErrorResult):
            resolver = NameResolver(fetch, batch_size=self._batch_size)
            names = await resolver.resolve(result.snapshot.element_ids())

        if not self.is_current(generation):
            logger.info(
                "Discarding names of superseded load",
                current=self._generation,
            )
            return None

        async with self._lock:
            if not self.is_current(generation):
                logger.info(
                    "Discarding superseded tree build",
                    current=self._generation,
                )
                return None

            tree = build_tree_from_result(result, names, builder=self._builder)
            self._current = tree
            self._current_generation = generation
            self._fetch = fetch
            self.selection.state.clear()

        logger.info("Model tree ready", nodes=tree.count())
        return tree

    def search(self, query: str) -> TreeNode | None:
        """Filter the current tree by a query."""
        if self._current is None:
            return None
        return filter_tree(self._current, query)

    async def select(self, element_id: int) -> dict[str, Any] | None:
        """Select an element and return its properties.

        Returns:
            Properties of the element, or None when the id is not selectable,
            no model is loaded, the fetch failed, or a later selection took
            over before this one finished
        """
        if self._fetch is None:
            return None
        if not self.selection.publish(element_id):
            return None
        await self.selection.drain(self._fetch)

        state = self.selection.state
        if state.highlighted_id != element_id:
            return None
        return state.properties

    def clear_selection(self) -> None:
        """Clear highlight and property panel."""
        self.selection.state.clear()
