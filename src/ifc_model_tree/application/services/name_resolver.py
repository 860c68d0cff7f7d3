"""Element Name Resolver.

Resolves display names for element ids through the model's property fetch,
in sequential chunks of concurrent requests.
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from ifc_model_tree.domain import NameFetchError, placeholder_name
from ifc_model_tree.shared.config import settings
from ifc_model_tree.shared.logging import get_logger
from ifc_model_tree.shared.result import Result, err, failures, ok

logger = get_logger(__name__)


PropertyFetch = Callable[[int], Awaitable[Mapping[str, Any] | None]]


def extract_name(properties: Mapping[str, Any] | None) -> str | None:
    """Read the ``Name`` attribute from fetched properties.

    Accepts both ``{"Name": {"value": "Wall 1"}}`` and ``{"Name": "Wall 1"}``.

    Returns:
        Non-empty name or None

    Raises:
        TypeError: If the properties are not a mapping
    """
    if not properties:
        return None
    if not isinstance(properties, Mapping):
        raise TypeError(f"Properties must be a mapping, got {type(properties).__name__}")
    raw = properties.get("Name")
    if isinstance(raw, Mapping):
        raw = raw.get("value")
    if raw is None:
        return None
    name = str(raw).strip()
    return name or None


class NameResolver:
    """Resolves element display names in bounded batches."""

    def __init__(self, fetch: PropertyFetch, batch_size: int | None = None) -> None:
        """Initialize resolver.

        Args:
            fetch: Async property fetch for one element id
            batch_size: Number of concurrent fetches per chunk
        """
        if batch_size is not None and batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._fetch = fetch
        self._batch_size = batch_size or settings.name_batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def resolve(self, element_ids: Iterable[int]) -> dict[int, str]:
        """Resolve a display name for every id.

        Chunks run one after another; fetches inside a chunk run concurrently.
        Failed fetches degrade to ``"Element <id>"``.

        Args:
            element_ids: Element ids to resolve

        Returns:
            One entry per requested id
        """
        ids = sorted(set(element_ids))
        names: dict[int, str] = {}
        failed = 0

        for i in range(0, len(ids), self._batch_size):
            chunk = ids[i : i + self._batch_size]
            results = await asyncio.gather(*(self._fetch_name(eid) for eid in chunk))

            for eid, result in zip(chunk, results):
                names[eid] = result.unwrap_or(placeholder_name(eid))

            chunk_failures = failures(results)
            failed += len(chunk_failures)
            logger.debug(
                "Resolved name chunk",
                chunk_num=i // self._batch_size + 1,
                size=len(chunk),
                failed=[e.element_id for e in chunk_failures],
            )

        logger.info("Resolved element names", count=len(names), failures=failed)
        return names

    async def _fetch_name(self, element_id: int) -> Result[str, NameFetchError]:
        """Fetch one element's name, capturing any failure."""
        try:
            name = extract_name(await self._fetch(element_id))
        except Exception as e:
            error = NameFetchError(element_id, str(e) or type(e).__name__)
            logger.warning(
                "Could not get properties for element",
                element_id=element_id,
                error=error.reason,
            )
            return err(error)

        return ok(name).map(lambda value: value or placeholder_name(element_id))


async def resolve_names(
    element_ids: Iterable[int],
    fetch: PropertyFetch,
    *,
    batch_size: int | None = None,
) -> dict[int, str]:
    """Convenience function to resolve names with a one-off resolver."""
    return await NameResolver(fetch, batch_size=batch_size).resolve(element_ids)
