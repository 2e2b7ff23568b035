"""
Composition service — the read path end to end.

  EntryStore → Linker → Resolver → Dispatcher

Sits between the pure kernel and the entry store. This is where IO happens;
linker, resolver and dispatcher stay pure.

The two collections (configs, datas) are fetched concurrently and may fail
independently. Until both are available the join is empty, never an error.
A successful join is cached for max_age seconds and shared by every caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from composer.config import Settings, settings as default_settings
from composer.kernel.dispatcher import Dispatcher
from composer.kernel.linker import index_records, link_with_report
from composer.kernel.preview import PreviewList
from composer.kernel.resolver import resolve_with_report
from composer.kernel.types import LinkedRecord, RenderInstruction, ResolvedNode, Warning
from composer.services.content_cache import ContentCache, should_refresh
from composer.services.entry_store import EntryStore, to_config_entries, to_data_entries
from composer.services.sync import SyncManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Join:
    """A cached join. Shared by every reader, so nothing in it is mutable."""

    records: tuple[LinkedRecord, ...]
    warnings: tuple[Warning, ...]


class CompositionService:
    """Owns the entry store, the join cache, and the dispatcher for one site."""

    def __init__(
        self,
        store: EntryStore,
        *,
        cache: ContentCache | None = None,
        dispatcher: Dispatcher | None = None,
        config: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.config = config or default_settings
        self.cache = cache or ContentCache(max_age=self.config.CACHE_MAX_AGE_SECONDS, clock=clock)
        self.dispatcher = dispatcher or Dispatcher()
        self._clock = clock
        self.sync_manager = SyncManager(refresh=self.refresh, clock=clock)
        self.warnings: list[Warning] = []

    @property
    def _cache_key(self) -> str:
        return f"linked:{self.config.CONFIG_CONTENT_TYPE}:{self.config.DATA_CONTENT_TYPE}"

    # -- fetching ------------------------------------------------------------

    async def load_records(self) -> list[LinkedRecord]:
        """
        Fetch, validate and join both collections. Cached on success.
        Resets `warnings` to the link-stage warnings of the join being served.
        """
        join = self.cache.get(self._cache_key)
        if join is None:
            join = await self._load_join()
            if join is None:
                return []
            self.cache.set(self._cache_key, join)
        self.warnings = list(join.warnings)
        return list(join.records)

    async def _load_join(self) -> _Join | None:
        warnings: list[Warning] = []
        raw_configs, raw_datas = await asyncio.gather(
            self._fetch(self.config.CONFIG_CONTENT_TYPE, warnings),
            self._fetch(self.config.DATA_CONTENT_TYPE, warnings),
        )
        if raw_configs is None or raw_datas is None:
            self.warnings = warnings
            return None

        configs = to_config_entries(raw_configs, warnings)
        datas = to_data_entries(raw_datas, warnings)
        result = link_with_report(configs, datas)
        warnings.extend(result.warnings)

        logger.info(
            "composition: linked %d of %d data entries against %d configs",
            len(result.records),
            len(datas),
            len(configs),
        )
        return _Join(records=tuple(result.records), warnings=tuple(warnings))

    async def _fetch(self, content_type: str, warnings: list[Warning]) -> list[dict[str, Any]] | None:
        try:
            return await self.store.fetch_entries_by_type(content_type)
        except Exception as e:
            # Store failures are the store's concern; here they mean "not yet available"
            logger.warning("composition: fetch failed for %s: %s", content_type, e)
            warnings.append(
                Warning(
                    code="FETCH_FAILED",
                    message=f"Fetching '{content_type}' failed",
                    details={"content_type": content_type, "error": str(e)},
                )
            )
            return None

    async def refresh(self) -> None:
        """Drop the cached join so the next read refetches."""
        self.cache.invalidate(self._cache_key)

    async def sync(self) -> bool:
        return await self.sync_manager.sync()

    async def sync_if_stale(self) -> bool:
        """Sync when the last one is older than the sync interval. Returns whether it ran."""
        if not should_refresh(self.sync_manager.last_update, self.config.SYNC_INTERVAL_SECONDS, self._clock()):
            return False
        return await self.sync()

    # -- resolution ----------------------------------------------------------
    #
    # Every read path starts with load_records(), so `warnings` holds the
    # warnings of the latest call only.

    async def resolved_records(self) -> list[ResolvedNode]:
        records = await self.load_records()
        lookup = index_records(records)
        return [self._resolve(record, lookup) for record in records]

    async def pages(self) -> list[tuple[LinkedRecord, ResolvedNode]]:
        """Routable pages: page-typed configs that carry a slug."""
        records = await self.load_records()
        lookup = index_records(records)
        return [
            (record, self._resolve(record, lookup))
            for record in records
            if record.config.type == self.config.PAGE_CONFIG_TYPE and record.config.slug
        ]

    async def page_by_slug(self, slug: str) -> RenderInstruction | None:
        for record, node in await self.pages():
            if record.config.slug == slug:
                return self._dispatch(node)
        return None

    async def render_all(self) -> list[RenderInstruction]:
        return [self._dispatch(node) for node in await self.resolved_records()]

    def _resolve(self, record: LinkedRecord, lookup: dict[str, LinkedRecord]) -> ResolvedNode:
        result = resolve_with_report(record, lookup=lookup, max_depth=self.config.MAX_RESOLVE_DEPTH)
        self.warnings.extend(result.warnings)
        return result.node

    def _dispatch(self, node: ResolvedNode) -> RenderInstruction:
        instruction, warnings = self.dispatcher.dispatch_with_report(node)
        self.warnings.extend(warnings)
        return instruction

    # -- editing -------------------------------------------------------------

    async def preview_for(self, data_id: str, **kwargs: Any) -> PreviewList | None:
        """An editing session seeded from one record's components."""
        for node in await self.resolved_records():
            if node.source_id == data_id:
                return PreviewList.from_node(node, **kwargs)
        return None
