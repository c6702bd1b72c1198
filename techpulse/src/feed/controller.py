"""
Aggregation controller — owns every dashboard column (SourceInstance) and the
only code path that mutates them.

  activate_source / deactivate_source   column lifecycle
  load_more                             next page for one column, appended
  refresh_one / refresh_all             reset to page one and reload

Each fetch runs as its own asyncio.Task tagged with a RequestTag (refresh
epoch + serial). A finished task may only write to its column if the column
still exists, still holds that exact tag, and the tag's epoch is current.
Cancelled or superseded fetches are dropped without touching state.
"""
import asyncio
import itertools
import secrets
from collections.abc import Mapping
from typing import Any

from loguru import logger

from src.collectors.base import WINDOW_SECONDS, BaseCollector, Page, SourceParams, SourceType
from src.collectors.errors import SourceError
from src.feed.state import InstanceSnapshot, RequestTag, SourceInstance
from src.feed.view import project


class AggregationController:

    def __init__(self, collectors: Mapping[SourceType, BaseCollector]):
        self._collectors: dict[SourceType, BaseCollector] = dict(collectors)
        self._instances:  dict[str, SourceInstance] = {}
        self._epoch  = 0
        self._serial = itertools.count(1)

    @property
    def epoch(self) -> int:
        return self._epoch

    # ── Column lifecycle ──────────────────────────────────────────────────────

    def activate_source(self, source_type: SourceType | str, params: SourceParams | None = None) -> str:
        """Add a column for `source_type`. Nothing is fetched until load_more / refresh."""
        source_type = SourceType(source_type)
        collector = self._collectors.get(source_type)
        if collector is None:
            raise ValueError(f"no collector registered for source type {source_type.value!r}")

        params = params or SourceParams()
        _validate_params(params)

        instance_id = _new_instance_id(source_type)
        while instance_id in self._instances:
            instance_id = _new_instance_id(source_type)

        self._instances[instance_id] = SourceInstance(
            instance_id = instance_id,
            source_type = source_type,
            params      = params,
            paginated   = collector.paginated,
            has_more    = collector.paginated,
        )
        logger.info(f"[Feed] activated {instance_id}")
        return instance_id

    def deactivate_source(self, instance_id: str) -> None:
        inst = self._instances.pop(instance_id)
        if inst.is_loading:
            logger.debug(f"[Feed] {instance_id} removed with a request in flight — cancelling")
        inst.cancel_in_flight()
        inst.is_loading = False
        logger.info(f"[Feed] deactivated {instance_id}")

    def update_params(self, instance_id: str, params: SourceParams) -> None:
        """Replace a column's query / window. Takes effect on the next refresh."""
        _validate_params(params)
        self._get(instance_id).params = params

    def dismiss_error(self, instance_id: str) -> None:
        self._get(instance_id).last_error = None

    # ── Loading ───────────────────────────────────────────────────────────────

    async def load_more(self, instance_id: str) -> None:
        """
        Fetch the next page and append it. No-op while a request is in flight
        or once the source reports no more pages. A failure keeps every item
        already loaded and records last_error.
        """
        inst = self._get(instance_id)
        if inst.is_loading or not inst.has_more:
            logger.debug(
                f"[Feed] load_more({instance_id}) skipped "
                f"(loading={inst.is_loading}, has_more={inst.has_more})"
            )
            return

        tag = self._begin(inst)
        await self._dispatch(inst, tag)

    async def refresh_one(self, instance_id: str) -> None:
        """Drop one column's buffer and reload its first page. Other columns are untouched."""
        inst = self._get(instance_id)
        inst.cancel_in_flight()
        inst.reset()
        tag = self._begin(inst)
        await self._dispatch(inst, tag)

    async def refresh_all(self) -> None:
        """
        Start a new refresh epoch: cancel everything in flight, reset every
        column, then load every first page concurrently. A failing column only
        sets its own last_error; the others still complete.
        """
        self._epoch += 1
        instances = list(self._instances.values())
        logger.info(f"[Feed] refresh #{self._epoch} — {len(instances)} columns")

        dispatches = []
        for inst in instances:
            inst.cancel_in_flight()
            inst.reset()
            dispatches.append(self._dispatch(inst, self._begin(inst)))

        results = await asyncio.gather(*dispatches, return_exceptions=True)

        loaded = [r for r in results if isinstance(r, Page)]
        failed = [r for r in results if isinstance(r, SourceError)]
        errors = [r for r in results if isinstance(r, Exception) and not isinstance(r, SourceError)]
        logger.info(
            f"[Feed] refresh #{self._epoch} done — {len(loaded)} loaded, "
            f"{len(failed)} failed, {sum(r is None for r in results)} superseded"
        )
        if errors:
            raise errors[0]

    async def shutdown(self) -> None:
        """Cancel every in-flight request and wait for the tasks to unwind."""
        tasks = [inst.task for inst in self._instances.values() if inst.task is not None]
        for inst in self._instances.values():
            inst.cancel_in_flight()
            inst.is_loading = False
        if tasks:
            await asyncio.wait(tasks)

    # ── Read side ─────────────────────────────────────────────────────────────

    def snapshot(self) -> dict[str, InstanceSnapshot]:
        """Read-only copy of every column, in activation order."""
        return {iid: inst.snapshot() for iid, inst in self._instances.items()}

    def view(self, filter_text: str = "", sort_by: str | None = None) -> dict[str, tuple]:
        return project(self.snapshot(), filter_text, sort_by)

    # ── Internals ─────────────────────────────────────────────────────────────

    def _get(self, instance_id: str) -> SourceInstance:
        try:
            return self._instances[instance_id]
        except KeyError:
            raise KeyError(f"unknown source instance: {instance_id}") from None

    def _begin(self, inst: SourceInstance) -> RequestTag:
        """Claim the column for a new request; any older tag becomes stale."""
        tag = RequestTag(epoch=self._epoch, serial=next(self._serial))
        inst.request    = tag
        inst.is_loading = True
        return tag

    def _is_current(self, instance_id: str, tag: RequestTag) -> bool:
        inst = self._instances.get(instance_id)
        return inst is not None and inst.request == tag and tag.epoch == self._epoch

    async def _dispatch(self, inst: SourceInstance, tag: RequestTag) -> Page | SourceError | None:
        """
        Run one fetch for `inst` under `tag` and apply it if still current.
        Returns the Page or SourceError that was applied, None if it was discarded.
        """
        if not self._is_current(inst.instance_id, tag):
            return None

        collector = self._collectors[inst.source_type]
        task = asyncio.create_task(
            _fetch(collector, inst.params, inst.cursor),
            name=f"fetch:{inst.instance_id}:{tag.serial}",
        )
        inst.task = task

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # caller cancelled: cancel the fetch too
            if self._is_current(inst.instance_id, tag):
                inst.cancel_in_flight()
                inst.is_loading = False
            else:
                task.cancel()
            raise

        if task.cancelled():
            logger.debug(f"[Feed] {inst.instance_id} request #{tag.serial} cancelled")
            return None

        if not self._is_current(inst.instance_id, tag):
            exc = task.exception()
            if exc is not None:
                logger.error(f"[Feed] stale request #{tag.serial} for {inst.instance_id} raised: {exc!r}")
            else:
                logger.debug(f"[Feed] {inst.instance_id} request #{tag.serial} superseded — result dropped")
            return None

        inst.task       = None
        inst.request    = None
        inst.is_loading = False

        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"[Feed] {inst.instance_id} collector crashed: {exc!r}")
            raise exc

        result = task.result()
        if isinstance(result, SourceError):
            inst.last_error = str(result)
            logger.warning(f"[Feed] {inst.instance_id} failed: {result}")
            return result

        added = inst.append(result.items)
        inst.cursor     = result.next_cursor
        inst.has_more   = inst.paginated and result.has_more
        inst.last_error = None
        logger.info(
            f"[Feed] {inst.instance_id} +{added} items "
            f"(total={len(inst.items)}, has_more={inst.has_more})"
        )
        return result


# ── Helpers ───────────────────────────────────────────────────────────────────

async def _fetch(collector: BaseCollector, params: SourceParams, cursor: Any) -> Page | SourceError:
    try:
        return await collector.fetch_page(params, cursor)
    except SourceError as exc:
        return exc


def _new_instance_id(source_type: SourceType) -> str:
    return f"col_{source_type.value}_{secrets.token_hex(3)}"


def _validate_params(params: SourceParams) -> None:
    if params.window != "all" and params.window not in WINDOW_SECONDS:
        raise ValueError(f"unknown recency window: {params.window!r}")
