"""
Single-slot cache for the full employee collection.

States: EMPTY -> (load succeeds) -> POPULATED -> (sweep | evict) -> EMPTY.

All state changes happen on the event loop without an intervening await, so
a reader sees either the whole entry or a clean miss. Concurrent readers on
a miss share one in-flight load.

A sweep only expires the entry; a load in flight keeps running and stores its
result. An eviction after a write also invalidates the in-flight load, since
it may predate the write.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple, TYPE_CHECKING

from shared.logging import get_logger
from ..models import EmployeeRecord

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_SWEEP_INTERVAL = 60.0

Loader = Callable[[], Awaitable[Sequence[EmployeeRecord]]]


@dataclass(frozen=True)
class CacheEntry:
    """Last fetched collection and when it was stored."""
    records: Tuple[EmployeeRecord, ...]
    created_at: float = field(default_factory=time.time)


def _retrieve_exception(task: asyncio.Task):
    if not task.cancelled():
        task.exception()


class CollectionCache:
    """Time-boxed, single-flight cache of one value: the employee collection."""

    def __init__(
        self,
        loader: Loader,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self._loader = loader
        self.sweep_interval = sweep_interval
        self.metrics = metrics
        self.logger = get_logger("employees.collection_cache")

        self._entry: Optional[CacheEntry] = None
        self._inflight: Optional[asyncio.Task] = None
        # Bumped on every eviction; a load started under an older generation
        # must not store its result
        self._generation = 0

        self._stats = {"hits": 0, "misses": 0, "loads": 0, "load_failures": 0, "evictions": 0, "sweeps": 0}

        self._sweep_task: Optional[asyncio.Task] = None
        self.running = False

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    @property
    def is_populated(self) -> bool:
        return self._entry is not None

    async def get(self) -> Tuple[EmployeeRecord, ...]:
        """Return the cached collection, loading it on a miss."""
        entry = self._entry
        if entry is not None:
            self._count("hits", "hit")
            return entry.records

        self._count("misses", "miss")
        if self._inflight is None:
            self.logger.info("Collection cache miss, loading from upstream", generation=self._generation)
            self._inflight = asyncio.create_task(self._load(self._generation))
            # Failures are logged in _load; readers may all have gone by then
            self._inflight.add_done_callback(_retrieve_exception)
        else:
            self.logger.debug("Collection cache miss, joining in-flight load")

        # Shielded so a cancelled reader does not cancel the load for the others
        return await asyncio.shield(self._inflight)

    async def _load(self, generation: int) -> Tuple[EmployeeRecord, ...]:
        task = asyncio.current_task()
        try:
            records = tuple(await self._loader())
        except Exception as exc:
            self._count("load_failures", "load_failure")
            self.logger.warning("Collection load failed, cache stays empty", error=str(exc))
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

        self._count("loads", "load")
        if generation == self._generation:
            self._entry = CacheEntry(records=records)
            self.logger.info("Collection cache populated", records=len(records))
        else:
            self.logger.info("Discarding collection loaded before an eviction", records=len(records))
        return records

    def evict(self, reason: str = "manual") -> bool:
        """Invalidate the cached collection after a write upstream.

        A load already in flight may predate the write, so its result is not
        stored and readers arriving after this point start a fresh load.
        Returns whether an entry was present.
        """
        had_entry = self._clear()
        self._generation += 1
        self._inflight = None

        self.logger.info("Clearing collection cache", reason=reason, had_entry=had_entry)
        return had_entry

    def sweep(self) -> bool:
        """Expire the cached collection. An in-flight load is left to finish and store."""
        self._stats["sweeps"] += 1
        had_entry = self._clear()
        if had_entry:
            self.logger.info("Collection cache expired", reason="ttl")
        return had_entry

    def _clear(self) -> bool:
        had_entry = self._entry is not None
        self._entry = None
        if had_entry:
            self._count("evictions", "evict")
        return had_entry

    async def start(self):
        """Start the periodic sweep."""
        if self.running:
            return
        self.running = True
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        self.logger.info("Collection cache sweeper started", interval=self.sweep_interval)

    async def stop(self):
        """Stop the periodic sweep and cancel any load still in flight."""
        self.running = False
        for task in (self._sweep_task, self._inflight):
            if task is None:
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as exc:
                self.logger.warning("In-flight collection load failed during shutdown", error=str(exc))
        self._sweep_task = None
        self._inflight = None

        self.logger.info("Collection cache sweeper stopped")

    async def _sweep_loop(self):
        """Expire the entry every ``sweep_interval`` seconds, regardless of age."""
        while self.running:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        entry = self._entry
        return {
            **self._stats,
            "populated": entry is not None,
            "records": len(entry.records) if entry else 0,
            "age_seconds": round(time.time() - entry.created_at, 3) if entry else None,
            "loading": self._inflight is not None,
            "sweep_interval": self.sweep_interval,
        }

    def _count(self, stat: str, event: str):
        self._stats[stat] += 1
        if self.metrics is not None:
            self.metrics.increment_counter("cache_events_total", event=event)
