"""
Background geo enrichment of recorded clicks.

The click recorder hands each freshly inserted event to an in-process pool
of asyncio workers through a bounded queue. Enrichment is best-effort:

- ``submit`` never blocks; a full queue drops the job and logs it.
- Every job is capped by a timeout, and any failure is logged and discarded.
- An event whose lookup fails simply keeps no geo fields.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from bson import ObjectId

from repositories.click_repository import ClickRepository
from services.geo_enricher import GeoEnricher
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)


@dataclass(frozen=True)
class EnrichmentJob:
    click_id: ObjectId
    client_ip: str
    ip_hash: str


class EnrichmentDispatcher:
    def __init__(
        self,
        enricher: GeoEnricher,
        repository: ClickRepository,
        workers: int = 4,
        queue_size: int = 1000,
        job_timeout: float = 5.0,
        update_timeout: float = 5.0,
    ) -> None:
        self._enricher = enricher
        self._repository = repository
        self._worker_count = max(1, workers)
        self._queue: asyncio.Queue[EnrichmentJob] = asyncio.Queue(maxsize=queue_size)
        self.job_timeout = job_timeout
        self.update_timeout = update_timeout
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def qsize(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._worker(i), name=f"enrichment-worker-{i}")
            for i in range(self._worker_count)
        ]
        log.info("enrichment_workers_started", workers=self._worker_count)

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        log.info("enrichment_workers_stopped", pending=self._queue.qsize())

    async def drain(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    def submit(self, job: EnrichmentJob) -> bool:
        """Queue *job* without blocking. Returns False when it was dropped."""
        try:
            self._queue.put_nowait(job)
            return True
        except asyncio.QueueFull:
            log.warning(
                "enrichment_queue_full",
                click_id=str(job.click_id),
                queue_size=self._queue.maxsize,
            )
            return False

    async def _worker(self, worker_id: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._process(job)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.warning(
                    "enrichment_job_failed",
                    worker_id=worker_id,
                    click_id=str(job.click_id),
                    error=str(e),
                    error_type=type(e).__name__,
                )
            finally:
                self._queue.task_done()

    async def _process(self, job: EnrichmentJob) -> Optional[bool]:
        try:
            geo = await asyncio.wait_for(
                self._enricher.locate(job.client_ip, job.ip_hash),
                timeout=self.job_timeout,
            )
        except asyncio.TimeoutError:
            log.warning(
                "geo_lookup_timeout",
                click_id=str(job.click_id),
                ip=hash_ip(job.client_ip),
            )
            return None

        if geo is None:
            log.debug("geo_enrichment_skipped", click_id=str(job.click_id))
            return None

        try:
            updated = await asyncio.wait_for(
                self._repository.set_geo(job.click_id, geo),
                timeout=self.update_timeout,
            )
        except asyncio.TimeoutError:
            log.warning("geo_update_timeout", click_id=str(job.click_id))
            return None

        log.debug(
            "click_enriched",
            click_id=str(job.click_id),
            country=geo.country,
            updated=updated,
        )
        return updated
