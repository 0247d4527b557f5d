from __future__ import annotations

import itertools
import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

import httpx
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ...core.constants import (
    DEFAULT_SYNC_BACKOFF_SECONDS,
    DEFAULT_SYNC_MAX_ATTEMPTS,
    DEFAULT_SYNC_TIMEOUT_SECONDS,
    DEFAULT_SYNC_WORKER_INTERVAL_SECONDS,
)

logger = logging.getLogger(__name__)

SYNC_JOB_ID = "sheets-sync"

_ids = itertools.count(1)


@dataclass
class SyncTask:
    url: str
    payload: dict[str, Any]
    task_id: int = field(default_factory=lambda: next(_ids))
    attempts: int = 0
    next_attempt_at: Optional[datetime] = None
    last_error: Optional[str] = None


@dataclass(frozen=True)
class FlushResult:
    sent: int = 0
    retried: int = 0
    dead: int = 0


class SheetsSyncQueue:
    """Outbound queue for spreadsheet sync, off the attendance save path.

    Failed deliveries (transport error or non-2xx) are retried with exponential
    backoff; after `max_attempts` the task moves to `dead_letters`.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        timeout: float = DEFAULT_SYNC_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_SYNC_MAX_ATTEMPTS,
        backoff: timedelta = timedelta(seconds=DEFAULT_SYNC_BACKOFF_SECONDS),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._max_attempts = max(1, int(max_attempts))
        self._backoff = backoff
        self._clock = clock
        self._pending: list[SyncTask] = []
        self._dead: list[SyncTask] = []
        self._lock = threading.Lock()

    @property
    def pending(self) -> list[SyncTask]:
        with self._lock:
            return list(self._pending)

    @property
    def dead_letters(self) -> list[SyncTask]:
        with self._lock:
            return list(self._dead)

    def enqueue(self, url: str, payload: dict[str, Any]) -> Optional[SyncTask]:
        if not url:
            return None
        task = SyncTask(url=url, payload=payload)
        with self._lock:
            self._pending.append(task)
        logger.debug("Queued sheets sync #%d for %s %s", task.task_id, payload.get("courseName"), payload.get("date"))
        return task

    def flush(self, now: Optional[datetime] = None) -> FlushResult:
        """Deliver every task that is due; returns what happened."""

        now = now or self._clock()
        with self._lock:
            due = [t for t in self._pending if t.next_attempt_at is None or t.next_attempt_at <= now]
            self._pending = [t for t in self._pending if t not in due]

        sent = retried = dead = 0
        keep: list[SyncTask] = []
        for task in due:
            task.attempts += 1
            error = self._deliver(task)
            if error is None:
                sent += 1
                continue

            task.last_error = error
            if task.attempts >= self._max_attempts:
                dead += 1
                logger.error("Sheets sync #%d dropped after %d attempts: %s", task.task_id, task.attempts, error)
                with self._lock:
                    self._dead.append(task)
            else:
                retried += 1
                task.next_attempt_at = now + self._backoff * (2 ** (task.attempts - 1))
                logger.warning(
                    "Sheets sync #%d failed (attempt %d/%d): %s",
                    task.task_id,
                    task.attempts,
                    self._max_attempts,
                    error,
                )
                keep.append(task)

        with self._lock:
            self._pending.extend(keep)
        return FlushResult(sent=sent, retried=retried, dead=dead)

    def _deliver(self, task: SyncTask) -> Optional[str]:
        try:
            # Apps Script web apps accept a JSON string posted as text/plain.
            resp = self._client.post(
                task.url,
                content=json.dumps(task.payload, ensure_ascii=False),
                headers={"Content-Type": "text/plain;charset=utf-8"},
            )
        except httpx.HTTPError as e:
            return f"{type(e).__name__}: {e}"
        if not resp.is_success:
            return f"HTTP {resp.status_code}"
        logger.info("Sheets sync #%d delivered (%s)", task.task_id, resp.status_code)
        return None

    def close(self) -> None:
        self._client.close()


def build_sync_scheduler(
    queue: SheetsSyncQueue,
    *,
    interval: float = DEFAULT_SYNC_WORKER_INTERVAL_SECONDS,
) -> BackgroundScheduler:
    """Background scheduler that drains the queue every `interval` seconds. Not started."""

    scheduler = BackgroundScheduler(daemon=True)
    scheduler.add_job(
        func=queue.flush,
        trigger=IntervalTrigger(seconds=interval),
        id=SYNC_JOB_ID,
        name="Drain sheets sync queue",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler
