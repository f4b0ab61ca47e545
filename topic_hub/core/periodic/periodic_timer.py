from __future__ import annotations

import contextlib
import threading
from typing import Any, Callable, Dict, Optional

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from topic_hub.config.settings import settings
from topic_hub.core.observability.metrics import PERIODIC_TIMERS
from topic_hub.core.topic.handlers import TopicHandler
from topic_hub.utils.logger import setup_logger

logger = setup_logger(__name__)


class PeriodicTimerCoordinator:
    """
    Owns the recurring jobs started by topic handlers.
    Jobs are grouped per handler (by handler name) so that all of a handler's
    timers can be dropped at once when its topic runs out of subscribers.
    """

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None, *, misfire_grace_time: Optional[int] = None) -> None:
        self._scheduler = scheduler or AsyncIOScheduler(timezone=settings.TIMEZONE)
        if misfire_grace_time is None:
            misfire_grace_time = settings.TIMER_MISFIRE_GRACE_TIME
        elif misfire_grace_time <= 0:
            raise ValueError(f"misfire_grace_time must be a positive number of seconds, got {misfire_grace_time}")
        self._misfire_grace_time = misfire_grace_time
        self._timers: Dict[str, Dict[str, Job]] = {}
        self._lock = threading.RLock()

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()

    def shutdown(self, wait: bool = False) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)

    @staticmethod
    def _job_id(handler: TopicHandler, name: str) -> str:
        return f"{handler.name}:{name}"

    def register(self, handler: TopicHandler, name: str, seconds: float, callback: Callable[..., Any], *args: Any, **kwargs: Any) -> Job:
        """Run ``callback`` every ``seconds`` on behalf of ``handler``. Registering an existing name is a no-op."""
        with self._lock:
            timers = self._timers.setdefault(handler.name, {})
            existing = timers.get(name)
            if existing is not None:
                return existing

            job = self._scheduler.add_job(
                callback,
                IntervalTrigger(seconds=seconds, timezone=self._scheduler.timezone),
                args=args,
                kwargs=kwargs,
                id=self._job_id(handler, name),
                coalesce=True,
                replace_existing=True,
                misfire_grace_time=self._misfire_grace_time,
            )
            timers[name] = job
            PERIODIC_TIMERS.inc()
            logger.info("Periodic timer %s registered for handler %s every %ss", name, handler.name, seconds)
            return job

    def is_registered(self, handler: TopicHandler) -> bool:
        with self._lock:
            return bool(self._timers.get(handler.name))

    def is_active(self, handler: TopicHandler, name: str) -> bool:
        with self._lock:
            return name in self._timers.get(handler.name, {})

    def get(self, handler: TopicHandler, name: str) -> Optional[Job]:
        with self._lock:
            return self._timers.get(handler.name, {}).get(name)

    def get_all(self, handler: TopicHandler) -> Dict[str, Job]:
        with self._lock:
            return dict(self._timers.get(handler.name, {}))

    def cancel(self, handler: TopicHandler, name: str) -> None:
        with self._lock:
            timers = self._timers.get(handler.name)
            if not timers or name not in timers:
                return
            job = timers.pop(name)
            if not timers:
                del self._timers[handler.name]
            self._remove_job(job)
            logger.info("Periodic timer %s cancelled for handler %s", name, handler.name)

    def clear(self, handler: TopicHandler) -> None:
        """Drop every timer owned by ``handler``; safe when it has none."""
        with self._lock:
            timers = self._timers.pop(handler.name, None)
            if not timers:
                return
            for job in timers.values():
                self._remove_job(job)
            logger.info("Cleared %d periodic timer(s) for handler %s", len(timers), handler.name)

    def _remove_job(self, job: Job) -> None:
        # the scheduler may already have dropped it
        with contextlib.suppress(JobLookupError):
            self._scheduler.remove_job(job.id)
        PERIODIC_TIMERS.dec()


class PeriodicTimerMixin:
    """Gives a handler access to the coordinator the dispatcher hands it."""

    periodic_timer: Optional[PeriodicTimerCoordinator] = None

    def set_periodic_timer(self, periodic_timer: PeriodicTimerCoordinator) -> None:
        self.periodic_timer = periodic_timer
