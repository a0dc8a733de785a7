"""Handle on the background scheduler, read by the health endpoint."""
from __future__ import annotations

from apscheduler.schedulers.base import BaseScheduler

_scheduler: BaseScheduler | None = None


def set_scheduler(scheduler: BaseScheduler | None) -> None:
    global _scheduler
    _scheduler = scheduler


def get_scheduler() -> BaseScheduler | None:
    return _scheduler


def is_scheduler_active() -> bool:
    """True while a started scheduler is registered."""

    return _scheduler is not None and _scheduler.running
