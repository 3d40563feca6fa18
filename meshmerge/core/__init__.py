"""Core utilities: events, cooperative task scheduling."""

from meshmerge.core.event import Event
from meshmerge.core.scheduler import TaskScheduler, Task

__all__ = ["Event", "TaskScheduler", "Task"]
