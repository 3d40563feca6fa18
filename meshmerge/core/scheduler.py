"""TaskScheduler - drives generator-based tasks one step per tick."""

from __future__ import annotations

from typing import Any, Callable, Generator, Optional

from meshmerge import log


class Task:
    """
    One cooperative task: a generator pulled by TaskScheduler.

    Each next() is one unit of work. The value returned by the generator
    (StopIteration.value) is kept in `result`.
    """

    def __init__(
        self,
        generator: Generator[Any, None, Any],
        name: str = "",
        on_done: Optional[Callable[["Task"], None]] = None,
    ):
        self.generator = generator
        self.name = name
        self.on_done = on_done
        self.steps = 0
        self.result: Any = None
        self.finished = False
        self.failed = False
        self.cancelled = False

    def step(self) -> bool:
        """Advance the task by one step. Returns True while still alive."""
        if self.finished:
            return False
        try:
            next(self.generator)
            self.steps += 1
            return True
        except StopIteration as stop:
            self.result = stop.value
        except Exception as e:
            log.error(e, f"[TaskScheduler] Task '{self.name}' failed")
            self.failed = True
        self.finished = True
        if self.on_done is not None:
            self.on_done(self)
        return False


class TaskScheduler:
    """
    Cooperative scheduler for long-running work.

    Usage:
        scheduler = TaskScheduler()
        scheduler.add(synthesizer.generate(proxy_node, sink), name="bodies")

        # In game loop
        scheduler.tick()
    """

    def __init__(self):
        self._tasks: list[Task] = []

    def add(
        self,
        generator: Generator[Any, None, Any],
        name: str = "",
        on_done: Optional[Callable[[Task], None]] = None,
    ) -> Task:
        task = Task(generator, name=name, on_done=on_done)
        self._tasks.append(task)
        return task

    def tick(self) -> int:
        """Advance every active task by one step. Returns number of tasks still alive."""
        alive = []
        for task in self._tasks:
            if task.step():
                alive.append(task)
        self._tasks = alive
        return len(alive)

    def run_until_complete(self, max_ticks: int = 0) -> int:
        """
        Tick until no task is left.

        Args:
            max_ticks: Stop after this many ticks (0 - no limit).

        Returns:
            Number of ticks performed.
        """
        ticks = 0
        while self._tasks:
            self.tick()
            ticks += 1
            if max_ticks and ticks >= max_ticks:
                break
        return ticks

    def clear(self) -> int:
        """Drop all pending tasks. They are marked finished and cancelled, on_done is not called."""
        count = len(self._tasks)
        for task in self._tasks:
            task.generator.close()
            task.finished = True
            task.cancelled = True
        self._tasks.clear()
        return count

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def __bool__(self) -> bool:
        return bool(self._tasks)
