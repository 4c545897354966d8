"""
Task Runner
===========

Runs an ordered list of named tasks against one shared context.

Tasks run strictly one after another. A task whose ``skip`` predicate holds
for the current context is omitted entirely. The first failing task aborts
the run and its exception propagates unchanged to the caller.
"""

import inspect
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    List,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
    Union,
)

from carbon_now.config.logging import get_logger
from carbon_now.core.exceptions import CarbonNowError

logger = get_logger(__name__)

ContextT = TypeVar("ContextT")

TaskAction = Callable[[ContextT], Union[None, Awaitable[None]]]
SkipPredicate = Callable[[ContextT], bool]


@dataclass(frozen=True)
class Task(Generic[ContextT]):
    """One pipeline stage."""

    title: str
    action: TaskAction
    skip: Optional[SkipPredicate] = None

    def should_skip(self, context: ContextT) -> bool:
        return bool(self.skip(context)) if self.skip is not None else False


class TaskReporter(Protocol):
    """Receives progress events from a running pipeline."""

    def task_started(self, title: str) -> None: ...

    def task_completed(self, title: str) -> None: ...

    def task_failed(self, title: str, error: BaseException) -> None: ...


class TaskRunner(Generic[ContextT]):
    """Sequential task runner with abort-on-first-failure semantics."""

    def __init__(
        self, tasks: Sequence[Task[ContextT]], reporter: Optional[TaskReporter] = None
    ):
        self.tasks: List[Task[ContextT]] = list(tasks)
        self.reporter = reporter
        self.logger: Any = logger.bind(component="task_runner")

    async def run(self, context: ContextT) -> ContextT:
        """
        Run every non-skipped task in order.

        Args:
            context: Mutable state shared by all tasks of this run

        Returns:
            The same context, after every task ran

        Raises:
            Whatever the first failing task raised
        """
        for index, task in enumerate(self.tasks):
            if task.should_skip(context):
                self.logger.debug("Task skipped", task=task.title, index=index)
                continue

            self.logger.debug("Task started", task=task.title, index=index)
            if self.reporter is not None:
                self.reporter.task_started(task.title)

            try:
                result = task.action(context)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                if isinstance(e, CarbonNowError) and e.task_title is None:
                    e.task_title = task.title
                self.logger.error("Task failed", task=task.title, index=index, error=str(e))
                if self.reporter is not None:
                    self.reporter.task_failed(task.title, e)
                raise

            self.logger.debug("Task completed", task=task.title, index=index)
            if self.reporter is not None:
                self.reporter.task_completed(task.title)

        return context
