"""
Progress reporting for pipeline runs.

The pipeline reports each step transition as `(step_index, status, message)`.
Any callable with that signature can receive them. `ProgressChannel` is the
fan-out variant: several observers (a live terminal display, a log, a test
recorder) subscribe to one channel and the pipeline only ever sees a single
callable.
"""
from __future__ import annotations

from typing import Callable, Literal, Protocol

from notegen.core.logging_config import get_logger
from notegen.models.workflow_schemas import StepEvent

logger = get_logger(__name__)

StepStatus = Literal["running", "done"]
StepCallback = Callable[[int, StepStatus, str], None]


class ProgressListener(Protocol):
    def __call__(self, step_index: int, status: StepStatus, message: str) -> None: ...


class ProgressChannel:
    """Observer hub for step events.

    Listeners are called synchronously, in subscription order. A listener that
    raises is logged and skipped so a broken display never aborts a run.

    `events` keeps every event seen since construction or the last `clear()`;
    clear the channel before reusing it for another run.
    """

    def __init__(self) -> None:
        self._listeners: list[ProgressListener] = []
        self.events: list[StepEvent] = []

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ProgressListener) -> None:
        self._listeners = [l for l in self._listeners if l is not listener]

    def clear(self) -> None:
        self.events = []

    def __call__(self, step_index: int, status: StepStatus, message: str) -> None:
        self.events.append(StepEvent(step_index=step_index, status=status, message=message))
        for listener in list(self._listeners):
            try:
                listener(step_index, status, message)
            except Exception as e:
                logger.warning("Progress listener error on step %s (%s): %s", step_index, status, e)


class PrinterProgressListener:
    """Renders step events on a `Printer`."""

    def __init__(self, printer, step_names: list[str]):
        self.printer = printer
        self.step_names = step_names

    def __call__(self, step_index: int, status: StepStatus, message: str) -> None:
        item_id = f"step_{step_index}"
        name = self.step_names[step_index] if step_index < len(self.step_names) else f"Step {step_index + 1}"
        if status == "running":
            self.printer.update_item(item_id, f"🔄 {name}: {message}")
        else:
            self.printer.update_item(item_id, name, is_done=True)
