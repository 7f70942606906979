from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot

from ductbank.model.ductbank import DuctbankSnapshot

from .solver import DuctbankFieldSolver, RelaxationRun

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolveRequest:
    """Message handed to a worker: one immutable ductbank snapshot."""

    snapshot: DuctbankSnapshot


class FieldSolveWorker(QObject):
    """
    Runs a field solve off the GUI thread.

    Emits ``progress(iteration, cap)`` every progress interval, then either
    ``finished(FieldSolveResult)`` or ``error(message)``. ``cancel()`` may be
    called from any thread and takes effect between sweeps.
    """

    progress = Signal(int, int)
    finished = Signal(object)
    error = Signal(str)

    def __init__(self, request: SolveRequest, solver: Optional[DuctbankFieldSolver] = None) -> None:
        super().__init__()
        self._request = request
        self._solver = solver or DuctbankFieldSolver()
        self._run: Optional[RelaxationRun] = None
        self._cancel_requested = False

    @Slot()
    def run(self) -> None:
        try:
            self._run = self._solver.start(self._request.snapshot)
            if self._cancel_requested:
                self._run.cancel()
            result = self._run.run(self._handle_progress)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Field solve failed")
            self.error.emit(str(exc))
            return
        self.finished.emit(result)

    def cancel(self) -> None:
        self._cancel_requested = True
        if self._run is not None:
            self._run.cancel()

    def _handle_progress(self, iteration: int, cap: int) -> None:
        self.progress.emit(iteration, cap)


def start_worker_thread(worker: FieldSolveWorker, parent: Optional[QObject] = None) -> QThread:
    """Move ``worker`` to a new thread that starts solving and quits when the worker is done."""
    thread = QThread(parent)
    worker.moveToThread(thread)
    thread.started.connect(worker.run)
    worker.finished.connect(thread.quit)
    worker.error.connect(thread.quit)
    thread.finished.connect(worker.deleteLater)
    thread.start()
    return thread
