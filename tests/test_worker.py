import pytest

QtCore = pytest.importorskip("PySide6.QtCore")

from ductbank.thermal import DuctbankFieldSolver, FieldSolveResult, SolverConfig  # noqa: E402
from ductbank.thermal.worker import FieldSolveWorker, SolveRequest, start_worker_thread  # noqa: E402


@pytest.fixture(scope="module")
def qt_app():
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app


class ExplodingSolver(DuctbankFieldSolver):
    def start(self, snapshot):
        raise RuntimeError("grid could not be built")


def _collect(worker):
    seen = {"progress": [], "finished": [], "error": []}
    worker.progress.connect(lambda it, cap: seen["progress"].append((it, cap)))
    worker.finished.connect(lambda result: seen["finished"].append(result))
    worker.error.connect(lambda message: seen["error"].append(message))
    return seen


def test_worker_emits_progress_and_result(qt_app, single_conduit_snapshot):
    solver = DuctbankFieldSolver(config=SolverConfig(max_iterations=50, tolerance_c=0.0, progress_interval=10))
    worker = FieldSolveWorker(SolveRequest(single_conduit_snapshot), solver)
    seen = _collect(worker)
    worker.run()
    assert seen["progress"] == [(10, 50), (20, 50), (30, 50), (40, 50), (50, 50)]
    assert len(seen["finished"]) == 1
    assert isinstance(seen["finished"][0], FieldSolveResult)
    assert seen["error"] == []


def test_worker_reports_failures_as_error_signal(qt_app, single_conduit_snapshot):
    worker = FieldSolveWorker(SolveRequest(single_conduit_snapshot), ExplodingSolver())
    seen = _collect(worker)
    worker.run()
    assert seen["error"] == ["grid could not be built"]
    assert seen["finished"] == []


def test_worker_cancelled_before_start(qt_app, single_conduit_snapshot):
    worker = FieldSolveWorker(SolveRequest(single_conduit_snapshot))
    seen = _collect(worker)
    worker.cancel()
    worker.run()
    result = seen["finished"][0]
    assert result.cancelled
    assert result.iterations == 0


def test_worker_runs_on_its_own_thread(qt_app, single_conduit_snapshot):
    solver = DuctbankFieldSolver(config=SolverConfig(max_iterations=40))
    worker = FieldSolveWorker(SolveRequest(single_conduit_snapshot), solver)
    seen = _collect(worker)

    loop = QtCore.QEventLoop()
    thread = start_worker_thread(worker)
    thread.finished.connect(loop.quit)
    QtCore.QTimer.singleShot(10000, loop.quit)
    loop.exec()

    assert thread.wait(5000)
    assert len(seen["finished"]) == 1
    assert seen["finished"][0].iterations <= 40
