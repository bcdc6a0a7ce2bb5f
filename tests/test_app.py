import json

import pytest

pytest.importorskip("PyQt6.QtWidgets")

from archlens.app import LoadWorker, MainWindow  # noqa: E402


@pytest.fixture
def window(qapp):
    w = MainWindow()
    yield w
    w.canvas.deactivate()
    w.deleteLater()


def test_set_analysis_logs_load(window, billing_components, billing_architecture):
    window.set_analysis(billing_components, billing_architecture)
    log = window.txt_log.toPlainText()
    assert "[load] components=2, edges=1, proposals=2" in log
    assert "[ready]" not in log


def test_set_analysis_cancels_a_held_drag(window, billing_components, billing_architecture):
    window.set_analysis(billing_components, billing_architecture)
    window.controller.drag_start("A")
    window.set_analysis(billing_components, billing_architecture)
    assert window.controller.dragging is None
    assert window.scene.sim.pins() == {}


def test_worker_reports_malformed_documents(qapp, tmp_path):
    comps = tmp_path / "components.json"
    comps.write_text(json.dumps({"components": ["com.x.Foo"]}), encoding="utf-8")
    failures, results = [], []
    worker = LoadWorker(str(comps), str(comps))
    worker.failed.connect(failures.append)
    worker.finished.connect(lambda c, a: results.append((c, a)))
    worker.run()
    assert not results
    assert failures and failures[0].startswith("AnalysisFormatError")


def test_worker_reports_missing_files(qapp, tmp_path):
    failures = []
    worker = LoadWorker(str(tmp_path / "nope.json"), str(tmp_path / "nope.json"))
    worker.failed.connect(failures.append)
    worker.run()
    assert failures and failures[0].startswith("FileNotFoundError")
