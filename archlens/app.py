#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ArchLens: interactive clustered component graph (PyQt6 + Matplotlib).

Key features:

* Load the analyser's ``components.json`` (components + dependency edges) and
  ``architecture.json`` (microservice proposals, metadata) in a worker thread.
* Force-directed layout (link / many-body / centering / collision) animated
  frame by frame on the Qt event loop; the simulation stops when the Graph tab
  is hidden and restarts from a fresh rebuild when it is shown again.
* Node radius and edge width on square-root scales of lines of code.
* Fill colour by architectural layer, border colour and padded convex hull by
  cluster (stable colours keyed by cluster id), neutral border for unclustered.
* Layer and cluster filters (checkbox lists with All / None).
* Zoom (wheel) and pan (drag background); drag nodes to pin them while the
  rest of the layout reacts; hover for a tooltip; click for full details.
* Move a component to another proposal from the detail dialog; edit proposal
  name / rationale / recommended actions; export the edited architecture JSON.
* Package tree, project summary, and a read-only documentation tab.
* Export figure to PNG / SVG; log panel records loads, filters, edits, errors.
"""

from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from PyQt6.QtCore import Qt, QObject, QThread, pyqtSignal
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QGridLayout,
    QListWidget,
    QListWidgetItem,
    QTreeWidget,
    QTreeWidgetItem,
    QTabWidget,
    QCheckBox,
    QPushButton,
    QLabel,
    QSpinBox,
    QDoubleSpinBox,
    QMessageBox,
    QPlainTextEdit,
    QProgressBar,
    QGroupBox,
    QFileDialog,
)

from .canvas import GraphCanvas
from .config import SimulationConfig
from .dialogs import DetailDialog, ProposalEditDialog
from .errors import ArchLensError
from .hulls import cluster_color, layer_color
from .interaction import InteractionController
from .membership import ProposalStore
from .model import (
    ArchitectureData,
    Component,
    ComponentsData,
    Proposal,
    load_architecture,
    load_components,
    save_architecture,
)
from .narrative import load_narrative
from .scene import GraphScene
from .summary import build_package_tree, proposal_lines, summarize

GRAPH_TAB = 0


# --------------------------- Worker (QThread target) -------------------

class LoadWorker(QObject):
    """Background worker that parses both analysis documents."""

    progress = pyqtSignal(int, str)                 # percent, message
    finished = pyqtSignal(object, object)           # ComponentsData, ArchitectureData
    failed = pyqtSignal(str)

    def __init__(self, components_path: str, architecture_path: str):
        """Store the two document paths."""
        super().__init__()
        self.components_path = components_path
        self.architecture_path = architecture_path

    def run(self) -> None:
        """Parse components, then proposals, and emit results."""
        try:
            self.progress.emit(10, "Reading components...")
            comps = load_components(self.components_path)
            self.progress.emit(60, "Reading proposals...")
            arch = load_architecture(self.architecture_path)
            self.progress.emit(100, "Done.")
            self.finished.emit(comps, arch)
        except Exception as e:
            self.failed.emit(f"{type(e).__name__}: {e}")


# --------------------------- Main Window -------------------------------

class MainWindow(QMainWindow):
    """Main window: inputs, filters, physics controls, graph, proposals, log."""

    def __init__(self):
        """Construct UI and connect signals."""
        super().__init__()
        self.setWindowTitle("ArchLens: Component Graph & Service Proposals")
        self.resize(1540, 1000)

        # State
        self.components_data = ComponentsData()
        self.arch = ArchitectureData()
        self.components_path: Optional[str] = None
        self.architecture_path: Optional[str] = None
        self.dirty = False
        self.store = ProposalStore(
            on_component_update=self.on_component_update,
            on_proposal_update=self.on_proposal_update,
            log=self._log,
        )
        self.scene = GraphScene(log=self._log)
        self.controller = InteractionController(self.scene, log=self._log)

        # Left: inputs + summary + filters + physics + log
        left = QWidget(self)
        left_v = QVBoxLayout(left)

        in_box = QGroupBox("Analysis")
        in_v = QVBoxLayout(in_box)
        rowA = QHBoxLayout()
        self.btn_open_components = QPushButton("Components JSON...")
        self.btn_open_architecture = QPushButton("Architecture JSON...")
        self.btn_load = QPushButton("Load Graph ▶")
        rowA.addWidget(self.btn_open_components)
        rowA.addWidget(self.btn_open_architecture)
        rowA.addStretch(1)
        rowA.addWidget(self.btn_load)
        in_v.addLayout(rowA)
        self.lbl_paths = QLabel("No files selected.")
        self.lbl_paths.setWordWrap(True)
        in_v.addWidget(self.lbl_paths)
        left_v.addWidget(in_box)

        sum_box = QGroupBox("Summary")
        self.sum_grid = QGridLayout(sum_box)
        self.sum_labels: Dict[str, QLabel] = {}
        for i, (key, title) in enumerate([
            ("total_components", "Components"), ("total_loc", "Total LOC"),
            ("shared_domain", "Shared domain"), ("components_with_secrets", "With secrets"),
            ("db_tables", "DB tables"), ("sensitive_proposals", "Sensitive proposals"),
            ("proposals", "Proposals"), ("support_libraries", "Support libraries"),
        ]):
            self.sum_grid.addWidget(QLabel(f"{title}:"), i // 2, (i % 2) * 2)
            lbl = QLabel("-")
            lbl.setStyleSheet("font-weight: 600;")
            self.sum_grid.addWidget(lbl, i // 2, (i % 2) * 2 + 1)
            self.sum_labels[key] = lbl
        left_v.addWidget(sum_box)

        filt_row = QHBoxLayout()
        self.list_layers, self.lbl_layers, layer_box = self._make_filter_box("Filter by layer")
        self.list_clusters, self.lbl_clusters, cluster_box = self._make_filter_box("Filter by cluster")
        filt_row.addWidget(layer_box)
        filt_row.addWidget(cluster_box)
        left_v.addLayout(filt_row, 2)

        phys_box = QGroupBox("Layout")
        phys = QVBoxLayout(phys_box)
        rowB = QHBoxLayout()
        defaults = SimulationConfig()
        rowB.addWidget(QLabel("Charge:"))
        self.spin_charge = QDoubleSpinBox()
        self.spin_charge.setRange(-5000.0, 0.0)
        self.spin_charge.setSingleStep(10.0)
        self.spin_charge.setValue(defaults.charge)
        rowB.addWidget(self.spin_charge)
        rowB.addWidget(QLabel("Link distance:"))
        self.spin_link = QDoubleSpinBox()
        self.spin_link.setRange(10.0, 1000.0)
        self.spin_link.setSingleStep(10.0)
        self.spin_link.setValue(defaults.link_distance)
        rowB.addWidget(self.spin_link)
        rowB.addWidget(QLabel("Centering:"))
        self.spin_center = QDoubleSpinBox()
        self.spin_center.setDecimals(3)
        self.spin_center.setRange(0.0, 1.0)
        self.spin_center.setSingleStep(0.01)
        self.spin_center.setValue(defaults.center_strength)
        rowB.addWidget(self.spin_center)
        rowB.addStretch(1)
        phys.addLayout(rowB)

        rowC = QHBoxLayout()
        rowC.addWidget(QLabel("Ticks/frame:"))
        self.spin_ticks = QSpinBox()
        self.spin_ticks.setRange(1, 20)
        self.spin_ticks.setValue(1)
        rowC.addWidget(self.spin_ticks)
        self.chk_labels = QCheckBox("Labels")
        rowC.addWidget(self.chk_labels)
        self.chk_legend = QCheckBox("Legend")
        self.chk_legend.setChecked(True)
        rowC.addWidget(self.chk_legend)
        rowC.addStretch(1)
        self.btn_fit = QPushButton("Fit view")
        self.btn_reheat = QPushButton("Re-layout")
        rowC.addWidget(self.btn_fit)
        rowC.addWidget(self.btn_reheat)
        phys.addLayout(rowC)

        rowD = QHBoxLayout()
        self.btn_export_png = QPushButton("Export PNG")
        self.btn_export_svg = QPushButton("Export SVG")
        self.btn_export_json = QPushButton("Export architecture JSON")
        rowD.addStretch(1)
        rowD.addWidget(self.btn_export_png)
        rowD.addWidget(self.btn_export_svg)
        rowD.addWidget(self.btn_export_json)
        phys.addLayout(rowD)
        left_v.addWidget(phys_box)

        log_box = QGroupBox("Log")
        log_v = QVBoxLayout(log_box)
        self.txt_log = QPlainTextEdit()
        self.txt_log.setReadOnly(True)
        log_v.addWidget(self.txt_log)
        left_v.addWidget(log_box, 1)

        # Right: tabs (graph, proposals, packages, documentation) + progress
        right = QWidget(self)
        right_v = QVBoxLayout(right)
        self.tabs = QTabWidget()

        graph_page = QWidget()
        graph_v = QVBoxLayout(graph_page)
        hint = QLabel("Scroll to zoom, drag the background to pan, drag nodes to pin them, click for details.")
        hint.setStyleSheet("color: #6B7A88;")
        graph_v.addWidget(hint)
        self.canvas = GraphCanvas(self.scene, self.controller, graph_page)
        graph_v.addWidget(self.canvas, 1)
        self.tabs.addTab(graph_page, "Graph")

        prop_page = QWidget()
        prop_v = QVBoxLayout(prop_page)
        self.list_proposals = QListWidget()
        prop_v.addWidget(self.list_proposals, 1)
        self.txt_proposal = QPlainTextEdit()
        self.txt_proposal.setReadOnly(True)
        prop_v.addWidget(self.txt_proposal, 2)
        prop_row = QHBoxLayout()
        prop_row.addStretch(1)
        self.btn_edit_proposal = QPushButton("Edit proposal...")
        self.btn_edit_proposal.setEnabled(False)
        prop_row.addWidget(self.btn_edit_proposal)
        prop_v.addLayout(prop_row)
        self.tabs.addTab(prop_page, "Proposals")

        self.tree_packages = QTreeWidget()
        self.tree_packages.setHeaderLabels(["Package", "Components", "Deps out", "Depends on"])
        self.tabs.addTab(self.tree_packages, "Packages")

        doc_page = QWidget()
        doc_v = QVBoxLayout(doc_page)
        doc_row = QHBoxLayout()
        self.btn_open_doc = QPushButton("Open documentation...")
        doc_row.addWidget(self.btn_open_doc)
        doc_row.addStretch(1)
        doc_v.addLayout(doc_row)
        self.txt_doc = QPlainTextEdit()
        self.txt_doc.setReadOnly(True)
        doc_v.addWidget(self.txt_doc, 1)
        self.tabs.addTab(doc_page, "Documentation")

        right_v.addWidget(self.tabs, 1)
        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setValue(0)
        right_v.addWidget(self.progress)

        root = QWidget(self)
        root_h = QHBoxLayout(root)
        root_h.addWidget(left, 2)
        root_h.addWidget(right, 5)
        self.setCentralWidget(root)

        # Connections
        self.btn_open_components.clicked.connect(self.choose_components)
        self.btn_open_architecture.clicked.connect(self.choose_architecture)
        self.btn_load.clicked.connect(self.load_documents)
        self.list_layers.itemChanged.connect(self._on_layer_item_changed)
        self.list_clusters.itemChanged.connect(self._on_cluster_item_changed)
        self.tabs.currentChanged.connect(self._on_tab_changed)
        self.canvas.node_clicked.connect(self.inspect_component)
        self.canvas.settled.connect(lambda: self._log("[layout] simulation at rest"))
        self.canvas.render_skipped.connect(lambda msg: self._log(f"[layout] {msg}"))

        self.spin_charge.valueChanged.connect(self._on_physics_changed)
        self.spin_link.valueChanged.connect(self._on_physics_changed)
        self.spin_center.valueChanged.connect(self._on_physics_changed)
        self.spin_ticks.valueChanged.connect(self._on_ticks_changed)
        self.chk_labels.stateChanged.connect(self._on_style_changed)
        self.chk_legend.stateChanged.connect(self._on_style_changed)
        self.btn_fit.clicked.connect(self.canvas.fit_view)
        self.btn_reheat.clicked.connect(lambda: self.canvas.refresh())

        self.btn_export_png.clicked.connect(self.export_png)
        self.btn_export_svg.clicked.connect(self.export_svg)
        self.btn_export_json.clicked.connect(self.export_architecture)
        self.list_proposals.currentRowChanged.connect(self._show_proposal)
        self.btn_edit_proposal.clicked.connect(self.edit_proposal)
        self.btn_open_doc.clicked.connect(self.open_documentation)

        self._style_load_button()
        self._update_actions()

    # -------- Logging helper --------
    def _log(self, msg: str) -> None:
        if not hasattr(self, "txt_log"):
            return
        ts = datetime.now().strftime("%H:%M:%S")
        self.txt_log.appendPlainText(f"[{ts}] {msg}")

    # -------- Style helpers --------
    def _style_load_button(self) -> None:
        self.btn_load.setObjectName("btnLoadGraph")
        self.setStyleSheet("""
            QPushButton#btnLoadGraph {
                background-color: #8ED6FF;
                color: #0B2942;
                border: 1px solid #59B9F3;
                border-radius: 6px;
                padding: 6px 12px;
                font-weight: 600;
            }
            QPushButton#btnLoadGraph:hover { background-color: #9BDCFF; }
            QPushButton#btnLoadGraph:pressed { background-color: #7FCFFF; }
            QPushButton#btnLoadGraph:disabled {
                background-color: #CFEEFC; color: #6B7A88; border-color: #CFEEFC;
            }
        """)
        self.btn_load.setMinimumHeight(32)
        self.btn_load.setCursor(Qt.CursorShape.PointingHandCursor)

    def _make_filter_box(self, title: str):
        box = QGroupBox(title)
        v = QVBoxLayout(box)
        head = QHBoxLayout()
        lbl = QLabel("")
        head.addWidget(lbl, 1)
        btn_all = QPushButton("All")
        btn_none = QPushButton("None")
        head.addWidget(btn_all)
        head.addWidget(btn_none)
        v.addLayout(head)
        lst = QListWidget()
        v.addWidget(lst, 1)
        btn_all.clicked.connect(lambda: self._bulk_select(lst, True))
        btn_none.clicked.connect(lambda: self._bulk_select(lst, False))
        return lst, lbl, box

    def _update_actions(self) -> None:
        has_data = bool(self.components_data.components)
        self.btn_load.setEnabled(bool(self.components_path and self.architecture_path))
        for b in (self.btn_export_png, self.btn_export_svg, self.btn_fit, self.btn_reheat):
            b.setEnabled(has_data)
        self.btn_export_json.setEnabled(bool(self.store.proposals))
        title = "ArchLens: Component Graph & Service Proposals"
        self.setWindowTitle(title + (" *" if self.dirty else ""))

    # -------- Inputs --------
    def choose_components(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open components JSON", "", "JSON (*.json)")
        if path:
            self.components_path = path
            self._update_paths_label()

    def choose_architecture(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open architecture JSON", "", "JSON (*.json)")
        if path:
            self.architecture_path = path
            self._update_paths_label()

    def _update_paths_label(self) -> None:
        parts = [
            f"components: {Path(self.components_path).name if self.components_path else '-'}",
            f"architecture: {Path(self.architecture_path).name if self.architecture_path else '-'}",
        ]
        self.lbl_paths.setText("   ".join(parts))
        self._update_actions()

    def load_documents(self) -> None:
        if not (self.components_path and self.architecture_path):
            QMessageBox.information(self, "Missing input", "Please choose both JSON documents.")
            return
        if self.dirty:
            ans = QMessageBox.question(
                self, "Discard edits?",
                "Cluster edits have not been exported. Reload and discard them?",
            )
            if ans != QMessageBox.StandardButton.Yes:
                return
        self.progress.setValue(0)
        self.progress.setFormat("Starting...")
        self.btn_load.setEnabled(False)
        self._log(f"[load] components={self.components_path}, architecture={self.architecture_path}")

        self.thread = QThread()
        self.worker = LoadWorker(self.components_path, self.architecture_path)
        self.worker.moveToThread(self.thread)
        self.thread.started.connect(self.worker.run)
        self.worker.progress.connect(self.on_worker_progress)
        self.worker.finished.connect(self.on_worker_finished)
        self.worker.failed.connect(self.on_worker_failed)
        self.worker.finished.connect(lambda *_: self._cleanup_worker())
        self.worker.failed.connect(lambda *_: self._cleanup_worker())
        self.thread.start()

    def _cleanup_worker(self) -> None:
        self.thread.quit()
        self.thread.wait()
        self._update_actions()

    def on_worker_progress(self, pct: int, msg: str) -> None:
        self.progress.setValue(pct)
        self.progress.setFormat(msg)

    def on_worker_failed(self, error_msg: str) -> None:
        self._log(f"[error] {error_msg}")
        QMessageBox.critical(self, "Load failed", error_msg)

    def on_worker_finished(self, comps: ComponentsData, arch: ArchitectureData) -> None:
        self.set_analysis(comps, arch)

    def set_analysis(self, comps: ComponentsData, arch: ArchitectureData) -> None:
        """Install a fresh analysis: new membership store, new scene, reset filters."""
        self.components_data = comps
        self.arch = arch
        self.dirty = False
        self.store.load(arch.proposals)
        self.controller.cancel_drag()
        self.scene.load(comps, self.store)
        self._log(f"[load] components={len(comps.components)}, edges={len(comps.edges)}, "
                  f"proposals={len(self.store.proposals)}")
        self._populate_filters()
        self._populate_proposals()
        self._populate_packages()
        self._update_summary()
        if arch.summary and not self.txt_doc.toPlainText():
            self.txt_doc.setPlainText(arch.summary)
        self.canvas.refresh(fit=True)
        self._update_actions()

    # -------- Filters --------
    def _populate_filters(self) -> None:
        f = self.scene.filters
        self.list_layers.blockSignals(True)
        self.list_layers.clear()
        for layer in f.known_layers:
            item = QListWidgetItem(layer)
            item.setData(Qt.ItemDataRole.UserRole, layer)
            item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
            item.setCheckState(Qt.CheckState.Checked if layer in f.selected_layers else Qt.CheckState.Unchecked)
            item.setForeground(_qcolor(layer_color(layer)))
            self.list_layers.addItem(item)
        self.list_layers.blockSignals(False)

        names = self.store.names()
        self.list_clusters.blockSignals(True)
        self.list_clusters.clear()
        for cid in f.known_clusters:
            item = QListWidgetItem(names.get(cid) or f"Cluster {cid}")
            item.setData(Qt.ItemDataRole.UserRole, cid)
            item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
            item.setCheckState(Qt.CheckState.Checked if cid in f.selected_clusters else Qt.CheckState.Unchecked)
            item.setForeground(_qcolor(cluster_color(cid)))
            self.list_clusters.addItem(item)
        self.list_clusters.blockSignals(False)
        self._update_filter_labels()

    def _update_filter_labels(self) -> None:
        s = self.scene.filters.summary()
        self.lbl_layers.setText(f"Showing {s['layers']} layers")
        self.lbl_clusters.setText(f"Showing {s['clusters']} clusters")

    def _on_layer_item_changed(self, item: QListWidgetItem) -> None:
        layer = item.data(Qt.ItemDataRole.UserRole)
        checked = item.checkState() == Qt.CheckState.Checked
        if checked != (layer in self.scene.filters.selected_layers):
            self.scene.filters.toggle_layer(layer)
            self._log(f"[filter] layer '{layer}' {'shown' if checked else 'hidden'}")
            self._filters_changed()

    def _on_cluster_item_changed(self, item: QListWidgetItem) -> None:
        cid = item.data(Qt.ItemDataRole.UserRole)
        checked = item.checkState() == Qt.CheckState.Checked
        if checked != (cid in self.scene.filters.selected_clusters):
            self.scene.filters.toggle_cluster(cid)
            self._log(f"[filter] cluster {cid} {'shown' if checked else 'hidden'}")
            self._filters_changed()

    def _bulk_select(self, lst: QListWidget, checked: bool) -> None:
        f = self.scene.filters
        if lst is self.list_layers:
            f.select_all_layers() if checked else f.select_no_layers()
        else:
            f.select_all_clusters() if checked else f.select_no_clusters()
        self._log(f"[filter] {'all' if checked else 'no'} "
                  f"{'layers' if lst is self.list_layers else 'clusters'} selected")
        self._populate_filters()
        self._filters_changed()

    def _filters_changed(self) -> None:
        self._update_filter_labels()
        self.canvas.refresh()

    # -------- Physics / style --------
    def _on_physics_changed(self) -> None:
        cfg = replace(
            self.scene.sim.config,
            charge=float(self.spin_charge.value()),
            link_distance=float(self.spin_link.value()),
            center_strength=float(self.spin_center.value()),
        )
        self.scene.set_sim_config(cfg)
        self._log(f"[layout] charge={cfg.charge:g}, link distance={cfg.link_distance:g}, "
                  f"centering={cfg.center_strength:g}")
        self.canvas.refresh()

    def _on_ticks_changed(self) -> None:
        self.canvas.ticks_per_frame = self.spin_ticks.value()

    def _on_style_changed(self) -> None:
        self.canvas.show_labels = self.chk_labels.isChecked()
        self.canvas.show_legend = self.chk_legend.isChecked()
        if self.chk_legend.isChecked():
            self._log("[legend] layer / cluster legend shown")
        self.canvas.refresh()

    def _on_tab_changed(self, index: int) -> None:
        if index == GRAPH_TAB:
            self.canvas.activate()
        else:
            self.canvas.deactivate()

    def showEvent(self, event):
        super().showEvent(event)
        if self.tabs.currentIndex() == GRAPH_TAB and not self.canvas.active:
            self.canvas.activate()

    # -------- Inspect / reassign --------
    def inspect_component(self, component_id: str) -> None:
        try:
            detail = self.controller.inspect(component_id)
        except ArchLensError as e:
            self._log(f"[error] {e}")
            QMessageBox.warning(self, "Inspect failed", str(e))
            return
        dlg = DetailDialog(detail, self.store, self)
        if dlg.exec() != DetailDialog.DialogCode.Accepted:
            return
        target = dlg.target_cluster()
        if not self.controller.can_reassign(component_id, target):
            return
        try:
            self.controller.reassign(component_id, target)
        except ArchLensError as e:
            self._log(f"[error] reassign failed: {e}")
            QMessageBox.critical(self, "Reassign failed", str(e))
            return
        self.canvas.refresh()

    def on_component_update(self, component: Component, new_cluster_id: int) -> None:
        """Membership changed: mark unsaved and refresh proposal views."""
        self.dirty = True
        self._populate_proposals()
        self._update_summary()
        self._update_actions()

    def on_proposal_update(self, proposal: Proposal) -> None:
        self.dirty = True
        self._populate_filters()
        self._populate_proposals()
        self._update_actions()
        self.canvas.refresh()

    # -------- Proposals / packages / summary --------
    def _populate_proposals(self) -> None:
        row = self.list_proposals.currentRow()
        self.list_proposals.blockSignals(True)
        self.list_proposals.clear()
        for p in self.store.proposals:
            item = QListWidgetItem(f"{p.name}  (ID: {p.id}, {len(p.components)} components)")
            item.setForeground(_qcolor(cluster_color(p.id)))
            self.list_proposals.addItem(item)
        self.list_proposals.blockSignals(False)
        if self.store.proposals:
            self.list_proposals.setCurrentRow(min(max(row, 0), len(self.store.proposals) - 1))
        self._show_proposal(self.list_proposals.currentRow())

    def _show_proposal(self, row: int) -> None:
        props = self.store.proposals
        if row < 0 or row >= len(props):
            self.txt_proposal.setPlainText("")
            self.btn_edit_proposal.setEnabled(False)
            return
        p = props[row]
        lines = proposal_lines(p) + ["", "Members:"] + [f"  {m}" for m in p.components]
        self.txt_proposal.setPlainText("\n".join(lines))
        self.btn_edit_proposal.setEnabled(True)

    def edit_proposal(self) -> None:
        row = self.list_proposals.currentRow()
        if row < 0:
            return
        dlg = ProposalEditDialog(self.store.proposals[row], self)
        if dlg.exec() != ProposalEditDialog.DialogCode.Accepted:
            return
        try:
            self.store.update_proposal(dlg.edited())
        except ArchLensError as e:
            self._log(f"[error] {e}")
            QMessageBox.critical(self, "Update failed", str(e))

    def _populate_packages(self) -> None:
        self.tree_packages.clear()
        md = self.arch.project_metadata
        if md is None or not md.package_dependencies:
            return
        root = build_package_tree(md.package_dependencies)
        items: Dict[str, QTreeWidgetItem] = {}
        for depth, node in root.walk():
            if node is root:
                continue
            d = node.details
            cols = [node.name, str(d.components_count) if d else "",
                    str(d.total_dependencies_out) if d else "",
                    ", ".join(d.depends_on_packages) if d else ""]
            parent_name = node.full_name.rsplit(".", 1)[0] if "." in node.full_name else None
            parent = items.get(parent_name) if parent_name else None
            item = QTreeWidgetItem(parent if parent is not None else self.tree_packages, cols)
            item.setToolTip(0, node.full_name)
            items[node.full_name] = item
            if depth < 2:
                item.setExpanded(True)

    def _update_summary(self) -> None:
        s = summarize(self.components_data, self.arch, self.store.proposals)
        for key, lbl in self.sum_labels.items():
            lbl.setText(str(getattr(s, key)))

    # -------- Documentation --------
    def open_documentation(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open documentation", "",
                                              "Markdown / text (*.md *.txt);;All files (*)")
        if not path:
            return
        try:
            doc = load_narrative(path)
        except (OSError, UnicodeDecodeError) as e:
            self._log(f"[error] documentation load failed: {e}")
            QMessageBox.critical(self, "Open failed", f"Failed to read documentation:\n{e}")
            return
        self.txt_doc.setPlainText(doc.text)
        self._log(f"[load] documentation '{doc.title}' ({len(doc.text)} chars)")

    # -------- Export --------
    def export_png(self) -> None:
        """Export the current figure to a PNG image."""
        path, _ = QFileDialog.getSaveFileName(self, "Export PNG", "", "PNG Image (*.png)")
        if not path:
            return
        try:
            self.canvas.export(path, dpi=200)
            self._log(f"[export] PNG → {path}")
        except (OSError, ValueError) as e:
            self._log(f"[error] export PNG failed: {e}")
            QMessageBox.critical(self, "Export failed", f"Failed to export PNG:\n{e}")

    def export_svg(self) -> None:
        """Export the current figure to an SVG vector file."""
        path, _ = QFileDialog.getSaveFileName(self, "Export SVG", "", "SVG Vector (*.svg)")
        if not path:
            return
        try:
            self.canvas.export(path)
            self._log(f"[export] SVG → {path}")
        except (OSError, ValueError) as e:
            self._log(f"[error] export SVG failed: {e}")
            QMessageBox.critical(self, "Export failed", f"Failed to export SVG:\n{e}")

    def export_architecture(self) -> None:
        """Write the architecture document with the edited proposals."""
        path, _ = QFileDialog.getSaveFileName(self, "Export architecture JSON",
                                              "architecture_updated.json", "JSON (*.json)")
        if not path:
            return
        try:
            save_architecture(self.arch, path, self.store.proposals)
        except OSError as e:
            self._log(f"[error] export JSON failed: {e}")
            QMessageBox.critical(self, "Export failed", f"Failed to export JSON:\n{e}")
            return
        self.dirty = False
        self._update_actions()
        self._log(f"[export] architecture JSON → {path}")


def _qcolor(hex_color: str) -> QColor:
    c = QColor(hex_color)
    # White (unclustered) is unreadable on a white list; darken it.
    return c if c.lightness() < 230 else QColor("#6B7A88")


# --------------------------- Entrypoint ----------------------------

def main() -> None:
    """Qt application entry point: create the main window and start the event loop.

    Optional arguments: ``components.json architecture.json``.
    """
    app = QApplication(sys.argv)
    win = MainWindow()
    args: List[str] = [a for a in sys.argv[1:] if not a.startswith("-")]
    if len(args) >= 2:
        win.components_path, win.architecture_path = args[0], args[1]
        win._update_paths_label()
        win.load_documents()
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
