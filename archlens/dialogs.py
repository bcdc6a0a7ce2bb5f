"""Component detail / reassignment dialog and proposal editor."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QApplication,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from .legend import ComponentDetail, format_detail
from .membership import ProposalStore, split_lines
from .model import Proposal


class DetailDialog(QDialog):
    """Full record of one component plus a "move to cluster" selector.

    ``target_cluster()`` is meaningful only when the dialog was accepted;
    Save stays disabled while the selection equals the current cluster.
    """

    def __init__(self, detail: ComponentDetail, store: ProposalStore,
                 parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setWindowTitle("Component details")
        self.resize(720, 560)
        self.detail = detail
        v = QVBoxLayout(self)

        title = QLabel(detail.component_id)
        title.setStyleSheet("font-family: monospace; font-weight: 600;")
        title.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        v.addWidget(title)

        body = QWidget()
        body_v = QVBoxLayout(body)
        head = QFormLayout()
        for key, value in detail.header:
            head.addRow(f"{key}:", QLabel(value))
        body_v.addLayout(head)
        for section in detail.sections:
            box = QGroupBox(section.title)
            form = QFormLayout(box)
            for key, value in section.rows:
                lbl = QLabel(value)
                lbl.setWordWrap(True)
                form.addRow(f"{key}:", lbl)
            body_v.addWidget(box)
        body_v.addStretch(1)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(body)
        v.addWidget(scroll, 1)

        row = QHBoxLayout()
        row.addWidget(QLabel("Move to cluster:"))
        self.combo_cluster = QComboBox()
        for p in store.proposals:
            self.combo_cluster.addItem(f"{p.name} (ID: {p.id})", p.id)
        if detail.cluster_id is not None:
            self.combo_cluster.setCurrentIndex(self.combo_cluster.findData(detail.cluster_id))
        else:
            self.combo_cluster.setCurrentIndex(-1)
        row.addWidget(self.combo_cluster, 1)
        v.addLayout(row)

        buttons = QDialogButtonBox()
        btn_copy = QPushButton("Copy details")
        btn_copy.clicked.connect(lambda: QApplication.clipboard().setText(format_detail(detail)))
        buttons.addButton(btn_copy, QDialogButtonBox.ButtonRole.ActionRole)
        self.btn_save = QPushButton("Save changes")
        buttons.addButton(self.btn_save, QDialogButtonBox.ButtonRole.AcceptRole)
        buttons.addButton(QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        v.addWidget(buttons)

        self.combo_cluster.currentIndexChanged.connect(self._update_save)
        self._update_save()

    def target_cluster(self) -> Optional[int]:
        data = self.combo_cluster.currentData()
        return None if data is None else int(data)

    def _update_save(self) -> None:
        target = self.target_cluster()
        self.btn_save.setEnabled(target is not None and target != self.detail.cluster_id)


class ProposalEditDialog(QDialog):
    """Edit a proposal's name, rationale and recommended actions (one per line)."""

    def __init__(self, proposal: Proposal, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setWindowTitle(f"Edit proposal {proposal.id}")
        self.resize(560, 480)
        self.proposal = proposal
        form = QFormLayout(self)

        self.edit_name = QLineEdit(proposal.name)
        form.addRow("Name:", self.edit_name)
        self.edit_rationale = QPlainTextEdit("\n".join(proposal.rationale))
        form.addRow("Rationale:", self.edit_rationale)
        self.edit_actions = QPlainTextEdit("\n".join(proposal.recommended_actions))
        form.addRow("Recommended actions:", self.edit_actions)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        form.addRow(buttons)

    def edited(self) -> Proposal:
        """The proposal with the dialog's values (membership untouched)."""
        name = self.edit_name.text().strip() or self.proposal.name
        return replace(
            self.proposal,
            name=name,
            rationale=tuple(split_lines(self.edit_rationale.toPlainText())),
            recommended_actions=tuple(split_lines(self.edit_actions.toPlainText())),
        )
