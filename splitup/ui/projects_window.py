from __future__ import annotations

from typing import Sequence

from PySide6.QtCore import QSize, Qt
from PySide6.QtGui import QIcon, QPixmap
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListView,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from splitup.core.controller import ProjectController
from splitup.core.models import ProjectSummary


class ProjectsWindow(QMainWindow):
    """Gallery of saved projects ("My Goals")."""

    def __init__(self, controller: ProjectController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.setWindowTitle("My Goals")
        self.resize(560, 640)
        thumb = controller.config.image.thumbnail_size

        central = QWidget(self)
        layout = QVBoxLayout(central)
        self._empty_label = QLabel("No saved projects yet.")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._empty_label)

        self.project_list = QListWidget()
        self.project_list.setViewMode(QListView.ViewMode.IconMode)
        self.project_list.setIconSize(QSize(thumb, thumb))
        self.project_list.setGridSize(QSize(thumb + 40, thumb + 48))
        self.project_list.setResizeMode(QListView.ResizeMode.Adjust)
        self.project_list.setMovement(QListView.Movement.Static)
        self.project_list.setWordWrap(True)
        layout.addWidget(self.project_list, stretch=1)

        buttons = QHBoxLayout()
        self.open_button = QPushButton("Open")
        self.delete_button = QPushButton("Delete")
        self.close_button = QPushButton("Main")
        buttons.addWidget(self.open_button)
        buttons.addWidget(self.delete_button)
        buttons.addStretch(1)
        buttons.addWidget(self.close_button)
        layout.addLayout(buttons)
        self.setCentralWidget(central)

        self.open_button.clicked.connect(self._open_selected)
        self.delete_button.clicked.connect(self._delete_selected)
        self.close_button.clicked.connect(self.close)
        self.project_list.itemActivated.connect(lambda _item: self._open_selected())
        self.controller.projects_changed.connect(self.refresh)

    def refresh(self, summaries: Sequence[ProjectSummary]) -> None:
        self.project_list.clear()
        for summary in summaries:
            pixmap = QPixmap()
            pixmap.loadFromData(summary.thumbnail)
            item = QListWidgetItem(QIcon(pixmap), summary.name)
            item.setData(Qt.ItemDataRole.UserRole, summary.id)
            self.project_list.addItem(item)
        has_projects = bool(summaries)
        self._empty_label.setVisible(not has_projects)
        self.open_button.setEnabled(has_projects)
        self.delete_button.setEnabled(has_projects)

    def _selected_id(self) -> str | None:
        item = self.project_list.currentItem()
        if item is None:
            return None
        return item.data(Qt.ItemDataRole.UserRole)

    def _open_selected(self) -> None:
        project_id = self._selected_id()
        if project_id is None:
            return
        if self.controller.open_project(project_id):
            self.close()

    def _delete_selected(self) -> None:
        project_id = self._selected_id()
        if project_id is None:
            return
        answer = QMessageBox.question(self, "Delete project", "Delete the selected project?")
        if answer == QMessageBox.StandardButton.Yes:
            self.controller.delete_project(project_id)
