from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from PySide6.QtCore import QRectF, Qt, QUrl
from PySide6.QtGui import QColor, QDesktopServices, QImage, QPainter, QPen
from PySide6.QtWidgets import (
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QStackedWidget,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from splitup.core.controller import ProjectController
from splitup.core.grid import GridDimensions, cell_rect
from splitup.core.models import Cell, Goal, parse_quantity
from splitup.ui.projects_window import ProjectsWindow


class SignalBlocker:
    """Context manager to temporarily suppress widget signals."""

    def __init__(self, widget) -> None:
        self._widget = widget
        self._previous = False

    def __enter__(self):
        self._previous = self._widget.blockSignals(True)
        return self

    def __exit__(self, exc_type, exc, tb):
        self._widget.blockSignals(self._previous)
        return False


class RevealViewWidget(QWidget):
    """Grayscale image with revealed cells painted in colour."""

    def __init__(self, line_color: Sequence[int] = (255, 255, 255), line_width: int = 1, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._color: Optional[QImage] = None
        self._gray: Optional[QImage] = None
        self._cells: List[Cell] = []
        self._dims = GridDimensions()
        self._grid_visible = False
        self._line_pen = QPen(QColor(*line_color[:3]))
        self._line_pen.setWidth(line_width)
        self.setMinimumSize(320, 320)

    def set_image(self, data: Optional[bytes]) -> None:
        if data is None:
            self._color = None
            self._gray = None
        else:
            image = QImage.fromData(data)
            self._color = None if image.isNull() else image
            self._gray = None if image.isNull() else image.convertToFormat(QImage.Format.Format_Grayscale8)
        self.update()

    def set_cells(self, cells: Sequence[Cell], dims: GridDimensions, grid_visible: bool) -> None:
        self._cells = list(cells)
        self._dims = dims
        self._grid_visible = grid_visible
        self.update()

    def _target_rect(self) -> QRectF:
        side = float(min(self.width(), self.height()))
        return QRectF((self.width() - side) / 2.0, (self.height() - side) / 2.0, side, side)

    def _source_rect(self, image: QImage) -> QRectF:
        # Scale-to-fill: crop the longer side of the source to a centred square.
        side = float(min(image.width(), image.height()))
        return QRectF((image.width() - side) / 2.0, (image.height() - side) / 2.0, side, side)

    def paintEvent(self, event) -> None:  # noqa: N802
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(18, 20, 26))
        if self._color is None or self._gray is None:
            painter.setPen(QColor(160, 160, 160))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Upload an image to start")
            painter.end()
            return

        target = self._target_rect()
        source = self._source_rect(self._color)
        painter.drawImage(target, self._gray, source)
        if not self._grid_visible or self._dims.capacity == 0:
            painter.end()
            return

        sx = source.width() / target.width()
        sy = source.height() / target.height()
        for cell in self._cells:
            if cell.position >= self._dims.capacity:
                continue
            x0, y0, x1, y1 = cell_rect(cell.position, self._dims, target.width(), target.height())
            dest = QRectF(target.x() + x0, target.y() + y0, x1 - x0, y1 - y0)
            if cell.revealed:
                src = QRectF(source.x() + x0 * sx, source.y() + y0 * sy, (x1 - x0) * sx, (y1 - y0) * sy)
                painter.drawImage(dest, self._color, src)
            else:
                painter.setPen(self._line_pen)
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.drawRect(dest)
        painter.end()


class MainWindow(QMainWindow):
    def __init__(self, controller: ProjectController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.controller = controller
        self._image_filter = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp);;All files (*)"
        self._editing_goal_id: Optional[str] = None
        self._projects_window: ProjectsWindow | None = None
        self.setWindowTitle("SplitUp")
        self.resize(900, 860)

        self._build_menu()
        self._build_ui()
        self._connect_signals()
        self.controller.load_projects()
        self._refresh()

    def _build_menu(self) -> None:
        menu = self.menuBar().addMenu("&Menu")
        goals_action = menu.addAction("My Goals")
        goals_action.triggered.connect(self._open_projects_window)
        privacy_action = menu.addAction("Privacy Policy")
        privacy_action.triggered.connect(self._open_privacy_policy)
        main_action = menu.addAction("Main")
        main_action.triggered.connect(self.reset_project)
        menu.addSeparator()
        exit_action = menu.addAction("E&xit")
        exit_action.triggered.connect(self.close)

    def _build_ui(self) -> None:
        self._pages = QStackedWidget(self)

        picker_page = QWidget()
        picker_layout = QVBoxLayout(picker_page)
        picker_layout.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.upload_button = QPushButton("Upload Image")
        self.upload_button.setMinimumHeight(48)
        picker_layout.addWidget(self.upload_button)
        self._pages.addWidget(picker_page)

        editor_page = QWidget()
        layout = QVBoxLayout(editor_page)

        button_row = QHBoxLayout()
        self.save_button = QPushButton("Save")
        self.delete_button = QPushButton("Delete")
        button_row.addWidget(self.save_button)
        button_row.addWidget(self.delete_button)
        layout.addLayout(button_row)

        self.project_name_edit = QLineEdit()
        self.project_name_edit.setPlaceholderText("Project name")
        self.project_name_edit.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.project_name_edit)

        self.reveal_view = RevealViewWidget(
            self.controller.config.grid.line_color, self.controller.config.grid.line_width
        )
        layout.addWidget(self.reveal_view, stretch=3)

        self.totals_label = QLabel("Total: 0    Remaining: 0")
        self.totals_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.totals_label)

        goal_buttons = QHBoxLayout()
        self.add_button = QPushButton("Add")
        self.divide_button = QPushButton("Divide Image")
        goal_buttons.addWidget(self.add_button)
        goal_buttons.addWidget(self.divide_button)
        layout.addLayout(goal_buttons)

        self._inputs = QWidget()
        form = QFormLayout(self._inputs)
        self.goal_text_edit = QLineEdit()
        self.goal_text_edit.setPlaceholderText("Enter text")
        self.goal_number_edit = QLineEdit()
        self.goal_number_edit.setPlaceholderText("Enter number")
        form.addRow("Goal", self.goal_text_edit)
        form.addRow("Quantity", self.goal_number_edit)
        layout.addWidget(self._inputs)

        self.goal_list = QListWidget()
        self.goal_list.setMinimumHeight(120)
        layout.addWidget(self.goal_list, stretch=1)

        complete_row = QHBoxLayout()
        self.amount_spin = QSpinBox()
        self.amount_spin.setMinimum(1)
        self.amount_spin.setPrefix("Completed amount: ")
        self.complete_button = QPushButton("Complete")
        complete_row.addWidget(self.amount_spin, stretch=1)
        complete_row.addWidget(self.complete_button)
        self._complete_row = QWidget()
        self._complete_row.setLayout(complete_row)
        layout.addWidget(self._complete_row)

        self.log_output = QTextEdit()
        self.log_output.setReadOnly(True)
        self.log_output.setMaximumHeight(90)
        layout.addWidget(self.log_output)

        self._pages.addWidget(editor_page)
        self.setCentralWidget(self._pages)
        self.statusBar().showMessage("Ready")

    def _connect_signals(self) -> None:
        self.upload_button.clicked.connect(self.pick_image)
        self.save_button.clicked.connect(self.save_project)
        self.delete_button.clicked.connect(self.reset_project)
        self.add_button.clicked.connect(self._on_add_or_update)
        self.divide_button.clicked.connect(self.divide_image)
        self.complete_button.clicked.connect(self._on_complete)
        self.project_name_edit.textChanged.connect(self.controller.set_project_name)
        self.goal_list.currentRowChanged.connect(self._on_goal_selected)
        self.goal_list.itemDoubleClicked.connect(self._start_editing)
        self.controller.image_changed.connect(self._on_image_changed)
        self.controller.goals_changed.connect(lambda _goals: self._refresh())
        self.controller.cells_changed.connect(lambda _cells: self._refresh_cells())
        self.controller.log_emitted.connect(self._append_log)

    def pick_image(self) -> None:
        filename, _ = QFileDialog.getOpenFileName(self, "Upload Image", str(Path.home()), self._image_filter)
        if not filename:
            return
        try:
            data = Path(filename).read_bytes()
        except OSError as exc:
            QMessageBox.critical(self, "Failed to open image", str(exc))
            return
        if not self.controller.set_image(data):
            QMessageBox.warning(self, "Failed to open image", f"{filename} is not a supported image.")

    def save_project(self) -> None:
        snapshot = self.controller.save_project()
        if snapshot is not None:
            self.statusBar().showMessage(f"Saved '{snapshot.project_name}'", 5000)
            self._open_projects_window()

    def reset_project(self) -> None:
        self._editing_goal_id = None
        with SignalBlocker(self.project_name_edit):
            self.project_name_edit.clear()
        self._clear_inputs()
        self.controller.clear()
        self._inputs.setVisible(True)

    def divide_image(self) -> None:
        self._inputs.setVisible(False)
        self.controller.divide()

    def _on_add_or_update(self) -> None:
        text = self.goal_text_edit.text().strip()
        quantity = parse_quantity(self.goal_number_edit.text())
        if not text or quantity is None:
            self.statusBar().showMessage("Enter goal text and a whole, non-negative number", 5000)
            return
        if self._editing_goal_id is not None:
            self.controller.update_goal(self._editing_goal_id, text, quantity)
            self._editing_goal_id = None
            self.add_button.setText("Add")
        else:
            self.controller.add_goal(text, quantity)
        self._clear_inputs()
        self._inputs.setVisible(True)

    def _start_editing(self, item: QListWidgetItem) -> None:
        goal = self.controller.session.goal(item.data(Qt.ItemDataRole.UserRole))
        if goal is None or goal.completed:
            return
        self._editing_goal_id = goal.id
        self.goal_text_edit.setText(goal.text)
        self.goal_number_edit.setText(str(goal.total))
        self.add_button.setText("Update")
        self._inputs.setVisible(True)

    def _on_complete(self) -> None:
        goal = self._selected_goal()
        if goal is None:
            return
        self.controller.apply_progress(goal.id, self.amount_spin.value())

    def _selected_goal(self) -> Optional[Goal]:
        item = self.goal_list.currentItem()
        if item is None:
            return None
        return self.controller.session.goal(item.data(Qt.ItemDataRole.UserRole))

    def _on_goal_selected(self, _row: int) -> None:
        goal = self._selected_goal()
        active = goal is not None and not goal.completed
        self._complete_row.setVisible(active)
        if active:
            self.amount_spin.setMaximum(max(1, goal.remaining))

    def _on_image_changed(self, data: Optional[bytes]) -> None:
        self.reveal_view.set_image(data)
        self._pages.setCurrentIndex(0 if data is None else 1)
        with SignalBlocker(self.project_name_edit):
            self.project_name_edit.setText(self.controller.session.project_name)

    def _refresh(self) -> None:
        session = self.controller.session
        selected = self.goal_list.currentRow()
        with SignalBlocker(self.goal_list):
            self.goal_list.clear()
            for goal in session.goals:
                marker = "✓" if goal.completed else "✎"
                item = QListWidgetItem(f"● {goal.text}   {goal.progress_label}   {marker}")
                item.setData(Qt.ItemDataRole.UserRole, goal.id)
                font = item.font()
                font.setStrikeOut(goal.completed)
                item.setFont(font)
                if goal.completed:
                    item.setForeground(QColor(140, 140, 140))
                self.goal_list.addItem(item)
            if session.goals:
                self.goal_list.setCurrentRow(min(max(selected, 0), len(session.goals) - 1))
        self._on_goal_selected(self.goal_list.currentRow())
        self.totals_label.setText(f"Total: {session.total_cells}    Remaining: {session.remaining_total}")
        self._refresh_cells()

    def _refresh_cells(self) -> None:
        session = self.controller.session
        self.reveal_view.set_cells(session.cells, session.dimensions, session.grid_visible)

    def _clear_inputs(self) -> None:
        self.goal_text_edit.clear()
        self.goal_number_edit.clear()

    def _append_log(self, message: str) -> None:
        self.log_output.append(message)

    def _open_projects_window(self) -> None:
        if self._projects_window is None:
            self._projects_window = ProjectsWindow(self.controller, parent=self)
        self._projects_window.refresh(self.controller.project_summaries())
        self._projects_window.show()
        self._projects_window.raise_()
        self._projects_window.activateWindow()

    def _open_privacy_policy(self) -> None:
        QDesktopServices.openUrl(QUrl(self.controller.config.privacy_policy_url))
