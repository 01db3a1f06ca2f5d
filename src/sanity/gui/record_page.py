# src/sanity/gui/record_page.py
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QTableWidget, QTableWidgetItem, QHeaderView,
    QAbstractItemView, QButtonGroup
)
from PySide6.QtCore import Qt
import qtawesome as qta

from sanity.core.event_bus import EventBus
from sanity.core.resource_controller import ALL_STATUSES, ResourceController
from sanity.core.schemas import FieldKind, Record
from sanity.gui.components import (
    Colors, Typography, ModernButton, StatusBadge, styled_line_edit, error_label
)
from sanity.gui.record_dialog import RecordDialog


class RecordPage(QWidget):
    """
    One tab of the dashboard: header, search and filters, and the table of
    visible records. Re-renders whenever its controller reports a change.
    """

    def __init__(self, controller: ResourceController, event_bus: EventBus, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.event_bus = event_bus
        self.schema = controller.schema
        self.filter_buttons = {}
        # Table columns: every non-long-text field, plus creation date and actions.
        self.columns = [spec for spec in self.schema.fields if spec.kind is not FieldKind.LONG_TEXT]

        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 20, 24, 20)
        layout.setSpacing(12)
        layout.addLayout(self._create_header())
        layout.addLayout(self._create_filters())

        self.error_row = QWidget()
        error_layout = QHBoxLayout(self.error_row)
        error_layout.setContentsMargins(0, 0, 0, 0)
        self.load_error_label = error_label()
        self.load_error_label.show()
        dismiss_button = ModernButton("Dismiss", "secondary")
        dismiss_button.clicked.connect(lambda: self.event_bus.emit("record_error_dismissed", self.schema.key))
        error_layout.addWidget(self.load_error_label, 1)
        error_layout.addWidget(dismiss_button)
        layout.addWidget(self.error_row)

        self.placeholder_label = QLabel()
        self.placeholder_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.placeholder_label.setFont(Typography.body())
        self.placeholder_label.setStyleSheet(f"color: {Colors.TEXT_SECONDARY.name()}; padding: 40px;")
        layout.addWidget(self.placeholder_label)

        self.table = self._create_table()
        layout.addWidget(self.table, 1)

        self.dialog = RecordDialog(controller, event_bus, self)
        self.event_bus.subscribe("resource_state_changed", self.on_state_changed)
        self.render()

    def _create_header(self) -> QHBoxLayout:
        header = QHBoxLayout()
        title = QLabel(f"Your {self.schema.plural}")
        title.setFont(Typography.heading_large())
        title.setStyleSheet(f"color: {Colors.TEXT_PRIMARY.name()};")

        refresh_button = ModernButton("", "secondary")
        refresh_button.setIcon(qta.icon("fa5s.sync", color=Colors.TEXT_PRIMARY.name()))
        refresh_button.setToolTip("Reload from the server")
        refresh_button.clicked.connect(lambda: self.event_bus.emit("record_refresh_requested", self.schema.key))

        add_button = ModernButton(f"+ Add {self.schema.singular}", "primary")
        add_button.clicked.connect(lambda: self.event_bus.emit("record_create_requested", self.schema.key))

        header.addWidget(title)
        header.addStretch()
        header.addWidget(refresh_button)
        header.addWidget(add_button)
        return header

    def _create_filters(self) -> QHBoxLayout:
        filters = QHBoxLayout()
        self.search_input = styled_line_edit(f"Search {self.schema.plural.lower()}...")
        self.search_input.textChanged.connect(
            lambda text: self.event_bus.emit("record_search_changed", self.schema.key, text))
        filters.addWidget(self.search_input, 1)

        if self.schema.has_status:
            group = QButtonGroup(self)
            group.setExclusive(True)
            for status in (ALL_STATUSES,) + self.schema.status_choices:
                button = ModernButton(status, "secondary")
                button.setCheckable(True)
                button.setChecked(status == ALL_STATUSES)
                button.clicked.connect(
                    lambda _, s=status: self.event_bus.emit("record_status_filter_changed", self.schema.key, s))
                group.addButton(button)
                filters.addWidget(button)
                self.filter_buttons[status] = button
        return filters

    def _create_table(self) -> QTableWidget:
        headers = [spec.label.replace(" (optional)", "") for spec in self.columns] + ["Date Created", "Actions"]
        table = QTableWidget(0, len(headers))
        table.setHorizontalHeaderLabels(headers)
        table.verticalHeader().setVisible(False)
        table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        table.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        table.horizontalHeader().setSectionResizeMode(len(headers) - 1, QHeaderView.ResizeMode.ResizeToContents)
        table.setStyleSheet(f"""
            QTableWidget {{
                background-color: {Colors.PRIMARY_BG.name()};
                color: {Colors.TEXT_PRIMARY.name()};
                gridline-color: {Colors.BORDER_DEFAULT.name()};
                border: 1px solid {Colors.BORDER_DEFAULT.name()};
                border-radius: 6px;
            }}
            QHeaderView::section {{
                background-color: {Colors.SECONDARY_BG.name()};
                color: {Colors.TEXT_SECONDARY.name()};
                border: none;
                padding: 6px;
            }}
        """)
        return table

    def on_state_changed(self, key: str):
        if key == self.schema.key:
            self.render()

    def render(self):
        controller = self.controller
        visible = list(controller.visible_records())

        if controller.load_error:
            self.load_error_label.setText(controller.load_error)
            self.error_row.show()
        elif controller.error and not controller.modal_open:
            self.load_error_label.setText(controller.error)
            self.error_row.show()
        else:
            self.error_row.hide()

        if controller.loading and not controller.records:
            self.placeholder_label.setText(f"Loading {self.schema.plural.lower()}...")
            self.placeholder_label.show()
            self.table.hide()
        elif not visible:
            if controller.records:
                self.placeholder_label.setText(f"No {self.schema.plural.lower()} match your filters.")
            else:
                self.placeholder_label.setText(
                    f"No {self.schema.plural.lower()} yet. Click \"Add {self.schema.singular}\" to get started!")
            self.placeholder_label.show()
            self.table.hide()
        else:
            self.placeholder_label.hide()
            self.table.show()
            self._fill_table(visible)

        self._update_filter_buttons()
        self._sync_dialog()

    def _fill_table(self, records):
        self.table.setRowCount(len(records))
        for row, record in enumerate(records):
            for col, spec in enumerate(self.columns):
                value = record.get(spec.name)
                if spec.name == self.schema.status_field and value:
                    self.table.setCellWidget(row, col, StatusBadge(str(value)))
                    continue
                text = "—" if value in (None, "") else str(value)
                if spec.kind is FieldKind.DATE and value:
                    text = str(value)[:10]
                self.table.removeCellWidget(row, col)
                self.table.setItem(row, col, QTableWidgetItem(text))
            created = str(record.created_at)[:10] if record.created_at else "—"
            self.table.setItem(row, len(self.columns), QTableWidgetItem(created))
            self.table.setCellWidget(row, len(self.columns) + 1, self._create_actions(record))
        self.table.resizeRowsToContents()

    def _create_actions(self, record: Record) -> QWidget:
        cell = QWidget()
        layout = QHBoxLayout(cell)
        layout.setContentsMargins(4, 2, 4, 2)
        edit_button = ModernButton("Edit", "secondary")
        edit_button.clicked.connect(lambda: self.event_bus.emit("record_edit_requested", self.schema.key, record))
        delete_button = ModernButton("Delete", "danger")
        delete_button.clicked.connect(
            lambda: self.event_bus.emit("record_delete_requested", self.schema.key, record.id))
        layout.addWidget(edit_button)
        layout.addWidget(delete_button)
        return cell

    def _update_filter_buttons(self):
        if not self.filter_buttons:
            return
        counts = self.controller.counts_by_status()
        current = self.controller.status_filter or ALL_STATUSES
        for status, button in self.filter_buttons.items():
            button.setText(f"{status} ({counts.get(status, 0)})")
            button.setChecked(status == current)

    def _sync_dialog(self):
        if self.controller.modal_open and not self.dialog.isVisible():
            self.dialog.open_for_controller()
        elif not self.controller.modal_open and self.dialog.isVisible():
            self.dialog.hide()
        elif self.dialog.isVisible():
            self.dialog.sync_state()

    def detach(self):
        self.event_bus.unsubscribe("resource_state_changed", self.on_state_changed)
        self.dialog.hide()
