# src/sanity/gui/record_dialog.py
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QComboBox, QDateEdit, QCheckBox, QWidget
)
from PySide6.QtCore import QDate, Signal

from sanity.core.event_bus import EventBus
from sanity.core.resource_controller import ResourceController
from sanity.core.schemas import FieldKind, FieldSpec
from sanity.gui.components import (
    Colors, Typography, ModernButton, styled_line_edit, styled_text_edit, input_style, error_label
)

DATE_FORMAT = "yyyy-MM-dd"


class RecordDialog(QDialog):
    """
    The create/edit modal for one record kind. Its form is generated from the
    kind's schema; every edit is sent to the controller as it happens.
    """

    def __init__(self, controller: ResourceController, event_bus: EventBus, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.event_bus = event_bus
        self.schema = controller.schema
        self.inputs = {}
        self.setModal(True)
        self.setMinimumWidth(480)
        self.setStyleSheet(f"background-color: {Colors.SECONDARY_BG.name()};")

        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(20, 20, 20, 20)
        main_layout.setSpacing(12)

        self.title_label = QLabel()
        self.title_label.setFont(Typography.heading_large())
        self.title_label.setStyleSheet(f"color: {Colors.TEXT_PRIMARY.name()};")
        main_layout.addWidget(self.title_label)

        self.error_label = error_label()
        main_layout.addWidget(self.error_label)

        for spec in self.schema.fields:
            main_layout.addWidget(self._create_field_row(spec))

        button_layout = QHBoxLayout()
        button_layout.addStretch()
        cancel_button = ModernButton("Cancel", "secondary")
        cancel_button.clicked.connect(self.reject)
        self.save_button = ModernButton("", "primary")
        self.save_button.clicked.connect(self._request_save)
        button_layout.addWidget(cancel_button)
        button_layout.addWidget(self.save_button)
        main_layout.addLayout(button_layout)

        self.rejected.connect(lambda: self.event_bus.emit("record_modal_close_requested", self.schema.key))

    def _create_field_row(self, spec: FieldSpec) -> QWidget:
        row = QWidget()
        layout = QVBoxLayout(row)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        label = QLabel(f"{spec.label} *" if spec.required else spec.label)
        label.setFont(Typography.heading_small())
        label.setStyleSheet(f"color: {Colors.TEXT_PRIMARY.name()};")
        layout.addWidget(label)

        if spec.kind is FieldKind.CHOICE:
            widget = QComboBox()
            widget.addItems(list(spec.choices))
            widget.setStyleSheet(f"QComboBox {{ {input_style()} }}")
            widget.currentTextChanged.connect(lambda text, name=spec.name: self._field_changed(name, text))
            layout.addWidget(widget)
        elif spec.kind is FieldKind.DATE:
            widget = _OptionalDateEdit()
            widget.changed.connect(lambda text, name=spec.name: self._field_changed(name, text))
            layout.addWidget(widget)
        elif spec.kind is FieldKind.LONG_TEXT:
            widget = styled_text_edit(spec.placeholder)
            widget.textChanged.connect(lambda name=spec.name, w=widget: self._field_changed(name, w.toPlainText()))
            layout.addWidget(widget)
        else:
            widget = styled_line_edit(spec.placeholder)
            widget.textChanged.connect(lambda text, name=spec.name: self._field_changed(name, text))
            layout.addWidget(widget)

        self.inputs[spec.name] = widget
        return row

    def _field_changed(self, name: str, value: str):
        self.event_bus.emit("record_field_changed", self.schema.key, name, value)

    def _request_save(self):
        self.event_bus.emit("record_save_requested", self.schema.key)

    def open_for_controller(self):
        """Loads the controller's fresh draft into the form and shows the dialog."""
        singular = self.schema.singular
        if self.controller.is_editing:
            self.setWindowTitle(f"Edit {singular}")
            self.title_label.setText(f"Edit {singular}")
            self.save_button.setText(f"Update {singular}")
        else:
            self.setWindowTitle(f"Add New {singular}")
            self.title_label.setText(f"Add New {singular}")
            self.save_button.setText(f"Create {singular}")

        for spec in self.schema.fields:
            widget = self.inputs[spec.name]
            value = self.controller.draft.get(spec.name, "")
            widget.blockSignals(True)
            if spec.kind is FieldKind.CHOICE:
                widget.setCurrentText(value)
            elif spec.kind is FieldKind.DATE:
                widget.set_value(value)
            elif spec.kind is FieldKind.LONG_TEXT:
                widget.setPlainText(value)
            else:
                widget.setText(value)
            widget.blockSignals(False)
        self.sync_state()
        self.show()

    def sync_state(self):
        """Mirrors validation markers, the error message and the saving flag."""
        for spec in self.schema.fields:
            if spec.kind in (FieldKind.TEXT, FieldKind.LONG_TEXT):
                self.inputs[spec.name].setStyleSheet(input_style(spec.name in self.controller.field_errors))
        if self.controller.error:
            self.error_label.setText(self.controller.error)
            self.error_label.show()
        else:
            self.error_label.hide()
        self.save_button.setEnabled(not self.controller.saving)


class _OptionalDateEdit(QWidget):
    """A date picker that can also be empty, reporting 'yyyy-MM-dd' or ''."""

    changed = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.enabled_box = QCheckBox("Set")
        self.enabled_box.setStyleSheet(f"color: {Colors.TEXT_PRIMARY.name()};")
        self.date_edit = QDateEdit()
        self.date_edit.setCalendarPopup(True)
        self.date_edit.setDisplayFormat(DATE_FORMAT)
        self.date_edit.setDate(QDate.currentDate())
        self.date_edit.setStyleSheet(f"QDateEdit {{ {input_style()} }}")
        self.date_edit.setEnabled(False)
        layout.addWidget(self.enabled_box)
        layout.addWidget(self.date_edit, 1)

        self.enabled_box.toggled.connect(self._on_toggled)
        self.date_edit.dateChanged.connect(lambda _: self.changed.emit(self.value()))

    def _on_toggled(self, checked: bool):
        self.date_edit.setEnabled(checked)
        self.changed.emit(self.value())

    def value(self) -> str:
        if not self.enabled_box.isChecked():
            return ""
        return self.date_edit.date().toString(DATE_FORMAT)

    def set_value(self, value: str):
        date = QDate.fromString(value[:10], DATE_FORMAT) if value else QDate()
        self.enabled_box.setChecked(date.isValid())
        self.date_edit.setEnabled(date.isValid())
        self.date_edit.setDate(date if date.isValid() else QDate.currentDate())

    def blockSignals(self, block: bool) -> bool:
        self.enabled_box.blockSignals(block)
        self.date_edit.blockSignals(block)
        return super().blockSignals(block)
