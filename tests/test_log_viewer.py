"""Tests for the activity log's source labels and groups."""

from sanity.gui.log_viewer import AUTH, RECORDS, SYSTEM, source_group, source_label


class TestSourceLabels:
    """Controller sources read as their record kind; filters group sources."""

    def test_controller_sources_drop_suffix(self):
        assert source_label("PromisesController") == "Promises"
        assert source_label("ExceptionsController") == "Exceptions"

    def test_other_sources_unchanged(self):
        assert source_label("AuthService") == "AuthService"
        assert source_label("Controller") == "Controller"

    def test_groups(self):
        assert source_group("DecisionsController") == RECORDS
        assert source_group("ShippedNotifier") == RECORDS
        assert source_group("AuthService") == AUTH
        assert source_group("AppStateService") == AUTH
        assert source_group("TaskManager") == SYSTEM
