# src/sanity/core/managers/__init__.py
# WindowManager is imported from its module directly so that the
# non-GUI managers load without Qt widgets.
from .service_manager import ServiceManager
from .event_coordinator import EventCoordinator
from .task_manager import TaskManager

__all__ = [
    "ServiceManager",
    "EventCoordinator",
    "TaskManager",
]
