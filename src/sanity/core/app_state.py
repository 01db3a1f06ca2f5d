from enum import Enum, auto


class AppState(Enum):
    """
    Represents the primary session state of the application.
    """
    LOADING = auto()     # Startup: the stored session has not been checked yet.
    SIGNED_OUT = auto()  # No session. The auth window is shown.
    SIGNED_IN = auto()   # A session is active. The dashboard is shown.


class AuthView(Enum):
    """
    Which form the auth window is showing.
    """
    LOGIN = auto()
    SIGNUP = auto()
