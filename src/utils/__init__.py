from .jwt import (
    CallerIdentity, create_access_token, verify_access_token,
    get_caller_from_token, get_current_caller, require_officer,
)
from .dates import to_date_str, today_str, within_window

__all__ = [
    "CallerIdentity",
    "create_access_token",
    "verify_access_token",
    "get_caller_from_token",
    "get_current_caller",
    "require_officer",
    "to_date_str",
    "today_str",
    "within_window",
]
