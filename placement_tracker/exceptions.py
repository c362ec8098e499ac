"""
Custom Exceptions for Placement Tracker
=======================================

Usage:
    from placement_tracker.exceptions import ReportStoreError

    try:
        reports = await client.list_reports()
    except ReportStoreError as e:
        console.print(f"[red]{e.message}[/red]")
"""

from typing import Optional, Any, Dict


class PlacementTrackerError(Exception):
    """Base exception for all Placement Tracker errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Remote Store Errors
# ============================================

class ReportStoreError(PlacementTrackerError):
    """Transport failure or non-2xx response from the report API"""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(
            message,
            code="REPORT_STORE_ERROR",
            details={"status_code": status_code, "payload": payload}
        )
        self.status_code = status_code
        self.payload = payload


# ============================================
# Authentication Errors
# ============================================

class AuthenticationError(PlacementTrackerError):
    """Login or signup was rejected"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class NotAuthenticatedError(AuthenticationError):
    """A command needs an active session"""

    def __init__(self, message: str = "Please login first"):
        super().__init__(message)
        self.code = "NOT_AUTHENTICATED"


# ============================================
# Local Storage Errors
# ============================================

class StorageCorruptError(PlacementTrackerError):
    """A locally stored JSON entry could not be decoded"""

    def __init__(self, key: str, reason: str):
        super().__init__(
            f"Stored entry '{key}' is corrupt: {reason}",
            code="STORAGE_CORRUPT",
            details={"key": key, "reason": reason}
        )
        self.key = key


# ============================================
# Form & Export Errors
# ============================================

class InvalidFieldPathError(PlacementTrackerError):
    """Dotted path does not address a report field"""

    def __init__(self, path: str):
        super().__init__(
            f"Unknown report field: {path}",
            code="INVALID_FIELD_PATH",
            details={"path": path}
        )
        self.path = path


class ExportError(PlacementTrackerError):
    """Spreadsheet or image export failed"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="EXPORT_FAILED", details=details)
