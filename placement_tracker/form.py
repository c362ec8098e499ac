"""
Form Controller
===============

Owns the draft report a reporter is filling in:

- field updates addressed by dotted path (``final_year.unplaced.college_a``,
  wire aliases such as ``FinalYearPlacementUpdates.OffersReceived`` work
  too, list items by index: ``internship_updates.0.company``)
- field-level validation messages (never exceptions)
- mirroring every change to local storage so an interrupted draft resumes
- one-shot submission to the report store

The draft is an immutable ReportRecord; every update rebuilds the nodes on
the path with ``model_copy`` and leaves everything else shared.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from placement_tracker.api_client import PlacementAPIClient
from placement_tracker.exceptions import (
    InvalidFieldPathError,
    ReportStoreError,
    StorageCorruptError,
)
from placement_tracker.logging_config import logger
from placement_tracker.models import InternshipUpdate, ReportRecord, UserSession
from placement_tracker.storage import DRAFT_KEY, LocalStore


REQUIRED = "This field is required"
NOT_A_COUNT = "Enter a whole number (0 or more)"
SUBMIT_BLOCKED = "Please fill in all required fields before submitting"

LOCKED_FIELDS = {"reported_by"}

REQUIRED_TEXT_FIELDS = (
    "date",
    "reported_by",
    "final_year.offers_received",
    "final_year.awaited_results",
    "pre_final_year_internships.offers_today",
    "pre_final_year_high_salary.offers_today",
    "pre_final_year_high_salary.total_since_april",
)
REQUIRED_INTERNSHIP_TEXT_FIELDS = ("company", "department", "status")

_WHOLE_NUMBER = re.compile(r"[0-9]+")

FieldPath = Tuple[str, ...]


@dataclass
class SubmissionResult:
    """Outcome of a submit attempt"""
    success: bool
    message: str = ""
    errors: Dict[str, str] = field(default_factory=dict)
    response: Any = None


# ==================== Path helpers ====================

def _field_name(node: BaseModel, segment: str) -> Optional[str]:
    """Map an attribute name or wire alias to the model's field name"""
    for name, info in type(node).model_fields.items():
        if segment == name or segment == info.alias:
            return name
    return None


def resolve_path(record: ReportRecord, path: str) -> FieldPath:
    """Canonical attribute path for ``path``; raises InvalidFieldPathError"""
    segments = [s for s in path.split(".") if s]
    if not segments:
        raise InvalidFieldPathError(path)

    canonical: List[str] = []
    node: Any = record
    for segment in segments:
        if isinstance(node, tuple):
            if not segment.isdigit() or int(segment) >= len(node):
                raise InvalidFieldPathError(path)
            canonical.append(segment)
            node = node[int(segment)]
        elif isinstance(node, BaseModel):
            name = _field_name(node, segment)
            if name is None:
                raise InvalidFieldPathError(path)
            canonical.append(name)
            node = getattr(node, name)
        else:
            raise InvalidFieldPathError(path)

    # Only scalar leaves are editable
    if isinstance(node, (BaseModel, tuple)):
        raise InvalidFieldPathError(path)

    return tuple(canonical)


def get_value(record: ReportRecord, path: FieldPath) -> Any:
    node: Any = record
    for segment in path:
        node = node[int(segment)] if isinstance(node, tuple) else getattr(node, segment)
    return node


def set_value(node: Any, path: FieldPath, value: Any) -> Any:
    """Return a copy of ``node`` with ``path`` replaced; untouched branches are shared"""
    head, rest = path[0], path[1:]

    if isinstance(node, tuple):
        index = int(head)
        child = set_value(node[index], rest, value) if rest else value
        return node[:index] + (child,) + node[index + 1:]

    child = set_value(getattr(node, head), rest, value) if rest else value
    return node.model_copy(update={head: child})


def _coerce_count(raw: Any) -> Tuple[Optional[int], Optional[str]]:
    """Parse form input for an integer field -> (value, error)"""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return (raw, None) if raw >= 0 else (None, NOT_A_COUNT)

    text = "" if raw is None else str(raw).strip()
    if not text:
        return None, REQUIRED
    if not _WHOLE_NUMBER.fullmatch(text):
        return None, NOT_A_COUNT
    return int(text), None


def _path_key(path: FieldPath) -> str:
    return ".".join(path)


# ==================== Controller ====================

class FormController:
    """Draft state, validation and submission for one reporter"""

    def __init__(
        self,
        session: UserSession,
        store: LocalStore,
        client: PlacementAPIClient,
        today: Optional[date] = None
    ):
        self.session = session
        self.store = store
        self.client = client
        self._today = today
        self.record: ReportRecord = self._blank()
        self.errors: Dict[str, str] = {}
        self._count_errors: Dict[str, str] = {}
        self.submitted = False
        self.last_error: Optional[str] = None

    def _blank(self) -> ReportRecord:
        return ReportRecord.blank(self.session.username, self._today or date.today())

    # ==================== Durability ====================

    def load(self) -> ReportRecord:
        """Resume the stored draft; the session always owns ReportedBy"""
        try:
            data = self.store.read(DRAFT_KEY)
            record = ReportRecord.from_payload(data) if data is not None else None
        except (StorageCorruptError, ValidationError) as e:
            logger.warning(f"Discarding stored draft: {e}")
            self.store.remove(DRAFT_KEY)
            record = None

        if record is None:
            self.record = self._blank()
        else:
            self.record = record.model_copy(update={"reported_by": self.session.username})
            logger.info(f"Resumed draft for {self.record.date}")

        self.errors = {}
        self._count_errors = {}
        return self.record

    def _persist(self) -> None:
        payload = self.record.to_payload()
        payload["ReportedBy"] = self.session.username
        self.store.write(DRAFT_KEY, payload)

    def _commit(self, record: ReportRecord) -> ReportRecord:
        self.record = record
        self.submitted = False
        self._persist()
        return record

    # ==================== Editing ====================

    def update(self, path: str, value: Any) -> ReportRecord:
        """Set one field and re-validate it"""
        canonical = resolve_path(self.record, path)
        key = _path_key(canonical)

        if key in LOCKED_FIELDS:
            return self.record

        current = get_value(self.record, canonical)
        if isinstance(current, int) and not isinstance(current, bool):
            count, error = _coerce_count(value)
            if error:
                self._count_errors[key] = error
                self.errors[key] = error
                return self.record
            self._count_errors.pop(key, None)
            new_value: Any = count
        else:
            new_value = "" if value is None else str(value)

        record = self._commit(set_value(self.record, canonical, new_value))
        self._revalidate(key)
        return record

    def get(self, path: str) -> Any:
        return get_value(self.record, resolve_path(self.record, path))

    def error_for(self, path: str) -> Optional[str]:
        """Current message for ``path`` in any accepted spelling"""
        return self.errors.get(_path_key(resolve_path(self.record, path)))

    def add_internship(self) -> ReportRecord:
        updates = self.record.internship_updates + (InternshipUpdate(),)
        return self._commit(self.record.model_copy(update={"internship_updates": updates}))

    def remove_internship(self, index: int) -> ReportRecord:
        updates = self.record.internship_updates
        if not 0 <= index < len(updates):
            return self.record

        remaining = updates[:index] + updates[index + 1:]
        self._count_errors = self._shift_internship_errors(self._count_errors, index)
        self.errors = self._shift_internship_errors(self.errors, index)
        return self._commit(self.record.model_copy(update={"internship_updates": remaining}))

    @staticmethod
    def _shift_internship_errors(errors: Dict[str, str], removed: int) -> Dict[str, str]:
        shifted = {}
        for key, message in errors.items():
            parts = key.split(".")
            if parts[0] == "internship_updates" and len(parts) > 2:
                index = int(parts[1])
                if index == removed:
                    continue
                if index > removed:
                    parts[1] = str(index - 1)
                key = ".".join(parts)
            shifted[key] = message
        return shifted

    def load_from(self, record: ReportRecord) -> ReportRecord:
        """Start a new draft from a saved report"""
        self.errors = {}
        self._count_errors = {}
        return self._commit(record.model_copy(update={"reported_by": self.session.username}))

    def reset(self) -> ReportRecord:
        """Discard the draft and its stored copy"""
        self.record = self._blank()
        self.errors = {}
        self._count_errors = {}
        self.submitted = False
        self.last_error = None
        self.store.remove(DRAFT_KEY)
        return self.record

    # ==================== Validation ====================

    def _required_text_paths(self) -> List[str]:
        paths = list(REQUIRED_TEXT_FIELDS)
        for index in range(len(self.record.internship_updates)):
            paths.extend(
                f"internship_updates.{index}.{name}"
                for name in REQUIRED_INTERNSHIP_TEXT_FIELDS
            )
        return paths

    def _check(self, key: str) -> Optional[str]:
        if key in self._count_errors:
            return self._count_errors[key]

        if key in self._required_text_paths():
            value = get_value(self.record, tuple(key.split(".")))
            if not str(value).strip():
                return REQUIRED
        return None

    def _revalidate(self, key: str) -> None:
        error = self._check(key)
        if error:
            self.errors[key] = error
        else:
            self.errors.pop(key, None)

    def validate(self) -> Dict[str, str]:
        """Full presence check; returns and stores {path: message}"""
        errors = {}
        for key in self._required_text_paths():
            error = self._check(key)
            if error:
                errors[key] = error
        errors.update(self._count_errors)
        self.errors = errors
        return dict(errors)

    @property
    def can_submit(self) -> bool:
        return not self.validate()

    # ==================== Remote ====================

    async def submit(self) -> SubmissionResult:
        """POST the draft once; clear it on success, keep it on failure"""
        errors = self.validate()
        if errors:
            return SubmissionResult(success=False, message=SUBMIT_BLOCKED, errors=errors)

        try:
            response = await self.client.create_report(self.record)
        except ReportStoreError as e:
            self.last_error = f"Failed to submit the form: {e.message}"
            logger.warning(f"Submission for {self.record.date} failed: {e.message}")
            return SubmissionResult(success=False, message=self.last_error)

        logger.info(f"Submitted report for {self.record.date}")
        self.reset()
        self.submitted = True
        return SubmissionResult(success=True, message="Report Submitted Successfully!", response=response)

    async def saved_reports(self) -> List[ReportRecord]:
        return await self.client.list_reports()
