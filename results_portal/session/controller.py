from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from results_portal.ingest.errors import LoadError
from results_portal.ingest.loader import load_dataset
from results_portal.lookup.catalog import list_categories, records_in_category
from results_portal.lookup.errors import ValidationError, ValidationErrorKind
from results_portal.lookup.matcher import SearchRequest
from results_portal.normalize.schema import StudentRecord
from results_portal.session import messages
from results_portal.settings import PortalSettings

logger = logging.getLogger(__name__)


class PortalState(str, Enum):
    LOADING = "LOADING"
    SEARCH = "SEARCH"
    RESULT = "RESULT"
    ERROR = "ERROR"


@dataclass(frozen=True, slots=True)
class Notification:
    kind: str
    message: str


@dataclass(slots=True)
class ResultsPortalSession:
    """Drives one visitor's load -> search -> result flow.

    Rendering is left to the caller: it reads the public fields after each
    call and feeds the visitor's choices back through the methods below.
    """

    settings: PortalSettings = field(default_factory=PortalSettings.baseline)
    loader: Callable[..., list[StudentRecord]] = load_dataset
    http_client: Any | None = None
    state: PortalState = PortalState.LOADING
    records: tuple[StudentRecord, ...] = ()
    error_message: str = ""
    notification: Notification | None = None
    selected_category: str = ""
    selected_student: str = ""
    birth_date_input: str = ""
    phone_input: str = ""
    validation_message: str = ""
    validation_kind: ValidationErrorKind | None = None
    found_record: StudentRecord | None = None
    _started: bool = field(default=False, init=False, repr=False)

    def start(self) -> PortalState:
        if self._started:
            raise RuntimeError("The results dataset is loaded once per session.")
        self._started = True

        try:
            records = self.loader(settings=self.settings, http_client=self.http_client)
        except LoadError as exc:
            logger.exception("Results dataset failed to load (kind=%s)", exc.kind.value)
            self.state = PortalState.ERROR
            self.error_message = messages.LOAD_FAILED
            self.notification = Notification(kind="error", message=messages.LOAD_FAILED_NOTICE)
            return self.state

        self.records = tuple(records)
        self.state = PortalState.SEARCH
        self.notification = Notification(kind="success", message=messages.LOAD_SUCCEEDED)
        return self.state

    def dismiss_notification(self) -> None:
        self.notification = None

    @property
    def categories(self) -> list[str]:
        return list_categories(self.records)

    @property
    def students_in_category(self) -> list[StudentRecord]:
        return records_in_category(self.records, self.selected_category)

    def select_category(self, category: str) -> None:
        self._require_state(PortalState.SEARCH)
        self.selected_category = category
        self.selected_student = ""
        self._clear_inputs()

    def select_student(self, student_name: str) -> None:
        self._require_state(PortalState.SEARCH)
        self.selected_student = student_name
        self._clear_inputs()

    def submit(self, birth_date: str, phone: str) -> StudentRecord | None:
        self._require_state(PortalState.SEARCH)
        self.birth_date_input = birth_date
        self.phone_input = phone
        self.validation_message = ""
        self.validation_kind = None

        request = SearchRequest(
            category=self.selected_category,
            student_name=self.selected_student,
            birth_date=birth_date,
            phone=phone,
        )
        try:
            record = request.match(self.records)
        except ValidationError as exc:
            self.validation_kind = exc.kind
            if exc.kind is ValidationErrorKind.RECORD_NOT_FOUND:
                logger.warning(
                    "Selected student %r is missing from category %r",
                    request.student_name,
                    request.category,
                )
                self.validation_message = messages.RECORD_NOT_FOUND
            else:
                self.validation_message = messages.CREDENTIAL_MISMATCH
            return None

        self.found_record = record
        self.state = PortalState.RESULT
        return record

    def back(self) -> None:
        self._require_state(PortalState.RESULT)
        self.found_record = None
        self.state = PortalState.SEARCH
        self._clear_inputs()

    def result_card(self) -> dict[str, Any]:
        if self.found_record is None:
            raise RuntimeError("No verified record to display.")
        record = self.found_record
        return {
            "name": record.name,
            "category": record.category,
            "scores": [
                {"label": messages.SCORE1_LABEL, "value": record.score1},
                {"label": messages.SCORE2_LABEL, "value": record.score2},
            ],
            "badge": messages.RESULT_VERIFIED,
        }

    def _clear_inputs(self) -> None:
        self.birth_date_input = ""
        self.phone_input = ""
        self.validation_message = ""
        self.validation_kind = None

    def _require_state(self, expected: PortalState) -> None:
        if self.state is not expected:
            raise RuntimeError(f"Action requires state {expected.value}, session is {self.state.value}.")
