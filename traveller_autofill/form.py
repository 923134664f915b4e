"""State controller behind the traveller form."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, List, Mapping, Optional, Protocol

import httpx

from .mappings import map_to_swedish
from .models import SLOT_FIELDS, UNKNOWN_NATIONALITY, TravellerSlot
from .schemas import MAX_TRAVELLERS
from .utils import normalize_birth_date


logger = logging.getLogger(__name__)

SLOT_COUNT = MAX_TRAVELLERS
PROGRESS_CLEAR_DELAY = 2.0

INVALID_RESULT_MESSAGE = "Received invalid data from AI. Please try again."
SUCCESS_MESSAGE = "Traveller information updated"


@dataclass
class Notification:
    level: str
    message: str


class UploadClient(Protocol):
    def process_travellers(
        self,
        filename: str,
        content: bytes,
        media_type: str,
        on_upload_progress: Optional[Callable[[int, int], None]] = None,
    ) -> Any: ...


class UploadRefused(RuntimeError):
    """The model declined to extract anything from the document."""


class UploadProgress:
    """Monotonic upload progress: 10-70% while uploading, 70-100% afterwards."""

    UPLOAD_START = 10.0
    UPLOAD_END = 70.0

    def __init__(self, listener: Optional[Callable[["UploadProgress"], None]] = None) -> None:
        self.listener = listener
        self.value = 0.0
        self.label = ""
        self.active = False

    def _set(self, value: float, label: str) -> None:
        self.value = max(self.value, min(100.0, value))
        self.label = label
        if self.listener:
            self.listener(self)

    def start(self) -> None:
        self.active = True
        self.value = 0.0
        self._set(0.0, "Starting file processing...")

    def uploading(self, loaded: int, total: int) -> None:
        percent = round(loaded * 100 / (total or 1))
        span = self.UPLOAD_END - self.UPLOAD_START
        self._set(self.UPLOAD_START + percent * span / 100, f"Uploading: {percent}%")

    def processing(self) -> None:
        self._set(80.0, "Processing AI response...")

    def updating(self) -> None:
        self._set(90.0, "Updating traveller information...")

    def complete(self) -> None:
        self._set(100.0, "Processing complete!")

    def clear(self) -> None:
        self.active = False
        self.value = 0.0
        self.label = ""
        if self.listener:
            self.listener(self)


class TravellerForm:
    """Five positional traveller slots plus the editor's working copy."""

    def __init__(self) -> None:
        self.slots: List[TravellerSlot] = [TravellerSlot(id=i) for i in range(1, SLOT_COUNT + 1)]
        self.selected: Optional[TravellerSlot] = None
        self.notifications: List[Notification] = []

    @property
    def is_editor_open(self) -> bool:
        return self.selected is not None

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level, message))

    def drain_notifications(self) -> List[Notification]:
        pending, self.notifications = self.notifications, []
        return pending

    # --- editor -----------------------------------------------------------

    def select_slot(self, slot: TravellerSlot) -> TravellerSlot:
        self.selected = slot.copy()
        return self.selected

    def update_selected(self, field: str, value: str) -> None:
        if self.selected is None:
            raise ValueError("No traveller is selected.")
        if field not in SLOT_FIELDS:
            raise ValueError(f"Unknown traveller field '{field}'.")
        setattr(self.selected, field, value)

    def save_slot(self) -> None:
        if self.selected is None:
            return
        edited = self.selected
        self.slots = [edited.copy() if s.id == edited.id else s for s in self.slots]
        logger.info("Traveller saved: %s", edited.id)
        self.selected = None

    def close_editor(self) -> None:
        self.selected = None

    # --- upload merge -----------------------------------------------------

    def merge_extraction_result(self, result: Any) -> bool:
        """Merge extracted travellers into the slots by position.

        Empty extracted values never overwrite what a slot already holds.
        Returns False, leaving every slot untouched, for malformed results.
        """

        travellers = result.get("travellers") if isinstance(result, Mapping) else None
        if not isinstance(travellers, list):
            logger.warning("Invalid data structure received from AI: %r", result)
            self.notify("error", INVALID_RESULT_MESSAGE)
            return False

        global_info = result.get("globalInfo")
        if not isinstance(global_info, Mapping):
            global_info = {}

        merged = list(self.slots)
        for index, extracted in enumerate(travellers[:SLOT_COUNT]):
            if not isinstance(extracted, Mapping):
                logger.warning("Skipping malformed traveller at position %s", index)
                continue
            merged[index] = _merge_slot(merged[index], extracted, global_info)
        self.slots = merged
        return True

    def process_upload(
        self,
        client: UploadClient,
        filename: str,
        content: bytes,
        media_type: str,
        progress: Optional[UploadProgress] = None,
    ) -> bool:
        """Upload a document, merge the answer and record a notification.

        The slots are left as they were when anything goes wrong. The caller
        clears ``progress`` after ``PROGRESS_CLEAR_DELAY`` seconds.
        """

        progress = progress or UploadProgress()
        progress.start()
        try:
            logger.info("File upload started: %s", filename)
            progress.uploading(0, 1)
            data = client.process_travellers(
                filename, content, media_type, on_upload_progress=progress.uploading
            )
            progress.processing()
            if isinstance(data, Mapping) and data.get("refusal"):
                raise UploadRefused(str(data["refusal"]))

            progress.updating()
            if not self.merge_extraction_result(data):
                return False
            progress.complete()
            self.notify("success", SUCCESS_MESSAGE)
            return True
        except httpx.HTTPStatusError as exc:
            message = _error_body_message(exc.response) or str(exc)
            logger.warning("Failed to process %s: %s", filename, message)
            self.notify("error", f"Failed to process the file: {message}")
        except httpx.TransportError as exc:
            logger.warning("Network error while uploading %s: %s", filename, exc)
            self.notify("error", f"Network error, could not reach the server: {exc}")
        except UploadRefused as exc:
            self.notify("error", str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error processing file %s: %s", filename, exc)
            self.notify("error", str(exc) or "Failed to process the file. Please try again.")
        return False


def _error_body_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, Mapping):
        return None
    return body.get("refusal") or body.get("error") or body.get("message")


def _mapped_with_fallback(
    extracted: Mapping[str, Any], global_info: Mapping[str, Any], field: str
) -> Optional[str]:
    # A value that maps to nothing ("Unknown") counts as missing, so the
    # document-wide value still applies.
    return map_to_swedish(extracted.get(field), field) or map_to_swedish(global_info.get(field), field)


def _merge_slot(
    slot: TravellerSlot, extracted: Mapping[str, Any], global_info: Mapping[str, Any]
) -> TravellerSlot:
    updated = slot.copy()
    updated.first_name = extracted.get("firstName") or slot.first_name
    updated.last_name = extracted.get("lastName") or slot.last_name
    updated.date_of_birth = normalize_birth_date(extracted.get("dateOfBirth")) or slot.date_of_birth
    updated.gender = map_to_swedish(extracted.get("gender"), "gender") or slot.gender
    updated.nationality = _mapped_with_fallback(extracted, global_info, "nationality") or slot.nationality
    updated.disability = _mapped_with_fallback(extracted, global_info, "disability") or slot.disability
    if updated.nationality == UNKNOWN_NATIONALITY:
        updated.nationality = ""
    return updated
