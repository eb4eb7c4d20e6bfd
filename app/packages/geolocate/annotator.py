"""Consolidated entry notes for geolocation-driven submission effects.

Country validation and field population both act on the same submission
and each registers what it did. Once the entry is stored the pipeline calls
``finalize`` a single time, which turns the accumulated facts into at most
one note.

Example:
    annotator = SubmissionAnnotator(note_writer=store)

    annotator.record_validation("sub-1", record, allowed_countries={"Canada"})
    annotator.record_field_population("sub-1", record, fields_with_tags)
    annotator.schedule_finalize("sub-1")

    # after the entry is persisted
    note = annotator.finalize("sub-1", entry_id="42")
"""

import threading
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, FrozenSet, List, Optional, Protocol, Sequence

from infrastructure.logging import get_module_logger
from packages.geolocate.schemas import EntryNote, LocationRecord, NoteType

logger = get_module_logger()


class NoteWriter(Protocol):
    """Attaches notes to stored entries."""

    def add_note(self, note: EntryNote) -> None: ...


@dataclass(frozen=True)
class FieldTag:
    """A hidden field whose default value carries a location merge tag."""

    field_id: int
    field_label: str
    tag_type: str


@dataclass
class PendingSubmissionFacts:
    """Facts registered for one submission before its note is written."""

    ip_data: Optional[LocationRecord] = None
    has_validation: bool = False
    has_merge_tags: bool = False
    has_api_error: bool = False
    allowed_countries: FrozenSet[str] = frozenset()
    fields_with_tags: List[FieldTag] = field(default_factory=list)


def format_location_text(record: Optional[LocationRecord]) -> str:
    """Format a record as ``city, country (region)``.

    The city is left out when absent, the region when absent or equal to the
    city. Records without a country format as an empty string.
    """
    if record is None or not record.country_name:
        return ""

    text = record.country_name
    if record.city:
        text = f"{record.city}, {text}"
    if record.region_name and record.region_name != record.city:
        text = f"{text} ({record.region_name})"
    return text


def format_fields_text(fields_with_tags: Sequence[FieldTag]) -> str:
    return ", ".join(tag.field_label for tag in fields_with_tags)


def compose_note(
    facts: PendingSubmissionFacts, entry_id: str
) -> Optional[EntryNote]:
    """Build the single note for a submission, if any is due.

    The first matching branch wins: API error, then population with
    validation, then population only, then validation only.
    """
    record = facts.ip_data
    if record is None:
        return None

    if facts.has_api_error or record.is_error:
        error_message = record.error_message or "Unknown API error"
        if facts.has_merge_tags and facts.fields_with_tags:
            text = (
                f"IP Location service error: {error_message} - Could not populate "
                f"location data for fields: {format_fields_text(facts.fields_with_tags)}. "
                "Default or empty values were used."
            )
        else:
            text = (
                f"IP Location service unavailable or error occurred: {error_message} "
                "- Form submission was allowed to continue."
            )
        return EntryNote(entry_id=entry_id, text=text, note_type=NoteType.ERROR)

    location_text = format_location_text(record)
    is_allowed = record.country_name in facts.allowed_countries
    outcome = "passed" if is_allowed else "failed but submission was allowed"

    if facts.has_merge_tags and facts.has_validation:
        text = (
            f"IP Location detected: {location_text}. Data auto-populated in fields: "
            f"{format_fields_text(facts.fields_with_tags)}. Country validation {outcome}."
        )
        return EntryNote(entry_id=entry_id, text=text, note_type=NoteType.SUCCESS)

    if facts.has_merge_tags:
        text = (
            f"IP Location detected: {location_text}. Data auto-populated in fields: "
            f"{format_fields_text(facts.fields_with_tags)}."
        )
        return EntryNote(entry_id=entry_id, text=text, note_type=NoteType.SUCCESS)

    if facts.has_validation:
        text = f"IP Location detected: {location_text}. Country validation {outcome}."
        return EntryNote(
            entry_id=entry_id,
            text=text,
            note_type=NoteType.SUCCESS if is_allowed else NoteType.WARNING,
        )

    return None


class SubmissionAnnotator:
    """Accumulates per-submission facts and writes one note per submission.

    The pending map is process-wide and shared by concurrent requests, so
    every access goes through a lock. Entries live from the first fact
    registered until ``finalize`` or ``discard``.

    Args:
        note_writer: Destination for finished notes
    """

    def __init__(self, note_writer: NoteWriter) -> None:
        self.note_writer = note_writer
        self._pending: Dict[str, PendingSubmissionFacts] = {}
        self._scheduled: set[str] = set()
        self._lock = threading.Lock()

    def _facts(self, submission_id: str) -> PendingSubmissionFacts:
        facts = self._pending.get(submission_id)
        if facts is None:
            facts = PendingSubmissionFacts()
            self._pending[submission_id] = facts
        return facts

    def record_validation(
        self,
        submission_id: str,
        record: LocationRecord,
        allowed_countries: AbstractSet[str],
        api_error: bool = False,
    ) -> None:
        """Register that country validation ran for a submission."""
        with self._lock:
            facts = self._facts(submission_id)
            facts.ip_data = record
            facts.has_validation = True
            facts.allowed_countries = frozenset(allowed_countries)
            if api_error:
                facts.has_api_error = True

    def record_field_population(
        self,
        submission_id: str,
        record: LocationRecord,
        fields_with_tags: Sequence[FieldTag],
        api_error: bool = False,
    ) -> None:
        """Register that merge-tag fields were (or could not be) populated."""
        with self._lock:
            facts = self._facts(submission_id)
            facts.ip_data = record
            facts.has_merge_tags = True
            facts.fields_with_tags = list(fields_with_tags)
            if api_error:
                facts.has_api_error = True

    def schedule_finalize(self, submission_id: str) -> bool:
        """Register the finalize step for a submission.

        Returns:
            True the first time for a submission, False when already scheduled.
        """
        with self._lock:
            if submission_id in self._scheduled:
                return False
            self._scheduled.add(submission_id)
            return True

    def is_scheduled(self, submission_id: str) -> bool:
        with self._lock:
            return submission_id in self._scheduled

    def pending(self, submission_id: str) -> Optional[PendingSubmissionFacts]:
        with self._lock:
            return self._pending.get(submission_id)

    def finalize(self, submission_id: str, entry_id: str) -> Optional[EntryNote]:
        """Write the note for a stored entry and forget the submission.

        Writer failures are logged and swallowed: the entry already exists
        and must not be affected by annotation.

        Returns:
            The composed note, or None when nothing was registered.
        """
        with self._lock:
            facts = self._pending.pop(submission_id, None)
            self._scheduled.discard(submission_id)

        if facts is None:
            return None

        note = compose_note(facts, entry_id)
        if note is None:
            return None

        try:
            self.note_writer.add_note(note)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "entry_note_write_failed",
                submission_id=submission_id,
                entry_id=entry_id,
                note_type=note.note_type.value,
                note_text=note.text,
                error=str(e),
            )
            return note

        logger.info(
            "entry_note_added",
            submission_id=submission_id,
            entry_id=entry_id,
            note_type=note.note_type.value,
            note_text=note.text,
        )
        return note

    def discard(self, submission_id: str) -> None:
        """Drop the facts of a submission that will not be stored."""
        with self._lock:
            self._pending.pop(submission_id, None)
            self._scheduled.discard(submission_id)

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()
            self._scheduled.clear()
