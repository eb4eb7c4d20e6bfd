"""Submission pipeline: country gate, field population, storage, note."""

import itertools
import threading
from collections import OrderedDict
from typing import Dict, List, Optional, Protocol

from infrastructure.logging import bind_submission_context, get_module_logger
from packages.geolocate.annotator import NoteWriter, SubmissionAnnotator
from packages.geolocate.gate import CountryGate
from packages.geolocate.population import (
    MERGE_TAG_PATTERN,
    FieldPopulator,
    replace_merge_tags,
)
from packages.geolocate.schemas import (
    CountryRestriction,
    EntryNote,
    GeolocationConfig,
    Submission,
    SubmissionResult,
)
from packages.geolocate.service import GeoResolver

logger = get_module_logger()


class EntryStore(Protocol):
    """Persists accepted submissions."""

    def save(self, submission: Submission, values: Dict[str, str]) -> str:
        """Store an entry and return its id."""
        ...


class EntryRepository(EntryStore, NoteWriter, Protocol):
    """Entry store that also keeps the notes attached to each entry."""

    def notes_for(self, entry_id: str) -> Optional[List[EntryNote]]:
        """Notes on an entry, or None when the entry is unknown."""
        ...


class InMemoryEntryStore:
    """Entry store and note writer kept in process memory.

    Holds at most ``max_entries`` entries; the oldest entry and its notes
    are dropped to make room for a new one.
    """

    def __init__(self, max_entries: int = 1000) -> None:
        self.max_entries = max_entries
        self.entries: "OrderedDict[str, Dict[str, str]]" = OrderedDict()
        self.notes: Dict[str, List[EntryNote]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def save(self, submission: Submission, values: Dict[str, str]) -> str:
        with self._lock:
            entry_id = str(next(self._ids))
            self.entries[entry_id] = dict(values)
            while len(self.entries) > self.max_entries:
                evicted, _ = self.entries.popitem(last=False)
                self.notes.pop(evicted, None)
        return entry_id

    def add_note(self, note: EntryNote) -> None:
        with self._lock:
            self.notes.setdefault(note.entry_id, []).append(note)

    def notes_for(self, entry_id: str) -> Optional[List[EntryNote]]:
        with self._lock:
            if entry_id not in self.entries and entry_id not in self.notes:
                return None
            return list(self.notes.get(entry_id, []))


class SubmissionPipeline:
    """Process one submission end to end.

    1. Country gate; a rejection stops here and nothing is stored.
    2. Hidden field population from location merge tags.
    3. Entry persistence.
    4. A single finalize call writing the consolidated note.
    """

    def __init__(
        self,
        resolver: GeoResolver,
        annotator: SubmissionAnnotator,
        entry_store: EntryStore,
    ) -> None:
        self.resolver = resolver
        self.annotator = annotator
        self.entry_store = entry_store
        self.gate = CountryGate(resolver)
        self.populator = FieldPopulator(resolver, annotator)

    def _restriction(self, submission: Submission) -> CountryRestriction:
        if submission.form.restriction is not None:
            return submission.form.restriction
        config: GeolocationConfig = self.resolver.config
        return CountryRestriction(
            validation_enabled=config.validation_enabled,
            allowed_countries=set(config.allowed_countries),
            rejection_message=config.rejection_message,
        )

    def _render_confirmation(self, submission: Submission) -> Optional[str]:
        text = submission.form.confirmation_message
        if not text or not MERGE_TAG_PATTERN.search(text):
            return text
        # Resolved records are in the request cache by now
        return replace_merge_tags(text, self.resolver.resolve(submission.ip_address))

    def process(self, submission: Submission) -> SubmissionResult:
        with bind_submission_context(submission.submission_id, submission.form.id):
            return self._process(submission)

    def _process(self, submission: Submission) -> SubmissionResult:
        submission_id = submission.submission_id
        restriction = self._restriction(submission)

        decision = self.gate.check(
            submission.ip_address,
            restriction.allowed_countries,
            restriction.validation_enabled,
            rejection_message=restriction.rejection_message,
        )
        if not decision.passed:
            self.annotator.discard(submission_id)
            logger.info("submission_rejected", reason=decision.reason)
            return SubmissionResult(
                submission_id=submission_id,
                accepted=False,
                message=decision.reason,
            )

        if decision.evaluated and decision.record is not None:
            self.annotator.record_validation(
                submission_id,
                decision.record,
                restriction.allowed_countries,
                api_error=decision.api_error,
            )
            self.annotator.schedule_finalize(submission_id)

        populated = self.populator.populate(
            submission_id, submission.form, submission.ip_address
        )
        values = {**submission.values, **populated}

        try:
            entry_id = self.entry_store.save(submission, values)
        except Exception:
            self.annotator.discard(submission_id)
            raise

        if self.annotator.is_scheduled(submission_id):
            self.annotator.finalize(submission_id, entry_id)

        confirmation = self._render_confirmation(submission)

        logger.info("submission_stored", entry_id=entry_id, populated=len(populated))
        return SubmissionResult(
            submission_id=submission_id,
            accepted=True,
            entry_id=entry_id,
            populated_values=populated,
            confirmation_message=confirmation,
        )
