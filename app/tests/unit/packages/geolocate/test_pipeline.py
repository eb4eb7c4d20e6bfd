"""Unit tests for the submission pipeline."""

from unittest.mock import Mock

import pytest

from infrastructure.operations import OperationResult
from packages.geolocate.pipeline import InMemoryEntryStore, SubmissionPipeline
from packages.geolocate.schemas import CountryRestriction, EntryNote, NoteType
from tests.factories import (
    make_form,
    make_hidden_fields,
    make_ipstack_payload,
    make_submission,
)

pytestmark = pytest.mark.unit


def _restriction(*countries, message="Only for allowed countries."):
    return CountryRestriction(
        validation_enabled=True,
        allowed_countries=set(countries),
        rejection_message=message,
    )


class TestInMemoryEntryStore:
    """Test suite for InMemoryEntryStore."""

    def test_ids_are_sequential(self):
        store = InMemoryEntryStore()

        first = store.save(make_submission(), {"1": "a"})
        second = store.save(make_submission(submission_id="sub-2"), {})

        assert (first, second) == ("1", "2")
        assert store.entries["1"] == {"1": "a"}

    def test_oldest_entry_and_notes_evicted_when_full(self):
        store = InMemoryEntryStore(max_entries=2)
        first = store.save(make_submission(), {})
        store.add_note(
            EntryNote(entry_id=first, text="old", note_type=NoteType.SUCCESS)
        )

        store.save(make_submission(), {})
        third = store.save(make_submission(), {})

        assert list(store.entries) == ["2", third]
        assert store.notes == {}
        assert store.notes_for(first) is None

    def test_notes_for_unknown_entry(self):
        assert InMemoryEntryStore().notes_for("missing") is None


class TestSubmissionPipeline:
    """Test suite for SubmissionPipeline.process."""

    def test_plain_form_is_stored_without_note(
        self, pipeline, entry_store, ipstack_client
    ):
        result = pipeline.process(make_submission(values={"1": "Jane"}))

        assert result.accepted
        assert entry_store.entries[result.entry_id] == {"1": "Jane"}
        assert entry_store.notes_for(result.entry_id) == []
        assert ipstack_client.calls == []

    def test_rejected_submission_is_not_stored(
        self, pipeline, entry_store, annotator, ipstack_client
    ):
        ipstack_client.respond_with(make_ipstack_payload())
        form = make_form(
            restriction=_restriction("Australia", message="Australia only."),
            fields=make_hidden_fields(["{user:country}"]),
        )

        result = pipeline.process(make_submission(form=form))

        assert not result.accepted
        assert result.message == "Australia only."
        assert entry_store.entries == {}
        assert annotator.pending("sub-1") is None

    def test_validation_and_population_share_one_lookup_and_note(
        self, pipeline, entry_store, ipstack_client
    ):
        """Both features fire; one ipstack call and one combined note."""
        ipstack_client.respond_with(make_ipstack_payload())
        form = make_form(
            restriction=_restriction("United States"),
            fields=make_hidden_fields(["{user:country}", "{user:city}"]),
        )

        result = pipeline.process(make_submission(form=form, values={"9": "x"}))

        assert result.accepted
        assert result.populated_values == {"1": "United States", "2": "Mountain View"}
        assert entry_store.entries[result.entry_id] == {
            "9": "x",
            "1": "United States",
            "2": "Mountain View",
        }
        assert len(ipstack_client.calls) == 1
        notes = entry_store.notes_for(result.entry_id)
        assert len(notes) == 1
        assert notes[0].note_type == NoteType.SUCCESS
        assert "Data auto-populated in fields: User Country, User City" in notes[0].text
        assert "Country validation passed" in notes[0].text

    def test_validation_only_note(self, pipeline, entry_store, ipstack_client):
        ipstack_client.respond_with(make_ipstack_payload())
        form = make_form(restriction=_restriction("United States"))

        result = pipeline.process(make_submission(form=form))

        notes = entry_store.notes_for(result.entry_id)
        assert [n.text for n in notes] == [
            "IP Location detected: Mountain View, United States (California). "
            "Country validation passed."
        ]

    def test_api_error_fails_open_with_error_note(
        self, pipeline, entry_store, ipstack_client
    ):
        ipstack_client.results.append(
            OperationResult.transient_error("Connection timed out", error_code="TIMEOUT")
        )
        form = make_form(
            restriction=_restriction("Australia"),
            fields=make_hidden_fields(["{user:country}"]),
        )

        result = pipeline.process(make_submission(ip_address="1.2.3.4", form=form))

        assert result.accepted
        assert result.populated_values == {}
        notes = entry_store.notes_for(result.entry_id)
        assert len(notes) == 1
        assert notes[0].note_type == NoteType.ERROR
        assert notes[0].text.startswith(
            "IP Location service error: Connection timed out"
        )

    def test_configured_restriction_applies_without_form_override(
        self, make_resolver, annotator, entry_store, ipstack_client
    ):
        ipstack_client.respond_with(make_ipstack_payload())
        resolver = make_resolver(
            validation_enabled=True,
            allowed_countries=frozenset({"Canada"}),
            rejection_message="Canada only.",
        )
        pipeline = SubmissionPipeline(resolver, annotator, entry_store)

        result = pipeline.process(make_submission())

        assert not result.accepted
        assert result.message == "Canada only."

    def test_confirmation_message_merge_tags(self, pipeline, ipstack_client):
        ipstack_client.respond_with(make_ipstack_payload())
        form = make_form(confirmation_message="Thanks, visitor from {user:country}!")

        result = pipeline.process(make_submission(form=form))

        assert result.confirmation_message == "Thanks, visitor from United States!"

    def test_store_failure_discards_pending_facts(
        self, resolver, annotator, ipstack_client
    ):
        ipstack_client.respond_with(make_ipstack_payload())
        store = Mock()
        store.save.side_effect = RuntimeError("db down")
        pipeline = SubmissionPipeline(resolver, annotator, store)
        form = make_form(fields=make_hidden_fields(["{user:country}"]))

        with pytest.raises(RuntimeError):
            pipeline.process(make_submission(form=form))

        assert annotator.pending("sub-1") is None
        assert not annotator.is_scheduled("sub-1")
