"""DynamoDB storage for accepted entries and the notes attached to them."""

import json
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore
from pydantic import ValidationError

from infrastructure.logging import get_module_logger
from infrastructure.operations.classifiers import classify_dynamodb_error
from packages.geolocate.schemas import EntryNote, Submission

logger = get_module_logger()

PARTITION_KEY = "entry_id"


class EntryStoreError(Exception):
    """The entries table could not be read or written."""


class DynamoDBEntryStore:
    """Entry store and note writer backed by one DynamoDB table.

    Uses a dedicated table with:
    - PK: entry_id (string, generated on save)
    - Attributes: submission_id, form_id, ip_address, values_json,
      created_at, notes (list of JSON-encoded notes, appended in place)

    Unlike the lookup cache, failures here are raised: an entry that was not
    stored must not be reported as accepted.
    """

    def __init__(
        self,
        client: BaseClient,
        table_name: str = "geolocation_entries",
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.client = client
        self.table_name = table_name
        self._clock = clock
        self._id_factory = id_factory

    def _failure(self, event: str, error: Exception, **kwargs: Any) -> EntryStoreError:
        result = classify_dynamodb_error(error)
        logger.error(
            event,
            table_name=self.table_name,
            **result.log_fields(),
            **kwargs,
        )
        return EntryStoreError(result.message)

    def save(self, submission: Submission, values: Dict[str, str]) -> str:
        entry_id = self._id_factory()
        try:
            self.client.put_item(
                TableName=self.table_name,
                Item={
                    PARTITION_KEY: {"S": entry_id},
                    "submission_id": {"S": submission.submission_id},
                    "form_id": {"N": str(submission.form.id)},
                    "ip_address": {"S": submission.ip_address},
                    "values_json": {"S": json.dumps(values, sort_keys=True)},
                    "created_at": {"N": str(int(self._clock()))},
                    "notes": {"L": []},
                },
                ConditionExpression="attribute_not_exists(#pk)",
                ExpressionAttributeNames={"#pk": PARTITION_KEY},
            )
        except (ClientError, BotoCoreError) as e:
            raise self._failure("entry_save_failed", e, entry_id=entry_id) from e

        logger.debug("entry_saved", entry_id=entry_id, table_name=self.table_name)
        return entry_id

    def add_note(self, note: EntryNote) -> None:
        try:
            self.client.update_item(
                TableName=self.table_name,
                Key={PARTITION_KEY: {"S": note.entry_id}},
                UpdateExpression=(
                    "SET #notes = list_append(if_not_exists(#notes, :empty), :note)"
                ),
                ExpressionAttributeNames={"#notes": "notes"},
                ExpressionAttributeValues={
                    ":empty": {"L": []},
                    ":note": {"L": [{"S": note.model_dump_json()}]},
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise self._failure(
                "entry_note_save_failed", e, entry_id=note.entry_id
            ) from e

    def notes_for(self, entry_id: str) -> Optional[List[EntryNote]]:
        """Notes on an entry in the order they were added.

        Returns:
            None when the entry does not exist. Unreadable notes are skipped.
        """
        try:
            response = self.client.get_item(
                TableName=self.table_name,
                Key={PARTITION_KEY: {"S": entry_id}},
                ProjectionExpression="#pk, #notes",
                ExpressionAttributeNames={"#pk": PARTITION_KEY, "#notes": "notes"},
            )
        except (ClientError, BotoCoreError) as e:
            raise self._failure("entry_notes_get_failed", e, entry_id=entry_id) from e

        item = response.get("Item")
        if not item:
            return None

        notes: List[EntryNote] = []
        for raw in item.get("notes", {}).get("L", []):
            try:
                notes.append(EntryNote.model_validate_json(raw["S"]))
            except (KeyError, TypeError, ValidationError) as e:
                logger.warning("entry_note_invalid", entry_id=entry_id, error=str(e))
        return notes
