"""Location merge tags and hidden field population."""

import re
from typing import Dict, List, Optional, Union

from infrastructure.logging import get_module_logger
from packages.geolocate.annotator import FieldTag, SubmissionAnnotator
from packages.geolocate.schemas import Form, LocationRecord
from packages.geolocate.service import GeoResolver

logger = get_module_logger()

MERGE_TAG_PATTERN = re.compile(
    r"{user:(country|city|region|continent|latitude|longitude)}"
)

# tag type -> (record attribute, merge tag picker label)
MERGE_TAGS: Dict[str, tuple[str, str]] = {
    "country": ("country_name", "IP: User Country"),
    "city": ("city", "IP: User City"),
    "region": ("region_name", "IP: User Region/State"),
    "continent": ("continent_name", "IP: User Continent"),
    "latitude": ("latitude", "IP: User Latitude"),
    "longitude": ("longitude", "IP: User Longitude"),
}


def available_merge_tags() -> List[Dict[str, str]]:
    """Label/tag pairs offered to form builders."""
    return [
        {"label": label, "tag": f"{{user:{tag_type}}}"}
        for tag_type, (_, label) in MERGE_TAGS.items()
    ]


def format_value(value: Union[str, float, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def tag_value(record: LocationRecord, tag_type: str) -> Optional[Union[str, float]]:
    attribute, _ = MERGE_TAGS[tag_type]
    return getattr(record, attribute)


def replace_merge_tags(text: str, record: Optional[LocationRecord]) -> str:
    """Render ``{user:*}`` tags in free text.

    Tags whose value is missing on the record are left in place. Text
    without any location tag is returned untouched.
    """
    if not text or record is None or not MERGE_TAG_PATTERN.search(text):
        return text

    for tag_type in MERGE_TAGS:
        value = tag_value(record, tag_type)
        if value is not None:
            text = text.replace(f"{{user:{tag_type}}}", format_value(value))
    return text


class FieldPopulator:
    """Fill hidden fields whose default value is a location merge tag.

    Fields are found before any lookup so forms without location tags never
    trigger one. Lookup errors fail open: no values are filled, the error is
    registered for the entry note and the submission continues.
    """

    def __init__(self, resolver: GeoResolver, annotator: SubmissionAnnotator):
        self.resolver = resolver
        self.annotator = annotator

    @staticmethod
    def find_tagged_fields(form: Form) -> List[FieldTag]:
        fields_with_tags = []
        for form_field in form.fields:
            if form_field.type != "hidden" or not form_field.default_value:
                continue
            match = MERGE_TAG_PATTERN.search(form_field.default_value)
            if match:
                fields_with_tags.append(
                    FieldTag(
                        field_id=form_field.id,
                        field_label=form_field.label
                        or f"Hidden Field #{form_field.id}",
                        tag_type=match.group(1),
                    )
                )
        return fields_with_tags

    def populate(
        self, submission_id: str, form: Form, ip: Optional[str]
    ) -> Dict[str, str]:
        """Compute values for tagged hidden fields.

        Args:
            submission_id: Submission the facts are registered under
            form: Form definition
            ip: Submitter IP address

        Returns:
            Mapping of field id (as string) to populated value
        """
        fields_with_tags = self.find_tagged_fields(form)
        if not fields_with_tags:
            logger.debug("no_location_fields", form_id=form.id)
            return {}

        record = self.resolver.resolve(ip)
        log = logger.bind(form_id=form.id, submission_id=submission_id)

        if record.is_error:
            log.warning(
                "location_fields_not_populated", error=record.error_message
            )
            self.annotator.record_field_population(
                submission_id, record, fields_with_tags, api_error=True
            )
            self.annotator.schedule_finalize(submission_id)
            return {}

        values: Dict[str, str] = {}
        for form_field in form.fields:
            if form_field.type != "hidden" or not form_field.default_value:
                continue
            match = MERGE_TAG_PATTERN.fullmatch(form_field.default_value)
            if match:
                values[str(form_field.id)] = format_value(
                    tag_value(record, match.group(1))
                )

        self.annotator.record_field_population(submission_id, record, fields_with_tags)
        self.annotator.schedule_finalize(submission_id)
        log.info("location_fields_populated", field_ids=sorted(values))
        return values
