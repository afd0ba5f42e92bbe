"""Form field renderer.

Maps stored field definitions to input contracts for clients and keeps the
working copy of an applicant's answers (a form draft), including which file
fields are still uploading.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from hireflow.models.job_position import FieldType
from hireflow.schemas.form_field import FieldAnswer, InputSpec
from hireflow.services.exceptions import ValidationError

logger = logging.getLogger(__name__)

SINGLE_LINE_TYPES = frozenset(
    {FieldType.TEXT, FieldType.EMAIL, FieldType.TEL, FieldType.NUMBER, FieldType.DATE}
)
TEXTAREA_ROWS = 4


class FieldLike(Protocol):
    """Anything shaped like a field definition (ORM row or FieldDef)."""

    field_name: str | None
    field_type: str
    field_label: str
    field_options: list[str] | None
    is_required: bool


def render_contract(field: FieldLike) -> InputSpec:
    """Describe the editable input for a field.

    Examples:
        A ``select`` field renders as a closed choice over its options;
        a ``file`` field renders as a picker whose answer becomes the
        upload reference.
    """
    field_type = FieldType(field.field_type)
    spec = InputSpec(
        field_name=field.field_name,
        label=field.field_label,
        field_type=field_type,
        widget="input",
        required=field.is_required,
    )

    if field_type in SINGLE_LINE_TYPES:
        spec.input_type = field_type.value
    elif field_type == FieldType.TEXTAREA:
        spec.widget = "textarea"
        spec.rows = TEXTAREA_ROWS
    elif field_type == FieldType.SELECT:
        spec.widget = "select"
        spec.choices = list(field.field_options or [])
    elif field_type == FieldType.FILE:
        spec.widget = "file"
        spec.uploads = True

    return spec


def render_form(fields: Iterable[FieldLike]) -> list[InputSpec]:
    return [render_contract(field) for field in fields]


class FormDraft:
    """Working copy of the answers for one application form.

    Updates are synchronous and keyed by field_name. File fields move
    through an "uploading" sub-state: ``begin_upload`` marks the field
    pending, ``complete_upload`` stores the resulting reference and
    ``remove_upload`` drops both.
    """

    def __init__(self, schema: Sequence[FieldLike]):
        self.schema = list(schema)
        self._fields = {field.field_name: field for field in self.schema}
        self._values: dict[str, str] = {}
        self._uploading: set[str] = set()

    @classmethod
    def from_answers(
        cls,
        schema: Sequence[FieldLike],
        answers: Mapping[str, str | None],
        pending_uploads: Iterable[str] = (),
    ) -> "FormDraft":
        """Rebuild a draft from answers and pending uploads sent by a client.

        ``None`` answers are skipped; unknown field names are rejected.
        """
        draft = cls(schema)
        for field_name in pending_uploads:
            draft.begin_upload(field_name)
        for field_name, value in answers.items():
            if value is None:
                draft._require_field(field_name)
                continue
            draft.set_value(field_name, value)
        return draft

    def _require_field(self, field_name: str) -> FieldLike:
        field = self._fields.get(field_name)
        if field is None:
            raise ValidationError(f"Unknown form field: '{field_name}'")
        return field

    def set_value(self, field_name: str, value: str) -> None:
        self._require_field(field_name)
        self._values[field_name] = value

    def get_value(self, field_name: str) -> str | None:
        return self._values.get(field_name)

    def begin_upload(self, field_name: str) -> None:
        field = self._require_field(field_name)
        if FieldType(field.field_type) != FieldType.FILE:
            raise ValidationError(f"Field '{field_name}' does not accept uploads")
        self._uploading.add(field_name)

    def complete_upload(self, field_name: str, reference: str) -> None:
        self._require_field(field_name)
        self._uploading.discard(field_name)
        self._values[field_name] = reference
        logger.debug(f"Upload for {field_name} resolved to {reference}")

    def remove_upload(self, field_name: str) -> None:
        self._require_field(field_name)
        self._uploading.discard(field_name)
        self._values.pop(field_name, None)

    def is_uploading(self, field_name: str) -> bool:
        return field_name in self._uploading

    @property
    def pending_uploads(self) -> list[str]:
        """Pending file fields in schema order."""
        return [f.field_name for f in self.schema if f.field_name in self._uploading]

    @property
    def has_pending_uploads(self) -> bool:
        return bool(self._uploading)

    def to_response_map(self) -> dict[str, FieldAnswer]:
        """Tag every answer with its declared field type, in entry order."""
        return {
            field_name: FieldAnswer(
                type=FieldType(self._fields[field_name].field_type),
                value=value,
            )
            for field_name, value in self._values.items()
        }
