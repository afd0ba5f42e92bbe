"""Response readback and labeling.

Rejoins an application's stored answers with the field definitions they
were submitted against, producing ordered (label, value) pairs for
reviewers. File answers become links that are signed on demand.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from hireflow.models import Application, FieldType
from hireflow.schemas.application import LabeledResponse
from hireflow.schemas.form_field import FieldDef
from hireflow.services.exceptions import StorageError
from hireflow.services.renderer import FieldLike
from hireflow.services.storage import StorageClient

logger = logging.getLogger(__name__)


def schema_for(application: Application) -> list[FieldLike]:
    """Field definitions to read an application against.

    Prefers the snapshot taken at submission; falls back to the job's live
    fields for applications stored without one.
    """
    if application.schema_snapshot:
        return [FieldDef.model_validate(entry) for entry in application.schema_snapshot]
    job = application.job_position
    return sorted(job.fields, key=lambda field: field.field_order) if job else []


def _display(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(_display(item) for item in value)
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def _as_field_type(tag: Any) -> FieldType | None:
    try:
        return FieldType(tag)
    except ValueError:
        return None


def _unpack(entry: Any) -> tuple[str | None, Any]:
    """Split a stored entry into (type tag, value); untagged legacy values have no tag."""
    if isinstance(entry, Mapping) and "value" in entry:
        return entry.get("type"), entry["value"]
    return None, entry


def label_responses(
    application: Application,
    schema: Sequence[FieldLike] | None = None,
) -> list[LabeledResponse]:
    """Build labeled answers in form order.

    Answers for known fields follow the schema's field order; answers whose
    key is not in the schema follow in stored order, labeled by the raw key.

    Args:
        application: Application whose form_data is read
        schema: Field definitions to label against. Defaults to the
            application's snapshot (or the live job schema)

    Returns:
        LabeledResponse list; file answers have ``kind="file"`` and no link yet
    """
    if schema is None:
        schema = schema_for(application)

    form_data: Mapping[str, Any] = application.form_data or {}
    fields = {field.field_name: field for field in schema}
    ordered_keys = [field.field_name for field in schema if field.field_name in form_data]
    ordered_keys += [key for key in form_data if key not in fields]

    responses: list[LabeledResponse] = []
    for key in ordered_keys:
        tag, value = _unpack(form_data[key])
        field = fields.get(key)

        field_type: FieldType | None = None
        if field is not None:
            field_type = FieldType(field.field_type)
            if tag is not None and tag != field_type.value:
                logger.warning(
                    f"Application {application.id}: answer '{key}' stored as {tag}, "
                    f"schema declares {field_type.value}"
                )
                field_type = _as_field_type(tag) or field_type
        else:
            field_type = _as_field_type(tag)

        responses.append(
            LabeledResponse(
                field_name=key,
                label=field.field_label if field is not None else key,
                field_type=field_type,
                kind="file" if field_type == FieldType.FILE else "text",
                value=_display(value),
            )
        )

    return responses


async def resolve_file_links(
    responses: Sequence[LabeledResponse],
    storage: StorageClient,
) -> list[LabeledResponse]:
    """Mint signed URLs for file answers.

    A failed mint leaves ``signed_url`` empty and records the message on that
    entry instead of failing the whole readback.
    """
    for response in responses:
        if response.kind != "file" or not response.value:
            continue
        try:
            response.signed_url = await storage.create_signed_url(response.value)
        except StorageError as e:
            logger.error(f"Could not sign file answer '{response.field_name}': {e}")
            response.link_error = str(e)
    return list(responses)
