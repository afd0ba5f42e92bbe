"""Tests for labeled readback of stored answers."""

import pytest

from hireflow.models import Application, FieldType
from hireflow.schemas.application import LabeledResponse
from hireflow.schemas.form_field import FieldDef
from hireflow.services import form_schema
from hireflow.services.form_schema import build_schema
from hireflow.services.readback import label_responses, resolve_file_links, schema_for
from hireflow.services.submission import submit

PDF_URL = "https://storage.test/storage/v1/object/public/application-files/u/j/resume/cv.pdf"


@pytest.fixture
def schema():
    return build_schema(
        [
            FieldDef(field_label="Years of Experience", field_type="number"),
            FieldDef(field_label="Resume", field_type="file"),
        ]
    )


def make_application(form_data, snapshot=None) -> Application:
    return Application(form_data=form_data, schema_snapshot=snapshot)


class TestLabelResponses:

    def test_schema_order_not_storage_order(self, schema):
        application = make_application(
            {
                "years_of_experience": {"type": "number", "value": "5"},
                "email": {"type": "email", "value": "ana@example.com"},
                "full_name": {"type": "text", "value": "Ana"},
            }
        )

        responses = label_responses(application, schema)

        assert [(r.label, r.value) for r in responses] == [
            ("Full Name", "Ana"),
            ("Email", "ana@example.com"),
            ("Years of Experience", "5"),
        ]

    def test_unknown_keys_follow_labeled_by_key(self, schema):
        application = make_application(
            {
                "referral_code": {"type": "text", "value": "XYZ"},
                "full_name": {"type": "text", "value": "Ana"},
                "legacy_note": "free text",
            }
        )

        responses = label_responses(application, schema)

        assert [r.label for r in responses] == ["Full Name", "referral_code", "legacy_note"]
        assert responses[1].field_type == FieldType.TEXT
        assert responses[2].field_type is None
        assert responses[2].value == "free text"

    def test_file_answers_marked(self, schema):
        application = make_application({"resume": {"type": "file", "value": PDF_URL}})

        [response] = label_responses(application, schema)

        assert response.kind == "file"
        assert response.value == PDF_URL
        assert response.signed_url is None

    def test_untagged_values_displayed(self, schema):
        application = make_application(
            {"years_of_experience": 7, "location": ["Jakarta", "Remote"], "linkedin": None}
        )

        values = {r.field_name: r.value for r in label_responses(application, schema)}

        assert values == {"linkedin": "", "location": "Jakarta, Remote", "years_of_experience": "7"}

    def test_snapshot_used_by_default(self, schema):
        snapshot = [field.model_dump(mode="json") for field in schema]
        application = make_application({"full_name": {"type": "text", "value": "Ana"}}, snapshot)

        assert [f.field_name for f in schema_for(application)] == [f.field_name for f in schema]
        assert label_responses(application)[0].label == "Full Name"

    @pytest.mark.asyncio
    async def test_relabeling_against_live_schema(self, db, admin, applicant, job_data):
        job = await form_schema.create_job(db, admin.id, job_data)
        application = await submit(
            db, job.id, applicant.id,
            {"full_name": "Ana", "email": "ana@example.com", "years_of_experience": "3"},
        )

        responses = label_responses(application)

        assert [r.field_name for r in responses] == ["full_name", "email", "years_of_experience"]
        assert responses[2].label == "Years of Experience"
        assert responses[2].field_type == FieldType.NUMBER


class TestResolveFileLinks:

    @pytest.mark.asyncio
    async def test_signs_file_answers_only(self, storage, storage_recorder):
        responses = [
            LabeledResponse(field_name="full_name", label="Full Name", kind="text", value="Ana"),
            LabeledResponse(field_name="resume", label="Resume", kind="file", value=PDF_URL),
            LabeledResponse(field_name="portfolio", label="Portfolio", kind="file", value=""),
        ]

        resolved = await resolve_file_links(responses, storage)

        assert resolved[0].signed_url is None
        assert resolved[1].signed_url == (
            "https://storage.test/storage/v1/object/sign/application-files/u/j/resume/cv.pdf?token=tok-3600"
        )
        assert resolved[2].signed_url is None
        assert storage_recorder.signed_paths() == ["u/j/resume/cv.pdf"]

    @pytest.mark.asyncio
    async def test_signing_failure_recorded_per_entry(self, storage, storage_recorder):
        storage_recorder.fail_signing = True
        responses = [
            LabeledResponse(field_name="resume", label="Resume", kind="file", value=PDF_URL),
        ]

        [resolved] = await resolve_file_links(responses, storage)

        assert resolved.signed_url is None
        assert resolved.link_error


class TestSubmittedSnapshots:

    @pytest.mark.asyncio
    async def test_labels_application_stored_by_submit(self, db, admin, applicant, job_data):
        job = await form_schema.create_job(db, admin.id, job_data)
        application = await submit(
            db, job.id, applicant.id,
            {
                "full_name": "Ana",
                "email": "ana@example.com",
                "years_of_experience": "3",
                "preferred_stack": "Vue",
            },
        )

        snapshot = {entry["field_name"]: entry for entry in application.schema_snapshot}
        assert snapshot["full_name"]["field_options"] == []
        assert snapshot["preferred_stack"]["field_options"] == ["React", "Vue"]

        responses = label_responses(application)

        assert [(r.label, r.value) for r in responses] == [
            ("Full Name", "Ana"),
            ("Email", "ana@example.com"),
            ("Years of Experience", "3"),
            ("Preferred Stack", "Vue"),
        ]

    def test_snapshot_with_null_options_still_reads(self):
        snapshot = [
            {
                "field_name": "full_name",
                "field_type": "text",
                "field_label": "Full Name",
                "field_options": None,
                "is_required": True,
                "field_order": 0,
            }
        ]
        application = make_application({"full_name": {"type": "text", "value": "Ana"}}, snapshot)

        assert schema_for(application)[0].field_options == []
        assert label_responses(application)[0].label == "Full Name"
