"""
Tests for the submission pipeline and FormSession.
"""

from unittest.mock import Mock

import pytest

from chronocost.errors import InvalidFileType, SubmissionFailure, SubmissionInProgress
from chronocost.submission import CsvUpload, FormSession, detail_path, submit_project


def _csv_upload(text, content_type="text/csv"):
    return CsvUpload(filename="history.csv", content_type=content_type, data=text.encode("utf-8"))


# ---------------------
# submit_project
# ---------------------


def test_submit_without_history(construction_form, store, config):
    doc = submit_project(construction_form, None, store, config=config, user_id="user-7")

    assert doc["riskScore"] == pytest.approx(0.62)
    assert doc["userId"] == "user-7"
    assert doc["historicalProjectCount"] is None
    assert doc["historicalAvgDuration"] is None
    assert doc["historicalAvgCost"] is None
    assert doc["historicalDelayFrequency"] is None
    assert store.get_document("testdb", "projects", doc["id"]) == doc


def test_submit_with_history(construction_form, store, config, history_csv):
    doc = submit_project(construction_form, _csv_upload(history_csv), store, config=config)

    assert doc["riskScore"] == 0.5
    assert doc["historicalProjectCount"] == 2
    assert doc["historicalAvgDuration"] == 15.0
    assert doc["historicalAvgCost"] == 1500.0
    assert doc["historicalDelayFrequency"] == 0.5


def test_submit_with_unparseable_durations_stores_null(construction_form, store, config):
    doc = submit_project(construction_form, _csv_upload("duration,cost\nabc,50"), store, config=config)

    assert doc["historicalAvgDuration"] is None
    assert doc["historicalAvgCost"] == 50.0


def test_store_failure_becomes_submission_failure(construction_form, config):
    broken_store = Mock()
    broken_store.create_document.side_effect = ConnectionError("network down")

    with pytest.raises(SubmissionFailure) as exc_info:
        submit_project(construction_form, None, broken_store, config=config)

    assert str(exc_info.value) == "Failed to submit project"
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_invalid_utf8_bytes_are_replaced_not_fatal(construction_form, store, config):
    upload = CsvUpload(
        filename="h.csv",
        content_type="text/csv",
        data=b"duration,delayed\n12,true\nabc\xff,false",
    )

    doc = submit_project(construction_form, upload, store, config=config)

    assert doc["historicalProjectCount"] == 2
    assert doc["historicalAvgDuration"] == 12.0
    assert doc["historicalDelayFrequency"] == 0.5
    assert store.list_documents("testdb", "projects") == [doc]


def test_detail_path():
    assert detail_path({"id": "abc123"}) == "/projects/abc123"


# ---------------------
# FormSession
# ---------------------


def _filled_session():
    session = FormSession()
    for name, value in {
        "companyName": "Acme",
        "projectName": "Depot",
        "location": "Chennai",
        "estimatedBudget": "5000",
        "estimatedDuration": "6",
    }.items():
        session.update_field(name, value)
    return session


def test_switching_to_software_forces_terrain():
    session = FormSession()
    session.update_field("terrain", "hilly")
    session.update_field("projectType", "Software")
    assert session.values["terrain"] == "not-applicable"


def test_switching_away_from_software_resets_terrain():
    session = FormSession()
    session.update_field("projectType", "Software")
    session.update_field("projectType", "IT")
    assert session.values["terrain"] == "flat"


def test_switching_between_site_types_keeps_terrain():
    session = FormSession()
    session.update_field("terrain", "mountainous")
    session.update_field("projectType", "Infrastructure")
    assert session.values["terrain"] == "mountainous"


def test_non_csv_file_is_rejected_and_not_kept():
    session = FormSession()
    with pytest.raises(InvalidFileType):
        session.select_file(_csv_upload("%PDF-1.7", content_type="application/pdf"))
    assert session.csv_upload is None


def test_rejected_file_keeps_previous_selection(history_csv):
    session = FormSession()
    first = _csv_upload(history_csv)
    session.select_file(first)
    with pytest.raises(InvalidFileType):
        session.select_file(_csv_upload("x", content_type="application/pdf"))
    assert session.csv_upload is first


def test_cannot_submit_without_requested_csv():
    session = _filled_session()
    session.update_field("hasHistoricalData", True)
    assert not session.can_submit

    with pytest.raises(ValueError):
        session.submit(Mock())


def test_submit_clears_loading(store, config):
    session = _filled_session()
    doc = session.submit(store, config=config)

    assert not session.loading
    assert doc["companyName"] == "Acme"
    assert doc["riskScore"] == pytest.approx(0.62)


def test_submit_while_loading_is_refused(store, config):
    session = _filled_session()
    session.loading = True

    assert not session.can_submit
    with pytest.raises(SubmissionInProgress):
        session.submit(store, config=config)


def test_failed_submit_keeps_values_and_clears_loading(config):
    session = _filled_session()
    values_before = dict(session.values)
    broken_store = Mock()
    broken_store.create_document.side_effect = RuntimeError("boom")

    with pytest.raises(SubmissionFailure):
        session.submit(broken_store, config=config)

    assert session.values == values_before
    assert not session.loading
    assert session.can_submit


def test_incomplete_form_is_a_submission_failure(config):
    session = FormSession()
    store = Mock()

    with pytest.raises(SubmissionFailure):
        session.submit(store, config=config)
    store.create_document.assert_not_called()


def test_csv_is_used_when_selected(store, config, history_csv):
    session = _filled_session()
    session.update_field("hasHistoricalData", True)
    session.select_file(_csv_upload(history_csv))

    doc = session.submit(store, config=config)

    assert doc["hasHistoricalData"] is True
    assert doc["historicalProjectCount"] == 2


def test_infinite_duration_is_a_submission_failure(config):
    session = _filled_session()
    session.update_field("estimatedDuration", "inf")
    store = Mock()

    with pytest.raises(SubmissionFailure):
        session.submit(store, config=config)
    store.create_document.assert_not_called()
    assert not session.loading
