"""Tests for the traveller form controller."""

from __future__ import annotations

import httpx
import pytest

from traveller_autofill.form import (
    INVALID_RESULT_MESSAGE,
    SUCCESS_MESSAGE,
    TravellerForm,
    UploadProgress,
)


def _traveller(**overrides):
    data = {
        "firstName": "John",
        "lastName": "Smith",
        "dateOfBirth": "1990-05-02",
        "gender": "male",
        "nationality": "Swedish",
        "disability": None,
    }
    data.update(overrides)
    return data


def _result(*travellers, **global_info):
    return {"travellers": list(travellers), "globalInfo": global_info}


def _snapshot(form):
    return [s.to_dict() for s in form.slots]


class FakeClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def process_travellers(self, filename, content, media_type, on_upload_progress=None):
        self.calls.append((filename, content, media_type))
        if on_upload_progress:
            on_upload_progress(50, 100)
            on_upload_progress(100, 100)
        if self.error:
            raise self.error
        return self.response


def _status_error(status, body):
    request = httpx.Request("POST", "http://test/api/process-travellers")
    response = httpx.Response(status, json=body, request=request)
    return httpx.HTTPStatusError("server error", request=request, response=response)


def test_form_starts_with_five_empty_slots():
    form = TravellerForm()
    assert [s.id for s in form.slots] == [1, 2, 3, 4, 5]
    assert all(not s.is_complete for s in form.slots)
    assert not form.is_editor_open


def test_editing_selected_copy_does_not_touch_slots():
    form = TravellerForm()
    form.select_slot(form.slots[1])
    form.update_selected("first_name", "Eva")
    assert form.slots[1].first_name == ""
    form.close_editor()
    assert form.slots[1].first_name == ""


def test_save_slot_writes_back_and_closes():
    form = TravellerForm()
    form.select_slot(form.slots[2])
    for field, value in (
        ("first_name", "Eva"),
        ("last_name", "Lind"),
        ("date_of_birth", "19700101"),
        ("nationality", "Norge"),
        ("gender", "Kvinna"),
        ("disability", "Synskada"),
    ):
        form.update_selected(field, value)
    form.save_slot()

    saved = form.slots[2]
    assert saved.id == 3
    assert saved.first_name == "Eva"
    assert saved.is_complete
    assert not form.is_editor_open
    assert len(form.slots) == 5


def test_update_selected_rejects_unknown_fields():
    form = TravellerForm()
    form.select_slot(form.slots[0])
    with pytest.raises(ValueError):
        form.update_selected("is_complete", True)
    with pytest.raises(ValueError):
        form.update_selected("id", 9)


def test_merge_example_plain_text_traveller():
    form = TravellerForm()
    assert form.merge_extraction_result(_result(_traveller()))

    slot = form.slots[0]
    assert slot.first_name == "John"
    assert slot.last_name == "Smith"
    assert slot.date_of_birth == "19900502"
    assert slot.nationality == "Sverige"
    assert slot.gender == "Man"
    assert slot.disability == ""
    assert slot.is_complete


def test_merge_fewer_travellers_leaves_other_slots():
    form = TravellerForm()
    form.slots[3].first_name = "Kept"
    before = _snapshot(form)

    form.merge_extraction_result(_result(_traveller(), _traveller(firstName="Jane", gender="female")))

    after = _snapshot(form)
    assert after[1]["firstName"] == "Jane"
    assert after[1]["gender"] == "Kvinna"
    assert after[2:] == before[2:]


def test_merge_caps_at_five_slots():
    form = TravellerForm()
    travellers = [_traveller(firstName=f"T{i}") for i in range(7)]
    form.merge_extraction_result(_result(*travellers))
    assert len(form.slots) == 5
    assert [s.first_name for s in form.slots] == ["T0", "T1", "T2", "T3", "T4"]


def test_merge_never_replaces_with_empty_values():
    form = TravellerForm()
    form.slots[0].first_name = "Anna"
    form.slots[0].nationality = "Norge"
    form.slots[0].gender = "Kvinna"

    form.merge_extraction_result(
        _result(_traveller(firstName="", lastName="Berg", gender="", nationality="", dateOfBirth=""))
    )

    slot = form.slots[0]
    assert slot.first_name == "Anna"
    assert slot.last_name == "Berg"
    assert slot.gender == "Kvinna"
    assert slot.nationality == "Norge"
    assert slot.date_of_birth == ""


def test_merge_first_value_survives_later_empty_upload():
    form = TravellerForm()
    form.merge_extraction_result(_result(_traveller()))
    form.merge_extraction_result(_result(_traveller(firstName="", lastName="")))
    assert form.slots[0].first_name == "John"
    assert form.slots[0].last_name == "Smith"


def test_merge_uses_global_info_fallback():
    form = TravellerForm()
    form.merge_extraction_result(
        _result(
            _traveller(nationality="", disability=None),
            _traveller(nationality="Danish", disability="Visual impairment"),
            nationality="Norwegian",
            disability="None",
        )
    )
    assert form.slots[0].nationality == "Norge"
    assert form.slots[0].disability == "Inget funktionshinder"
    assert form.slots[1].nationality == "Danmark"
    assert form.slots[1].disability == "Synskada"


def test_unknown_nationality_never_reaches_the_form():
    form = TravellerForm()
    form.slots[1].nationality = "Finland"
    form.slots[2].nationality = "Unknown"

    form.merge_extraction_result(
        _result(
            _traveller(nationality="Unknown"),
            _traveller(nationality="Unknown"),
            _traveller(nationality=""),
        )
    )

    assert form.slots[0].nationality == ""
    assert form.slots[1].nationality == "Finland"
    assert form.slots[2].nationality == ""
    assert not form.slots[0].is_complete


def test_unknown_nationality_falls_back_to_global_info():
    form = TravellerForm()
    form.merge_extraction_result(
        _result(_traveller(nationality="Unknown"), nationality="Norwegian")
    )
    assert form.slots[0].nationality == "Norge"


def test_unmapped_values_pass_through_merge():
    form = TravellerForm()
    form.merge_extraction_result(_result(_traveller(nationality="German", gender="Man")))
    assert form.slots[0].nationality == "German"
    assert form.slots[0].gender == "Man"


@pytest.mark.parametrize("bad", [None, {}, {"travellers": None}, {"travellers": "John"}, ["x"]])
def test_malformed_result_leaves_slots_and_warns(bad):
    form = TravellerForm()
    form.slots[0].first_name = "Anna"
    before = _snapshot(form)

    assert not form.merge_extraction_result(bad)

    assert _snapshot(form) == before
    notes = form.drain_notifications()
    assert [n.message for n in notes] == [INVALID_RESULT_MESSAGE]
    assert notes[0].level == "error"


def test_progress_is_monotonic_and_scaled():
    seen = []
    progress = UploadProgress(listener=lambda p: seen.append(p.value))
    progress.start()
    progress.uploading(0, 100)
    assert progress.value == 10
    progress.uploading(50, 100)
    assert progress.value == 40
    progress.uploading(100, 100)
    assert progress.value == 70
    progress.uploading(20, 100)
    assert progress.value == 70
    progress.processing()
    progress.complete()
    assert progress.value == 100
    assert seen == sorted(seen)
    progress.clear()
    assert not progress.active
    assert progress.value == 0


def test_process_upload_success_merges_and_notifies():
    form = TravellerForm()
    client = FakeClient(response=_result(_traveller()))
    progress = UploadProgress()

    assert form.process_upload(client, "note.txt", b"John Smith", "text/plain", progress)

    assert client.calls == [("note.txt", b"John Smith", "text/plain")]
    assert form.slots[0].first_name == "John"
    assert progress.value == 100
    assert progress.label == "Processing complete!"
    notes = form.drain_notifications()
    assert [(n.level, n.message) for n in notes] == [("success", SUCCESS_MESSAGE)]


def test_process_upload_refusal_keeps_slots():
    form = TravellerForm()
    before = _snapshot(form)
    client = FakeClient(response={"refusal": "I cannot help with that."})

    assert not form.process_upload(client, "note.txt", b"x", "text/plain")

    assert _snapshot(form) == before
    assert form.drain_notifications()[0].message == "I cannot help with that."


def test_process_upload_http_error_uses_body_error():
    form = TravellerForm()
    client = FakeClient(error=_status_error(500, {"message": "Error reading file content", "error": "bad pdf"}))

    assert not form.process_upload(client, "a.pdf", b"x", "application/pdf")

    note = form.drain_notifications()[0]
    assert note.level == "error"
    assert note.message == "Failed to process the file: bad pdf"


def test_process_upload_network_error_has_own_message():
    form = TravellerForm()
    client = FakeClient(error=httpx.ConnectError("connection refused"))

    assert not form.process_upload(client, "a.txt", b"x", "text/plain")

    note = form.drain_notifications()[0]
    assert note.message.startswith("Network error")
    assert "connection refused" in note.message


def test_process_upload_invalid_payload_reports_once():
    form = TravellerForm()
    before = _snapshot(form)
    client = FakeClient(response={"travellers": None})

    assert not form.process_upload(client, "a.txt", b"x", "text/plain")

    assert _snapshot(form) == before
    assert [n.message for n in form.drain_notifications()] == [INVALID_RESULT_MESSAGE]
