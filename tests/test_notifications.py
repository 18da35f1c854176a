# tests/test_notifications.py

import pytest

from conftest import upload_file
from fletes.extensions import db
from fletes.models import LandFreight, NotificationTask
from fletes.services.emails import render_email, render_land_email
from fletes.services.errors import ValidationError
from fletes.services.land_freight import create_land_freight, set_land_status, upload_land_document
from fletes.services.notifications import dispatch_task, process_pending


def test_process_pending_sends_queued_tasks(land_data, outbox):
    freight = create_land_freight(land_data)
    set_land_status(freight, "dispatched")

    result = process_pending()

    assert result == {"sent": 2, "failed": 0}
    assert sorted(m["to"] for m in outbox) == ["carrier@example.com", "cliente@example.com"]
    assert all("Dispatched" in m["subject"] for m in outbox)
    assert {t.status for t in NotificationTask.query.all()} == {"SENT"}


def test_provider_failure_marks_failed_and_keeps_status(land_data, failing_mail):
    freight = create_land_freight(land_data)
    upload_land_document(freight, "freight_data", upload_file())

    result = process_pending()

    assert result == {"sent": 0, "failed": 1}
    task = NotificationTask.query.one()
    assert task.status == "FAILED"
    assert task.attempts == 1
    assert "provider down" in task.error_message
    assert db.session.get(LandFreight, freight.id).status == "pending_carta_porte_layout"

    # no se reintenta solo
    assert process_pending() == {"sent": 0, "failed": 0}


def test_eager_mode_dispatches_inside_request(app, land_data, outbox):
    app.config["NOTIFICATIONS_EAGER"] = True
    freight = create_land_freight(land_data)

    upload_land_document(freight, "carta_porte", upload_file("cp.pdf"))

    assert [m["to"] for m in outbox] == ["cliente@example.com"]
    assert "[LF-" in outbox[0]["subject"]
    assert NotificationTask.query.one().status == "SENT"


def test_invalid_payload_is_recorded_as_failure(app, outbox):
    task = NotificationTask(kind="status", recipient="x@example.com", payload={"status": "entregado"})
    db.session.add(task)
    db.session.commit()

    assert dispatch_task(task) is False
    assert task.status == "FAILED"
    assert outbox == []


def test_land_email_rejects_unknown_type(app):
    with pytest.raises(ValidationError):
        render_land_email({"type": "otro"})


def test_land_document_email_contains_file_link(app):
    subject, html = render_email("land", {
        "type": "document",
        "folio": "LF-00001",
        "clientName": "Importadora",
        "docType": "Carta Porte",
        "docName": "cp.pdf",
        "fileUrl": "http://testserver/files/cp.pdf",
    })
    assert subject == "[LF-00001] Carta Porte Subido - Importadora"
    assert "http://testserver/files/cp.pdf" in html
