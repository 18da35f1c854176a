# fletes/services/notifications.py

"""
Canal best-effort de correos.

Los servicios de fletes escriben primero el documento/status y después
encolan NotificationTask. El envío lo hace el worker (o el mismo request si
NOTIFICATIONS_EAGER). Un fallo de envío queda registrado en la tarea y en el
log; nunca revierte ni bloquea la operación que lo originó.
"""

from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from fletes.extensions import db
from fletes.models import NotificationTask
from fletes.services.emails import render_email
from fletes.services.mailer import EmailSender, MailError, get_sender
from fletes.services.workflow import doc_type_label
from fletes.utils.logging import get_logger

logger = get_logger("notifications")

# doc_type terrestre -> a quién se avisa
LAND_DOC_RECIPIENTS = {
    "freight_data": "cliente",
    "carta_porte_layout": "carrier",
    "carta_porte": "cliente",
    "load_order": "carrier",
}


def land_payload(freight) -> dict:
    return {
        "folio": freight.folio,
        "clientName": freight.client_name,
        "carrierName": freight.carrier_name,
        "origin": freight.origin,
        "destination": freight.destination,
        "freightDate": freight.freight_date.isoformat() if freight.freight_date else None,
        "freightTime": freight.freight_time.strftime("%H:%M") if freight.freight_time else None,
        "importInvoice": freight.import_invoice,
        "description": freight.description,
    }


def ocean_payload(freight) -> dict:
    return {
        "clientName": freight.client_name,
        "vendorName": freight.vendor_name,
        "containerNumber": freight.container_number,
        "invoiceNumber": freight.invoice_number,
        "vesselNumber": freight.vessel_number,
        "blNumber": freight.bl_number,
    }


def _enqueue(items: List[tuple]) -> List[NotificationTask]:
    """items: [(kind, recipient, payload)]. Nunca lanza."""
    tasks = [
        NotificationTask(kind=kind, recipient=recipient, payload=payload, status="QUEUED")
        for kind, recipient, payload in items
        if recipient
    ]
    if not tasks:
        return []

    try:
        db.session.add_all(tasks)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"No se pudieron encolar notificaciones: {e}")
        return []

    logger.info(f"Notificaciones encoladas: {[(t.kind, t.recipient) for t in tasks]}")

    if current_app.config.get("NOTIFICATIONS_EAGER"):
        sender = get_sender()
        for task in tasks:
            dispatch_task(task, sender)

    return tasks


def notify_land_document(freight, doc_type: str, file_name: str, file_url: str) -> List[NotificationTask]:
    role = LAND_DOC_RECIPIENTS.get(doc_type)
    if role == "cliente":
        recipient = freight.client_email
    elif role == "carrier":
        recipient = freight.carrier_email
    else:
        recipient = None

    payload = land_payload(freight)
    payload.update({
        "type": "document",
        "docType": doc_type_label("land", doc_type),
        "docName": file_name,
        "fileUrl": file_url,
    })
    return _enqueue([("land", recipient, payload)])


def notify_ocean_document(freight, doc_type: str, file_name: str) -> List[NotificationTask]:
    payload = {
        "clientName": freight.client_name,
        "vendorName": freight.vendor_name,
        "docType": doc_type_label("ocean", doc_type),
        "docName": file_name,
    }
    return _enqueue([("document", freight.client_email, payload)])


def notify_land_status(freight, status: str) -> List[NotificationTask]:
    payload = land_payload(freight)
    payload.update({"type": "status", "status": status})
    recipients = [r for r in (freight.client_email, freight.carrier_email) if r]
    return _enqueue([("land", r, dict(payload)) for r in recipients])


def notify_ocean_status(freight, status: str) -> List[NotificationTask]:
    payload = ocean_payload(freight)
    payload["status"] = status
    return _enqueue([("status", freight.client_email, payload)])


def dispatch_task(task: NotificationTask, sender: Optional[EmailSender] = None) -> bool:
    """Intenta un envío. Marca SENT/FAILED y hace commit. Nunca lanza."""
    sender = sender or get_sender()
    task.attempts = (task.attempts or 0) + 1

    try:
        subject, html = render_email(task.kind, task.payload or {})
        sender.send(task.recipient, subject, html)
        task.mark_sent()
        ok = True
    except (MailError, ValueError) as e:
        task.mark_failed(e)
        logger.warning(f"Notificación {task.id} falló ({task.kind} -> {task.recipient}): {e}")
        ok = False

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"No se pudo actualizar la notificación {task.id}: {e}")
    return ok


def fetch_pending(limit: int = 20) -> List[NotificationTask]:
    return (
        NotificationTask.query
        .filter(NotificationTask.status == "QUEUED")
        .order_by(NotificationTask.id.asc())
        .limit(limit)
        .all()
    )


def process_pending(limit: int = 20, sender: Optional[EmailSender] = None) -> dict:
    sender = sender or get_sender()
    sent = failed = 0
    for task in fetch_pending(limit):
        if dispatch_task(task, sender):
            sent += 1
        else:
            failed += 1
    return {"sent": sent, "failed": failed}
