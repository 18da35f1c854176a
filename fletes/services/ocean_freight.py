# fletes/services/ocean_freight.py

from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from fletes.extensions import db
from fletes.models import Cliente, OceanFreight, OceanFreightDocument, Proveedor
from fletes.services import notifications
from fletes.services.errors import NotFound, StorageError, ValidationError
from fletes.services.freight_common import (
    assign_folio, current_doc_types, delete_record, get_record, insert_document,
    list_records, optional_text, persist_status, require_reference, store_document_file,
)
from fletes.services.mailer import MailError, download_attachment, get_sender
from fletes.services.emails import render_tramite_email
from fletes.services.storage import read_stored_file
from fletes.services.workflow import (
    OCEAN_INITIAL_STATUS, OCEAN_TRAMITE_STATUS, doc_type_label, is_manual_status,
    is_valid_doc_type, ocean_status_after_change,
)
from fletes.utils.logging import get_logger
from fletes.utils.strings import file_extension

logger = get_logger("ocean_freight")

SEARCH_COLUMNS = (
    OceanFreight.folio,
    OceanFreight.client_name,
    OceanFreight.vendor_name,
    OceanFreight.container_number,
    OceanFreight.bl_number,
)


def list_ocean_freight(actor, search: Optional[str] = None, limit: Optional[int] = None):
    return list_records(OceanFreight, actor, SEARCH_COLUMNS, search=search, limit=limit)


def get_ocean_freight(freight_id: int, actor) -> OceanFreight:
    return get_record(OceanFreight, freight_id, actor)


def create_ocean_freight(data: dict) -> OceanFreight:
    cliente = require_reference(Cliente, data.get("cliente_id"), "Selecciona un cliente")
    proveedor = require_reference(Proveedor, data.get("proveedor_id"), "Selecciona o crea un proveedor")
    if proveedor.cliente_id != cliente.id:
        raise ValidationError("El proveedor no pertenece al cliente seleccionado")

    freight = OceanFreight(
        cliente_id=cliente.id,
        client_name=cliente.name,
        proveedor_id=proveedor.id,
        vendor_name=proveedor.name,
        vendor_tax_id=proveedor.tax_id,
        container_number=optional_text(data, "container_number"),
        vessel_number=optional_text(data, "vessel_number"),
        invoice_number=optional_text(data, "invoice_number"),
        pedimento_number=optional_text(data, "pedimento_number"),
        bl_number=optional_text(data, "bl_number"),
        description=optional_text(data, "description"),
        notes=optional_text(data, "notes"),
        status=OCEAN_INITIAL_STATUS,
    )

    try:
        db.session.add(freight)
        db.session.flush()
        assign_folio(freight, "OF")
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(f"Ocean freight creado id={freight.id} folio={freight.folio}")
    return freight


def delete_ocean_freight(freight: OceanFreight) -> None:
    freight_id = freight.id
    delete_record(freight)
    logger.info(f"Ocean freight eliminado id={freight_id}")


def _recompute_status(freight: OceanFreight, reason: str) -> None:
    # best-effort: si falla, el documento ya quedó escrito
    doc_types = current_doc_types(OceanFreightDocument, OceanFreightDocument.ocean_freight_id, freight.id)
    new_status = ocean_status_after_change(doc_types)
    previous = freight.status
    try:
        persist_status(freight, new_status)
    except SQLAlchemyError as e:
        logger.warning(f"Ocean {freight.id}: no se pudo recalcular status ({reason}): {e}")
        return
    if previous != new_status:
        logger.info(f"Ocean {freight.id}: status {previous} -> {new_status} ({reason})")


def upload_ocean_document(freight: OceanFreight, doc_type: str, file_storage) -> dict:
    if not is_valid_doc_type("ocean", doc_type):
        raise ValidationError(f"Tipo de documento inválido: {doc_type}")

    stored = store_document_file("ocean", freight.id, doc_type, file_storage)

    doc = insert_document(
        OceanFreightDocument,
        ocean_freight_id=freight.id,
        doc_type=doc_type,
        file_name=stored["file_name"],
        file_url=stored["file_url"],
        storage_path=stored["path"],
    )

    _recompute_status(freight, f"upload {doc_type}")

    tasks = notifications.notify_ocean_document(freight, doc_type, stored["file_name"])

    return {"document": doc, "status": freight.status, "notifications": tasks}


def remove_ocean_document(freight: OceanFreight, document_id: int) -> dict:
    doc = OceanFreightDocument.query.filter_by(id=document_id, ocean_freight_id=freight.id).first()
    if doc is None:
        raise NotFound("Documento no encontrado")

    doc_type = doc.doc_type
    try:
        db.session.delete(doc)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    _recompute_status(freight, f"remove {doc_type}")
    return {"status": freight.status}


def set_ocean_status(freight: OceanFreight, status: str) -> dict:
    if not is_manual_status("ocean", status):
        raise ValidationError(f"Status inválido: {status}")

    persist_status(freight, status)
    logger.info(f"Ocean {freight.id}: status manual -> {status}")

    tasks = notifications.notify_ocean_status(freight, status)
    return {"status": freight.status, "notifications": tasks}


def collect_attachments(documents) -> list:
    """
    documents: [{docType, fileName, fileUrl}]
    Descarga cada archivo; los que fallan se omiten.
    """
    attachments = []
    for d in documents or []:
        url = d.get("fileUrl")
        if not url:
            continue
        content = download_attachment(url)
        if content is None:
            continue
        ext = file_extension(d.get("fileName") or "")
        attachments.append({"filename": f"{d.get('docType')}.{ext}", "content": content})
    return attachments


def stored_attachments(documents) -> list:
    """Adjuntos leídos directo de UPLOAD_FOLDER con storage_path de cada documento."""
    base_folder = current_app.config.get("UPLOAD_FOLDER", "uploads")
    attachments = []
    for d in documents:
        content = read_stored_file(base_folder, d.storage_path or "")
        if content is None:
            continue
        ext = file_extension(d.file_name or "")
        attachments.append({"filename": f"{doc_type_label('ocean', d.doc_type)}.{ext}", "content": content})
    return attachments


def _deliver_tramite(to: str, payload: dict, attachments: list) -> int:
    subject, html = render_tramite_email(payload, [a["filename"] for a in attachments])
    get_sender().send(to, subject, html, attachments=attachments)
    logger.info(f"Trámite enviado to={to} adjuntos={len(attachments)}")
    return len(attachments)


def send_tramite_email(to: str, payload: dict, documents) -> int:
    """Arma y envía el correo de trámite con adjuntos por URL. Retorna cuántos se adjuntaron."""
    if not to:
        raise ValidationError("Missing required fields")

    return _deliver_tramite(to, payload, collect_attachments(documents))


def send_to_tramite(freight: OceanFreight) -> dict:
    """
    Envía todos los documentos actuales a trámite. Solo si el proveedor acepta
    el correo se marca enviado_tramite.
    """
    to = current_app.config.get("TRAMITE_EMAIL") or freight.client_email
    if not to:
        raise ValidationError("El cliente no tiene correo registrado")
    if not freight.documents:
        raise ValidationError("No hay documentos para enviar")

    attachments = stored_attachments(freight.documents)
    if not attachments:
        raise StorageError("No se pudo leer ningún documento del flete")

    payload = notifications.ocean_payload(freight)

    try:
        attached = _deliver_tramite(to, payload, attachments)
    except MailError as e:
        logger.warning(f"Ocean {freight.id}: trámite no enviado: {e}")
        raise

    persist_status(freight, OCEAN_TRAMITE_STATUS)
    logger.info(f"Ocean {freight.id}: status -> {OCEAN_TRAMITE_STATUS}")
    return {"status": freight.status, "attachments": attached}
