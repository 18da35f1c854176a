# fletes/services/land_freight.py

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from fletes.extensions import db
from fletes.models import Carrier, Cliente, LandFreight, LandFreightDocument
from fletes.services import notifications
from fletes.services.errors import NotFound, ValidationError
from fletes.services.freight_common import (
    assign_folio, current_doc_types, delete_record, get_record, insert_document,
    list_records, optional_text, persist_status, require_reference, store_document_file,
)
from fletes.services.workflow import (
    LAND_INITIAL_STATUS, is_manual_status, is_valid_doc_type,
    land_status_after_removal, land_status_after_upload,
)
from fletes.utils.logging import get_logger

logger = get_logger("land_freight")

SEARCH_COLUMNS = (
    LandFreight.folio,
    LandFreight.client_name,
    LandFreight.origin,
    LandFreight.destination,
    LandFreight.carrier_name,
)


def list_land_freight(actor, search: Optional[str] = None, limit: Optional[int] = None):
    return list_records(LandFreight, actor, SEARCH_COLUMNS, search=search, limit=limit)


def get_land_freight(freight_id: int, actor) -> LandFreight:
    return get_record(LandFreight, freight_id, actor)


def _apply_fields(freight: LandFreight, data: dict) -> None:
    cliente = require_reference(Cliente, data.get("cliente_id"), "Selecciona un cliente")
    if not data.get("freight_date") or not data.get("freight_time"):
        raise ValidationError("Fecha y hora son requeridos")

    carrier = None
    if data.get("carrier_id"):
        carrier = require_reference(Carrier, data.get("carrier_id"), "Carrier no encontrado")

    freight.cliente_id = cliente.id
    freight.client_name = cliente.name
    freight.carrier_id = carrier.id if carrier else None
    freight.carrier_name = carrier.name if carrier else None

    freight.freight_date = data["freight_date"]
    freight.freight_time = data["freight_time"]
    freight.origin = optional_text(data, "origin")
    freight.destination = optional_text(data, "destination")
    freight.import_invoice = optional_text(data, "import_invoice")
    freight.description = optional_text(data, "description")
    freight.notes = optional_text(data, "notes")


def create_land_freight(data: dict) -> LandFreight:
    freight = LandFreight(status=LAND_INITIAL_STATUS)
    _apply_fields(freight, data)

    try:
        db.session.add(freight)
        db.session.flush()
        assign_folio(freight, "LF")
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(f"Land freight creado id={freight.id} folio={freight.folio}")
    return freight


def update_land_freight(freight: LandFreight, data: dict) -> LandFreight:
    # el status no se edita aquí
    _apply_fields(freight, data)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    logger.info(f"Land freight actualizado id={freight.id}")
    return freight


def delete_land_freight(freight: LandFreight) -> None:
    freight_id = freight.id
    delete_record(freight)
    logger.info(f"Land freight eliminado id={freight_id}")


def upload_land_document(freight: LandFreight, doc_type: str, file_storage) -> dict:
    """
    1) guardar archivo  2) insertar documento  3) recalcular status si sigue pendiente
    4) encolar correo según LAND_DOC_RECIPIENTS.
    Un error en 1 o 2 corta el flujo; un error en 3 se propaga pero el documento
    queda y el correo de 4 se encola igual.
    """
    if not is_valid_doc_type("land", doc_type):
        raise ValidationError(f"Tipo de documento inválido: {doc_type}")

    stored = store_document_file("land", freight.id, doc_type, file_storage)

    doc = insert_document(
        LandFreightDocument,
        land_freight_id=freight.id,
        doc_type=doc_type,
        file_name=stored["file_name"],
        file_url=stored["file_url"],
        storage_path=stored["path"],
    )

    previous = freight.status
    doc_types = current_doc_types(LandFreightDocument, LandFreightDocument.land_freight_id, freight.id)
    new_status = land_status_after_upload(previous, doc_types)
    try:
        if new_status is not None:
            persist_status(freight, new_status)
            logger.info(f"Land {freight.id}: status {previous} -> {new_status} (upload {doc_type})")
    finally:
        # el documento ya existe: el aviso sale aunque el status no se haya guardado
        tasks = notifications.notify_land_document(freight, doc_type, stored["file_name"], stored["file_url"])

    return {"document": doc, "status": freight.status, "notifications": tasks}


def remove_land_document(freight: LandFreight, document_id: int) -> dict:
    doc = LandFreightDocument.query.filter_by(id=document_id, land_freight_id=freight.id).first()
    if doc is None:
        raise NotFound("Documento no encontrado")

    try:
        db.session.delete(doc)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    previous = freight.status
    doc_types = current_doc_types(LandFreightDocument, LandFreightDocument.land_freight_id, freight.id)
    new_status = land_status_after_removal(previous, doc_types)
    if new_status is not None and new_status != previous:
        persist_status(freight, new_status)
        logger.info(f"Land {freight.id}: status {previous} -> {new_status} (remove {doc.doc_type})")

    return {"status": freight.status}


def set_land_status(freight: LandFreight, status: str) -> dict:
    """Transición manual. Se persiste primero; los correos van después y no la afectan."""
    if not is_manual_status("land", status):
        raise ValidationError(f"Status inválido: {status}")

    persist_status(freight, status)
    logger.info(f"Land {freight.id}: status manual -> {status}")

    tasks = notifications.notify_land_status(freight, status)
    return {"status": freight.status, "notifications": tasks}
