# fletes/services/freight_common.py

from typing import Iterable, Optional, Set

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from fletes.extensions import db
from fletes.services.access import scope_freight_query
from fletes.services.errors import NotFound, ValidationError
from fletes.services.storage import save_uploaded_file
from fletes.utils.strings import clean_optional, like_pattern


def search_filter(query, columns: Iterable, text: Optional[str]):
    """Búsqueda libre (contains, case-insensitive) sobre campos desnormalizados."""
    text = (text or "").strip()
    if not text:
        return query
    pattern = like_pattern(text)
    return query.filter(or_(*[col.ilike(pattern, escape="\\") for col in columns]))


def list_records(model, actor, search_columns, search: Optional[str] = None, limit: Optional[int] = None):
    q = scope_freight_query(model.query, model, actor)
    q = search_filter(q, search_columns, search)
    q = q.order_by(model.created_at.desc(), model.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def get_record(model, record_id: int, actor):
    q = scope_freight_query(model.query, model, actor)
    record = q.filter(model.id == record_id).first()
    if record is None:
        raise NotFound("Flete no encontrado")
    return record


def assign_folio(record, prefix: str) -> None:
    # requiere id (flush previo)
    record.folio = f"{prefix}-{record.id:05d}"


def current_doc_types(doc_model, fk_column, record_id: int) -> Set[str]:
    rows = db.session.query(doc_model.doc_type).filter(fk_column == record_id).distinct().all()
    return {r[0] for r in rows}


def store_document_file(kind: str, record_id: int, doc_type: str, file_storage) -> dict:
    cfg = current_app.config
    return save_uploaded_file(
        file_storage,
        base_upload_folder=cfg.get("UPLOAD_FOLDER", "uploads"),
        folder=f"{kind}/{record_id}/{doc_type}",
        base_url=cfg.get("PUBLIC_BASE_URL", ""),
    )


def insert_document(doc_model, **fields):
    doc = doc_model(**fields)
    try:
        db.session.add(doc)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return doc


def persist_status(record, status: str) -> None:
    record.mark_status(status)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def delete_record(record) -> None:
    try:
        db.session.delete(record)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def require_reference(model, ref_id, message: str):
    if not ref_id:
        raise ValidationError(message)
    ref = db.session.get(model, int(ref_id))
    if ref is None:
        raise ValidationError(message)
    return ref


def optional_text(data: dict, key: str) -> Optional[str]:
    return clean_optional(data.get(key))
