# fletes/blueprints/api/routes.py

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from fletes.services.access import CAPABILITIES, require_role
from fletes.services.catalogs import (
    create_location, create_proveedor, list_proveedores, location_to_dict, search_locations,
)
from fletes.services.emails import render_document_email, render_land_email, render_status_email
from fletes.services.errors import NotFound, StorageError, ValidationError
from fletes.services.mailer import MailError, get_sender
from fletes.services.ocean_freight import send_tramite_email
from fletes.services.storage import save_uploaded_file
from fletes.services.users import delete_user, list_profiles, provision_user
from fletes.models import ROLES
from fletes.utils.logging import get_logger

logger = get_logger("api")

api_bp = Blueprint("api", __name__)


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _guard(allowed_roles):
    """(perfil, respuesta_error) según require_role."""
    profile, error, status = require_role(allowed_roles)
    if error:
        return None, _error(error, status)
    return profile, None


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@api_bp.route("/ping")
def ping():
    return jsonify({"status": "ok"})


# ----------------------------
# Archivos
# ----------------------------
@api_bp.route("/upload", methods=["POST"])
def upload():
    _, denied = _guard(CAPABILITIES["upload_docs"])
    if denied:
        return denied

    file = request.files.get("file")
    if file is None or not file.filename:
        return _error("No file provided", 400)

    try:
        saved = save_uploaded_file(
            file,
            base_upload_folder=current_app.config.get("UPLOAD_FOLDER", "uploads"),
            folder=request.form.get("folder", ""),
            base_url=current_app.config.get("PUBLIC_BASE_URL", ""),
        )
    except ValidationError as e:
        return _error(str(e), 400)
    except StorageError as e:
        return _error(str(e), 500)

    return jsonify(saved)


# ----------------------------
# Correos
# ----------------------------
def _send(to, render, payload):
    """Renderiza + envía. Valida antes de tocar al proveedor."""
    try:
        subject, html = render(payload)
        get_sender().send(to, subject, html)
    except ValidationError as e:
        return _error(str(e), 400)
    except MailError as e:
        return _error(str(e), 500)
    return jsonify({"success": True})


@api_bp.route("/notify", methods=["POST"])
def notify():
    _, denied = _guard(ROLES)
    if denied:
        return denied

    data = _payload()
    if not data.get("to") or not data.get("clientName") or not data.get("docType"):
        return _error("Missing required fields", 400)
    return _send(data["to"], render_document_email, data)


@api_bp.route("/notify-land", methods=["POST"])
def notify_land():
    _, denied = _guard(("admin", "operador", "transportista"))
    if denied:
        return denied

    data = _payload()
    if not data.get("to"):
        return _error("Missing recipient", 400)
    return _send(data["to"], render_land_email, data)


@api_bp.route("/notify-status", methods=["POST"])
def notify_status():
    _, denied = _guard(("admin", "operador"))
    if denied:
        return denied

    data = _payload()
    if not data.get("to") or not data.get("status") or not data.get("clientName"):
        return _error("Missing required fields", 400)
    return _send(data["to"], render_status_email, data)


@api_bp.route("/send-tramite", methods=["POST"])
def send_tramite():
    _, denied = _guard(ROLES)
    if denied:
        return denied

    data = _payload()
    if not data.get("to") or not data.get("clientName"):
        return _error("Missing required fields", 400)

    try:
        attached = send_tramite_email(data["to"], data, data.get("documents") or [])
    except ValidationError as e:
        return _error(str(e), 400)
    except MailError as e:
        return _error(str(e), 500)

    return jsonify({"success": True, "attachments": attached})


# ----------------------------
# Usuarios (admin)
# ----------------------------
@api_bp.route("/admin/users", methods=["GET"])
def admin_list_users():
    _, denied = _guard(("admin",))
    if denied:
        return denied
    return jsonify([p.to_dict() for p in list_profiles()])


@api_bp.route("/admin/users", methods=["POST"])
def admin_create_user():
    _, denied = _guard(("admin",))
    if denied:
        return denied

    try:
        profile = provision_user(_payload())
    except ValidationError as e:
        return _error(str(e), 400)
    except SQLAlchemyError as e:
        logger.error(f"Error al crear usuario: {e}")
        return _error("Error al crear usuario", 500)

    return jsonify({"success": True, "userId": profile.id})


@api_bp.route("/admin/users", methods=["DELETE"])
def admin_delete_user():
    actor, denied = _guard(("admin",))
    if denied:
        return denied

    try:
        delete_user(_payload().get("userId"), actor)
    except ValidationError as e:
        return _error(str(e), 400)
    except NotFound as e:
        return _error(str(e), 404)
    except SQLAlchemyError as e:
        logger.error(f"Error al eliminar usuario: {e}")
        return _error("Error al eliminar usuario", 500)

    return jsonify({"success": True})


# ----------------------------
# Ubicaciones
# ----------------------------
@api_bp.route("/locations", methods=["GET"])
def locations():
    _, denied = _guard(ROLES)
    if denied:
        return denied
    return jsonify([location_to_dict(l) for l in search_locations(request.args.get("q"))])


@api_bp.route("/locations", methods=["POST"])
def locations_create():
    _, denied = _guard(CAPABILITIES["create_freight"])
    if denied:
        return denied

    try:
        location = create_location(_payload())
    except ValidationError as e:
        return _error(str(e), 400)
    except SQLAlchemyError as e:
        logger.error(f"Error al crear ubicación: {e}")
        return _error("Error al crear ubicación", 500)

    return jsonify(location_to_dict(location)), 201


# ----------------------------
# Proveedores por cliente
# ----------------------------
def _proveedor_to_dict(p) -> dict:
    return {"id": p.id, "name": p.name, "tax_id": p.tax_id, "cliente_id": p.cliente_id}


@api_bp.route("/clientes/<int:cliente_id>/proveedores", methods=["GET"])
def proveedores(cliente_id: int):
    _, denied = _guard(CAPABILITIES["create_freight"])
    if denied:
        return denied
    return jsonify([_proveedor_to_dict(p) for p in list_proveedores(cliente_id)])


@api_bp.route("/clientes/<int:cliente_id>/proveedores", methods=["POST"])
def proveedores_create(cliente_id: int):
    _, denied = _guard(CAPABILITIES["create_freight"])
    if denied:
        return denied

    try:
        proveedor = create_proveedor(cliente_id, _payload())
    except ValidationError as e:
        return _error(str(e), 400)
    except SQLAlchemyError as e:
        logger.error(f"Error al crear proveedor: {e}")
        return _error("Error al crear proveedor", 500)

    return jsonify(_proveedor_to_dict(proveedor)), 201
