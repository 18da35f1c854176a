# tests/test_api.py

import os
from io import BytesIO

import pytest

from conftest import login
from fletes.extensions import db
from fletes.models import AuthUser, UserProfile


# ----------------------------
# Autenticación / autorización
# ----------------------------
def test_admin_users_requires_session(client, app):
    resp = client.get("/api/admin/users")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Unauthorized"}


@pytest.mark.parametrize("role", ["operador", "cliente", "transportista"])
def test_admin_users_forbidden_for_non_admin(client, make_user, cliente, carrier, role):
    extra = {"cliente_id": cliente.id, "carrier_id": carrier.id}
    login(client, make_user(role, **extra))

    resp = client.get("/api/admin/users")
    assert resp.status_code == 403
    assert resp.get_json() == {"error": "Forbidden"}


def test_notify_land_rejects_cliente_role(client, make_user, cliente):
    login(client, make_user("cliente", cliente_id=cliente.id))
    resp = client.post("/api/notify-land", json={"to": "x@example.com", "type": "status"})
    assert resp.status_code == 403


def test_notify_status_rejects_transportista(client, make_user, carrier):
    login(client, make_user("transportista", carrier_id=carrier.id))
    resp = client.post("/api/notify-status", json={"to": "x@example.com", "status": "entregado", "clientName": "A"})
    assert resp.status_code == 403


# ----------------------------
# Usuarios
# ----------------------------
def test_list_users_includes_association_names(client, admin, make_user, cliente):
    make_user("cliente", cliente_id=cliente.id)
    login(client, admin)

    rows = client.get("/api/admin/users").get_json()

    assert len(rows) == 2
    by_role = {r["role"]: r for r in rows}
    assert by_role["cliente"]["clientes"] == {"name": cliente.name}
    assert by_role["admin"]["clientes"] is None


def test_create_user_patches_default_profile(client, admin, carrier):
    login(client, admin)
    resp = client.post("/api/admin/users", json={
        "email": "Chofer@Example.com",
        "password": "secreto123",
        "full_name": "Chofer Uno",
        "role": "transportista",
        "carrier_id": carrier.id,
    })

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True

    profile = db.session.get(UserProfile, body["userId"])
    assert profile.role == "transportista"
    assert profile.carrier_id == carrier.id
    assert profile.email == "chofer@example.com"


@pytest.mark.parametrize("payload", [
    {"email": "a@example.com", "password": "x", "full_name": "A"},
    {"email": "a@example.com", "password": "x", "full_name": "A", "role": "superuser"},
    {"email": "a@example.com", "password": "x", "full_name": "A", "role": "cliente"},
    {"email": "a@example.com", "password": "x", "full_name": "A", "role": "transportista"},
])
def test_create_user_validation_happens_before_write(client, admin, payload):
    login(client, admin)
    before = AuthUser.query.count()

    resp = client.post("/api/admin/users", json=payload)

    assert resp.status_code == 400
    assert "error" in resp.get_json()
    assert AuthUser.query.count() == before


def test_create_user_duplicate_email(client, admin):
    login(client, admin)
    payload = {"email": admin.email, "password": "x", "full_name": "Dup", "role": "operador"}
    resp = client.post("/api/admin/users", json=payload)
    assert resp.status_code == 400


def test_delete_self_is_rejected_without_write(client, admin):
    login(client, admin)

    resp = client.delete("/api/admin/users", json={"userId": admin.id})

    assert resp.status_code == 400
    assert db.session.get(AuthUser, admin.id) is not None


def test_delete_user(client, admin, operador):
    login(client, admin)
    operador_id = operador.id

    resp = client.delete("/api/admin/users", json={"userId": operador_id})

    assert resp.status_code == 200
    assert db.session.get(AuthUser, operador_id) is None
    assert db.session.get(UserProfile, operador_id) is None


def test_delete_user_missing_id_and_unknown(client, admin):
    login(client, admin)
    assert client.delete("/api/admin/users", json={}).status_code == 400
    assert client.delete("/api/admin/users", json={"userId": 9999}).status_code == 404


# ----------------------------
# Upload
# ----------------------------
def test_upload_sanitizes_name(client, app, operador):
    login(client, operador)

    resp = client.post(
        "/api/upload",
        data={"file": (BytesIO(b"hola"), "mi factura (1).pdf"), "folder": "land/7/../freight_data"},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["file_name"] == "mi factura (1).pdf"
    assert body["path"].startswith("land/7/freight_data/")
    assert body["path"].endswith("_mi_factura__1_.pdf")
    assert body["file_url"] == f"http://testserver/files/{body['path']}"
    assert os.path.exists(os.path.join(app.config["UPLOAD_FOLDER"], *body["path"].split("/")))

    # se sirve por la URL pública
    served = client.get(f"/files/{body['path']}")
    assert served.status_code == 200
    assert served.data == b"hola"


def test_upload_without_file(client, operador):
    login(client, operador)
    resp = client.post("/api/upload", data={"folder": "x"}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "No file provided"}


# ----------------------------
# Correos
# ----------------------------
def test_notify_requires_fields(client, operador, outbox):
    login(client, operador)
    resp = client.post("/api/notify", json={"to": "x@example.com", "clientName": "A"})
    assert resp.status_code == 400
    assert outbox == []


def test_notify_sends(client, operador, outbox):
    login(client, operador)
    resp = client.post("/api/notify", json={
        "to": "x@example.com", "clientName": "A", "vendorName": "V", "docType": "BL", "docName": "bl.pdf",
    })
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True}
    assert outbox[0]["subject"] == "Documento subido: BL - V"


def test_notify_land_invalid_type(client, operador, outbox):
    login(client, operador)
    resp = client.post("/api/notify-land", json={"to": "x@example.com", "type": "otro"})
    assert resp.status_code == 400
    assert outbox == []


def test_notify_status_provider_failure(client, operador, failing_mail):
    login(client, operador)
    resp = client.post("/api/notify-status", json={
        "to": "x@example.com", "status": "entregado", "clientName": "A",
    })
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "provider down"}


def test_send_tramite_endpoint(client, operador, outbox, monkeypatch):
    from fletes.services import ocean_freight

    downloads = {"http://ok/bl.pdf": b"pdf"}
    monkeypatch.setattr(ocean_freight, "download_attachment", lambda url: downloads.get(url))
    login(client, operador)

    resp = client.post("/api/send-tramite", json={
        "to": "tramite@example.com",
        "clientName": "A",
        "containerNumber": "MSCU1",
        "documents": [
            {"docType": "BL", "fileName": "bl.pdf", "fileUrl": "http://ok/bl.pdf"},
            {"docType": "UVA", "fileName": "uva.pdf", "fileUrl": "http://missing/uva.pdf"},
        ],
    })

    assert resp.status_code == 200
    assert resp.get_json()["attachments"] == 1
    assert [a["filename"] for a in outbox[0]["attachments"]] == ["BL.pdf"]


# ----------------------------
# Ubicaciones
# ----------------------------
def test_locations_autocomplete_and_create(client, operador):
    login(client, operador)

    created = client.post("/api/locations", json={"name": "Puerto de Manzanillo"})
    assert created.status_code == 201
    dup = client.post("/api/locations", json={"name": "Puerto de Manzanillo"})
    assert dup.status_code == 400

    rows = client.get("/api/locations?q=manza").get_json()
    assert [r["name"] for r in rows] == ["Puerto de Manzanillo"]
    assert client.get("/api/locations?q=zzz").get_json() == []
