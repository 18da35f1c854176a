# tests/test_web.py

from io import BytesIO

import pandas as pd

from conftest import login
from fletes.extensions import db
from fletes.models import AuthUser, LandFreight, LandFreightDocument, OceanFreight, Proveedor
from fletes.services.land_freight import create_land_freight


def test_login_and_logout(client, make_user):
    user = make_user("operador")

    bad = client.post("/login", data={"email": user.email, "password": "incorrecta"})
    assert bad.status_code == 401

    ok = client.post("/login", data={"email": user.email.upper(), "password": "secreto123"})
    assert ok.status_code == 302

    assert client.get("/").status_code == 200

    client.post("/logout")
    assert client.get("/").status_code == 302


def test_dashboard_counts(client, operador, land_data):
    create_land_freight(land_data)
    login(client, operador)

    resp = client.get("/")
    assert resp.status_code == 200
    assert b"LF-00001" in resp.data
    assert b"Ocean Freight" in resp.data


def test_dashboard_hides_ocean_for_transportista(client, make_user, carrier):
    login(client, make_user("transportista", carrier_id=carrier.id))
    resp = client.get("/")
    assert b"Ocean Freight recientes" not in resp.data


def test_create_land_from_form(client, operador, cliente, carrier):
    login(client, operador)

    resp = client.post("/land/new", data={
        "cliente_id": cliente.id,
        "carrier_id": carrier.id,
        "freight_date": "2026-04-01",
        "freight_time": "08:15",
        "origin": "Laredo",
        "destination": "Saltillo",
    })

    assert resp.status_code == 302
    freight = LandFreight.query.one()
    assert freight.folio == "LF-00001"
    assert freight.carrier_name == carrier.name


def test_create_land_requires_date(client, operador, cliente):
    login(client, operador)
    resp = client.post("/land/new", data={"cliente_id": cliente.id, "carrier_id": 0, "freight_time": "08:15"})
    assert resp.status_code == 400
    assert LandFreight.query.count() == 0


def test_cliente_cannot_create_freight(client, make_user, cliente):
    login(client, make_user("cliente", cliente_id=cliente.id))
    resp = client.get("/land/new")
    assert resp.status_code == 302


def test_upload_and_status_from_detail(client, operador, land_data):
    freight = create_land_freight(land_data)
    login(client, operador)

    resp = client.post(
        f"/land/{freight.id}/documents",
        data={"doc_type": "freight_data", "file": (BytesIO(b"pdf"), "datos.pdf")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 302
    assert LandFreightDocument.query.count() == 1
    assert db.session.get(LandFreight, freight.id).status == "pending_carta_porte_layout"

    client.post(f"/land/{freight.id}/status", data={"status": "red_light"})
    detail = client.get(f"/land/{freight.id}")
    assert b"Liberado de Rojo" in detail.data


def test_ocean_inline_proveedor_and_create(client, operador, cliente):
    login(client, operador)

    resp = client.post("/ocean/proveedores", data={"cliente_id": cliente.id, "name": "Nuevo Vendor", "tax_id": ""})
    assert resp.status_code == 302
    proveedor = Proveedor.query.filter_by(name="Nuevo Vendor").one()
    assert proveedor.cliente_id == cliente.id
    assert proveedor.tax_id is None

    resp = client.post("/ocean/new", data={
        "cliente_id": cliente.id,
        "proveedor_id": proveedor.id,
        "container_number": "TGHU0000001",
    })
    assert resp.status_code == 302
    assert OceanFreight.query.one().vendor_name == "Nuevo Vendor"


def test_export_land_excel(client, operador, land_data):
    create_land_freight(land_data)
    login(client, operador)

    resp = client.get("/land/export")

    assert resp.status_code == 200
    assert resp.mimetype.endswith("spreadsheetml.sheet")
    df = pd.read_excel(BytesIO(resp.data), sheet_name="Land_Freight")
    assert list(df["Folio"]) == ["LF-00001"]
    assert list(df["Origen"]) == ["Manzanillo"]


def test_delete_requires_capability(client, make_user, carrier, land_data):
    freight = create_land_freight(land_data)
    login(client, make_user("transportista", carrier_id=carrier.id))

    client.post(f"/land/{freight.id}/delete")
    assert db.session.get(LandFreight, freight.id) is not None


def test_admin_page_cannot_delete_self(client, admin):
    login(client, admin)
    client.post(f"/admin/users/{admin.id}/delete")
    assert db.session.get(AuthUser, admin.id) is not None

    page = client.get("/admin")
    assert page.status_code == 200
    assert admin.email.encode() in page.data


def test_clientes_crud(client, operador):
    login(client, operador)

    client.post("/clientes", data={"name": "  Nuevo Cliente ", "email": "NUEVO@Example.com"})
    page = client.get("/clientes?q=nuevo")
    assert b"Nuevo Cliente" in page.data
    assert b"nuevo@example.com" in page.data
