# tests/test_catalogs_storage.py

import os

import pytest

from conftest import upload_file
from fletes.services import catalogs
from fletes.services.errors import ValidationError
from fletes.services.kpis import compute_kpis
from fletes.services.storage import sanitize_filename, sanitize_folder, save_uploaded_file
from fletes.utils.strings import file_extension


def test_sanitize_filename():
    assert sanitize_filename("Factura Nº 12 (final).pdf") == "Factura_N__12__final_.pdf"
    assert sanitize_filename("ok-name_1.PDF") == "ok-name_1.PDF"


def test_sanitize_folder_drops_traversal():
    assert sanitize_folder("../../etc/passwd") == "etc/passwd"
    assert sanitize_folder("ocean/3/bl") == "ocean/3/bl"
    assert sanitize_folder("") == ""


def test_save_uploaded_file(tmp_path):
    saved = save_uploaded_file(upload_file("a b.pdf"), str(tmp_path), "ocean/1/bl", "http://files.local/")

    assert saved["file_name"] == "a b.pdf"
    assert saved["path"].startswith("ocean/1/bl/")
    assert saved["path"].endswith("_a_b.pdf")
    assert saved["file_url"] == f"http://files.local/files/{saved['path']}"
    assert os.path.exists(tmp_path.joinpath(*saved["path"].split("/")))


def test_save_uploaded_file_without_file(tmp_path):
    with pytest.raises(ValidationError):
        save_uploaded_file(None, str(tmp_path), "x", "")


def test_file_extension():
    assert file_extension("factura.final.PDF") == "PDF"
    assert file_extension("sin_extension") == "pdf"
    assert file_extension("") == "pdf"


def test_cliente_requires_name_and_email(app):
    with pytest.raises(ValidationError):
        catalogs.create_cliente({"name": "Solo nombre"})

    c = catalogs.create_cliente({"name": " Acme ", "email": " Compras@ACME.com "})
    assert c.name == "Acme"
    assert c.email == "compras@acme.com"


def test_carrier_email_optional_and_search(app):
    catalogs.create_carrier({"name": "Fletes del Bajío", "phone": "4420001111"})
    catalogs.create_carrier({"name": "Norte Cargo", "email": "ops@norte.example.com"})

    assert [c.name for c in catalogs.list_carriers("norte")] == ["Norte Cargo"]
    assert [c.name for c in catalogs.list_carriers("4420")] == ["Fletes del Bajío"]
    assert len(catalogs.list_carriers()) == 2


def test_proveedor_requires_cliente(app, cliente):
    with pytest.raises(ValidationError):
        catalogs.create_proveedor(None, {"name": "X"})
    with pytest.raises(ValidationError):
        catalogs.create_proveedor(cliente.id, {"name": "  "})

    p = catalogs.create_proveedor(cliente.id, {"name": "Vendor", "tax_id": "RFC1"})
    assert [x.id for x in catalogs.list_proveedores(cliente.id)] == [p.id]


def test_location_name_unique(app):
    catalogs.create_location({"name": "Laredo", "google_maps_url": "https://maps.example.com/laredo"})
    with pytest.raises(ValidationError):
        catalogs.create_location({"name": "Laredo"})
    assert [l.name for l in catalogs.search_locations("lar")] == ["Laredo"]


def test_compute_kpis():
    kpis = compute_kpis(
        ["pending_docs", "pending_docs", "docs_complete", "cleared", "entregado"],
        ["pending_data", "pending_carta_porte", "ready", "dispatched", "green_light", "red_light", "delivered"],
    )

    assert kpis["ocean_total"] == 5
    assert kpis["ocean_pending"] == 2
    assert kpis["ocean_complete"] == 1
    assert kpis["ocean_cleared"] == 1

    assert kpis["land_total"] == 7
    assert kpis["land_pending"] == 2
    assert kpis["land_active"] == 3
    assert kpis["land_delivered"] == 1
