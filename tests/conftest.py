# tests/conftest.py

from datetime import date, time
from io import BytesIO

import pytest
from flask import g
from werkzeug.datastructures import FileStorage

from fletes import create_app
from fletes.config import TestConfig
from fletes.extensions import db
from fletes.models import Carrier, Cliente, Proveedor
from fletes.services.mailer import EmailSender, MailError
from fletes.services.users import provision_user


@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig)
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")

    # el contexto de app del test se comparte entre requests: limpiar caché por request
    @app.before_request
    def _reset_request_cache():
        g.pop("_login_user", None)
        g.pop("capabilities", None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(monkeypatch):
    """Registra los correos en lugar de enviarlos."""
    sent = []

    def fake_send(self, to, subject, html, attachments=None):
        sent.append({"to": to, "subject": subject, "html": html, "attachments": attachments or []})

    monkeypatch.setattr(EmailSender, "send", fake_send)
    return sent


@pytest.fixture
def failing_mail(monkeypatch):
    def fail_send(self, to, subject, html, attachments=None):
        raise MailError("provider down")

    monkeypatch.setattr(EmailSender, "send", fail_send)


@pytest.fixture
def cliente(app):
    c = Cliente(name="Importadora del Norte", email="cliente@example.com")
    db.session.add(c)
    db.session.commit()
    return c


@pytest.fixture
def otro_cliente(app):
    c = Cliente(name="Comercial del Sur", email="sur@example.com")
    db.session.add(c)
    db.session.commit()
    return c


@pytest.fixture
def carrier(app):
    c = Carrier(name="Transportes Rápidos", phone="8100000000", email="carrier@example.com")
    db.session.add(c)
    db.session.commit()
    return c


@pytest.fixture
def proveedor(cliente):
    p = Proveedor(cliente_id=cliente.id, name="Shenzhen Parts", tax_id="CN123")
    db.session.add(p)
    db.session.commit()
    return p


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role="operador", **extra):
        counter["n"] += 1
        data = {
            "email": f"{role}{counter['n']}@example.com",
            "password": "secreto123",
            "full_name": f"Usuario {role}",
            "role": role,
        }
        data.update(extra)
        return provision_user(data)

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def operador(make_user):
    return make_user("operador")


def login(client, profile):
    with client.session_transaction() as sess:
        sess["_user_id"] = str(profile.id)
        sess["_fresh"] = True


def upload_file(name="documento.pdf", content=b"%PDF-1.4 test"):
    return FileStorage(stream=BytesIO(content), filename=name, content_type="application/pdf")


@pytest.fixture
def land_data(cliente, carrier):
    return {
        "cliente_id": cliente.id,
        "carrier_id": carrier.id,
        "freight_date": date(2026, 3, 2),
        "freight_time": time(9, 30),
        "origin": "Manzanillo",
        "destination": "Monterrey",
        "import_invoice": "INV-001",
    }


@pytest.fixture
def ocean_data(cliente, proveedor):
    return {
        "cliente_id": cliente.id,
        "proveedor_id": proveedor.id,
        "container_number": "MSCU1234567",
        "invoice_number": "F-100",
        "bl_number": "BL-9",
    }
