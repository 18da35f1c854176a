# fletes/models/catalogs.py

from datetime import datetime

from fletes.extensions import db


class Cliente(db.Model):
    __tablename__ = "clientes"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    proveedores = db.relationship(
        "Proveedor",
        backref=db.backref("cliente", lazy=True),
        cascade="all, delete-orphan",
        lazy=True,
        order_by="Proveedor.name",
    )


class Proveedor(db.Model):
    __tablename__ = "proveedores"

    id = db.Column(db.Integer, primary_key=True)
    cliente_id = db.Column(
        db.Integer,
        db.ForeignKey("clientes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = db.Column(db.String(200), nullable=False)
    tax_id = db.Column(db.String(50))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class Carrier(db.Model):
    __tablename__ = "carriers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    phone = db.Column(db.String(50))
    email = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class Location(db.Model):
    __tablename__ = "locations"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    google_maps_url = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
