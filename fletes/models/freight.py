# fletes/models/freight.py

from datetime import datetime

from fletes.extensions import db
from fletes.services.workflow import LAND_INITIAL_STATUS, OCEAN_INITIAL_STATUS


class OceanFreight(db.Model):
    __tablename__ = "ocean_freight"

    id = db.Column(db.Integer, primary_key=True)
    folio = db.Column(db.String(20), unique=True, index=True)

    cliente_id = db.Column(db.Integer, db.ForeignKey("clientes.id"), nullable=False, index=True)
    client_name = db.Column(db.String(200), nullable=False, default="")

    proveedor_id = db.Column(db.Integer, db.ForeignKey("proveedores.id"), nullable=False)
    vendor_name = db.Column(db.String(200), nullable=False, default="")
    vendor_tax_id = db.Column(db.String(50))

    container_number = db.Column(db.String(30), index=True)
    vessel_number = db.Column(db.String(50))
    invoice_number = db.Column(db.String(50))
    pedimento_number = db.Column(db.String(50))
    bl_number = db.Column(db.String(50), index=True)

    description = db.Column(db.Text)
    notes = db.Column(db.Text)

    status = db.Column(db.String(40), nullable=False, default=OCEAN_INITIAL_STATUS)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    cliente = db.relationship("Cliente", lazy=True)
    proveedor = db.relationship("Proveedor", lazy=True)

    documents = db.relationship(
        "OceanFreightDocument",
        backref=db.backref("freight", lazy=True),
        cascade="all, delete-orphan",
        lazy=True,
        order_by="OceanFreightDocument.uploaded_at.desc()",
    )

    kind = "ocean"

    @property
    def client_email(self):
        return self.cliente.email if self.cliente else None

    def mark_status(self, status: str) -> None:
        self.status = status


class OceanFreightDocument(db.Model):
    __tablename__ = "ocean_freight_documents"

    id = db.Column(db.Integer, primary_key=True)
    ocean_freight_id = db.Column(
        db.Integer,
        db.ForeignKey("ocean_freight.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    doc_type = db.Column(db.String(40), nullable=False)  # bl / invoice / packing_list / uva / traduccion / factura_maritima
    file_name = db.Column(db.String(255), nullable=False)
    file_url = db.Column(db.String(1000), nullable=False)
    storage_path = db.Column(db.String(500))

    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow)


class LandFreight(db.Model):
    __tablename__ = "land_freight"

    id = db.Column(db.Integer, primary_key=True)
    folio = db.Column(db.String(20), unique=True, index=True)

    cliente_id = db.Column(db.Integer, db.ForeignKey("clientes.id"), nullable=False, index=True)
    client_name = db.Column(db.String(200), nullable=False, default="")

    carrier_id = db.Column(db.Integer, db.ForeignKey("carriers.id"), index=True)
    carrier_name = db.Column(db.String(200))

    freight_date = db.Column(db.Date, nullable=False)
    freight_time = db.Column(db.Time, nullable=False)

    origin = db.Column(db.String(200))
    destination = db.Column(db.String(200))
    import_invoice = db.Column(db.String(100))

    description = db.Column(db.Text)
    notes = db.Column(db.Text)

    status = db.Column(db.String(40), nullable=False, default=LAND_INITIAL_STATUS)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    cliente = db.relationship("Cliente", lazy=True)
    carrier = db.relationship("Carrier", lazy=True)

    documents = db.relationship(
        "LandFreightDocument",
        backref=db.backref("freight", lazy=True),
        cascade="all, delete-orphan",
        lazy=True,
        order_by="LandFreightDocument.uploaded_at.desc()",
    )

    kind = "land"

    @property
    def client_email(self):
        return self.cliente.email if self.cliente else None

    @property
    def carrier_email(self):
        return self.carrier.email if self.carrier else None

    @property
    def title(self) -> str:
        if self.origin and self.destination:
            return f"{self.origin} → {self.destination}"
        return self.carrier_name or "Land Freight"

    def mark_status(self, status: str) -> None:
        self.status = status


class LandFreightDocument(db.Model):
    __tablename__ = "land_freight_documents"

    id = db.Column(db.Integer, primary_key=True)
    land_freight_id = db.Column(
        db.Integer,
        db.ForeignKey("land_freight.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    doc_type = db.Column(db.String(40), nullable=False)  # freight_data / carta_porte_layout / carta_porte / load_order
    file_name = db.Column(db.String(255), nullable=False)
    file_url = db.Column(db.String(1000), nullable=False)
    storage_path = db.Column(db.String(500))

    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow)
