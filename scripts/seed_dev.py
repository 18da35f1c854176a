# scripts/seed_dev.py

import os
from datetime import date, time

from fletes import create_app
from fletes.extensions import db
from fletes.models import AuthUser, Carrier, Cliente, Location, Proveedor
from fletes.services.land_freight import create_land_freight
from fletes.services.ocean_freight import create_ocean_freight
from fletes.services.users import provision_user

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

app = create_app()

with app.app_context():
    db.create_all()

    if AuthUser.query.filter_by(email=ADMIN_EMAIL).first() is None:
        admin = provision_user({
            "email": ADMIN_EMAIL,
            "password": ADMIN_PASSWORD,
            "full_name": "Administrador",
            "role": "admin",
        })
        print("Admin creado:", admin.email)

    if Cliente.query.count() == 0:
        cliente = Cliente(name="Importadora del Norte", email="logistica@importadora.example.com")
        carrier = Carrier(name="Transportes Rápidos", phone="+52 81 0000 0000", email="trafico@rapidos.example.com")
        db.session.add_all([cliente, carrier])
        db.session.add_all([
            Location(name="Puerto de Manzanillo"),
            Location(name="Monterrey, NL"),
        ])
        db.session.flush()

        proveedor = Proveedor(cliente_id=cliente.id, name="Shenzhen Parts Co.", tax_id="CN-91440300")
        db.session.add(proveedor)
        db.session.commit()

        ocean = create_ocean_freight({
            "cliente_id": cliente.id,
            "proveedor_id": proveedor.id,
            "container_number": "MSCU1234567",
            "bl_number": "MEDU0001",
        })
        land = create_land_freight({
            "cliente_id": cliente.id,
            "carrier_id": carrier.id,
            "freight_date": date.today(),
            "freight_time": time(9, 0),
            "origin": "Puerto de Manzanillo",
            "destination": "Monterrey, NL",
        })
        print("Fletes creados:", ocean.folio, land.folio)
