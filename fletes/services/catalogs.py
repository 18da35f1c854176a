# fletes/services/catalogs.py

from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from fletes.extensions import db
from fletes.models import Carrier, Cliente, Location, Proveedor
from fletes.services.errors import NotFound, ValidationError
from fletes.services.freight_common import search_filter
from fletes.utils.logging import get_logger
from fletes.utils.strings import clean_email, clean_optional

logger = get_logger("catalogs")


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def _get(model, record_id, message: str):
    record = db.session.get(model, int(record_id)) if record_id else None
    if record is None:
        raise NotFound(message)
    return record


# ----------------------------
# Clientes
# ----------------------------
def list_clientes(search: Optional[str] = None):
    q = search_filter(Cliente.query, (Cliente.name, Cliente.email), search)
    return q.order_by(Cliente.name.asc()).all()


def get_cliente(cliente_id) -> Cliente:
    return _get(Cliente, cliente_id, "Cliente no encontrado")


def _cliente_fields(data: dict):
    name = clean_optional(data.get("name"))
    email = clean_email(data.get("email"))
    if not name or not email:
        raise ValidationError("Nombre y email son requeridos")
    return name, email


def create_cliente(data: dict) -> Cliente:
    name, email = _cliente_fields(data)
    cliente = Cliente(name=name, email=email)
    db.session.add(cliente)
    _commit()
    logger.info(f"Cliente creado id={cliente.id} name={name}")
    return cliente


def update_cliente(cliente: Cliente, data: dict) -> Cliente:
    cliente.name, cliente.email = _cliente_fields(data)
    _commit()
    logger.info(f"Cliente actualizado id={cliente.id}")
    return cliente


def delete_cliente(cliente: Cliente) -> None:
    cliente_id = cliente.id
    db.session.delete(cliente)
    _commit()
    logger.info(f"Cliente eliminado id={cliente_id}")


# ----------------------------
# Proveedores (siempre ligados a un cliente)
# ----------------------------
def list_proveedores(cliente_id):
    if not cliente_id:
        return []
    return Proveedor.query.filter_by(cliente_id=int(cliente_id)).order_by(Proveedor.name.asc()).all()


def create_proveedor(cliente_id, data: dict) -> Proveedor:
    cliente = db.session.get(Cliente, int(cliente_id)) if cliente_id else None
    if cliente is None:
        raise ValidationError("Selecciona un cliente primero")

    name = clean_optional(data.get("name"))
    if not name:
        raise ValidationError("El nombre del proveedor es requerido")

    proveedor = Proveedor(cliente_id=cliente.id, name=name, tax_id=clean_optional(data.get("tax_id")))
    db.session.add(proveedor)
    _commit()
    logger.info(f"Proveedor creado id={proveedor.id} cliente={cliente.id}")
    return proveedor


# ----------------------------
# Carriers
# ----------------------------
def list_carriers(search: Optional[str] = None):
    q = search_filter(Carrier.query, (Carrier.name, Carrier.email, Carrier.phone), search)
    return q.order_by(Carrier.name.asc()).all()


def get_carrier(carrier_id) -> Carrier:
    return _get(Carrier, carrier_id, "Carrier no encontrado")


def _carrier_fields(data: dict):
    name = clean_optional(data.get("name"))
    if not name:
        raise ValidationError("El nombre es requerido")
    return name, clean_optional(data.get("phone")), clean_email(data.get("email"))


def create_carrier(data: dict) -> Carrier:
    name, phone, email = _carrier_fields(data)
    carrier = Carrier(name=name, phone=phone, email=email)
    db.session.add(carrier)
    _commit()
    logger.info(f"Carrier creado id={carrier.id} name={name}")
    return carrier


def update_carrier(carrier: Carrier, data: dict) -> Carrier:
    carrier.name, carrier.phone, carrier.email = _carrier_fields(data)
    _commit()
    logger.info(f"Carrier actualizado id={carrier.id}")
    return carrier


def delete_carrier(carrier: Carrier) -> None:
    carrier_id = carrier.id
    db.session.delete(carrier)
    _commit()
    logger.info(f"Carrier eliminado id={carrier_id}")


# ----------------------------
# Locations
# ----------------------------
def search_locations(text: Optional[str] = None, limit: int = 20):
    q = search_filter(Location.query, (Location.name,), text)
    return q.order_by(Location.name.asc()).limit(limit).all()


def create_location(data: dict) -> Location:
    name = clean_optional(data.get("name"))
    if not name:
        raise ValidationError("El nombre de la ubicación es requerido")

    location = Location(name=name, google_maps_url=clean_optional(data.get("google_maps_url")))
    db.session.add(location)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError("Ya existe una ubicación con ese nombre")
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(f"Ubicación creada id={location.id} name={name}")
    return location


def location_to_dict(location: Location) -> dict:
    return {"id": location.id, "name": location.name, "google_maps_url": location.google_maps_url}
