# fletes/services/users.py

"""
Alta y baja de usuarios (solo admin).

La identidad (AuthUser) se crea primero; el perfil nace con rol por defecto
vía el evento after_insert y después se ajusta con rol y asociaciones.
Todas las validaciones ocurren antes de cualquier escritura.
"""

from sqlalchemy.exc import SQLAlchemyError

from fletes.extensions import db
from fletes.models import ROLES, AuthUser, Carrier, Cliente, UserProfile
from fletes.services.errors import NotFound, ValidationError
from fletes.utils.logging import get_logger
from fletes.utils.strings import clean_email, clean_optional

logger = get_logger("users")


def list_profiles():
    return UserProfile.query.order_by(UserProfile.created_at.desc(), UserProfile.id.desc()).all()


def _optional_id(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Identificador inválido")


def validate_new_user(data: dict) -> dict:
    email = clean_email(data.get("email"))
    password = data.get("password") or ""
    full_name = clean_optional(data.get("full_name"))
    role = clean_optional(data.get("role"))

    if not email or not password or not full_name or not role:
        raise ValidationError("Faltan campos requeridos")
    if role not in ROLES:
        raise ValidationError(f"Rol inválido: {role}")

    cliente_id = _optional_id(data.get("cliente_id"))
    carrier_id = _optional_id(data.get("carrier_id"))

    if role == "cliente" and not cliente_id:
        raise ValidationError("Un usuario cliente requiere cliente_id")
    if role == "transportista" and not carrier_id:
        raise ValidationError("Un usuario transportista requiere carrier_id")

    if cliente_id and db.session.get(Cliente, cliente_id) is None:
        raise ValidationError("Cliente no encontrado")
    if carrier_id and db.session.get(Carrier, carrier_id) is None:
        raise ValidationError("Carrier no encontrado")

    if AuthUser.query.filter_by(email=email).first() is not None:
        raise ValidationError("Ya existe un usuario con ese email")

    return {
        "email": email,
        "password": password,
        "full_name": full_name,
        "role": role,
        # solo se guarda la asociación que corresponde al rol
        "cliente_id": cliente_id if role == "cliente" else None,
        "carrier_id": carrier_id if role == "transportista" else None,
    }


def provision_user(data: dict) -> UserProfile:
    fields = validate_new_user(data)

    user = AuthUser(email=fields["email"], full_name=fields["full_name"])
    user.set_password(fields["password"])

    try:
        db.session.add(user)
        db.session.flush()

        # el perfil ya existe con rol por defecto; se corrige aquí
        profile = db.session.get(UserProfile, user.id)
        profile.full_name = fields["full_name"]
        profile.role = fields["role"]
        profile.cliente_id = fields["cliente_id"]
        profile.carrier_id = fields["carrier_id"]

        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(f"Usuario creado id={user.id} email={user.email} role={fields['role']}")
    return profile


def delete_user(user_id, actor) -> None:
    if not user_id:
        raise ValidationError("userId es requerido")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise ValidationError("userId inválido")

    if actor is not None and user_id == actor.id:
        raise ValidationError("No puedes eliminar tu propio usuario")

    user = db.session.get(AuthUser, user_id)
    if user is None:
        raise NotFound("Usuario no encontrado")

    try:
        db.session.delete(user)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(f"Usuario eliminado id={user_id}")


def authenticate(email: str, password: str):
    """Retorna el perfil si las credenciales son válidas, si no None."""
    user = AuthUser.query.filter_by(email=clean_email(email)).first()
    if user is None or not user.check_password(password or ""):
        return None
    return db.session.get(UserProfile, user.id)
