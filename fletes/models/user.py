# fletes/models/user.py

from datetime import datetime

from flask_login import UserMixin
from sqlalchemy import event
from werkzeug.security import check_password_hash, generate_password_hash

from fletes.extensions import db

ROLES = ("admin", "operador", "cliente", "transportista")
DEFAULT_ROLE = "operador"


class AuthUser(db.Model):
    """Identidad de acceso (correo + contraseña)."""

    __tablename__ = "auth_users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(200))  # metadata de alta, la copia el trigger

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    profile = db.relationship(
        "UserProfile",
        uselist=False,
        backref=db.backref("auth_user", lazy=True),
        cascade="all, delete-orphan",
    )

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)


class UserProfile(UserMixin, db.Model):
    __tablename__ = "user_profiles"

    id = db.Column(
        db.Integer,
        db.ForeignKey("auth_users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    email = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(200), nullable=False, default="")
    role = db.Column(db.String(20), nullable=False, default=DEFAULT_ROLE)  # admin / operador / cliente / transportista

    cliente_id = db.Column(db.Integer, db.ForeignKey("clientes.id", ondelete="SET NULL"))
    carrier_id = db.Column(db.Integer, db.ForeignKey("carriers.id", ondelete="SET NULL"))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    cliente = db.relationship("Cliente", lazy=True)
    carrier = db.relationship("Carrier", lazy=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "cliente_id": self.cliente_id,
            "carrier_id": self.carrier_id,
            "clientes": {"name": self.cliente.name} if self.cliente else None,
            "carriers": {"name": self.carrier.name} if self.carrier else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@event.listens_for(AuthUser, "after_insert")
def _create_profile_row(mapper, connection, target):
    # Equivalente al trigger de alta: toda identidad nace con perfil y rol por defecto
    connection.execute(
        UserProfile.__table__.insert().values(
            id=target.id,
            email=target.email,
            full_name=target.full_name or "",
            role=DEFAULT_ROLE,
            created_at=datetime.utcnow(),
        )
    )
