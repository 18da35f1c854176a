# fletes/services/access.py

from functools import wraps
from typing import Iterable, Optional, Tuple

from flask import flash, g, redirect, url_for
from flask_login import current_user
from sqlalchemy import false

from fletes.extensions import login_manager

# Qué roles pueden entrar a cada sección (navegación + guardas de vistas)
ROUTE_ACCESS = {
    "/": ("admin", "operador", "cliente", "transportista"),
    "/ocean": ("admin", "operador", "cliente"),
    "/land": ("admin", "operador", "cliente", "transportista"),
    "/clientes": ("admin", "operador"),
    "/carriers": ("admin", "operador"),
    "/admin": ("admin",),
}

# Capacidades -> roles
CAPABILITIES = {
    "create_freight": ("admin", "operador"),
    "edit_freight": ("admin", "operador"),
    "delete_freight": ("admin", "operador"),
    "upload_docs": ("admin", "operador", "transportista"),
    "manage_users": ("admin",),
}

# Roles que ven todos los fletes; el resto solo los suyos
UNSCOPED_ROLES = ("admin", "operador")


def capabilities_for(role: Optional[str]) -> frozenset:
    if not role:
        return frozenset()
    return frozenset(cap for cap, roles in CAPABILITIES.items() if role in roles)


def can_access(role: Optional[str], route: str) -> bool:
    return bool(role) and role in ROUTE_ACCESS.get(route, ())


def current_profile():
    """Perfil autenticado del request, o None."""
    if not current_user or not current_user.is_authenticated:
        return None
    return current_user._get_current_object()


def request_capabilities() -> frozenset:
    # se evalúa una sola vez por request
    if "capabilities" not in g:
        profile = current_profile()
        g.capabilities = capabilities_for(profile.role if profile else None)
    return g.capabilities


def require_role(allowed_roles: Iterable[str]) -> Tuple[object, Optional[str], int]:
    """
    Retorna (perfil, error, status):
      - (None, "Unauthorized", 401) sin sesión
      - (None, "Forbidden", 403) si el rol no está permitido
      - (perfil, None, 200) si pasa
    """
    profile = current_profile()
    if profile is None:
        return None, "Unauthorized", 401
    if profile.role not in tuple(allowed_roles):
        return None, "Forbidden", 403
    return profile, None, 200


def role_required(allowed_roles: Iterable[str], message: str = "No tienes acceso a esta sección."):
    """
    Decorador de vistas web con la misma regla que require_role:
    sin sesión -> login; rol no permitido -> flash + dashboard.
    """
    allowed_roles = tuple(allowed_roles)

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            profile, error, status = require_role(allowed_roles)
            if status == 401:
                return login_manager.unauthorized()
            if error:
                flash(message, "error")
                return redirect(url_for("web.dashboard"))
            return view(*args, **kwargs)

        return wrapped

    return decorator


def route_required(route: str):
    """Guarda de sección según ROUTE_ACCESS."""
    return role_required(ROUTE_ACCESS[route])


def capability_required(capability: str):
    return role_required(CAPABILITIES[capability], "No tienes permiso para esta acción.")


def scope_freight_query(query, model, actor):
    """
    Filtra fletes según el perfil:
      admin / operador -> todo
      cliente -> solo su cliente_id
      transportista -> solo fletes terrestres de su carrier_id
    """
    if actor is None:
        return query.filter(false())
    if actor.role in UNSCOPED_ROLES:
        return query
    if actor.role == "cliente":
        return query.filter(model.cliente_id == actor.cliente_id)
    if actor.role == "transportista" and hasattr(model, "carrier_id"):
        return query.filter(model.carrier_id == actor.carrier_id)
    return query.filter(false())
