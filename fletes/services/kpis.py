# fletes/services/kpis.py

from collections import Counter
from typing import Any, Dict, Iterable

from fletes.extensions import db
from fletes.models import LandFreight, OceanFreight
from fletes.services.access import can_access, scope_freight_query
from fletes.services.workflow import LAND_PENDING_STATUSES

LAND_ACTIVE_STATUSES = ("ready", "dispatched", "green_light")
RECENT_LIMIT = 5


def compute_kpis(ocean_statuses: Iterable[str], land_statuses: Iterable[str]) -> Dict[str, Any]:
    """
    Conteos del dashboard a partir de la lista de status de cada tipo.

    NOTA:
    - "cleared" es un status legado de ocean; ya no se asigna pero se sigue contando.
    - land "active" agrupa ready / dispatched / green_light.
    """
    ocean = Counter(ocean_statuses)
    land = Counter(land_statuses)

    return {
        "ocean_total": sum(ocean.values()),
        "ocean_pending": ocean.get("pending_docs", 0),
        "ocean_complete": ocean.get("docs_complete", 0),
        "ocean_cleared": ocean.get("cleared", 0),

        "land_total": sum(land.values()),
        "land_pending": sum(land.get(s, 0) for s in LAND_PENDING_STATUSES),
        "land_active": sum(land.get(s, 0) for s in LAND_ACTIVE_STATUSES),
        "land_delivered": land.get("delivered", 0),
    }


def _statuses(model, actor):
    q = scope_freight_query(db.session.query(model.status), model, actor)
    return [row[0] for row in q.all()]


def _recent(model, actor):
    q = scope_freight_query(model.query, model, actor)
    return q.order_by(model.created_at.desc(), model.id.desc()).limit(RECENT_LIMIT).all()


def dashboard_data(actor) -> Dict[str, Any]:
    """KPIs + cinco registros más recientes de cada tipo, respetando el alcance del perfil."""
    show_ocean = can_access(actor.role if actor else None, "/ocean")

    ocean_statuses = _statuses(OceanFreight, actor) if show_ocean else []
    land_statuses = _statuses(LandFreight, actor)

    return {
        "kpis": compute_kpis(ocean_statuses, land_statuses),
        "recent_ocean": _recent(OceanFreight, actor) if show_ocean else [],
        "recent_land": _recent(LandFreight, actor),
        "show_ocean": show_ocean,
    }
