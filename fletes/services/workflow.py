# fletes/services/workflow.py

"""
Estados de fletes derivados de documentos.

Funciones puras: reciben el conjunto de doc_type cargados (y el status actual)
y devuelven el status que corresponde. No tocan la base de datos; quien llama
decide si persiste el resultado.

Asimetrías conocidas (se conservan tal cual):
  - Land protege el status con guardas al subir y al eliminar; Ocean recalcula siempre.
  - load_order se puede subir en Land pero no participa en la derivación.
"""

from typing import Iterable, Optional, Set, Tuple

# ----------------------------
# Land Freight
# ----------------------------
LAND_DOC_TYPES = (
    ("freight_data", "Freight Data"),
    ("carta_porte_layout", "Carta Porte Layout"),
    ("carta_porte", "Carta Porte"),
    ("load_order", "Load Order"),
)

# Orden de documentos requeridos -> status pendiente cuando falta
LAND_REQUIRED_SEQUENCE: Tuple[Tuple[str, str], ...] = (
    ("freight_data", "pending_data"),
    ("carta_porte_layout", "pending_carta_porte_layout"),
    ("carta_porte", "pending_carta_porte"),
)

LAND_PENDING_STATUSES = frozenset(status for _, status in LAND_REQUIRED_SEQUENCE)
LAND_READY = "ready"
LAND_INITIAL_STATUS = "pending_data"

# Al eliminar un documento no se revierte un flete que ya está en operación
LAND_REMOVAL_LOCKED_STATUSES = frozenset({"dispatched", "green_light", "red_light", "delivered"})

LAND_MANUAL_STATUSES = ("dispatched", "green_light", "red_light", "liberado_rojo", "delivered")

LAND_STATUSES = (
    "pending_data",
    "pending_carta_porte_layout",
    "pending_carta_porte",
    "ready",
    "dispatched",
    "green_light",
    "red_light",
    "liberado_rojo",
    "delivered",
)

# ----------------------------
# Ocean Freight
# ----------------------------
OCEAN_DOC_TYPES = (
    ("bl", "BL"),
    ("invoice", "Invoice"),
    ("packing_list", "Packing List"),
    ("uva", "UVA"),
    ("traduccion", "Traducción"),
    ("factura_maritima", "Factura Marítima"),
)

OCEAN_REQUIRED_DOC_TYPES = frozenset(key for key, _ in OCEAN_DOC_TYPES)
OCEAN_PENDING = "pending_docs"
OCEAN_COMPLETE = "docs_complete"
OCEAN_INITIAL_STATUS = OCEAN_PENDING
OCEAN_TRAMITE_STATUS = "enviado_tramite"

OCEAN_MANUAL_STATUSES = (
    "desaduanamiento_libre",
    "reconocimiento_aduanero",
    "liberado_reconocimiento",
    "entregado",
)

OCEAN_STATUSES = (
    "pending_docs",
    "docs_complete",
    "enviado_tramite",
    "desaduanamiento_libre",
    "reconocimiento_aduanero",
    "liberado_reconocimiento",
    "entregado",
    "cleared",
)

# Botones condicionales: solo se ofrecen cuando el status actual coincide
CONDITIONAL_ACTIONS = {
    "liberado_rojo": "red_light",
    "liberado_reconocimiento": "reconocimiento_aduanero",
}


def _as_set(doc_types: Iterable[str]) -> Set[str]:
    return {d for d in doc_types if d}


def derive_land_status(doc_types: Iterable[str]) -> str:
    """
    Recorre la secuencia requerida y devuelve pending_<paso> del primer
    documento ausente; si están los tres, 'ready'.
    """
    present = _as_set(doc_types)
    for doc_type, pending_status in LAND_REQUIRED_SEQUENCE:
        if doc_type not in present:
            return pending_status
    return LAND_READY


def derive_ocean_status(doc_types: Iterable[str]) -> str:
    present = _as_set(doc_types)
    if OCEAN_REQUIRED_DOC_TYPES.issubset(present):
        return OCEAN_COMPLETE
    return OCEAN_PENDING


def land_status_after_upload(current_status: str, doc_types: Iterable[str]) -> Optional[str]:
    """
    Nuevo status tras subir un documento, o None si no se debe recalcular
    (el flete ya avanzó manualmente más allá de los pendientes).
    """
    if current_status not in LAND_PENDING_STATUSES:
        return None
    return derive_land_status(doc_types)


def land_status_after_removal(current_status: str, doc_types: Iterable[str]) -> Optional[str]:
    if current_status in LAND_REMOVAL_LOCKED_STATUSES:
        return None
    return derive_land_status(doc_types)


def ocean_status_after_change(doc_types: Iterable[str]) -> str:
    # sin guarda: aplica igual para subida y eliminación
    return derive_ocean_status(doc_types)


def available_actions(kind: str, current_status: str) -> list:
    """Acciones manuales que se muestran para el status actual."""
    statuses = LAND_MANUAL_STATUSES if kind == "land" else OCEAN_MANUAL_STATUSES
    actions = []
    for status in statuses:
        required = CONDITIONAL_ACTIONS.get(status)
        if required and current_status != required:
            continue
        actions.append(status)
    return actions


def is_manual_status(kind: str, status: str) -> bool:
    statuses = LAND_MANUAL_STATUSES if kind == "land" else OCEAN_MANUAL_STATUSES
    return status in statuses


def doc_type_label(kind: str, doc_type: str) -> str:
    choices = LAND_DOC_TYPES if kind == "land" else OCEAN_DOC_TYPES
    return dict(choices).get(doc_type, doc_type)


def is_valid_doc_type(kind: str, doc_type: str) -> bool:
    choices = LAND_DOC_TYPES if kind == "land" else OCEAN_DOC_TYPES
    return doc_type in dict(choices)
