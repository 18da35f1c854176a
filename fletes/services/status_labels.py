# fletes/services/status_labels.py

# status -> (etiqueta, clase css del badge)
STATUS_CONFIG = {
    # Ocean Freight
    "pending_docs": ("Pending Docs", "badge-amber"),
    "docs_complete": ("Docs Complete", "badge-blue"),
    "cleared": ("Cleared", "badge-emerald"),
    "enviado_tramite": ("Enviado a Trámite", "badge-violet"),
    "desaduanamiento_libre": ("Desaduanamiento Libre", "badge-emerald"),
    "reconocimiento_aduanero": ("Reconocimiento Aduanero", "badge-orange"),
    "liberado_reconocimiento": ("Liberado del Reconocimiento", "badge-emerald"),
    "entregado": ("Entregado", "badge-green"),
    # Land Freight
    "pending_data": ("Pending Data", "badge-amber"),
    "pending_carta_porte_layout": ("Pending Carta Porte Layout", "badge-orange"),
    "pending_carta_porte": ("Pending Carta Porte", "badge-yellow"),
    "ready": ("Ready", "badge-blue"),
    "dispatched": ("Dispatched", "badge-indigo"),
    "green_light": ("Green Light", "badge-emerald"),
    "red_light": ("Red Light", "badge-red"),
    "liberado_rojo": ("Liberado de Rojo", "badge-emerald"),
    "delivered": ("Delivered", "badge-emerald"),
}

DEFAULT_CLASS = "badge-muted"


def status_label(status: str) -> str:
    return STATUS_CONFIG.get(status, (status, DEFAULT_CLASS))[0]


def status_class(status: str) -> str:
    return STATUS_CONFIG.get(status, (status, DEFAULT_CLASS))[1]
