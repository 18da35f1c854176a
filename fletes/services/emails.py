# fletes/services/emails.py

"""Asunto + HTML de cada familia de correo. Los payloads usan las llaves camelCase del API."""

from typing import List, Tuple

from flask import render_template
from markupsafe import Markup

from fletes.services.errors import ValidationError

LAND_STATUS_LABELS = {
    "dispatched": "Dispatched",
    "green_light": "Green Light",
    "red_light": "Red Light",
    "liberado_rojo": "Liberado de Rojo",
    "delivered": "Entregado",
}

LAND_STATUS_DESCRIPTIONS = {
    "dispatched": "El flete ha sido despachado.",
    "green_light": "El flete ha recibido luz verde.",
    "red_light": "El flete ha recibido luz roja (reconocimiento).",
    "liberado_rojo": "El flete ha sido liberado del reconocimiento.",
    "delivered": "El flete ha sido entregado exitosamente.",
}

OCEAN_STATUS_LABELS = {
    "enviado_tramite": "Enviado a Trámite",
    "desaduanamiento_libre": "Desaduanamiento Libre",
    "reconocimiento_aduanero": "Reconocimiento Aduanero",
    "liberado_reconocimiento": "Liberado del Reconocimiento Aduanero",
    "entregado": "Entregado",
}

OCEAN_STATUS_DESCRIPTIONS = {
    "enviado_tramite": "Los documentos han sido enviados a trámite de importación.",
    "desaduanamiento_libre": "El contenedor ha sido liberado de aduanas sin reconocimiento.",
    "reconocimiento_aduanero": "El contenedor ha sido seleccionado para reconocimiento aduanero.",
    "liberado_reconocimiento": "El contenedor ha sido liberado después del reconocimiento aduanero.",
    "entregado": "El embarque ha sido entregado exitosamente.",
}


def _require(payload: dict, *keys: str) -> None:
    missing = [k for k in keys if not payload.get(k)]
    if missing:
        raise ValidationError("Missing required fields")


def render_document_email(payload: dict) -> Tuple[str, str]:
    _require(payload, "clientName", "docType")

    subject = f"Documento subido: {payload['docType']} - {payload.get('vendorName') or ''}"
    html = render_template(
        "emails/document.html",
        fields=[
            ("Cliente", payload.get("clientName")),
            ("Proveedor", payload.get("vendorName")),
            ("Tipo de Documento", payload.get("docType")),
            ("Archivo", payload.get("docName")),
        ],
    )
    return subject, html


def render_land_email(payload: dict) -> Tuple[str, str]:
    folio_tag = payload.get("folio") or "S/F"
    client_name = payload.get("clientName") or ""

    freight_date = payload.get("freightDate") or "—"
    freight_time = payload.get("freightTime") or ""
    shipment_fields = [
        ("Folio", payload.get("folio")),
        ("Cliente", client_name),
        ("Carrier", payload.get("carrierName")),
        ("Origen", payload.get("origin")),
        ("Destino", payload.get("destination")),
        ("Fecha", f"{freight_date} {freight_time}".strip()),
        ("Factura de Importación", payload.get("importInvoice")),
        ("Descripción", payload.get("description")),
    ]

    kind = payload.get("type")
    if kind == "status":
        status = payload.get("status") or ""
        heading = LAND_STATUS_LABELS.get(status, status)
        subject = f"[{folio_tag}] {heading} - {client_name}"
        html = render_template(
            "emails/land.html",
            heading=heading,
            intro=LAND_STATUS_DESCRIPTIONS.get(status, ""),
            fields=shipment_fields,
            file_url=None,
        )
        return subject, html

    if kind == "document":
        doc_type = payload.get("docType") or ""
        subject = f"[{folio_tag}] {doc_type} Subido - {client_name}"
        html = render_template(
            "emails/land.html",
            heading="Nuevo Documento Subido",
            intro=Markup("Se ha subido el documento <strong>{}</strong> para el flete.").format(doc_type),
            fields=[("Documento", doc_type), ("Archivo", payload.get("docName"))] + shipment_fields,
            file_url=payload.get("fileUrl"),
        )
        return subject, html

    raise ValidationError("Invalid notification type")


def render_status_email(payload: dict) -> Tuple[str, str]:
    _require(payload, "status", "clientName")

    status = payload["status"]
    heading = OCEAN_STATUS_LABELS.get(status, status)
    subject = f"{heading} - Contenedor {payload.get('containerNumber') or 'S/N'} - {payload['clientName']}"
    html = render_template(
        "emails/status.html",
        heading=heading,
        intro=OCEAN_STATUS_DESCRIPTIONS.get(status, ""),
        fields=[
            ("Cliente", payload.get("clientName")),
            ("Proveedor", payload.get("vendorName")),
            ("Vessel", payload.get("vesselNumber")),
            ("Contenedor", payload.get("containerNumber")),
            ("BL", payload.get("blNumber")),
            ("Factura", payload.get("invoiceNumber")),
        ],
    )
    return subject, html


def render_tramite_email(payload: dict, attachment_names: List[str]) -> Tuple[str, str]:
    _require(payload, "clientName")

    container = payload.get("containerNumber") or "S/N"
    invoice = payload.get("invoiceNumber") or "S/N"
    subject = f"Trámite de Importación - Contenedor {container} - Factura {invoice} - {payload['clientName']}"
    html = render_template(
        "emails/tramite.html",
        container_number=payload.get("containerNumber"),
        invoice_number=payload.get("invoiceNumber"),
        client_name=payload["clientName"],
        fields=[
            ("Vessel", payload.get("vesselNumber")),
            ("Contenedor", payload.get("containerNumber")),
            ("BL", payload.get("blNumber")),
        ],
        attachment_names=attachment_names,
    )
    return subject, html


RENDERERS = {
    "document": render_document_email,
    "land": render_land_email,
    "status": render_status_email,
}


def render_email(kind: str, payload: dict) -> Tuple[str, str]:
    renderer = RENDERERS.get(kind)
    if renderer is None:
        raise ValidationError(f"Tipo de notificación desconocido: {kind}")
    return renderer(payload)
