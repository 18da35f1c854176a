# fletes/exporters/excel_export.py

from io import BytesIO

import pandas as pd

from fletes.services.status_labels import status_label
from fletes.services.workflow import doc_type_label


def _fmt_date(value) -> str:
    return value.isoformat() if value else ""


def _doc_summary(kind: str, documents) -> str:
    return ", ".join(sorted({doc_type_label(kind, d.doc_type) for d in documents}))


def ocean_dataframe(records) -> pd.DataFrame:
    return pd.DataFrame([{
        "Folio": r.folio or "",
        "Cliente": r.client_name or "",
        "Proveedor": r.vendor_name or "",
        "RFC Proveedor": r.vendor_tax_id or "",
        "Contenedor": r.container_number or "",
        "Buque": r.vessel_number or "",
        "Factura": r.invoice_number or "",
        "Pedimento": r.pedimento_number or "",
        "BL": r.bl_number or "",
        "Status": status_label(r.status),
        "Documentos": _doc_summary("ocean", r.documents),
        "Creado": r.created_at.strftime("%Y-%m-%d %H:%M") if r.created_at else "",
    } for r in records], columns=[
        "Folio", "Cliente", "Proveedor", "RFC Proveedor", "Contenedor", "Buque",
        "Factura", "Pedimento", "BL", "Status", "Documentos", "Creado",
    ])


def land_dataframe(records) -> pd.DataFrame:
    return pd.DataFrame([{
        "Folio": r.folio or "",
        "Cliente": r.client_name or "",
        "Transportista": r.carrier_name or "",
        "Fecha": _fmt_date(r.freight_date),
        "Hora": r.freight_time.strftime("%H:%M") if r.freight_time else "",
        "Origen": r.origin or "",
        "Destino": r.destination or "",
        "Factura Importación": r.import_invoice or "",
        "Status": status_label(r.status),
        "Documentos": _doc_summary("land", r.documents),
    } for r in records], columns=[
        "Folio", "Cliente", "Transportista", "Fecha", "Hora", "Origen", "Destino",
        "Factura Importación", "Status", "Documentos",
    ])


def export_freight_to_excel(kind: str, records) -> BytesIO:
    """
    Genera el .xlsx en memoria con una hoja:
      Ocean_Freight  o  Land_Freight
    """
    if kind == "ocean":
        df, sheet = ocean_dataframe(records), "Ocean_Freight"
    else:
        df, sheet = land_dataframe(records), "Land_Freight"

    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet, index=False)
    buf.seek(0)
    return buf
