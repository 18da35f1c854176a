# fletes/services/storage.py

import os
import re
import time

from fletes.services.errors import StorageError, ValidationError
from fletes.utils.logging import get_logger

logger = get_logger("storage")

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def sanitize_filename(name: str) -> str:
    """Todo lo que no sea [A-Za-z0-9._-] pasa a '_'."""
    return _UNSAFE_CHARS.sub("_", name or "")


def sanitize_folder(folder: str) -> str:
    """
    Carpeta destino tipo 'land/12/carta_porte'.
    Cada segmento se sanea igual que un nombre; se descartan '.', '..' y vacíos.
    """
    parts = []
    for part in (folder or "").replace("\\", "/").split("/"):
        part = sanitize_filename(part.strip())
        if part in ("", ".", ".."):
            continue
        parts.append(part)
    return "/".join(parts)


def public_url(base_url: str, stored_path: str) -> str:
    return f"{base_url.rstrip('/')}/files/{stored_path}"


def save_uploaded_file(file_storage, base_upload_folder: str, folder: str, base_url: str) -> dict:
    """
    Guarda archivo subido en: <UPLOAD_FOLDER>/<folder>/<timestamp>_<nombre_saneado>
    Retorna:
      {
        file_name, path, file_url
      }
    """
    if not file_storage or not file_storage.filename:
        raise ValidationError("No file provided")

    original_name = file_storage.filename
    safe_name = sanitize_filename(original_name)
    timestamp = int(time.time() * 1000)

    rel_folder = sanitize_folder(folder)
    rel_path = f"{rel_folder}/{timestamp}_{safe_name}" if rel_folder else f"{timestamp}_{safe_name}"

    abs_path = os.path.join(base_upload_folder, *rel_path.split("/"))
    try:
        ensure_dir(os.path.dirname(abs_path))
        file_storage.save(abs_path)
    except OSError as e:
        logger.error(f"Upload failed path={rel_path}: {e}")
        raise StorageError("Upload failed") from e

    logger.info(f"Saved file path={rel_path} name={original_name}")

    return {
        "file_name": original_name,
        "path": rel_path,
        "file_url": public_url(base_url, rel_path),
    }


def read_stored_file(base_upload_folder: str, stored_path: str) -> bytes | None:
    """Lee un archivo guardado por save_uploaded_file; None si no está en disco."""
    rel_path = sanitize_folder(stored_path)
    if not rel_path:
        return None

    abs_path = os.path.join(base_upload_folder, *rel_path.split("/"))
    try:
        with open(abs_path, "rb") as f:
            return f.read()
    except OSError as e:
        logger.warning(f"Stored file not readable path={rel_path}: {e}")
        return None
