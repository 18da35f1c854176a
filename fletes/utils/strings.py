# fletes/utils/strings.py

from typing import Optional


def clean_optional(value) -> Optional[str]:
    """Trim; vacío -> None."""
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def clean_email(value) -> Optional[str]:
    s = clean_optional(value)
    return s.lower() if s else None


def file_extension(file_name: str, default: str = "pdf") -> str:
    """'factura.final.PDF' -> 'PDF'; sin punto -> default."""
    name = (file_name or "").strip()
    if "." not in name:
        return default
    ext = name.rsplit(".", 1)[-1]
    return ext or default


def like_pattern(text: str, escape: str = "\\") -> str:
    """'LF_1' -> '%LF\\_1%': comodines de LIKE se buscan literal."""
    for ch in (escape, "%", "_"):
        text = text.replace(ch, escape + ch)
    return f"%{text}%"
