# fletes/services/mailer.py

import base64
from typing import List, Optional

import requests
from flask import current_app

from fletes.utils.logging import get_logger

logger = get_logger("mailer")


class MailError(RuntimeError):
    pass


class EmailSender:
    """Envía correos HTML por el proveedor transaccional (Resend) o a consola."""

    def __init__(self, backend="resend", api_key="", api_url="", sender="", timeout=15.0):
        self.backend = backend
        self.api_key = api_key
        self.api_url = api_url
        self.sender = sender
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "EmailSender":
        return cls(
            backend=config.get("MAIL_BACKEND", "resend"),
            api_key=config.get("RESEND_API_KEY", ""),
            api_url=config.get("RESEND_API_URL", "https://api.resend.com/emails"),
            sender=config.get("MAIL_FROM", ""),
            timeout=float(config.get("MAIL_TIMEOUT_SECONDS", 15)),
        )

    def send(self, to: str, subject: str, html: str, attachments: Optional[List[dict]] = None) -> None:
        """
        attachments: [{"filename": str, "content": bytes}]
        Lanza MailError si el proveedor rechaza o no responde.
        """
        attachments = attachments or []

        if self.backend == "console":
            logger.info(f"[console] to={to} subject={subject!r} attachments={len(attachments)}")
            return

        if not self.api_key:
            raise MailError("RESEND_API_KEY no configurada")

        body = {
            "from": self.sender,
            "to": [to] if isinstance(to, str) else list(to),
            "subject": subject,
            "html": html,
        }
        if attachments:
            body["attachments"] = [
                {
                    "filename": a["filename"],
                    "content": base64.b64encode(a["content"]).decode("ascii"),
                }
                for a in attachments
            ]

        try:
            resp = requests.post(
                self.api_url,
                json=body,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Resend error: {e}")
            raise MailError(str(e)) from e

        if resp.status_code >= 400:
            try:
                message = resp.json().get("message") or resp.text
            except ValueError:
                message = resp.text
            logger.error(f"Resend error status={resp.status_code}: {message}")
            raise MailError(message or f"HTTP {resp.status_code}")

        logger.info(f"Email sent to={to} subject={subject!r}")


def get_sender() -> EmailSender:
    return EmailSender.from_config(current_app.config)


def download_attachment(url: str, timeout: float = 20.0) -> Optional[bytes]:
    """Descarga un archivo por URL; None si falla (se omite del correo)."""
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.warning(f"Attachment download failed url={url}: {e}")
        return None
    if not resp.ok:
        logger.warning(f"Attachment download failed url={url} status={resp.status_code}")
        return None
    return resp.content
