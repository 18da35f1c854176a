# fletes/config.py

import os


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

    # PostgreSQL (Render / local)
    # Render a veces entrega DATABASE_URL como postgres:// (deprecated)
    uri = os.getenv("DATABASE_URL", "postgresql://localhost/coordinacion_fletes")
    if uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)

    # Forzar driver pg8000 (para evitar psycopg2 en Render)
    # Si ya viene con driver, no lo tocamos
    if uri.startswith("postgresql://") and "+pg8000" not in uri:
        uri = uri.replace("postgresql://", "postgresql+pg8000://", 1)

    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Archivos de fletes (bucket local) y URL pública con la que se sirven
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000")

    # Limite upload (25MB)
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(25 * 1024 * 1024)))

    # Correo transaccional
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "resend")  # resend | console
    RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
    RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
    MAIL_FROM = os.getenv("MAIL_FROM", "Core Integrated Solutions <no-reply@core-logistics.com>")
    MAIL_TIMEOUT_SECONDS = float(os.getenv("MAIL_TIMEOUT_SECONDS", "15"))

    # Destinatario del correo de trámite; vacío = correo del cliente
    TRAMITE_EMAIL = os.getenv("TRAMITE_EMAIL", "")

    # Notificaciones: outbox + worker. Eager = se despachan al final del request.
    NOTIFICATIONS_EAGER = _env_flag("NOTIFICATIONS_EAGER")
    WORKER_POLL_SECONDS = int(os.getenv("WORKER_POLL_SECONDS", "3"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    MAIL_BACKEND = "console"
    NOTIFICATIONS_EAGER = False
    PUBLIC_BASE_URL = "http://testserver"
