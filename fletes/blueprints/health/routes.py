# fletes/blueprints/health/routes.py

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from fletes.extensions import db

health_bp = Blueprint("health", __name__)

@health_bp.route("/")
def health():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        db.session.rollback()
        database = "unavailable"

    status = "healthy" if database == "ok" else "degraded"
    return jsonify({"status": status, "database": database}), (200 if database == "ok" else 503)
