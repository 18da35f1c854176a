# fletes/__init__.py

from flask import Flask

from .config import Config
from .extensions import csrf, db, login_manager, migrate
from .utils.logging import configure_logging


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app.config.get("LOG_LEVEL"))

    # Inicializar extensiones
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    login_manager.init_app(app)

    from .models import UserProfile

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(UserProfile, int(user_id))

    # Registrar blueprints
    from .blueprints.web.routes import web_bp
    from .blueprints.api.routes import api_bp
    from .blueprints.auth.routes import auth_bp
    from .blueprints.health.routes import health_bp

    app.register_blueprint(web_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(health_bp, url_prefix="/health")

    # La API recibe JSON / multipart desde fetch, sin token CSRF
    csrf.exempt(api_bp)

    _register_template_helpers(app)

    return app


def _register_template_helpers(app):
    from .services.access import ROUTE_ACCESS, can_access, current_profile, request_capabilities
    from .services.status_labels import status_class, status_label
    from .services.workflow import doc_type_label

    app.jinja_env.filters["status_label"] = status_label
    app.jinja_env.filters["status_class"] = status_class

    @app.context_processor
    def inject_access():
        profile = current_profile()
        role = profile.role if profile else None
        return {
            "profile": profile,
            "capabilities": request_capabilities(),
            "nav_routes": [route for route in ROUTE_ACCESS if can_access(role, route)],
            "doc_type_label": doc_type_label,
        }
