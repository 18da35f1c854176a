# fletes/blueprints/auth/routes.py

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import login_required, login_user, logout_user

from fletes.blueprints.web.forms import LoginForm
from fletes.services.users import authenticate
from fletes.utils.logging import get_logger

logger = get_logger("auth")

auth_bp = Blueprint("auth", __name__)


def _safe_next(target):
    # solo rutas internas
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("web.dashboard")


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    form = LoginForm()

    if request.method == "POST":
        if not form.validate_on_submit():
            flash("Ingresa correo y contraseña.", "error")
            return render_template("auth/login.html", form=form), 400

        profile = authenticate(form.email.data, form.password.data)
        if profile is None:
            logger.info(f"Login fallido email={form.email.data}")
            flash("Credenciales inválidas.", "error")
            return render_template("auth/login.html", form=form), 401

        login_user(profile)
        logger.info(f"Login id={profile.id} role={profile.role}")
        return redirect(_safe_next(request.args.get("next")))

    return render_template("auth/login.html", form=form)


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    flash("Sesión cerrada.", "success")
    return redirect(url_for("auth.login"))
