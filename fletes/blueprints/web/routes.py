# fletes/blueprints/web/routes.py

import os

from flask import (
    Blueprint, render_template, request, redirect, url_for,
    flash, send_file, send_from_directory, current_app, abort
)
from sqlalchemy.exc import SQLAlchemyError

from fletes.blueprints.web.forms import (
    CarrierForm, ClienteForm, DocumentUploadForm, LandFreightForm,
    OceanFreightForm, ProveedorForm, UserForm,
)
from fletes.exporters.excel_export import export_freight_to_excel
from fletes.services import catalogs, kpis, land_freight, ocean_freight, users
from fletes.services.access import capability_required, current_profile, route_required
from fletes.services.errors import NotFound, StorageError, ValidationError
from fletes.services.mailer import MailError
from fletes.services.workflow import available_actions
from fletes.utils.logging import get_logger

logger = get_logger("web")

web_bp = Blueprint("web", __name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _db_error(e: SQLAlchemyError, message: str) -> None:
    # se muestra el mensaje del backend tal cual
    logger.error(f"{message}: {e}")
    detail = getattr(e, "orig", None) or e
    flash(f"{message}: {detail}", "error")


def _cliente_choices(placeholder="Selecciona un cliente"):
    return [(0, placeholder)] + [(c.id, c.name) for c in catalogs.list_clientes()]


def _carrier_choices(placeholder="Sin carrier"):
    return [(0, placeholder)] + [(c.id, c.name) for c in catalogs.list_carriers()]


def _proveedor_choices(cliente_id):
    return [(0, "Selecciona un proveedor")] + [(p.id, p.name) for p in catalogs.list_proveedores(cliente_id)]


def _load(getter, record_id):
    try:
        return getter(record_id, current_profile())
    except NotFound:
        abort(404)


# ----------------------------
# Dashboard
# ----------------------------
@web_bp.route("/")
@route_required("/")
def dashboard():
    data = kpis.dashboard_data(current_profile())
    return render_template("dashboard.html", **data)


# ----------------------------
# Archivos públicos (URL que viaja en los correos)
# ----------------------------
@web_bp.route("/files/<path:path>")
def files(path: str):
    folder = os.path.abspath(current_app.config.get("UPLOAD_FOLDER", "uploads"))
    return send_from_directory(folder, path)


# ----------------------------
# Ocean Freight
# ----------------------------
@web_bp.route("/ocean")
@route_required("/ocean")
def ocean_list():
    q = request.args.get("q", "")
    records = ocean_freight.list_ocean_freight(current_profile(), search=q)
    return render_template("ocean/list.html", records=records, q=q)


@web_bp.route("/ocean/export")
@route_required("/ocean")
def ocean_export():
    records = ocean_freight.list_ocean_freight(current_profile(), search=request.args.get("q"))
    buf = export_freight_to_excel("ocean", records)
    return send_file(buf, as_attachment=True, download_name="ocean_freight.xlsx", mimetype=XLSX_MIMETYPE)


@web_bp.route("/ocean/new", methods=["GET", "POST"])
@route_required("/ocean")
@capability_required("create_freight")
def ocean_new():
    form = OceanFreightForm()
    cliente_id = request.values.get("cliente_id", type=int) or 0

    form.cliente_id.choices = _cliente_choices()
    form.proveedor_id.choices = _proveedor_choices(cliente_id)
    proveedor_form = ProveedorForm(formdata=None)

    if request.method == "POST":
        if not form.validate_on_submit():
            flash("Formulario inválido. Selecciona cliente y proveedor.", "error")
            return render_template("ocean/form.html", form=form, proveedor_form=proveedor_form, cliente_id=cliente_id), 400

        try:
            freight = ocean_freight.create_ocean_freight(form.data)
        except ValidationError as e:
            flash(str(e), "error")
            return render_template("ocean/form.html", form=form, proveedor_form=proveedor_form, cliente_id=cliente_id), 400
        except SQLAlchemyError as e:
            _db_error(e, "Error al crear el flete")
            return render_template("ocean/form.html", form=form, proveedor_form=proveedor_form, cliente_id=cliente_id), 500

        flash(f"Flete {freight.folio} creado.", "success")
        return redirect(url_for("web.ocean_detail", freight_id=freight.id))

    if cliente_id:
        form.cliente_id.data = cliente_id
    return render_template("ocean/form.html", form=form, proveedor_form=proveedor_form, cliente_id=cliente_id)


@web_bp.route("/ocean/proveedores", methods=["POST"])
@route_required("/ocean")
@capability_required("create_freight")
def ocean_proveedor_create():
    """Alta inline de proveedor desde el formulario de ocean; regresa con el cliente seleccionado."""
    cliente_id = request.form.get("cliente_id", type=int) or 0
    form = ProveedorForm()

    if not form.validate_on_submit():
        flash("El nombre del proveedor es requerido.", "error")
        return redirect(url_for("web.ocean_new", cliente_id=cliente_id or None))

    try:
        proveedor = catalogs.create_proveedor(cliente_id, form.data)
        flash(f"Proveedor {proveedor.name} agregado.", "success")
    except ValidationError as e:
        flash(str(e), "error")
    except SQLAlchemyError as e:
        _db_error(e, "Error al crear el proveedor")

    return redirect(url_for("web.ocean_new", cliente_id=cliente_id or None))


@web_bp.route("/ocean/<int:freight_id>")
@route_required("/ocean")
def ocean_detail(freight_id: int):
    freight = _load(ocean_freight.get_ocean_freight, freight_id)
    return render_template(
        "ocean/detail.html",
        freight=freight,
        upload_form=DocumentUploadForm.for_kind("ocean", formdata=None),
        actions=available_actions("ocean", freight.status),
    )


@web_bp.route("/ocean/<int:freight_id>/documents", methods=["POST"])
@route_required("/ocean")
@capability_required("upload_docs")
def ocean_upload(freight_id: int):
    freight = _load(ocean_freight.get_ocean_freight, freight_id)
    form = DocumentUploadForm.for_kind("ocean")

    if not form.validate_on_submit():
        flash("Selecciona tipo de documento y archivo válido.", "error")
        return redirect(url_for("web.ocean_detail", freight_id=freight_id))

    try:
        ocean_freight.upload_ocean_document(freight, form.doc_type.data, form.file.data)
        flash("Documento subido.", "success")
    except (ValidationError, StorageError) as e:
        flash(str(e), "error")
    except SQLAlchemyError as e:
        _db_error(e, "Error al guardar el documento")

    return redirect(url_for("web.ocean_detail", freight_id=freight_id))


@web_bp.route("/ocean/<int:freight_id>/documents/<int:document_id>/delete", methods=["POST"])
@route_required("/ocean")
@capability_required("upload_docs")
def ocean_remove_document(freight_id: int, document_id: int):
    freight = _load(ocean_freight.get_ocean_freight, freight_id)
    try:
        ocean_freight.remove_ocean_document(freight, document_id)
        flash("Documento eliminado.", "success")
    except NotFound as e:
        flash(str(e), "error")
    except SQLAlchemyError as e:
        _db_error(e, "Error al eliminar el documento")
    return redirect(url_for("web.ocean_detail", freight_id=freight_id))


@web_bp.route("/ocean/<int:freight_id>/status", methods=["POST"])
@route_required("/ocean")
@capability_required("edit_freight")
def ocean_status(freight_id: int):
    freight = _load(ocean_freight.get_ocean_freight, freight_id)
    try:
        ocean_freight.set_ocean_status(freight, request.form.get("status", ""))
        flash("Status actualizado.", "success")
    except ValidationError as e:
        flash(str(e), "error")
    except SQLAlchemyError as e:
        _db_error(e, "Error al actualizar el status")
    return redirect(url_for("web.ocean_detail", freight_id=freight_id))


@web_bp.route("/ocean/<int:freight_id>/tramite", methods=["POST"])
@route_required("/ocean")
@capability_required("edit_freight")
def ocean_tramite(freight_id: int):
    freight = _load(ocean_freight.get_ocean_freight, freight_id)
    try:
        result = ocean_freight.send_to_tramite(freight)
        flash(f"Enviado a trámite con {result['attachments']} adjunto(s).", "success")
    except (ValidationError, StorageError) as e:
        flash(str(e), "error")
    except MailError as e:
        flash(f"Error al enviar a trámite: {e}", "error")
    except SQLAlchemyError as e:
        _db_error(e, "Correo enviado, pero no se pudo actualizar el status")
    return redirect(url_for("web.ocean_detail", freight_id=freight_id))


@web_bp.route("/ocean/<int:freight_id>/delete", methods=["POST"])
@route_required("/ocean")
@capability_required("delete_freight")
def ocean_delete(freight_id: int):
    freight = _load(ocean_freight.get_ocean_freight, freight_id)
    try:
        ocean_freight.delete_ocean_freight(freight)
    except SQLAlchemyError as e:
        _db_error(e, "Error al eliminar el flete")
        return redirect(url_for("web.ocean_detail", freight_id=freight_id))
    flash("Flete eliminado.", "success")
    return redirect(url_for("web.ocean_list"))


# ----------------------------
# Land Freight
# ----------------------------
@web_bp.route("/land")
@route_required("/land")
def land_list():
    q = request.args.get("q", "")
    records = land_freight.list_land_freight(current_profile(), search=q)
    return render_template("land/list.html", records=records, q=q)


@web_bp.route("/land/export")
@route_required("/land")
def land_export():
    records = land_freight.list_land_freight(current_profile(), search=request.args.get("q"))
    buf = export_freight_to_excel("land", records)
    return send_file(buf, as_attachment=True, download_name="land_freight.xlsx", mimetype=XLSX_MIMETYPE)


def _land_form(**kwargs) -> LandFreightForm:
    form = LandFreightForm(**kwargs)
    form.cliente_id.choices = _cliente_choices()
    form.carrier_id.choices = _carrier_choices()
    return form


@web_bp.route("/land/new", methods=["GET", "POST"])
@route_required("/land")
@capability_required("create_freight")
def land_new():
    form = _land_form()

    if request.method == "POST":
        if not form.validate_on_submit():
            flash("Formulario inválido. Cliente, fecha y hora son requeridos.", "error")
            return render_template("land/form.html", form=form, freight=None), 400

        try:
            freight = land_freight.create_land_freight(form.data)
        except ValidationError as e:
            flash(str(e), "error")
            return render_template("land/form.html", form=form, freight=None), 400
        except SQLAlchemyError as e:
            _db_error(e, "Error al crear el flete")
            return render_template("land/form.html", form=form, freight=None), 500

        flash(f"Flete {freight.folio} creado.", "success")
        return redirect(url_for("web.land_detail", freight_id=freight.id))

    return render_template("land/form.html", form=form, freight=None)


@web_bp.route("/land/<int:freight_id>")
@route_required("/land")
def land_detail(freight_id: int):
    freight = _load(land_freight.get_land_freight, freight_id)
    return render_template(
        "land/detail.html",
        freight=freight,
        upload_form=DocumentUploadForm.for_kind("land", formdata=None),
        actions=available_actions("land", freight.status),
    )


@web_bp.route("/land/<int:freight_id>/edit", methods=["GET", "POST"])
@route_required("/land")
@capability_required("edit_freight")
def land_edit(freight_id: int):
    freight = _load(land_freight.get_land_freight, freight_id)

    if request.method == "GET":
        form = _land_form(obj=freight)
        form.carrier_id.data = freight.carrier_id or 0
        return render_template("land/form.html", form=form, freight=freight)

    form = _land_form()
    if not form.validate_on_submit():
        flash("Formulario inválido. Cliente, fecha y hora son requeridos.", "error")
        return render_template("land/form.html", form=form, freight=freight), 400

    try:
        land_freight.update_land_freight(freight, form.data)
    except ValidationError as e:
        flash(str(e), "error")
        return render_template("land/form.html", form=form, freight=freight), 400
    except SQLAlchemyError as e:
        _db_error(e, "Error al actualizar el flete")
        return render_template("land/form.html", form=form, freight=freight), 500

    flash("Flete actualizado.", "success")
    return redirect(url_for("web.land_detail", freight_id=freight_id))


@web_bp.route("/land/<int:freight_id>/documents", methods=["POST"])
@route_required("/land")
@capability_required("upload_docs")
def land_upload(freight_id: int):
    freight = _load(land_freight.get_land_freight, freight_id)
    form = DocumentUploadForm.for_kind("land")

    if not form.validate_on_submit():
        flash("Selecciona tipo de documento y archivo válido.", "error")
        return redirect(url_for("web.land_detail", freight_id=freight_id))

    try:
        land_freight.upload_land_document(freight, form.doc_type.data, form.file.data)
        flash("Documento subido.", "success")
    except (ValidationError, StorageError) as e:
        flash(str(e), "error")
    except SQLAlchemyError as e:
        _db_error(e, "Error al guardar el documento")

    return redirect(url_for("web.land_detail", freight_id=freight_id))


@web_bp.route("/land/<int:freight_id>/documents/<int:document_id>/delete", methods=["POST"])
@route_required("/land")
@capability_required("upload_docs")
def land_remove_document(freight_id: int, document_id: int):
    freight = _load(land_freight.get_land_freight, freight_id)
    try:
        land_freight.remove_land_document(freight, document_id)
        flash("Documento eliminado.", "success")
    except NotFound as e:
        flash(str(e), "error")
    except SQLAlchemyError as e:
        _db_error(e, "Error al eliminar el documento")
    return redirect(url_for("web.land_detail", freight_id=freight_id))


@web_bp.route("/land/<int:freight_id>/status", methods=["POST"])
@route_required("/land")
@capability_required("edit_freight")
def land_status(freight_id: int):
    freight = _load(land_freight.get_land_freight, freight_id)
    try:
        land_freight.set_land_status(freight, request.form.get("status", ""))
        flash("Status actualizado.", "success")
    except ValidationError as e:
        flash(str(e), "error")
    except SQLAlchemyError as e:
        _db_error(e, "Error al actualizar el status")
    return redirect(url_for("web.land_detail", freight_id=freight_id))


@web_bp.route("/land/<int:freight_id>/delete", methods=["POST"])
@route_required("/land")
@capability_required("delete_freight")
def land_delete(freight_id: int):
    freight = _load(land_freight.get_land_freight, freight_id)
    try:
        land_freight.delete_land_freight(freight)
    except SQLAlchemyError as e:
        _db_error(e, "Error al eliminar el flete")
        return redirect(url_for("web.land_detail", freight_id=freight_id))
    flash("Flete eliminado.", "success")
    return redirect(url_for("web.land_list"))


# ----------------------------
# Clientes
# ----------------------------
@web_bp.route("/clientes", methods=["GET", "POST"])
@route_required("/clientes")
def clientes():
    form = ClienteForm()
    q = request.args.get("q", "")

    if request.method == "POST":
        if form.validate_on_submit():
            try:
                cliente = catalogs.create_cliente(form.data)
                flash(f"Cliente {cliente.name} creado.", "success")
                return redirect(url_for("web.clientes"))
            except ValidationError as e:
                flash(str(e), "error")
            except SQLAlchemyError as e:
                _db_error(e, "Error al crear el cliente")
        else:
            flash("Nombre y email son requeridos.", "error")

    return render_template("catalogs/clientes.html", form=form, clientes=catalogs.list_clientes(q), q=q)


@web_bp.route("/clientes/<int:cliente_id>/edit", methods=["GET", "POST"])
@route_required("/clientes")
def cliente_edit(cliente_id: int):
    try:
        cliente = catalogs.get_cliente(cliente_id)
    except NotFound:
        abort(404)

    form = ClienteForm(obj=cliente)
    if form.validate_on_submit():
        try:
            catalogs.update_cliente(cliente, form.data)
            flash("Cliente actualizado.", "success")
            return redirect(url_for("web.clientes"))
        except ValidationError as e:
            flash(str(e), "error")
        except SQLAlchemyError as e:
            _db_error(e, "Error al actualizar el cliente")

    return render_template("catalogs/edit.html", form=form, title="Editar cliente", back=url_for("web.clientes"))


@web_bp.route("/clientes/<int:cliente_id>/delete", methods=["POST"])
@route_required("/clientes")
def cliente_delete(cliente_id: int):
    try:
        catalogs.delete_cliente(catalogs.get_cliente(cliente_id))
        flash("Cliente eliminado.", "success")
    except NotFound:
        abort(404)
    except SQLAlchemyError as e:
        _db_error(e, "Error al eliminar el cliente")
    return redirect(url_for("web.clientes"))


# ----------------------------
# Carriers
# ----------------------------
@web_bp.route("/carriers", methods=["GET", "POST"])
@route_required("/carriers")
def carriers():
    form = CarrierForm()
    q = request.args.get("q", "")

    if request.method == "POST":
        if form.validate_on_submit():
            try:
                carrier = catalogs.create_carrier(form.data)
                flash(f"Carrier {carrier.name} creado.", "success")
                return redirect(url_for("web.carriers"))
            except ValidationError as e:
                flash(str(e), "error")
            except SQLAlchemyError as e:
                _db_error(e, "Error al crear el carrier")
        else:
            flash("El nombre es requerido.", "error")

    return render_template("catalogs/carriers.html", form=form, carriers=catalogs.list_carriers(q), q=q)


@web_bp.route("/carriers/<int:carrier_id>/edit", methods=["GET", "POST"])
@route_required("/carriers")
def carrier_edit(carrier_id: int):
    try:
        carrier = catalogs.get_carrier(carrier_id)
    except NotFound:
        abort(404)

    form = CarrierForm(obj=carrier)
    if form.validate_on_submit():
        try:
            catalogs.update_carrier(carrier, form.data)
            flash("Carrier actualizado.", "success")
            return redirect(url_for("web.carriers"))
        except ValidationError as e:
            flash(str(e), "error")
        except SQLAlchemyError as e:
            _db_error(e, "Error al actualizar el carrier")

    return render_template("catalogs/edit.html", form=form, title="Editar carrier", back=url_for("web.carriers"))


@web_bp.route("/carriers/<int:carrier_id>/delete", methods=["POST"])
@route_required("/carriers")
def carrier_delete(carrier_id: int):
    try:
        catalogs.delete_carrier(catalogs.get_carrier(carrier_id))
        flash("Carrier eliminado.", "success")
    except NotFound:
        abort(404)
    except SQLAlchemyError as e:
        _db_error(e, "Error al eliminar el carrier")
    return redirect(url_for("web.carriers"))


# ----------------------------
# Usuarios (admin)
# ----------------------------
def _user_form(**kwargs) -> UserForm:
    form = UserForm(**kwargs)
    form.cliente_id.choices = _cliente_choices("Sin cliente")
    form.carrier_id.choices = _carrier_choices("Sin transportista")
    return form


@web_bp.route("/admin", methods=["GET", "POST"])
@route_required("/admin")
def admin_users():
    form = _user_form()

    if request.method == "POST":
        if form.validate_on_submit():
            try:
                profile = users.provision_user(form.data)
                flash(f"Usuario {profile.email} creado.", "success")
                return redirect(url_for("web.admin_users"))
            except ValidationError as e:
                flash(str(e), "error")
            except SQLAlchemyError as e:
                _db_error(e, "Error al crear usuario")
        else:
            flash("Faltan campos requeridos.", "error")

    return render_template("admin/users.html", form=form, profiles=users.list_profiles())


@web_bp.route("/admin/users/<int:user_id>/delete", methods=["POST"])
@route_required("/admin")
def admin_user_delete(user_id: int):
    try:
        users.delete_user(user_id, current_profile())
        flash("Usuario eliminado.", "success")
    except (ValidationError, NotFound) as e:
        flash(str(e), "error")
    except SQLAlchemyError as e:
        _db_error(e, "Error al eliminar usuario")
    return redirect(url_for("web.admin_users"))
