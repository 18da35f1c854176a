# fletes/blueprints/web/forms.py

from flask_wtf import FlaskForm
from wtforms import (
    DateField, EmailField, PasswordField, SelectField, StringField, SubmitField,
    TextAreaField, TimeField,
)
from wtforms.validators import DataRequired, Length, Optional
from flask_wtf.file import FileField, FileRequired, FileAllowed

from fletes.models import DEFAULT_ROLE, ROLES
from fletes.services.workflow import LAND_DOC_TYPES, OCEAN_DOC_TYPES

ALLOWED_DOC_EXTENSIONS = ["pdf", "xml", "xlsx", "xls", "doc", "docx", "jpg", "jpeg", "png"]


class LoginForm(FlaskForm):
    email = EmailField("Correo", validators=[DataRequired()])
    password = PasswordField("Contraseña", validators=[DataRequired()])
    submit = SubmitField("Entrar")


class ClienteForm(FlaskForm):
    name = StringField("Nombre", validators=[DataRequired(), Length(max=200)])
    email = EmailField("Email", validators=[DataRequired(), Length(max=255)])
    submit = SubmitField("Guardar")


class CarrierForm(FlaskForm):
    name = StringField("Nombre", validators=[DataRequired(), Length(max=200)])
    phone = StringField("Teléfono", validators=[Optional(), Length(max=50)])
    email = EmailField("Email", validators=[Optional(), Length(max=255)])
    submit = SubmitField("Guardar")


class ProveedorForm(FlaskForm):
    name = StringField("Proveedor", validators=[DataRequired(), Length(max=200)])
    tax_id = StringField("Tax ID / RFC", validators=[Optional(), Length(max=50)])
    submit = SubmitField("Agregar proveedor")


class OceanFreightForm(FlaskForm):
    # choices se cargan en la vista
    cliente_id = SelectField("Cliente", coerce=int, validators=[DataRequired()])
    proveedor_id = SelectField("Proveedor", coerce=int, validators=[DataRequired()])

    container_number = StringField("Contenedor", validators=[Optional(), Length(max=30)])
    vessel_number = StringField("Vessel", validators=[Optional(), Length(max=50)])
    invoice_number = StringField("Factura", validators=[Optional(), Length(max=50)])
    pedimento_number = StringField("Pedimento", validators=[Optional(), Length(max=50)])
    bl_number = StringField("BL", validators=[Optional(), Length(max=50)])
    description = TextAreaField("Descripción", validators=[Optional()])
    notes = TextAreaField("Notas", validators=[Optional()])

    submit = SubmitField("Crear flete")


class LandFreightForm(FlaskForm):
    cliente_id = SelectField("Cliente", coerce=int, validators=[DataRequired()])
    carrier_id = SelectField("Carrier", coerce=int, default=0)  # 0 = sin carrier

    freight_date = DateField("Fecha", validators=[DataRequired()])
    freight_time = TimeField("Hora", validators=[DataRequired()])
    origin = StringField("Origen", validators=[Optional(), Length(max=200)])
    destination = StringField("Destino", validators=[Optional(), Length(max=200)])
    import_invoice = StringField("Factura de Importación", validators=[Optional(), Length(max=50)])
    description = TextAreaField("Descripción", validators=[Optional()])
    notes = TextAreaField("Notas", validators=[Optional()])

    submit = SubmitField("Guardar")


class DocumentUploadForm(FlaskForm):
    doc_type = SelectField("Tipo de documento")
    file = FileField(
        "Archivo",
        validators=[
            FileRequired(),
            FileAllowed(ALLOWED_DOC_EXTENSIONS, "Tipo de archivo no permitido"),
        ],
    )
    submit = SubmitField("Subir")

    @classmethod
    def for_kind(cls, kind: str, **kwargs) -> "DocumentUploadForm":
        form = cls(**kwargs)
        form.doc_type.choices = list(LAND_DOC_TYPES if kind == "land" else OCEAN_DOC_TYPES)
        return form


class UserForm(FlaskForm):
    full_name = StringField("Nombre completo", validators=[DataRequired(), Length(max=200)])
    email = EmailField("Correo", validators=[DataRequired(), Length(max=255)])
    password = PasswordField("Contraseña", validators=[DataRequired(), Length(min=6)])
    role = SelectField("Rol", choices=[(r, r.capitalize()) for r in ROLES], default=DEFAULT_ROLE)
    # 0 = sin asociación; requerido según rol (se valida en el servicio)
    cliente_id = SelectField("Cliente", coerce=int, default=0)
    carrier_id = SelectField("Transportista", coerce=int, default=0)
    submit = SubmitField("Crear usuario")
