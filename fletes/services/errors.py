# fletes/services/errors.py


class ValidationError(ValueError):
    """Dato faltante o inválido; se muestra al usuario tal cual."""


class StorageError(RuntimeError):
    """No se pudo guardar el archivo en disco."""


class NotFound(LookupError):
    pass
