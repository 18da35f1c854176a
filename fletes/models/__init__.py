# fletes/models/__init__.py

from .catalogs import Cliente, Proveedor, Carrier, Location
from .user import AuthUser, UserProfile, ROLES, DEFAULT_ROLE

from .freight import OceanFreight, OceanFreightDocument, LandFreight, LandFreightDocument
from .notification import NotificationTask
