# tests/test_scoping.py

import pytest

from conftest import login
from fletes.extensions import db
from fletes.models import Carrier, LandFreight, OceanFreight
from fletes.services.access import (
    can_access, capabilities_for, require_role, scope_freight_query,
)
from fletes.services.errors import NotFound
from fletes.services.land_freight import create_land_freight, get_land_freight, list_land_freight
from fletes.services.ocean_freight import create_ocean_freight, list_ocean_freight


def test_route_and_capability_tables():
    assert can_access("cliente", "/ocean")
    assert not can_access("transportista", "/ocean")
    assert can_access("transportista", "/land")
    assert not can_access("operador", "/admin")
    assert not can_access(None, "/")

    assert capabilities_for("transportista") == frozenset({"upload_docs"})
    assert "manage_users" in capabilities_for("admin")
    assert capabilities_for("cliente") == frozenset()


def test_require_role_without_session(app):
    with app.test_request_context("/"):
        assert require_role(["admin"]) == (None, "Unauthorized", 401)


def test_cliente_sees_only_own_freight(make_user, land_data, ocean_data, otro_cliente):
    mine = create_land_freight(land_data)
    create_land_freight({**land_data, "cliente_id": otro_cliente.id})
    create_ocean_freight(ocean_data)

    user = make_user("cliente", cliente_id=land_data["cliente_id"])

    assert [f.id for f in list_land_freight(user)] == [mine.id]
    assert len(list_ocean_freight(user)) == 1

    other = LandFreight.query.filter(LandFreight.id != mine.id).one()
    with pytest.raises(NotFound):
        get_land_freight(other.id, user)


def test_transportista_sees_only_own_carrier(make_user, land_data, carrier, ocean_data):
    otro = Carrier(name="Otra Línea", email="otra@example.com")
    db.session.add(otro)
    db.session.commit()

    mine = create_land_freight(land_data)
    create_land_freight({**land_data, "carrier_id": otro.id})
    create_ocean_freight(ocean_data)

    user = make_user("transportista", carrier_id=carrier.id)

    assert [f.id for f in list_land_freight(user)] == [mine.id]
    # ocean no tiene carrier: nada
    assert scope_freight_query(OceanFreight.query, OceanFreight, user).count() == 0


def test_search_filters_by_denormalized_fields(operador, land_data):
    create_land_freight(land_data)
    create_land_freight({**land_data, "origin": "Veracruz", "destination": "Puebla"})

    assert len(list_land_freight(operador, search="veracruz")) == 1
    assert len(list_land_freight(operador, search="transportes")) == 2
    assert len(list_land_freight(operador, search="LF-00001")) == 1
    assert list_land_freight(operador, search="nada-que-ver") == []


def test_web_section_guard_redirects(client, make_user, carrier):
    login(client, make_user("transportista", carrier_id=carrier.id))

    resp = client.get("/ocean")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")

    assert client.get("/land").status_code == 200


def test_anonymous_is_sent_to_login(client, app):
    resp = client.get("/land")
    assert resp.status_code == 302
    assert "/login" in resp.headers["Location"]


def test_search_treats_like_wildcards_literally(operador, land_data):
    create_land_freight(land_data)
    create_land_freight({**land_data, "origin": "Planta_2", "destination": "100% Norte"})

    assert list_land_freight(operador, search="LF_") == []
    assert [f.origin for f in list_land_freight(operador, search="planta_")] == ["Planta_2"]
    assert [f.destination for f in list_land_freight(operador, search="100%")] == ["100% Norte"]
    assert list_land_freight(operador, search="%") == []
