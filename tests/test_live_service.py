# -*- coding: utf-8 -*-
"""Tests for live sessions, order capture and TPOS order linking."""

import uuid
from datetime import date

import pytest
from fastapi import HTTPException

from app.repositories.live_repo import LiveRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.live import LiveOrderCreate, LiveProductCreate, LiveSessionCreate
from app.services.live_service import LiveService


@pytest.fixture
def service():
    return LiveService(LiveRepository(), ProductRepository())


@pytest.fixture
def live_session(service, session):
    return service.create_session(
        session,
        LiveSessionCreate(session_name="Live tối thứ 6", session_date=date(2026, 10, 16)),
    )


class TestSessions:
    def test_create_and_get(self, service, session, live_session):
        assert live_session.status == "active"
        assert service.get_session(session, live_session.id).session_name == "Live tối thứ 6"
        assert [s.id for s in service.list_sessions(session)] == [live_session.id]

    def test_missing_session(self, service, session):
        with pytest.raises(HTTPException) as exc:
            service.get_session(session, uuid.uuid4())
        assert exc.value.status_code == 404


class TestLiveProducts:
    def test_defaults_from_catalog(self, service, session, live_session, make_product):
        make_product("M800MC", "Áo Thun size M Cam", variant="M, Cam")

        live_product = service.add_product(
            session,
            live_session.id,
            LiveProductCreate(product_code="M800MC", prepared_quantity=3),
        )

        assert live_product.product_name == "Áo Thun size M Cam"
        assert live_product.variant == "M, Cam"
        assert live_product.sold_quantity == 0

    def test_explicit_name_without_catalog(self, service, session, live_session):
        live_product = service.add_product(
            session,
            live_session.id,
            LiveProductCreate(product_code="X1", product_name="Hàng lẻ"),
        )
        assert live_product.product_name == "Hàng lẻ"
        assert live_product.variant is None

    def test_unknown_code_without_name(self, service, session, live_session):
        with pytest.raises(HTTPException) as exc:
            service.add_product(session, live_session.id, LiveProductCreate(product_code="X1"))
        assert exc.value.status_code == 404


class TestOrderCapture:
    @pytest.fixture
    def live_product(self, service, session, live_session):
        return service.add_product(
            session,
            live_session.id,
            LiveProductCreate(product_code="M800MC", product_name="Áo Thun", prepared_quantity=2),
        )

    def _order(self, live_session, live_product, code, quantity=1):
        return LiveOrderCreate(
            live_session_id=live_session.id,
            live_product_id=live_product.id,
            order_code=code,
            quantity=quantity,
        )

    def test_oversell_flag(self, service, session, live_session, live_product):
        first = service.create_order(session, self._order(live_session, live_product, "A1"))
        second = service.create_order(session, self._order(live_session, live_product, "A2"))
        third = service.create_order(session, self._order(live_session, live_product, "A3"))

        assert [first.is_oversell, second.is_oversell, third.is_oversell] == [False, False, True]
        session.refresh(live_product)
        assert live_product.sold_quantity == 3
        assert third.upload_status == "pending"

    def test_quantity_counts_towards_oversell(self, service, session, live_session, live_product):
        order = service.create_order(
            session, self._order(live_session, live_product, "A1", quantity=3)
        )
        assert order.is_oversell

    def test_product_from_other_session(self, service, session, live_product):
        other = service.create_session(
            session,
            LiveSessionCreate(session_name="Khác", session_date=date(2026, 10, 17)),
        )
        with pytest.raises(HTTPException) as exc:
            service.create_order(session, self._order(other, live_product, "A1"))
        assert exc.value.status_code == 404

    def test_link_tpos_order(self, service, session, live_session, live_product):
        service.create_order(session, self._order(live_session, live_product, "A1"))
        service.create_order(session, self._order(live_session, live_product, "A1"))

        linked = service.set_tpos_order_id(session, " A1 ", "abc-123")

        assert len(linked) == 2
        assert all(o.tpos_order_id == "abc-123" for o in linked)

    def test_link_unknown_code(self, service, session):
        with pytest.raises(HTTPException) as exc:
            service.set_tpos_order_id(session, "NOPE", "abc-123")
        assert exc.value.status_code == 404
