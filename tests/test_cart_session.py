"""
Tests for cache-backed POS sessions.
"""

import pytest

from apps.core.models import Store
from apps.sales.exceptions import CartSessionNotFound
from apps.sales.sessions import CartSession


@pytest.mark.django_db
class TestCartSession:
    def test_open_and_load(self, manager, store, make_product):
        session = CartSession.open(manager, store)
        session.cart.add_line(make_product(), 2)
        session.save()

        loaded = CartSession.load(session.session_id, manager)

        assert loaded.store == store
        assert loaded.cart.item_count == 2
        assert loaded.opened_at == session.opened_at

    def test_unknown_session(self, manager):
        with pytest.raises(CartSessionNotFound):
            CartSession.load("missing", manager)

    def test_session_of_another_user(self, manager, company_admin, store):
        session = CartSession.open(manager, store)

        with pytest.raises(CartSessionNotFound):
            CartSession.load(session.session_id, company_admin)

    def test_close_discards_cart(self, manager, store, make_product):
        session = CartSession.open(manager, store)
        session.cart.add_line(make_product(), 1)
        session.save()

        session.close()

        assert session.cart.is_empty
        with pytest.raises(CartSessionNotFound):
            CartSession.load(session.session_id, manager)

    def test_context_manager_closes(self, manager, store):
        with CartSession.open(manager, store) as session:
            session_id = session.session_id

        with pytest.raises(CartSessionNotFound):
            CartSession.load(session_id, manager)

    def test_switch_store_starts_with_empty_cart(
        self, company_admin, store, second_store, make_product
    ):
        session = CartSession.open(company_admin, store)
        session.cart.add_line(make_product(), 1)
        session.save()

        switched = session.switch_store(second_store)

        assert switched.session_id != session.session_id
        assert switched.store == second_store
        assert switched.cart.is_empty
        assert switched.cart.store_id == str(second_store.pk)
        with pytest.raises(CartSessionNotFound):
            CartSession.load(session.session_id, company_admin)

    def test_deactivated_store_ends_session(self, manager, store):
        session = CartSession.open(manager, store)
        Store.objects.filter(pk=store.pk).update(is_active=False)

        with pytest.raises(CartSessionNotFound):
            CartSession.load(session.session_id, manager)
