"""
Tests for deciding which store a POS transaction belongs to.
"""

import pytest

from apps.core.models import Store
from apps.sales.exceptions import (
    NoStoreAssigned,
    NoStoresAvailable,
    StoreNotAccessible,
    StoreResolutionError,
    StoreSelectionRequired,
)
from apps.sales.store_resolution import FixedStoreActor, SelectingActor, StoreResolver, actor_for


@pytest.mark.django_db
class TestActorFor:
    def test_manager_has_fixed_store(self, manager):
        actor = actor_for(manager)
        assert isinstance(actor, FixedStoreActor)
        assert actor.has_fixed_store
        assert not actor.must_select_store

    def test_company_admin_selects(self, company_admin):
        actor = actor_for(company_admin)
        assert isinstance(actor, SelectingActor)
        assert actor.must_select_store

    def test_store_owner_selects(self, store_owner):
        assert isinstance(actor_for(store_owner), SelectingActor)

    def test_platform_admin_cannot_sell(self, django_user_model):
        user = django_user_model.objects.create_user(
            username="platform", password="testpass123", role="PLATFORM_ADMIN"
        )
        with pytest.raises(StoreResolutionError):
            actor_for(user)


@pytest.mark.django_db
class TestFixedStoreResolution:
    def test_resolves_assigned_store(self, manager, store):
        assert StoreResolver().resolve(actor_for(manager)) == store

    def test_explicit_matching_store_id(self, manager, store):
        assert StoreResolver().resolve(actor_for(manager), str(store.pk)) == store

    def test_other_store_id_forbidden(self, manager, second_store):
        with pytest.raises(StoreNotAccessible):
            StoreResolver().resolve(actor_for(manager), second_store.pk)

    def test_no_store_assigned(self, company, django_user_model):
        user = django_user_model.objects.create_user(
            username="floating", password="testpass123", company=company, role="MANAGER"
        )
        with pytest.raises(NoStoreAssigned) as exc_info:
            StoreResolver().resolve(actor_for(user))
        assert exc_info.value.fatal is True

    def test_inactive_store_counts_as_unassigned(self, manager, store):
        store.is_active = False
        store.save()
        manager.refresh_from_db()

        with pytest.raises(NoStoreAssigned):
            StoreResolver().resolve(actor_for(manager))
        assert StoreResolver().available_stores(actor_for(manager)) == []


@pytest.mark.django_db
class TestSelectingResolution:
    def test_selection_required_lists_stores(self, company_admin, store, second_store):
        with pytest.raises(StoreSelectionRequired) as exc_info:
            StoreResolver().resolve(actor_for(company_admin))

        names = [s["name"] for s in exc_info.value.as_dict()["stores"]]
        assert names == ["Harbour", "Main Street"]

    def test_resolves_selected_store(self, company_admin, store, second_store):
        resolved = StoreResolver().resolve(actor_for(company_admin), str(second_store.pk))
        assert resolved == second_store

    def test_store_of_other_company_forbidden(self, company_admin, store, other_store):
        with pytest.raises(StoreNotAccessible):
            StoreResolver().resolve(actor_for(company_admin), other_store.pk)

    def test_inactive_store_not_selectable(self, company_admin, store, second_store):
        Store.objects.filter(pk=second_store.pk).update(is_active=False)

        with pytest.raises(StoreNotAccessible):
            StoreResolver().resolve(actor_for(company_admin), second_store.pk)

    def test_no_active_stores(self, company_admin):
        with pytest.raises(NoStoresAvailable) as exc_info:
            StoreResolver().resolve(actor_for(company_admin), "anything")
        assert exc_info.value.fatal is True
