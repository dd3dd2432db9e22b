"""
Decide which store a point-of-sale transaction belongs to.

Managers work in the one store they are assigned to. Company admins and
store owners choose among the active stores of their company. Views
never inspect role strings themselves; they wrap the user with
`actor_for()` and ask the resolver.
"""

import logging

from apps.core.models import Store

from .exceptions import (
    NoStoreAssigned,
    NoStoresAvailable,
    StoreNotAccessible,
    StoreResolutionError,
    StoreSelectionRequired,
)

logger = logging.getLogger(__name__)


class Actor:
    """A user as seen by the store resolver."""

    has_fixed_store = False
    must_select_store = False

    def __init__(self, user):
        self.user = user

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.user.username}>"

    @property
    def company_id(self):
        return self.user.company_id


class FixedStoreActor(Actor):
    has_fixed_store = True

    @property
    def store(self):
        return self.user.store


class SelectingActor(Actor):
    must_select_store = True


def actor_for(user):
    """Wrap a user in the actor matching their store capability."""
    if user.is_manager():
        return FixedStoreActor(user)
    if user.is_company_admin() or user.is_store_owner():
        return SelectingActor(user)
    raise StoreResolutionError("This account cannot operate a point of sale.")


def _same_id(store, store_id):
    return str(store.pk) == str(store_id)


class StoreResolver:
    def available_stores(self, actor):
        """Stores the actor may open a POS session for."""
        if actor.has_fixed_store:
            store = actor.store
            return [store] if store is not None and store.is_active else []
        return list(
            Store.objects.filter(company_id=actor.company_id, is_active=True).order_by("name")
        )

    def resolve(self, actor, store_id=None):
        """
        Return the store a transaction applies to.

        Raises:
            NoStoreAssigned: fixed-store actor without an (active) store
            NoStoresAvailable: the company has no active store
            StoreSelectionRequired: selecting actor gave no store_id
            StoreNotAccessible: store_id is not one of the actor's stores
        """
        if actor.has_fixed_store:
            store = actor.store
            if store is None or not store.is_active:
                logger.warning(f"User {actor.user.username} has no store assigned")
                raise NoStoreAssigned()
            if store_id is not None and not _same_id(store, store_id):
                raise StoreNotAccessible(store_id)
            return store

        stores = self.available_stores(actor)
        if not stores:
            raise NoStoresAvailable()
        if store_id is None:
            raise StoreSelectionRequired(stores)

        for store in stores:
            if _same_id(store, store_id):
                return store
        raise StoreNotAccessible(store_id)
