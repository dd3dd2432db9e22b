"""
POS sessions: a cart bound to one user and one store, kept in the cache.

A session is opened once a store has been resolved and lives until it is
closed or its cache entry times out. Switching store closes the current
session (dropping its cart) and opens a fresh one.

Usage:
    session = CartSession.open(user, store)
    session.cart.add_line(product, 2)
    session.save()
    ...
    session.close()
"""

import logging
import uuid

from django.conf import settings
from django.core.cache import caches
from django.utils import timezone

from apps.core.models import Store

from .cart import Cart
from .exceptions import CartSessionNotFound

logger = logging.getLogger(__name__)

CACHE_ALIAS = "default"
KEY_PREFIX = "pos:session"


def _cache():
    return caches[CACHE_ALIAS]


def _key(session_id):
    return f"{KEY_PREFIX}:{session_id}"


class CartSession:
    def __init__(self, session_id, user, store, cart=None, opened_at=None):
        self.session_id = session_id
        self.user = user
        self.store = store
        self.cart = cart if cart is not None else Cart(store.pk)
        self.opened_at = opened_at or timezone.now()

    def __repr__(self):
        return f"<CartSession {self.session_id} store={self.store.pk}>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def timeout(self):
        return settings.POS_CART_SESSION_TTL_SECONDS

    @classmethod
    def open(cls, user, store):
        session = cls(uuid.uuid4().hex, user, store)
        session.save()
        logger.info(f"POS session {session.session_id} opened by {user.username} at {store.name}")
        return session

    @classmethod
    def load(cls, session_id, user):
        """
        Fetch an open session owned by `user`.

        Raises:
            CartSessionNotFound: unknown, expired, closed or owned by another user
        """
        data = _cache().get(_key(session_id))
        if data is None or data["user_id"] != user.pk:
            raise CartSessionNotFound(session_id)

        try:
            store = Store.objects.get(pk=data["store_id"], is_active=True)
        except Store.DoesNotExist:
            _cache().delete(_key(session_id))
            raise CartSessionNotFound(session_id)

        return cls(
            session_id,
            user,
            store,
            cart=Cart.from_dict(data["cart"]),
            opened_at=data["opened_at"],
        )

    def save(self):
        _cache().set(
            _key(self.session_id),
            {
                "user_id": self.user.pk,
                "store_id": str(self.store.pk),
                "cart": self.cart.to_dict(),
                "opened_at": self.opened_at,
            },
            self.timeout,
        )

    def close(self):
        """End the session and drop its cart."""
        self.cart.clear()
        _cache().delete(_key(self.session_id))
        logger.info(f"POS session {self.session_id} closed")

    def switch_store(self, store):
        """Close this session and open a new one for `store`; the cart is not carried over."""
        self.close()
        return type(self).open(self.user, store)
