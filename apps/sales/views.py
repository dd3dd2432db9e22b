"""
Views for the point-of-sale API.

Thin handlers over the sale engine:
- Store selection and POS sessions
- Cart management with live VAT totals
- Checkout
- Sale history and store summary

Engine errors are turned into responses by sale_engine_exception_handler,
registered as REST_FRAMEWORK["EXCEPTION_HANDLER"].
"""

import logging

from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.permissions import CanProcessSales
from apps.inventory.catalog import ProductCatalog

from .analytics import AnalyticsAggregator
from .exceptions import (
    CartSessionNotFound,
    InsufficientPayment,
    NoStoreAssigned,
    NoStoresAvailable,
    ReservationError,
    SaleEngineError,
    SalePersistenceError,
    StockError,
    StoreNotAccessible,
    StoreResolutionError,
    StoreSelectionRequired,
)
from .models import Sale
from .serializers import (
    AddLineSerializer,
    CheckoutSerializer,
    OpenSessionSerializer,
    SaleSerializer,
    SetQuantitySerializer,
    StoreSerializer,
    serialize_cart,
)
from .services import SaleCommitter
from .sessions import CartSession
from .store_resolution import StoreResolver, actor_for

logger = logging.getLogger(__name__)

# First match wins, so subclasses come before their bases
ERROR_STATUS = [
    (CartSessionNotFound, status.HTTP_404_NOT_FOUND),
    (StoreSelectionRequired, status.HTTP_400_BAD_REQUEST),
    (StoreNotAccessible, status.HTTP_403_FORBIDDEN),
    (NoStoreAssigned, status.HTTP_403_FORBIDDEN),
    (NoStoresAvailable, status.HTTP_403_FORBIDDEN),
    (StoreResolutionError, status.HTTP_403_FORBIDDEN),
    (StockError, status.HTTP_409_CONFLICT),
    (ReservationError, status.HTTP_409_CONFLICT),
    (InsufficientPayment, status.HTTP_400_BAD_REQUEST),
    (SalePersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def sale_engine_exception_handler(exc, context):
    """
    Render sale engine errors as `{"code", "detail", "fatal", ...}`.

    Anything else is left to DRF's default handler.
    """
    if not isinstance(exc, SaleEngineError):
        return exception_handler(exc, context)

    status_code = status.HTTP_400_BAD_REQUEST
    for error_class, code in ERROR_STATUS:
        if isinstance(exc, error_class):
            status_code = code
            break

    view = context.get("view")
    logger.warning(
        f"{exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
    )

    data = exc.as_dict()
    data["fatal"] = exc.fatal
    return Response(data, status=status_code)


def _load_session(request, session_id):
    return CartSession.load(session_id, request.user)


def _session_payload(session):
    return {
        "session_id": session.session_id,
        "store": StoreSerializer(session.store).data,
        "cart": serialize_cart(session.cart),
    }


# Stores and sessions


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, CanProcessSales])
def pos_stores(request):
    """
    Stores the user can open the point of sale for.

    Managers get their assigned store; company admins and store owners
    get every active store of their company and must pick one.
    """
    actor = actor_for(request.user)
    stores = StoreResolver().available_stores(actor)
    if not stores:
        raise NoStoreAssigned() if actor.has_fixed_store else NoStoresAvailable()

    return Response(
        {
            "must_select_store": actor.must_select_store,
            "stores": StoreSerializer(stores, many=True).data,
        },
        status=status.HTTP_200_OK,
    )


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, CanProcessSales])
def pos_open_session(request):
    """
    Open a POS session for a store.

    Request body:
    {
        "store_id": "uuid" (required unless the user has a fixed store),
        "previous_session_id": "..." (optional, closed and its cart dropped)
    }
    """
    serializer = OpenSessionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    store = StoreResolver().resolve(
        actor_for(request.user), serializer.validated_data.get("store_id")
    )

    previous_id = serializer.validated_data.get("previous_session_id")
    if previous_id:
        try:
            previous = _load_session(request, previous_id)
        except CartSessionNotFound:
            session = CartSession.open(request.user, store)
        else:
            session = previous.switch_store(store)
    else:
        session = CartSession.open(request.user, store)

    return Response(_session_payload(session), status=status.HTTP_201_CREATED)


@api_view(["DELETE"])
@permission_classes([permissions.IsAuthenticated, CanProcessSales])
def pos_close_session(request, session_id):
    """Close a POS session; its cart is discarded."""
    _load_session(request, session_id).close()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Cart


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, CanProcessSales])
def pos_cart(request, session_id):
    """
    Current cart with totals and VAT breakdown.

    Product snapshots are refreshed first; lines that now exceed the
    available stock are listed under "warnings".
    """
    session = _load_session(request, session_id)
    over_stock = session.cart.refresh(ProductCatalog())
    session.save()

    payload = _session_payload(session)
    payload["warnings"] = [
        {
            "product_id": line.product_id,
            "name": line.product.name,
            "quantity": line.quantity,
            "available_stock": line.product.stock,
        }
        for line in over_stock
    ]
    return Response(payload, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, CanProcessSales])
def pos_add_line(request, session_id):
    """
    Add a product to the cart.

    Request body:
    {
        "product_id": 1,
        "quantity": 1 (optional, default 1)
    }
    """
    session = _load_session(request, session_id)
    serializer = AddLineSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    product = ProductCatalog().get(session.store.pk, serializer.validated_data["product_id"])
    session.cart.add_line(product, serializer.validated_data["quantity"])
    session.save()

    return Response(_session_payload(session), status=status.HTTP_201_CREATED)


@api_view(["PATCH", "DELETE"])
@permission_classes([permissions.IsAuthenticated, CanProcessSales])
def pos_cart_line(request, session_id, product_id):
    """Change the quantity of a cart line (PATCH) or remove it (DELETE)."""
    session = _load_session(request, session_id)

    if request.method == "DELETE":
        session.cart.remove_line(product_id)
    else:
        serializer = SetQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quantity = serializer.validated_data["quantity"]
        product = None
        if quantity > 0 and session.cart.get_line(product_id) is not None:
            product = ProductCatalog().get(session.store.pk, product_id)
        session.cart.set_quantity(product_id, quantity, product=product)

    session.save()
    return Response(_session_payload(session), status=status.HTTP_200_OK)


# Checkout


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, CanProcessSales])
def pos_checkout(request, session_id):
    """
    Commit the cart as a sale.

    Request body:
    {
        "payment_method": "cash|card",
        "amount_tendered": "60.00" (required for cash),
        "customer_info": {"name": "", "phone": "", "email": ""} (optional)
    }
    """
    session = _load_session(request, session_id)
    serializer = CheckoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    committer = SaleCommitter(request.user, session.store, request=request)
    result = committer.checkout(
        session.cart,
        data["payment_method"],
        amount_tendered=data.get("amount_tendered"),
        customer_info=data.get("customer_info"),
    )
    session.save()

    return Response(
        {
            "sale": SaleSerializer(result.sale).data,
            "change": str(result.change),
        },
        status=status.HTTP_201_CREATED,
    )


# Sale history and analytics


class SaleListView(generics.ListAPIView):
    """
    Sales of one store, newest first.

    Query parameters:
    - payment_method: Filter by payment method
    - date_from: Filter by date (YYYY-MM-DD)
    - date_to: Filter by date (YYYY-MM-DD)
    """

    serializer_class = SaleSerializer
    permission_classes = [permissions.IsAuthenticated, CanProcessSales]

    def get_queryset(self):
        store = StoreResolver().resolve(actor_for(self.request.user), self.kwargs["store_id"])
        queryset = Sale.objects.filter(store=store).prefetch_related("items")

        payment_method = self.request.query_params.get("payment_method")
        if payment_method:
            queryset = queryset.filter(payment_method=payment_method)

        date_from = self.request.query_params.get("date_from")
        if date_from:
            queryset = queryset.filter(created_at__date__gte=date_from)

        date_to = self.request.query_params.get("date_to")
        if date_to:
            queryset = queryset.filter(created_at__date__lte=date_to)

        return queryset.order_by("-created_at")


class SaleDetailView(generics.RetrieveAPIView):
    """
    API endpoint for retrieving a single sale.
    """

    serializer_class = SaleSerializer
    permission_classes = [permissions.IsAuthenticated, CanProcessSales]
    lookup_field = "id"
    lookup_url_kwarg = "sale_id"

    def get_queryset(self):
        stores = StoreResolver().available_stores(actor_for(self.request.user))
        return Sale.objects.filter(store__in=stores).prefetch_related("items")


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, CanProcessSales])
def store_summary(request, store_id):
    """Revenue, sale count, VAT collected and best sellers of a store."""
    store = StoreResolver().resolve(actor_for(request.user), store_id)
    return Response(AnalyticsAggregator().store_summary(store), status=status.HTTP_200_OK)
