"""
Audit logging for the retail POS platform.

Provides the functions the sale engine calls to append structured events
(action, actor, entity, before/after, severity) to the audit log.
"""

import logging

from django.contrib.contenttypes.models import ContentType

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """
    Extract client IP address from request.

    Args:
        request: HTTP request object

    Returns:
        str: Client IP address
    """
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        ip = x_forwarded_for.split(",")[0].strip()
    else:
        ip = request.META.get("REMOTE_ADDR")
    return ip


def record_event(
    action,
    category,
    description,
    user=None,
    store=None,
    affected_object=None,
    old_values=None,
    new_values=None,
    severity=None,
    metadata=None,
    request=None,
):
    """
    Append a single event to the audit log.

    Args:
        action: One of the AuditLog.ACTION_* values
        category: One of the AuditLog.CATEGORY_* values
        description: Human-readable description
        user: Actor (optional)
        store: Store the event happened in (optional)
        affected_object: Model instance the event is about (optional)
        old_values: State before the event (optional)
        new_values: State after the event (optional)
        severity: AuditLog.SEVERITY_* (defaults to INFO)
        metadata: Extra structured data (optional)
        request: HTTP request object (optional, for IP and user agent)

    Returns:
        AuditLog: The created entry
    """
    from apps.core.audit_models import AuditLog

    content_type = None
    object_id = None
    if affected_object is not None:
        content_type = ContentType.objects.get_for_model(affected_object)
        object_id = str(affected_object.pk)

    company_id = None
    if store is not None:
        company_id = store.company_id
    elif user is not None and getattr(user, "company_id", None):
        company_id = user.company_id

    entry = AuditLog.objects.create(
        company_id=company_id,
        store=store,
        user=user if user is not None and user.is_authenticated else None,
        category=category,
        action=action,
        severity=severity or AuditLog.SEVERITY_INFO,
        description=description,
        content_type=content_type,
        object_id=object_id,
        old_values=old_values,
        new_values=new_values,
        metadata=metadata,
        ip_address=get_client_ip(request) if request else None,
        user_agent=request.META.get("HTTP_USER_AGENT", "") if request else "",
    )
    logger.debug(f"Audit event {action} recorded for {object_id or 'n/a'}")
    return entry


def log_sale_created(sale, request=None):
    """
    Log the creation of a sale.

    Args:
        sale: The committed Sale
        request: HTTP request object (optional)
    """
    from apps.core.audit_models import AuditLog

    return record_event(
        action=AuditLog.ACTION_SALE_CREATE,
        category=AuditLog.CATEGORY_DATA,
        description=f"Sale created for {sale.total} ({sale.payment_method})",
        user=sale.user,
        store=sale.store,
        affected_object=sale,
        new_values=sale.to_record(),
        metadata={
            "store_id": str(sale.store_id),
            "total": str(sale.total),
            "payment_method": sale.payment_method,
            "item_count": len(sale.to_record()["items"]),
        },
        request=request,
    )


def log_checkout_failure(user, store, error, request=None):
    """
    Log a rejected checkout (stock or payment failure).

    Args:
        user: Cashier attempting the checkout
        store: Store of the cart
        error: The SaleEngineError that aborted the checkout
        request: HTTP request object (optional)
    """
    from apps.core.audit_models import AuditLog

    return record_event(
        action=AuditLog.ACTION_CHECKOUT_FAILED,
        category=AuditLog.CATEGORY_DATA,
        description=f"Checkout rejected: {error}",
        user=user,
        store=store,
        severity=AuditLog.SEVERITY_WARNING,
        metadata=error.as_dict(),
        request=request,
    )


def log_reservation_expired(reservation):
    """
    Log a stock reservation released by the expiry sweep.

    Args:
        reservation: The released StockReservation
    """
    from apps.core.audit_models import AuditLog

    return record_event(
        action=AuditLog.ACTION_RESERVATION_EXPIRED,
        category=AuditLog.CATEGORY_STOCK,
        description=(
            f"Reservation of {reservation.quantity} x {reservation.product.name} "
            f"expired and was released"
        ),
        store=reservation.store,
        affected_object=reservation,
        old_values={"status": "RESERVED"},
        new_values={"status": reservation.status},
        severity=AuditLog.SEVERITY_WARNING,
        metadata={"product_id": reservation.product_id, "quantity": reservation.quantity},
    )
