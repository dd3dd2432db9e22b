"""
Audit logging models for the retail POS platform.

Every committed sale and every stock movement that is not part of a sale
leaves an entry here for compliance review.
"""

import uuid

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models


class AuditLog(models.Model):
    """
    Append-only audit log for sale and stock events.
    """

    # Action categories
    CATEGORY_DATA = "DATA"
    CATEGORY_STOCK = "STOCK"
    CATEGORY_SYSTEM = "SYSTEM"

    CATEGORY_CHOICES = [
        (CATEGORY_DATA, "Data Modification"),
        (CATEGORY_STOCK, "Stock Movement"),
        (CATEGORY_SYSTEM, "System Event"),
    ]

    # Action types
    ACTION_SALE_CREATE = "sale_create"
    ACTION_CHECKOUT_FAILED = "checkout_failed"
    ACTION_RESERVATION_EXPIRED = "reservation_expired"

    ACTION_CHOICES = [
        (ACTION_SALE_CREATE, "Sale Created"),
        (ACTION_CHECKOUT_FAILED, "Checkout Failed"),
        (ACTION_RESERVATION_EXPIRED, "Stock Reservation Expired"),
    ]

    # Severity levels
    SEVERITY_INFO = "INFO"
    SEVERITY_WARNING = "WARNING"
    SEVERITY_ERROR = "ERROR"

    SEVERITY_CHOICES = [
        (SEVERITY_INFO, "Info"),
        (SEVERITY_WARNING, "Warning"),
        (SEVERITY_ERROR, "Error"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the audit log entry",
    )

    company = models.ForeignKey(
        "core.Company",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
        help_text="Company associated with this action",
    )

    store = models.ForeignKey(
        "core.Store",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
        help_text="Store associated with this action",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs_performed",
        help_text="User who performed the action",
    )

    category = models.CharField(
        max_length=20,
        choices=CATEGORY_CHOICES,
        db_index=True,
        help_text="Category of the action",
    )

    action = models.CharField(
        max_length=50,
        choices=ACTION_CHOICES,
        db_index=True,
        help_text="Specific action performed",
    )

    severity = models.CharField(
        max_length=20,
        choices=SEVERITY_CHOICES,
        default=SEVERITY_INFO,
        db_index=True,
        help_text="Severity level of the action",
    )

    description = models.TextField(help_text="Human-readable description of the action")

    # Generic foreign key for the affected object
    content_type = models.ForeignKey(
        ContentType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="Type of the affected object",
    )

    object_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="ID of the affected object",
    )

    affected_object = GenericForeignKey("content_type", "object_id")

    old_values = models.JSONField(
        null=True,
        blank=True,
        help_text="Previous values before the change",
    )

    new_values = models.JSONField(
        null=True,
        blank=True,
        help_text="New values after the change",
    )

    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True,
        help_text="IP address of the user",
    )

    user_agent = models.TextField(blank=True, help_text="User agent string of the client")

    metadata = models.JSONField(
        null=True,
        blank=True,
        help_text="Additional metadata",
    )

    timestamp = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When the action occurred",
    )

    class Meta:
        db_table = "audit_logs"
        ordering = ["-timestamp"]
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"
        indexes = [
            models.Index(fields=["company", "-timestamp"], name="auditlog_company_time_idx"),
            models.Index(fields=["store", "-timestamp"], name="auditlog_store_time_idx"),
            models.Index(fields=["action", "-timestamp"], name="auditlog_action_time_idx"),
        ]

    def __str__(self):
        return f"{self.get_action_display()} - {self.timestamp}"
