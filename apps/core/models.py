"""
Core models for the retail POS platform.
"""

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.text import slugify

# Import audit models to register them with Django
from apps.core.audit_models import AuditLog  # noqa: F401


class Company(models.Model):
    """
    Core company model for multi-tenancy.

    Each company is a retail business that operates one or more stores.
    All stores, products and sales are scoped to exactly one company.
    """

    # Status choices
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"

    STATUS_CHOICES = [
        (ACTIVE, "Active"),
        (SUSPENDED, "Suspended"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the company",
    )

    name = models.CharField(max_length=255, help_text="Registered name of the business")

    slug = models.SlugField(
        unique=True, max_length=255, help_text="URL-friendly identifier for the company"
    )

    vat_number = models.CharField(
        max_length=50, blank=True, help_text="VAT registration number printed on receipts"
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=ACTIVE,
        help_text="Current operational status of the company",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "companies"
        ordering = ["name"]
        verbose_name = "Company"
        verbose_name_plural = "Companies"
        indexes = [
            models.Index(fields=["status"], name="company_status_idx"),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        """
        Override save to auto-generate slug from name if not provided.
        """
        if not self.slug:
            self.slug = slugify(self.name)
            # Ensure uniqueness by appending UUID if slug already exists
            if Company.objects.filter(slug=self.slug).exists():
                self.slug = f"{self.slug}-{str(uuid.uuid4())[:8]}"
        super().save(*args, **kwargs)

    def is_active(self):
        """Check if company is in active status."""
        return self.status == self.ACTIVE


class Store(models.Model):
    """
    Store model for multi-store companies.

    Every cart, sale and stock check operates inside exactly one store.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the store",
    )

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="stores",
        help_text="Company that owns this store",
    )

    name = models.CharField(max_length=255, help_text="Store name")

    address = models.TextField(blank=True, help_text="Store address")

    phone = models.CharField(max_length=20, blank=True, help_text="Store phone number")

    is_active = models.BooleanField(default=True, help_text="Whether the store is trading")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "stores"
        ordering = ["name"]
        verbose_name = "Store"
        verbose_name_plural = "Stores"
        unique_together = [["company", "name"]]
        indexes = [
            models.Index(fields=["company", "is_active"], name="store_company_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.company.name})"


class User(AbstractUser):
    """
    Extended user model with company association and role.

    Managers run the POS of the single store they are assigned to.
    Company admins and store owners pick one of their company's stores.
    """

    # Role choices
    PLATFORM_ADMIN = "PLATFORM_ADMIN"
    COMPANY_ADMIN = "COMPANY_ADMIN"
    STORE_OWNER = "STORE_OWNER"
    MANAGER = "MANAGER"

    ROLE_CHOICES = [
        (PLATFORM_ADMIN, "Platform Administrator"),
        (COMPANY_ADMIN, "Company Administrator"),
        (STORE_OWNER, "Store Owner"),
        (MANAGER, "Store Manager"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="users",
        help_text="Company that this user belongs to (null for platform admins)",
    )

    role = models.CharField(
        max_length=50,
        choices=ROLE_CHOICES,
        default=MANAGER,
        help_text="User's role in the system",
    )

    store = models.ForeignKey(
        Store,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="users",
        help_text="Store that this user is assigned to",
    )

    phone = models.CharField(max_length=20, blank=True, help_text="User's phone number")

    class Meta:
        db_table = "users"
        ordering = ["username"]
        verbose_name = "User"
        verbose_name_plural = "Users"
        indexes = [
            models.Index(fields=["company", "role"], name="user_company_role_idx"),
            models.Index(fields=["company", "store"], name="user_company_store_idx"),
        ]

    def __str__(self):
        if self.company:
            return f"{self.username} ({self.get_role_display()} - {self.company.name})"
        return f"{self.username} ({self.get_role_display()})"

    def is_platform_admin(self):
        """Check if user is a platform administrator."""
        return self.role == self.PLATFORM_ADMIN

    def is_company_admin(self):
        """Check if user is a company administrator."""
        return self.role == self.COMPANY_ADMIN

    def is_store_owner(self):
        """Check if user is a store owner."""
        return self.role == self.STORE_OWNER

    def is_manager(self):
        """Check if user is a store manager."""
        return self.role == self.MANAGER

    def has_company_access(self):
        """Check if user has access to company features."""
        return self.company_id is not None and self.role in [
            self.COMPANY_ADMIN,
            self.STORE_OWNER,
            self.MANAGER,
        ]

    def can_process_sales(self):
        """Check if user can ring up sales."""
        return self.has_company_access()

    def save(self, *args, **kwargs):
        """
        Override save to ensure data consistency.
        """
        # Superusers created from the command line operate the platform
        if self.is_superuser and not self.company_id:
            self.role = self.PLATFORM_ADMIN

        # Platform admins should not belong to a company
        if self.role == self.PLATFORM_ADMIN:
            self.company = None
            self.store = None

        # Company users must have a company
        if self.role in [self.COMPANY_ADMIN, self.STORE_OWNER, self.MANAGER]:
            if not self.company_id:
                raise ValueError(f"Users with role {self.role} must have a company assigned")

        # Store must belong to the same company
        if self.store_id and self.company_id:
            store_company_id = (
                Store.objects.filter(id=self.store_id).values_list("company_id", flat=True).first()
            )
            if store_company_id != self.company_id:
                raise ValueError("Assigned store must belong to the user's company")

        super().save(*args, **kwargs)
