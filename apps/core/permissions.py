"""
Permission classes for company-based access control.
"""

from rest_framework import permissions


class HasCompanyAccess(permissions.BasePermission):
    """
    Permission class to ensure users can only access resources from their own company.
    """

    message = "User must belong to a company to use the point of sale."

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.has_company_access()

    def has_object_permission(self, request, view, obj):
        # Objects are either company-owned or store-owned
        if hasattr(obj, "company_id"):
            return obj.company_id == request.user.company_id
        if hasattr(obj, "store"):
            return obj.store.company_id == request.user.company_id
        return True


class CanProcessSales(HasCompanyAccess):
    """
    Permission class for endpoints that ring up sales.
    """

    message = "User is not allowed to process sales."

    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.can_process_sales()
