"""
Tests for the audit log helpers and POS permissions.
"""

from django.test import RequestFactory

import pytest

from apps.core.audit import get_client_ip, log_checkout_failure
from apps.core.audit_models import AuditLog
from apps.sales.exceptions import InsufficientStock


def test_client_ip_prefers_forwarded_header():
    request = RequestFactory().get("/", HTTP_X_FORWARDED_FOR="10.0.0.1, 172.16.0.1")
    assert get_client_ip(request) == "10.0.0.1"


def test_client_ip_falls_back_to_remote_addr():
    request = RequestFactory().get("/", REMOTE_ADDR="192.168.1.5")
    assert get_client_ip(request) == "192.168.1.5"


@pytest.mark.django_db
class TestCheckoutFailureLog:
    def test_records_error_details(self, manager, store):
        request = RequestFactory().get("/", HTTP_USER_AGENT="pos-terminal/1.0")
        error = InsufficientStock(7, "Wine", requested=3, available=1)

        entry = log_checkout_failure(manager, store, error, request=request)

        assert entry.action == AuditLog.ACTION_CHECKOUT_FAILED
        assert entry.severity == AuditLog.SEVERITY_WARNING
        assert entry.company_id == store.company_id
        assert entry.metadata["code"] == "insufficient_stock"
        assert entry.metadata["available"] == 1
        assert entry.user_agent == "pos-terminal/1.0"
        assert entry.ip_address == "127.0.0.1"


@pytest.mark.django_db
class TestPosPermissions:
    def test_platform_admin_cannot_use_pos(self, api_client, django_user_model):
        admin = django_user_model.objects.create_superuser(
            username="root", email="root@example.com", password="testpass123"
        )
        api_client.force_authenticate(user=admin)

        response = api_client.get("/api/pos/stores/")

        assert response.status_code == 403
