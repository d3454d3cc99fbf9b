import pytest

from dependencies.rbac import RequestContext, has_permission, ensure_permission
from utils.errors import RoleError


@pytest.mark.parametrize("role,resource,permission,allowed", [
    ("vendor", "groups", "write", True),
    ("vendor", "join-requests", "write", True),
    ("vendor", "order-requests/status", "write", False),
    ("supplier", "groups", "write", False),
    ("supplier", "order-requests/status", "write", True),
    ("admin", "groups", "read", False),
    (None, "groups", "read", False),
])
def test_has_permission(role, resource, permission, allowed):
    assert has_permission(role, resource, permission) is allowed


def test_ensure_permission_uses_readable_message():
    with pytest.raises(RoleError) as exc_info:
        ensure_permission(RequestContext("supplier-1", "supplier"), "order-requests")
    assert exc_info.value.message == "Only vendors can create order requests."
    assert exc_info.value.status_code == 403


def test_ensure_permission_falls_back_to_generic_message():
    with pytest.raises(RoleError) as exc_info:
        ensure_permission(RequestContext("vendor-1", "vendor"), "suppliers", "write")
    assert "does not have write permission" in exc_info.value.message
