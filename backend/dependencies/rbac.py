"""
Role checks for marketplace writes.

There is no authentication: the caller declares who it is (userId, userRole)
in every request body. The declaration is carried as a RequestContext and
checked against RESOURCES_FOR_ROLES before a service touches the store.
"""
from dataclasses import dataclass
from typing import Optional
from utils.errors import RoleError
import logging

logger = logging.getLogger(__name__)

RESOURCES_FOR_ROLES = {
    'vendor': {
        'groups': ['read', 'write'],
        'join-requests': ['write'],
        'order-requests': ['read', 'write'],
        'suppliers': ['read'],
    },
    'supplier': {
        'groups': ['read'],
        'order-requests': ['read'],
        'order-requests/status': ['write'],
    },
}

DENIED_MESSAGES = {
    ('groups', 'write'): 'Only vendors can create groups.',
    ('join-requests', 'write'): 'Only vendors can join groups.',
    ('order-requests', 'write'): 'Only vendors can create order requests.',
    ('order-requests/status', 'write'): 'Only suppliers can update order request status.',
}


@dataclass(frozen=True)
class RequestContext:
    """Identity the client claims for the current call"""
    user_id: Optional[str]
    user_role: Optional[str]


def has_permission(user_role: Optional[str], resource_name: str, required_permission: str) -> bool:
    """Check if user role has permission for the resource and action"""
    if user_role not in RESOURCES_FOR_ROLES:
        return False

    user_permissions = RESOURCES_FOR_ROLES[user_role]

    if resource_name in user_permissions:
        return required_permission in user_permissions[resource_name]

    return False


def ensure_permission(ctx: RequestContext, resource: str, permission: str = 'write'):
    """Raise RoleError unless the declared role may perform the action"""
    if not has_permission(ctx.user_role, resource, permission):
        logger.warning(f"Access denied - User: {ctx.user_id}, Role: {ctx.user_role}, Resource: {resource}, Permission: {permission}")
        raise RoleError(
            DENIED_MESSAGES.get(
                (resource, permission),
                f"Role {ctx.user_role} does not have {permission} permission for {resource}."
            )
        )
