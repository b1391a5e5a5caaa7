# app/permissions.py
"""Role to capability table shared by every endpoint."""

USER = "user"
STAFF = "staff"
ADMIN = "admin"
ROLES = (USER, STAFF, ADMIN)

VIEW_FULL_INVENTORY = "inventory:view-full"
MANAGE_INVENTORY = "inventory:manage"
VIEW_SALES = "sales:view"
BUY_CAR = "cars:buy"
VIEW_STAFF = "staff:view"
MANAGE_STAFF = "staff:manage"

CAPABILITIES = {
    USER: {BUY_CAR},
    STAFF: {BUY_CAR, VIEW_FULL_INVENTORY, MANAGE_INVENTORY, VIEW_SALES, VIEW_STAFF},
    ADMIN: {BUY_CAR, VIEW_FULL_INVENTORY, MANAGE_INVENTORY, VIEW_SALES, VIEW_STAFF, MANAGE_STAFF},
}


def authorize(role, capability) -> bool:
    return capability in CAPABILITIES.get(role, ())
