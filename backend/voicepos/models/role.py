"""Roles and feature permissions."""

import enum


class Feature(str, enum.Enum):
    """Feature areas a user can be granted access to."""
    PRODUCTS = "products"
    ORDERS = "orders"
    CUSTOMERS = "customers"
    REPORTS = "reports"
    SETTINGS = "settings"
    USERS = "users"


class RoleType(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"
