"""User role enum for role-based access control."""

from enum import Enum as PyEnum


class UserRole(str, PyEnum):
    """
    Roles a user holds inside its tenant.

    Role Hierarchy (highest to lowest):
    1. ADMIN - Created with the tenant, full control over tenant data
    2. MANAGER - May manage other users' activities
    3. USER - Default role for registered users
    """

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"
