"""RoleDesk - role-based permission editing.

Provides the permission catalog, the editable selection state, role
templates and the guarded role switch used to manage which permissions
each role grants, plus a SQLAlchemy-backed access-control API.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
