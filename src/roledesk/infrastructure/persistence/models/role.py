"""SQLAlchemy model for the roles table."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roledesk.infrastructure.persistence.database import Base
from roledesk.infrastructure.persistence.models.role_permission import role_permissions


class RoleModel(Base):
    """SQLAlchemy model for the roles table.

    Attributes:
        id: Auto-incrementing primary key.
        name: Unique role name.
        description: Description of the role's purpose.
        created_at: Timestamp when the role was created.
        permissions: Permissions granted by the role.
    """

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
        comment="Role name (unique, compared case-insensitively)",
    )
    description: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Description of the role's purpose",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    # Relationships
    permissions: Mapped[list["PermissionModel"]] = relationship(  # noqa: F821
        "PermissionModel",
        secondary=role_permissions,
        order_by="PermissionModel.id",
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"
