"""SQLAlchemy model for the permissions table.

Each row is one atomic access right. The category column is used only for
grouping and display.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from roledesk.infrastructure.persistence.database import Base


class PermissionModel(Base):
    """SQLAlchemy model for the permissions table.

    Attributes:
        id: Auto-incrementing primary key.
        name: Unique permission name (e.g., 'viewPatients').
        category: Display category; blank means it is inferred from the name.
        description: Human-readable description.
    """

    __tablename__ = "permissions"

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
    )
    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="",
        comment="Display category (blank = inferred from name)",
    )
    description: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
    )

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, name={self.name}, category={self.category})>"
