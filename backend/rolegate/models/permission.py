import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Permission(Base):
    """An explicit ``resource.action`` permission.

    Wildcards are rejected by the catalog builder; the table refuses them too
    so a bad row cannot reach the loader.
    """

    __tablename__ = "permissions"
    __table_args__ = (
        CheckConstraint("name NOT LIKE '%*'", name="ck_permissions_no_wildcard"),
        CheckConstraint(
            "name = resource || '.' || action",
            name="ck_permissions_name_is_resource_action",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    resource: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
