"""
Notification model for system-generated events.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, Text
from sqlalchemy import Enum as SQLEnum

from .base import BaseModel
from .enums import NotificationKind


class Notification(BaseModel):
    """
    Event record targeted at one user.

    Created as a side effect of workflow transitions and administrative
    actions; only the read flag changes afterwards.

    Attributes:
        user_id: Foreign key to the recipient User
        kind: Notification classification
        title: Short headline
        message: Body text
        is_read: Whether the recipient has seen it
        package_id: Optional foreign key to the related Package
    """

    __tablename__ = "notifications"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    kind = Column(SQLEnum(NotificationKind), nullable=False, default=NotificationKind.SYSTEM)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    package_id = Column(Integer, ForeignKey("packages.id", ondelete="RESTRICT"), nullable=True)

    __table_args__ = (
        Index("idx_notification_user_read", "user_id", "is_read"),
    )
