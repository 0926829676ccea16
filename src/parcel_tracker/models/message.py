"""
Message model for the per-package conversation thread.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


class Message(BaseModel):
    """
    Free-text note attached to a package.

    Visible to every party with access to the package. Messages are never
    edited or deleted.

    Attributes:
        package_id: Foreign key to Package
        sender_id: Foreign key to the authoring User
        text: Message body
    """

    __tablename__ = "messages"

    package_id = Column(Integer, ForeignKey("packages.id", ondelete="RESTRICT"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    text = Column(Text, nullable=False)

    package = relationship("Package", back_populates="messages")
    sender = relationship("User")

    __table_args__ = (
        Index("idx_message_package", "package_id"),
    )
