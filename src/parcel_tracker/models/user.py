"""
User and logist profile models.

This module contains:
- User: Account with a role, access flag and credential hash
- Logist: 1:1 profile extending a logist-role user
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from .base import BaseModel
from .enums import UserRole


class User(BaseModel):
    """
    User model.

    The role decides which status vocabulary applies to packages the user
    can see. Role and access flag are changed only by admins and managers.

    Attributes:
        email: Unique login identifier
        first_name: Given name (optional)
        last_name: Family name (optional)
        telegram_username: Contact handle (optional)
        role: Account role
        is_active: Whether the user may log in and act
        password_hash: Salted credential hash, never the password itself
    """

    __tablename__ = "users"

    email = Column(String(320), unique=True, nullable=False)
    first_name = Column(String(200), nullable=True)
    last_name = Column(String(200), nullable=True)
    telegram_username = Column(String(200), nullable=True)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.CLIENT)
    is_active = Column(Boolean, nullable=False, default=True)
    password_hash = Column(String(255), nullable=True)

    logist_profile = relationship("Logist", back_populates="user", uselist=False)

    __table_args__ = (
        Index("idx_user_role", "role"),
    )

    @property
    def display_name(self) -> str:
        """Full name if known, otherwise the email."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.email

    @property
    def is_manager(self) -> bool:
        """Admins count as managers."""
        return self.role in (UserRole.ADMIN, UserRole.MANAGER)

    def to_dict(self, include_relationships: bool = False) -> dict:
        """Convert user to dictionary without the credential hash."""
        result = super().to_dict(include_relationships)
        result.pop("password_hash", None)
        result["display_name"] = self.display_name
        return result

    def __repr__(self) -> str:
        return f"User(id={self.id}, email='{self.email}', role={self.role})"


class Logist(BaseModel):
    """
    Logist profile: the fulfillment agent a package is assigned to.

    Attributes:
        user_id: Foreign key to the logist-role User (unique)
        location: Service location (city/region)
        address: Physical address where packages are received
        supports_lockers: Can deliver to parcel lockers
        supports_offices: Operates staffed offices
        is_active: Whether new packages may be assigned
    """

    __tablename__ = "logists"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), unique=True, nullable=False)
    location = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    supports_lockers = Column(Boolean, nullable=False, default=False)
    supports_offices = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="logist_profile")

    def __repr__(self) -> str:
        return f"Logist(id={self.id}, user_id={self.user_id}, location='{self.location}')"
