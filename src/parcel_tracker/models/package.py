"""
Package models for the delivery workflow.

This module contains:
- Package: The tracked shipment, carrying one sub-status per workflow role
- PackageFile: Append-only record of an uploaded file
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    Text,
    DateTime,
    ForeignKey,
    Index,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from .enums import DeliveryType, FileKind, WorkflowRole
from .package_status import ClientStatus, LogistStatus, ManagerStatus


class Package(BaseModel):
    """
    Package model: the aggregate root of the workflow.

    The three sub-status columns are written only by the workflow engine
    and kept consistent through the cross-role projection table.
    logist_status stays NULL until a manager relays the package.

    The version column is SQLAlchemy's version counter: every UPDATE
    increments it and fails with StaleDataError if the row changed
    underneath the session.

    Attributes:
        tracking_code: Immutable, unique human-facing identifier
        client_id: Foreign key to the client User
        logist_id: Foreign key to the assigned Logist profile
        client_status / logist_status / manager_status: Per-role sub-statuses
        payment_amount: Amount due in minor currency units
    """

    __tablename__ = "packages"

    tracking_code = Column(String(64), unique=True, nullable=False)

    # Ownership
    client_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    logist_id = Column(Integer, ForeignKey("logists.id", ondelete="RESTRICT"), nullable=False)

    # Package details
    telegram_username = Column(String(200), nullable=True)
    recipient_name = Column(String(200), nullable=False)
    delivery_type = Column(SQLEnum(DeliveryType), nullable=False)
    locker_address = Column(Text, nullable=True)
    locker_code = Column(String(64), nullable=True)
    courier_service = Column(String(200), nullable=False)
    tracking_number = Column(String(200), nullable=False)
    estimated_delivery_date = Column(DateTime, nullable=True)
    item_name = Column(Text, nullable=False)
    shop_name = Column(Text, nullable=False)
    comments = Column(Text, nullable=True)

    # Workflow
    client_status = Column(SQLEnum(ClientStatus), nullable=False, default=ClientStatus.CREATED)
    logist_status = Column(SQLEnum(LogistStatus), nullable=True)
    manager_status = Column(SQLEnum(ManagerStatus), nullable=False, default=ManagerStatus.CREATED)
    admin_comments = Column(Text, nullable=True)
    payment_amount = Column(Integer, nullable=True)
    payment_details = Column(Text, nullable=True)

    version = Column(Integer, nullable=False)

    # Relationships
    client = relationship("User", foreign_keys=[client_id])
    logist = relationship("Logist", foreign_keys=[logist_id])
    files = relationship(
        "PackageFile", back_populates="package", order_by="PackageFile.created_at"
    )
    messages = relationship(
        "Message", back_populates="package", order_by="Message.created_at"
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_package_client", "client_id"),
        Index("idx_package_logist", "logist_id"),
        Index("idx_package_manager_status", "manager_status"),
    )

    _STATUS_COLUMNS = {
        WorkflowRole.CLIENT: "client_status",
        WorkflowRole.LOGIST: "logist_status",
        WorkflowRole.MANAGER: "manager_status",
    }

    def get_sub_status(self, role: WorkflowRole):
        """Return the sub-status stored for a workflow role (may be None)."""
        return getattr(self, self._STATUS_COLUMNS[role])

    def set_sub_status(self, role: WorkflowRole, status) -> None:
        """Write the sub-status of a workflow role."""
        setattr(self, self._STATUS_COLUMNS[role], status)

    def sub_statuses(self) -> dict:
        """Snapshot of all three sub-statuses keyed by WorkflowRole."""
        return {role: self.get_sub_status(role) for role in self._STATUS_COLUMNS}

    def __repr__(self) -> str:
        return (
            f"Package(id={self.id}, tracking_code='{self.tracking_code}', "
            f"client={self.client_status}, logist={self.logist_status}, "
            f"manager={self.manager_status})"
        )


class PackageFile(BaseModel):
    """
    Uploaded file attached to a package.

    Records storage metadata only; the bytes live outside the database.
    Files are evidence for a human reviewer and never gate a transition.

    Attributes:
        package_id: Foreign key to Package
        kind: File classification
        filename: Stored file name
        original_name: Name as uploaded
        mime_type: Reported MIME type
        size: Size in bytes
        uploaded_by: Foreign key to the uploading User
    """

    __tablename__ = "package_files"

    package_id = Column(Integer, ForeignKey("packages.id", ondelete="RESTRICT"), nullable=False)
    kind = Column(SQLEnum(FileKind), nullable=False, default=FileKind.DOCUMENT)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    package = relationship("Package", back_populates="files")
    uploader = relationship("User")

    __table_args__ = (
        Index("idx_package_file_package", "package_id"),
    )

    def __repr__(self) -> str:
        return f"PackageFile(id={self.id}, package_id={self.package_id}, kind={self.kind})"
