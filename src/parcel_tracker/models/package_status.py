"""
Package status enums, one per workflow role.

Each role sees the same package lifecycle through its own vocabulary.
Members are declared in lifecycle order; the order is significant and is
used by the workflow vocabulary helpers.

Client:  CREATED -> RECEIVED_BY_LOGIST -> AWAITING_PROCESSING
         -> AWAITING_PAYMENT -> AWAITING_SHIPPING -> SHIPPED
Logist:  RECEIVED_INFO -> PACKAGE_RECEIVED -> AWAITING_SHIPPING
         -> SHIPPED -> PAID
Manager: CREATED -> SENT_TO_LOGIST -> LOGIST_CONFIRMED -> INFO_SENT_TO_CLIENT
         -> CONFIRMED_BY_CLIENT -> AWAITING_PAYMENT -> AWAITING_PROCESSING
         -> AWAITING_SHIPPING -> SHIPPED_BY_LOGIST -> PAID
"""

import enum
from typing import Union


class ClientStatus(str, enum.Enum):
    """Package status as seen by the client."""

    CREATED = "created"
    RECEIVED_BY_LOGIST = "received_by_logist"
    AWAITING_PROCESSING = "awaiting_processing"
    AWAITING_PAYMENT = "awaiting_payment"
    AWAITING_SHIPPING = "awaiting_shipping"
    SHIPPED = "shipped"


class LogistStatus(str, enum.Enum):
    """Package status as seen by the logist."""

    RECEIVED_INFO = "received_info"
    PACKAGE_RECEIVED = "package_received"
    AWAITING_SHIPPING = "awaiting_shipping"
    SHIPPED = "shipped"
    PAID = "paid"


class ManagerStatus(str, enum.Enum):
    """Package status as seen by managers and admins."""

    CREATED = "created"
    SENT_TO_LOGIST = "sent_to_logist"
    LOGIST_CONFIRMED = "logist_confirmed"
    INFO_SENT_TO_CLIENT = "info_sent_to_client"
    CONFIRMED_BY_CLIENT = "confirmed_by_client"
    AWAITING_PAYMENT = "awaiting_payment"
    AWAITING_PROCESSING = "awaiting_processing"
    AWAITING_SHIPPING = "awaiting_shipping"
    SHIPPED_BY_LOGIST = "shipped_by_logist"
    PAID = "paid"


SubStatus = Union[ClientStatus, LogistStatus, ManagerStatus]
