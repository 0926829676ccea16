"""
Constants for the Parcel Tracker application.

This module defines system-wide constants including:
- Application metadata
- Tracking code format
- Package file upload rules
- Notification defaults
"""

from typing import List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Parcel Tracker"
APP_VERSION = "0.1.0"
DATABASE_FILENAME = "parcel_tracker.db"

# ============================================================================
# Tracking Codes
# ============================================================================

# Format: PKG-<epoch millis>-<suffix>
TRACKING_CODE_PREFIX = "PKG"
TRACKING_CODE_SUFFIX_LENGTH = 4
TRACKING_CODE_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
TRACKING_CODE_MAX_ATTEMPTS = 5

# ============================================================================
# Package Files
# ============================================================================

ALLOWED_FILE_EXTENSIONS: List[str] = [
    "jpeg",
    "jpg",
    "png",
    "gif",
    "pdf",
    "doc",
    "docx",
    "mp4",
    "mov",
    "avi",
]

DEFAULT_MAX_UPLOAD_MB = 50

# ============================================================================
# Packages
# ============================================================================

# Fields a client must supply when creating a package
REQUIRED_PACKAGE_FIELDS: List[str] = [
    "recipient_name",
    "delivery_type",
    "courier_service",
    "tracking_number",
    "item_name",
    "shop_name",
]

# Fields a client may supply when creating a package
OPTIONAL_PACKAGE_FIELDS: List[str] = [
    "telegram_username",
    "locker_address",
    "locker_code",
    "estimated_delivery_date",
    "comments",
]

# Max lengths for string columns
MAX_NAME_LENGTH = 200
MAX_CODE_LENGTH = 64
MAX_MESSAGE_LENGTH = 5000
