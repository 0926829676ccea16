"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across workflow, user and notification
services.

Usage:
    from parcel_tracker.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    # Log successful transition
    log_operation(
        logger,
        operation="apply_action",
        outcome="success",
        package_id=123,
        action="send_to_logist",
    )

    # Log rejected request
    log_operation(
        logger,
        operation="apply_action",
        outcome="forbidden",
        level=logging.WARNING,
        package_id=123,
        role="client",
    )
"""

import logging
from typing import Any

LOGGER_NAMESPACE = "parcel_tracker.services"


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger named 'parcel_tracker.services.<module>'.

    Example:
        >>> logger = get_service_logger("parcel_tracker.services.package_service")
        >>> logger.name
        'parcel_tracker.services.package_service'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured
    logging. Enum values are flattened to their string value.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "apply_action", "create_package")
        outcome: Outcome description (e.g., "success", "forbidden", "conflict")
        level: Log level (default: INFO)
        **context: Additional context fields (package_id, role, action, ...)
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
    }
    for key, value in context.items():
        extra[key] = getattr(value, "value", value)
    logger.log(level, f"{operation}: {outcome}", extra=extra)
