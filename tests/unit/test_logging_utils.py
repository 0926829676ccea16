"""Tests for service logging helpers."""

import logging

from parcel_tracker.models import ManagerStatus
from parcel_tracker.services.logging_utils import get_service_logger, log_operation


class TestGetServiceLogger:
    def test_namespaced_by_module(self):
        logger = get_service_logger("parcel_tracker.services.package_service")
        assert logger.name == "parcel_tracker.services.package_service"

    def test_plain_name(self):
        assert get_service_logger("audit").name == "parcel_tracker.services.audit"


class TestLogOperation:
    def test_structured_extra(self, caplog):
        logger = get_service_logger("test_ops")
        with caplog.at_level(logging.INFO, logger=logger.name):
            log_operation(
                logger,
                operation="apply_action",
                outcome="success",
                package_id=3,
                to_status=ManagerStatus.PAID,
            )

        record = caplog.records[-1]
        assert record.getMessage() == "apply_action: success"
        assert record.operation == "apply_action"
        assert record.outcome == "success"
        assert record.package_id == 3
        assert record.to_status == "paid"

    def test_level(self, caplog):
        logger = get_service_logger("test_ops")
        with caplog.at_level(logging.INFO, logger=logger.name):
            log_operation(logger, "apply_action", "forbidden", level=logging.WARNING)
        assert caplog.records[-1].levelno == logging.WARNING
