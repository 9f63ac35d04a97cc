"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "tuition-portal"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_checkout(
    request_id: str,
    deal_id: str,
    payment_type: str,
    total_amount: Decimal,
    duration_ms: float,
) -> None:
    """Log structured checkout outcome for reconciliation with Stripe"""
    logging.info(
        "Checkout session created",
        extra={
            "request_id": request_id,
            "deal_id": deal_id,
            "step": "checkout_created",
            "payment_type": payment_type,
            "total_amount": str(total_amount),
            "duration_ms": duration_ms,
        },
    )


def log_rejection(request_id: str, deal_id: str, payment_type: str, reason: str) -> None:
    logging.warning(
        "Checkout rejected",
        extra={
            "request_id": request_id,
            "deal_id": deal_id,
            "step": "checkout_rejected",
            "payment_type": payment_type,
            "reason": reason,
        },
    )
