"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from odysseus_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


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


def log_transfer_outcome(
    account_id: str,
    amount: Any,
    state: str,
    failure_kind: Optional[str],
    attempts: int,
    duration_ms: float,
    request_id: Optional[str] = None,
) -> None:
    """Log a finished transfer attempt; rejections are expected, not exceptional"""
    logging.info(
        "Transfer finished",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "amount": str(amount),
            "step": "transfer_complete",
            "state": state,
            "failure_kind": failure_kind,
            "attempts": attempts,
            "duration_ms": duration_ms,
        },
    )


def log_transfer_retry(attempt: int, delay_seconds: float, reason: str) -> None:
    """Log a transient failure that will be retried"""
    logging.warning(
        "Transfer attempt failed, retrying",
        extra={
            "step": "transfer_retry",
            "attempt": attempt,
            "delay_seconds": delay_seconds,
            "reason": reason,
        },
    )
