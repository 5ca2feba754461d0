"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from pounds_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on stdout"""
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    logger.addHandler(handler)


def log_funding(
    request_id: str,
    user_id: str,
    reference: str,
    amount_kobo: int,
    outcome: str,
    duration_ms: float,
) -> None:
    """Log structured funding outcome"""
    logging.info(
        "Funding processed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "funding_processed",
            "reference": reference,
            "amount_kobo": amount_kobo,
            "outcome": outcome,
            "duration_ms": duration_ms,
        },
    )


def log_withdrawal(
    request_id: str,
    user_id: str,
    amount_kobo: Optional[int],
    outcome: str,
    duration_ms: float,
) -> None:
    """Log structured withdrawal outcome. The PIN is never logged."""
    logging.info(
        "Withdrawal request processed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "withdrawal_processed",
            "amount_kobo": amount_kobo,
            "outcome": outcome,
            "duration_ms": duration_ms,
        },
    )
