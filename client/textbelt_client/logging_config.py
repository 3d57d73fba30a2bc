"""
Logging configuration for the Textbelt client

The library itself only creates loggers; ``setup_logging`` is meant for
applications and the command line tool that want handlers installed.
"""

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone


def setup_logging(log_level=None, log_file=None, max_bytes=10*1024*1024, backup_count=5):
    """
    Set up logging configuration for the Textbelt client.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (if None, logs to stdout)
        max_bytes: Maximum size of log file before rotation (default 10MB)
        backup_count: Number of backup log files to keep (default 5)
    """

    if log_level is None:
        log_level = os.environ.get('LOG_LEVEL', 'INFO')
    log_level = log_level.upper()

    if log_file is None:
        log_file = os.environ.get('LOG_FILE')

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level))
    root_logger.handlers.clear()

    if log_file:
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized - Level: {log_level}, Output: {log_file or 'stdout'}")

    return logger


def log_api_event(operation, success=True, text_id=None, phone=None, userid=None,
                  status=None, quota_remaining=None, error=None):
    """
    Log a Textbelt API call with structured information.

    Args:
        operation: API operation (e.g., 'send', 'quota', 'otp_generate')
        success: Whether the vendor reported success
        text_id: Textbelt message ID
        phone: Recipient phone number
        userid: OTP user identifier
        status: Delivery status reported by the vendor
        quota_remaining: Remaining quota reported by the vendor
        error: Vendor error text if applicable
    """
    logger = logging.getLogger('textbelt.api')

    log_data = {
        'operation': operation,
        'success': success,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }

    if text_id:
        log_data['text_id'] = text_id
    if phone:
        log_data['phone'] = phone
    if userid:
        log_data['userid'] = userid
    if status:
        log_data['status'] = status
    if quota_remaining is not None:
        log_data['quota_remaining'] = quota_remaining
    if error:
        log_data['error'] = error

    # Format as key=value pairs for easy parsing
    log_message = ' '.join([f"{k}={v}" for k, v in log_data.items()])

    if success:
        logger.info(f"API: {log_message}")
    else:
        logger.warning(f"API: {log_message}")
