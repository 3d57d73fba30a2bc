"""
Textbelt Client

A Python client library for the Textbelt SMS and one-time password API.
"""

from .api_caller import (
    MessageStatus, TextbeltResponse, CustomOTP, TextbeltClient, new,
    get_quota, send_sms, get_status, generate_otp, verify_otp,
)
from .config import TextbeltConfig, with_key, with_url, with_timeout
from .errors import TextbeltError, TextbeltAPIError, TextbeltConfigError

__all__ = [
    'MessageStatus',
    'TextbeltResponse',
    'CustomOTP',
    'TextbeltClient',
    'TextbeltConfig',
    'TextbeltError',
    'TextbeltAPIError',
    'TextbeltConfigError',
    'new',
    'with_key',
    'with_url',
    'with_timeout',
    'get_quota',
    'send_sms',
    'get_status',
    'generate_otp',
    'verify_otp',
]

__version__ = "0.1.0"
