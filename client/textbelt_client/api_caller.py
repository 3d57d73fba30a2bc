"""
Textbelt API Client Module

This module sends SMS messages and one-time passwords through the Textbelt
API, and looks up quota and delivery status. Every call is a single blocking
HTTP request bounded by the configured timeout; nothing is retried or cached.
"""

import json
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import requests
from requests.exceptions import JSONDecodeError, Timeout

from .config import TextbeltConfig, Option
from .errors import TextbeltAPIError
from .logging_config import log_api_event

logger = logging.getLogger(__name__)


class MessageStatus(str, Enum):
    """Delivery state of a sent message as reported by Textbelt"""

    DELIVERED = "DELIVERED"
    SENT = "SENT"
    SENDING = "SENDING"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Optional[str]) -> Union["MessageStatus", str]:
        """
        Map a vendor status string to a member.

        An empty or missing status is UNKNOWN. Strings outside the known set
        are returned unchanged so new vendor states are not lost.
        """
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return value


@dataclass
class TextbeltResponse:
    """The JSON envelope returned by every Textbelt endpoint"""

    success: bool = False
    status: str = ""
    text_id: str = ""
    error: str = ""
    quota_remaining: int = 0
    otp: str = ""
    is_valid_otp: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextbeltResponse":
        """
        Build an envelope from decoded JSON.

        Absent or null fields stay zero-valued. A field of the wrong JSON type
        raises ValueError, like any other undecodable reply.
        """
        text_id = _field(data, "textId", (str, int), "")
        return cls(
            success=_field(data, "success", bool, False),
            status=_field(data, "status", str, ""),
            text_id=str(text_id),
            error=_field(data, "error", str, ""),
            quota_remaining=_field(data, "quotaRemaining", int, 0),
            otp=_field(data, "otp", str, ""),
            is_valid_otp=_field(data, "isValidOtp", bool, False),
        )


def _field(data: Dict[str, Any], name: str, types, default):
    value = data.get(name)
    if value is None:
        return default
    # bool is an int subclass; a flag is never a count or an ID
    if not isinstance(value, types) or (isinstance(value, bool) and types is not bool):
        raise ValueError(f"Envelope field {name!r} has unexpected type {type(value).__name__}")
    return value


@dataclass
class CustomOTP:
    """Parameters for a customized OTP message"""

    phone: str
    userid: str  # arbitrary identifier the OTP is bound to
    message: str = ""  # custom text; Textbelt replaces $OTP with the code
    lifetime: int = 0  # seconds the code stays valid, vendor default when 0
    length: int = 0  # number of digits, vendor default when 0


class TextbeltClient:
    """Client for the Textbelt API"""

    def __init__(self, config: Optional[TextbeltConfig] = None):
        self.config = config if config is not None else TextbeltConfig()

    def __repr__(self):
        # Omits the API key
        return f"TextbeltClient(url={self.config.url!r}, timeout={self.config.timeout})"

    def _get(self, path: str, params: Optional[Dict[str, str]] = None,
             log_path: Optional[str] = None) -> TextbeltResponse:
        log_path = log_path or path
        logger.debug(f"GET {log_path}")
        return self._request("GET", path, log_path, params=params)

    def _post_form(self, path: str, values: Dict[str, str]) -> TextbeltResponse:
        logger.debug(f"POST {path} fields={sorted(k for k in values if k != 'key')}")
        return self._request("POST", path, path, data=values)

    def _request(self, method: str, path: str, log_path: str, **kwargs) -> TextbeltResponse:
        """
        Perform one request and decode its envelope.

        The configured timeout bounds the whole call, not just the connect
        and each socket read: the body is streamed and the deadline is
        checked as it arrives.
        """
        deadline = time.monotonic() + self.config.timeout
        with requests.request(method, f"{self.config.url}{path}", stream=True,
                              timeout=self.config.timeout, **kwargs) as response:
            self._check_deadline(deadline, log_path)
            body = self._read_body(response, deadline, log_path)
        return self._decode(response, body, log_path)

    def _check_deadline(self, deadline: float, log_path: str) -> None:
        if time.monotonic() >= deadline:
            raise Timeout(f"{log_path} did not complete within {self.config.timeout}s")

    def _read_body(self, response: requests.Response, deadline: float, log_path: str) -> bytes:
        chunks = []
        try:
            # Byte-sized chunks so a trickling body cannot outlast the deadline
            for chunk in response.iter_content(chunk_size=1):
                chunks.append(chunk)
                self._check_deadline(deadline, log_path)
        except requests.exceptions.ConnectionError as e:
            # requests reports a read timeout inside iter_content as ConnectionError
            if time.monotonic() >= deadline:
                raise Timeout(f"{log_path} did not complete within {self.config.timeout}s") from e
            raise
        return b"".join(chunks)

    def _decode(self, response: requests.Response, body: bytes, log_path: str) -> TextbeltResponse:
        # Textbelt reports failures in the envelope, so the HTTP status is not checked
        logger.debug(f"Response {response.status_code} from {log_path}")
        text = body.decode(response.encoding or "utf-8", errors="replace")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise JSONDecodeError(e.msg, e.doc, e.pos) from e
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object from {log_path}, got {type(data).__name__}")
        return TextbeltResponse.from_dict(data)

    def quota(self) -> int:
        """Return the number of messages that can still be sent with this key"""
        r = self._get(f"/quota/{quote(self.config.key, safe='')}", log_path="/quota/<key>")
        log_api_event('quota', success=r.success, quota_remaining=r.quota_remaining, error=r.error)
        return r.quota_remaining

    def status(self, text_id: str) -> Union[MessageStatus, str]:
        """Return the delivery status of a previously sent message"""
        r = self._get(f"/status/{quote(text_id, safe='')}")
        status = MessageStatus.parse(r.status)
        log_api_event('status', success=r.success, text_id=text_id, status=r.status, error=r.error)
        return status

    def send(self, phone: str, message: str) -> str:
        """
        Send an SMS message.

        Args:
            phone: Recipient phone number
            message: Text to send

        Returns:
            str: The Textbelt message ID, usable with status()

        Raises:
            TextbeltAPIError: Textbelt rejected the message
        """
        values = {
            "phone": phone,
            "message": message,
            "key": self.config.key,
        }
        r = self._post_form("/text", values)
        log_api_event('send', success=r.success, text_id=r.text_id, phone=phone, error=r.error)
        if not r.success:
            raise TextbeltAPIError(r.error, response=r)
        return r.text_id

    def generate_otp(self, phone: str, userid: str) -> str:
        """Generate an OTP, text it to ``phone`` and return the code"""
        values = {
            "phone": phone,
            "userid": userid,
            "key": self.config.key,
        }
        return self._send_otp(values)

    def generate_custom_otp(self, otp: CustomOTP) -> str:
        """Like generate_otp(), with optional message template, lifetime and length"""
        values = {
            "phone": otp.phone,
            "userid": otp.userid,
            "key": self.config.key,
        }
        if otp.message:
            values["message"] = otp.message
        if otp.lifetime > 0:
            values["lifetime"] = str(otp.lifetime)
        if otp.length > 0:
            values["length"] = str(otp.length)
        return self._send_otp(values)

    def verify_otp(self, otp: str, userid: str) -> bool:
        """
        Check whether ``otp`` is the valid code for ``userid``.

        Returns:
            bool: True if the code is valid

        Raises:
            TextbeltAPIError: Textbelt could not perform the check
        """
        params = {
            "otp": otp,
            "userid": userid,
            "key": self.config.key,
        }
        r = self._get("/otp/verify", params=params)
        log_api_event('otp_verify', success=r.success, userid=userid, error=r.error)
        if not r.success:
            raise TextbeltAPIError(r.error, response=r)
        return r.is_valid_otp

    def _send_otp(self, values: Dict[str, str]) -> str:
        r = self._post_form("/otp/generate", values)
        log_api_event('otp_generate', success=r.success, phone=values["phone"],
                      userid=values["userid"], error=r.error)
        if not r.success:
            raise TextbeltAPIError(r.error, response=r)
        return r.otp


def new(*options: Option) -> TextbeltClient:
    """
    Create a client from the defaults with ``options`` applied in order.

    Example:
        client = new(with_key("my-key"), with_timeout(10))
    """
    return TextbeltClient(TextbeltConfig().apply(*options))


def get_quota(api_config: TextbeltConfig) -> int:
    """
    Get the remaining message quota

    Args:
        api_config: Textbelt API configuration

    Returns:
        int: Number of messages left
    """
    return TextbeltClient(api_config).quota()


def send_sms(api_config: TextbeltConfig, phone: str, message: str) -> str:
    """
    Send an SMS message

    Args:
        api_config: Textbelt API configuration
        phone: Recipient phone number
        message: The message to send

    Returns:
        str: Textbelt message ID
    """
    return TextbeltClient(api_config).send(phone, message)


def get_status(api_config: TextbeltConfig, text_id: str) -> Union[MessageStatus, str]:
    return TextbeltClient(api_config).status(text_id)


def generate_otp(api_config: TextbeltConfig, phone: str, userid: str) -> str:
    return TextbeltClient(api_config).generate_otp(phone, userid)


def verify_otp(api_config: TextbeltConfig, otp: str, userid: str) -> bool:
    return TextbeltClient(api_config).verify_otp(otp, userid)
