"""
Exceptions raised by the Textbelt client.

Transport and JSON decoding failures are not wrapped: they reach the caller
as the ``requests`` exceptions they already are.
"""


class TextbeltError(Exception):
    """Base class for errors raised by this package"""


class TextbeltAPIError(TextbeltError):
    """The vendor answered with ``success: false``"""

    def __init__(self, message: str, response=None):
        super().__init__(message)
        self.response = response


class TextbeltConfigError(TextbeltError):
    """Invalid or unreadable client configuration"""
