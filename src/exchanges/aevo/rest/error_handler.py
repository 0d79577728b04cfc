from typing import Dict, Optional, Type

import msgspec

from infrastructure.exceptions.exchange import (
    AuthenticationError,
    ExchangeRestError,
    InvalidParameterError,
    OrderNotFoundError,
    RateLimitErrorRest,
)
from infrastructure.networking.http import default_error_handler


class AevoErrorResponse(msgspec.Struct, frozen=True):
    error: str


ERROR_MAPPING: Dict[str, Type[ExchangeRestError]] = {
    "ORDER_DOES_NOT_EXIST": OrderNotFoundError,
    "ORDER_NOT_FOUND": OrderNotFoundError,
    "INVALID_SIGNATURE": AuthenticationError,
    "UNAUTHORIZED": AuthenticationError,
    "INVALID_API_KEY": AuthenticationError,
    "RATE_LIMIT_EXCEEDED": RateLimitErrorRest,
    "INVALID_AMOUNT": InvalidParameterError,
    "INVALID_PRICE": InvalidParameterError,
}


def handle_aevo_error(status: int, response_text: str,
                      headers: Optional[Dict[str, str]] = None) -> ExchangeRestError:
    """
    Convert an Aevo error body {"error": "<CODE>"} to a unified REST exception.

    Bodies that are not in that shape fall back to the HTTP status mapping.
    """
    try:
        aevo_error = msgspec.json.decode(response_text, type=AevoErrorResponse)
    except (msgspec.DecodeError, msgspec.ValidationError):
        return default_error_handler(status, response_text, headers)

    error_class = ERROR_MAPPING.get(aevo_error.error)
    if error_class is None:
        return default_error_handler(status, f"Aevo Error: {aevo_error.error}", headers)
    return error_class(status, f"Aevo Error: {aevo_error.error}")
