"""
Classification of outbound request failures.

``classify_exception`` inspects the exception raised by the HTTP client (and
the exceptions chained beneath it) and reduces it to one of the
``TransportFailure`` variants. ``describe_failure`` turns a variant into the
message shown to the user.
"""
import asyncio
import os
import socket
import ssl
from typing import Iterator, Optional

import httpx

from contracts.transport_failure import (
    ConnectionFailure,
    DNSFailure,
    OtherFailure,
    TimeoutFailure,
    TLSFailure,
    TransportFailure,
)

MAX_ERROR_LENGTH = 200
DEFAULT_TIMEOUT_SECONDS = 30

_TIMEOUT_ERRORS = (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)
_DNS_NOT_FOUND_CODES = {
    code
    for code in (
        getattr(socket, "EAI_NONAME", None),
        getattr(socket, "EAI_NODATA", None),
    )
    if code is not None
}


def _iter_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield the exception followed by its causes, outermost first."""
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        nested = exc.__cause__ or exc.__context__
        if nested is None and getattr(exc, "exceptions", None):
            # Exception groups, e.g. one error per failed connection attempt.
            nested = exc.exceptions[-1]
        exc = nested


def _find(exc: BaseException, types) -> Optional[BaseException]:
    for item in _iter_chain(exc):
        if isinstance(item, types):
            return item
    return None


def _connection_detail(exc: BaseException) -> Optional[str]:
    # Prefer the operating system's description of the innermost socket error.
    # asyncio puts the peer address in strerror, so the errno is the reliable part.
    chain = list(_iter_chain(exc))
    for item in reversed(chain):
        if not isinstance(item, OSError):
            continue
        if isinstance(item.errno, int) and item.errno > 0:
            return os.strerror(item.errno)
        if item.strerror:
            return item.strerror
    for item in chain:
        text = str(item)
        if text:
            return text
    return None


def classify_exception(exc: BaseException, host: Optional[str] = None) -> TransportFailure:
    """
    Map an exception raised while sending a request to a transport failure variant.

    Args:
        exc (BaseException): The exception raised by the HTTP client.
        host (Optional[str]): The host being contacted, reported on DNS failures.

    Returns:
        TransportFailure: The most specific matching variant.
    """
    if _find(exc, _TIMEOUT_ERRORS) is not None:
        return TimeoutFailure()

    if _find(exc, ssl.SSLCertVerificationError) is not None:
        return TLSFailure(certificate_verification=True)

    if _find(exc, ssl.SSLError) is not None:
        return TLSFailure(certificate_verification=False)

    dns_error = _find(exc, socket.gaierror)
    if dns_error is not None:
        return DNSFailure(
            not_found=dns_error.errno in _DNS_NOT_FOUND_CODES,
            name=host or "",
            detail=dns_error.strerror or str(dns_error),
        )

    if _find(exc, (httpx.ConnectError, OSError)) is not None:
        return ConnectionFailure(detail=_connection_detail(exc))

    return OtherFailure(message=str(exc) or type(exc).__name__)


def describe_failure(
    failure: TransportFailure, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
) -> str:
    """
    Render a transport failure as a human-readable message.
    """
    if isinstance(failure, TimeoutFailure):
        return f"timeout: request exceeded {timeout_seconds:g} seconds"

    if isinstance(failure, TLSFailure):
        if failure.certificate_verification:
            return "SSL/TLS error: certificate verification failed"
        return "SSL/TLS error: invalid certificate or protocol error"

    if isinstance(failure, DNSFailure):
        if failure.not_found:
            return f"DNS error: host not found ({failure.name})"
        return f"DNS error: {failure.detail}"

    if isinstance(failure, ConnectionFailure):
        if failure.detail:
            return f"connection error: {failure.detail}"
        return "connection error: failed to connect to host"

    message = failure.message
    if len(message) > MAX_ERROR_LENGTH:
        message = message[:MAX_ERROR_LENGTH] + "..."
    return message
