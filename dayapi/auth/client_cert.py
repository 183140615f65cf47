"""
Client certificate subject check for the DayData write endpoint.

Mutual TLS is terminated in front of this service. The proxy forwards the
verified certificate subject in a request header, or the ASGI server exposes
it through the ``tls`` scope extension. This module only compares that value
against the configured subject; it never inspects certificates itself.

CHANGELOG:
- 2026-10-19: Initial creation
- 2026-10-19: Decode header carriers as UTF-8 so non-ASCII subjects match

TODO:
- None
"""

import logging
import secrets

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)


def _header_value(request: Request, name: str) -> str | None:
    """Return one header value decoded as UTF-8, falling back to latin-1."""
    key = name.lower().encode("latin-1")
    for raw_name, raw_value in request.headers.raw:
        if raw_name.lower() == key:
            try:
                return raw_value.decode("utf-8")
            except UnicodeDecodeError:
                return raw_value.decode("latin-1")
    return None


def extract_cert_subject(request: Request, header_names: list[str]) -> str | None:
    """Return the presented certificate subject, or None if there is none.

    Headers are checked in the given order; the first non-empty one wins.
    Header bytes are decoded as UTF-8, so a proxy forwarding a subject such
    as ``CN=Zürich`` matches the configured string.
    When no header carries a value, the ASGI TLS extension field
    ``client_cert_name`` is used.

    Args:
        request: The incoming FastAPI request.
        header_names: Header names to check, most preferred first.

    Returns:
        str | None: The subject string, or None if no carrier holds one.
    """
    for name in header_names:
        value = _header_value(request, name)
        if value:
            return value

    tls = request.scope.get("extensions", {}).get("tls") or {}
    subject = tls.get("client_cert_name")
    if subject:
        return subject
    return None


def subjects_match(received: str, expected: str) -> bool:
    """Exact, case-sensitive comparison in constant time."""
    return secrets.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


class ClientCertAuth:
    """FastAPI-compatible client certificate subject gate.

    Attributes:
        expected_subject: The only subject allowed through. Empty means the
            service is misconfigured and every request is refused with 500.
        header_names: Ordered header carriers for the subject.
    """

    def __init__(self, expected_subject: str, header_names: list[str]) -> None:
        self.expected_subject = expected_subject
        self.header_names = header_names

    def verify(self, request: Request) -> str:
        """Check the request's certificate subject against the expected one.

        Args:
            request: The incoming FastAPI request.

        Returns:
            str: The accepted subject.

        Raises:
            HTTPException: 500 if no expected subject is configured.
            HTTPException: 403 if no subject was presented or it differs.
        """
        if not self.expected_subject:
            logger.error("CLIENT_CERT_SUBJECT is not configured, refusing write")
            raise HTTPException(
                status_code=500,
                detail={
                    "error": "Server configuration error",
                    "message": "Expected client certificate subject is not configured",
                },
            )

        received = extract_cert_subject(request, self.header_names)
        if received is None:
            logger.warning("Rejected %s: no client certificate", request.url.path)
            raise HTTPException(
                status_code=403,
                detail={
                    "error": "Forbidden",
                    "message": "client certificate required",
                },
            )

        if not subjects_match(received, self.expected_subject):
            logger.warning(
                "Rejected %s: certificate subject %r does not match",
                request.url.path,
                received,
            )
            raise HTTPException(
                status_code=403,
                detail={
                    "error": "Forbidden",
                    "message": "invalid client certificate",
                    "received": received,
                },
            )

        return received
