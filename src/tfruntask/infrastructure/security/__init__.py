"""Request authentication."""

from tfruntask.infrastructure.security.signature import (
    SIGNATURE_HEADER,
    authenticate_request,
    compute_signature,
    verify_signature,
)

__all__ = [
    "SIGNATURE_HEADER",
    "authenticate_request",
    "compute_signature",
    "verify_signature",
]
