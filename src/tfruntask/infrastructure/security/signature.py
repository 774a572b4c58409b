"""HMAC signature verification for inbound run task requests.

HCP Terraform signs each request body with HMAC-SHA512 using the HMAC key
configured on the run task and sends the hex digest in the
``X-Tfc-Task-Signature`` header.
"""

from __future__ import annotations

import hashlib
import hmac

import structlog

from tfruntask.domain.exceptions import SignatureRejected

logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "X-Tfc-Task-Signature"


def _to_bytes(value: bytes | str) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_signature(body: bytes, key: bytes | str) -> str:
    """Return the hex encoded HMAC-SHA512 of ``body`` keyed with ``key``."""
    return hmac.new(_to_bytes(key), body, hashlib.sha512).hexdigest()


def verify_signature(body: bytes, signature: bytes | str, key: bytes | str) -> bool:
    """Check a claimed hex signature against the body.

    The comparison runs in constant time. A mismatch returns False; errors while
    hashing propagate to the caller.

    Args:
        body: Raw request body
        signature: Hex encoded signature sent by the platform
        key: Shared HMAC key

    Returns:
        True only if the signature matches exactly
    """
    expected = compute_signature(body, key).encode("ascii")
    return hmac.compare_digest(_to_bytes(signature), expected)


def authenticate_request(body: bytes, signature: str | None, key: str | None) -> None:
    """Apply the shared secret policy to an inbound request.

    =================  ==============  =========================
    HMAC key set       Header present  Result
    =================  ==============  =========================
    yes                no              401 Unauthorized
    no                 yes             400 cannot verify
    yes                yes             verify, 401 on mismatch
    no                 no              accepted unauthenticated
    =================  ==============  =========================

    Raises:
        SignatureRejected: If the request does not satisfy the policy
    """
    if signature and not key:
        logger.warning("Received a signed request but no HMAC key is configured")
        raise SignatureRejected(400, "Unexpected x-tfc-task-signature header")

    if key and not signature:
        logger.warning("Received an unsigned request")
        raise SignatureRejected(401, "Unauthorized")

    if not key:
        return

    if not verify_signature(body, signature or "", key):
        logger.warning("Received a request with an invalid signature")
        raise SignatureRejected(401, "Unauthorized")
