"""
Error taxonomy for a sync run.

Run-fatal: InputError, ResourceAccessError, KeyDiscoveryError.
Per-key (recorded, never abort the run): EncryptionError, PushError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import PushOutcome


class EnvsealError(Exception):
    """Base class for every error envseal raises on purpose."""


class InputError(EnvsealError):
    """Required inputs are missing or malformed."""


class ResourceAccessError(EnvsealError):
    """The target resource does not exist or the credential cannot see it."""


class KeyDiscoveryError(EnvsealError):
    """The recipient public key could not be resolved.

    Args:
        message: Human-readable reason.
        status: HTTP status of the failing lookup (0 for transport failures).
        body: Response body, when one was received.
    """

    def __init__(
        self, message: str, status: int = 0, body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class KeyNotFound(KeyDiscoveryError):
    """Neither the repository nor the organization exposes a public key."""


class EncryptionError(EnvsealError):
    """Sealing a single value failed."""


class PushError(EnvsealError):
    """The secret store did not accept a write."""

    def __init__(self, outcome: "PushOutcome") -> None:
        super().__init__(
            f"Secret {outcome.key} rejected: "
            f"{outcome.status_code} {outcome.status_text}"
        )
        self.outcome = outcome
