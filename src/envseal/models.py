"""
Pydantic models for a sync run.

A run starts from a SecretMap (plain ordered dict from the parser),
resolves one PublicKeyInfo, produces one PushOutcome per key, and
folds them into a SyncReport. The SyncReport is the only thing a
caller ever needs to decide which secrets to retry.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import PushError

ACCEPTED_STATUSES = frozenset({201, 204})
TRANSPORT_FAILURE_STATUS = 0


class KeyScope(str, Enum):
    """Level at which the recipient key and write endpoint live."""

    REPOSITORY = "repository"
    ORGANIZATION = "organization"


class PublicKeyInfo(BaseModel):
    """Recipient public key, resolved once per run and never mutated."""

    model_config = ConfigDict(frozen=True)

    public_key: str
    key_id: str
    scope: KeyScope


class PushOutcome(BaseModel):
    """Result of writing (or failing to write) a single secret."""

    key: str
    accepted: bool
    status_code: int = TRANSPORT_FAILURE_STATUS
    status_text: str = ""
    body: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, key: str, error: str) -> "PushOutcome":
        """Outcome for a key that never reached the secret store."""
        return cls(key=key, accepted=False, error=error)

    def raise_for_status(self) -> None:
        """Raise PushError unless the store accepted the write."""
        if not self.accepted:
            raise PushError(self)


class SyncReport(BaseModel):
    """Aggregated outcome of a run.

    Every key of the SecretMap ends up in exactly one of
    ``succeeded_keys`` or ``failed_keys``.
    """

    repo: str
    scope: Optional[KeyScope] = None
    succeeded_keys: list[str] = Field(default_factory=list)
    failed_keys: list[str] = Field(default_factory=list)
    outcomes: list[PushOutcome] = Field(default_factory=list)

    @property
    def overall_success(self) -> bool:
        return not self.failed_keys

    def record(self, outcome: PushOutcome) -> None:
        """Fold one outcome into the report.

        Raises:
            ValueError: If the key was already recorded.
        """
        if outcome.key in self.succeeded_keys or outcome.key in self.failed_keys:
            raise ValueError(f"Key {outcome.key} already recorded")
        if outcome.accepted:
            self.succeeded_keys.append(outcome.key)
        else:
            self.failed_keys.append(outcome.key)
        self.outcomes.append(outcome)

    def to_result(self) -> RunResult:
        if self.overall_success:
            return RunResult(
                success=True, variables=list(self.succeeded_keys), report=self,
            )
        return RunResult(
            success=False, variables=list(self.failed_keys), report=self,
        )


class RunResult(BaseModel):
    """What a caller receives from a run.

    On success ``variables`` lists the written keys. On failure it lists
    the failed keys, or a single reason string when the run never got
    as far as processing secrets.
    """

    success: bool
    variables: list[str] = Field(default_factory=list)
    status_code: int = 200
    report: Optional[SyncReport] = Field(default=None, exclude=True)
