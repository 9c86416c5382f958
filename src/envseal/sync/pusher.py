"""
Secret writer -- one authenticated PUT per sealed secret.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..models import (
    ACCEPTED_STATUSES,
    TRANSPORT_FAILURE_STATUS,
    KeyScope,
    PublicKeyInfo,
    PushOutcome,
)
from .client import SecretStoreClient, TransportError, split_repo

logger = logging.getLogger("envseal.sync.pusher")

ORG_VISIBILITY = "all"


def build_payload(ciphertext: str, key_info: PublicKeyInfo) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "encrypted_value": ciphertext,
        "key_id": key_info.key_id,
    }
    if key_info.scope is KeyScope.ORGANIZATION:
        payload["visibility"] = ORG_VISIBILITY
    return payload


class SecretPusher:
    """Writes sealed secrets to the endpoint matching the key's scope."""

    def __init__(self, client: SecretStoreClient) -> None:
        self.client = client

    def push(
        self,
        key: str,
        ciphertext: str,
        key_info: PublicKeyInfo,
        repo: str,
    ) -> PushOutcome:
        """Write one secret.

        Args:
            key: Secret name.
            ciphertext: Base64 sealed value.
            key_info: Key the value was sealed to; picks the endpoint.
            repo: ``owner/name`` resource identifier.

        Returns:
            PushOutcome. 201 and 204 are accepted; everything else,
            including transport failures, is not.
        """
        payload = build_payload(ciphertext, key_info)
        try:
            if key_info.scope is KeyScope.ORGANIZATION:
                org, _ = split_repo(repo)
                resp = self.client.put_organization_secret(org, key, payload)
            else:
                resp = self.client.put_repository_secret(repo, key, payload)
        except TransportError as exc:
            logger.warning("Secret %s: no response (%s)", key, exc)
            return PushOutcome(
                key=key,
                accepted=False,
                status_code=TRANSPORT_FAILURE_STATUS,
                status_text="Transport error",
                body=str(exc),
            )

        outcome = PushOutcome(
            key=key,
            accepted=resp.status_code in ACCEPTED_STATUSES,
            status_code=resp.status_code,
            status_text=resp.reason or "",
            body=resp.text or None,
        )
        logger.debug("Secret %s response status: %d", key, resp.status_code)
        return outcome
