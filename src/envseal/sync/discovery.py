"""
Public key discovery -- repository first, organization as fallback.

The scope that answers decides everything downstream: which write
endpoint a secret goes to, and whether the payload carries a
visibility field.
"""

from __future__ import annotations

import logging

from ..errors import KeyDiscoveryError, KeyNotFound
from ..models import KeyScope, PublicKeyInfo
from .client import ApiResult, Failed, Found, NotFound, SecretStoreClient, split_repo

logger = logging.getLogger("envseal.sync.discovery")


def _to_key_info(result: Found, scope: KeyScope) -> PublicKeyInfo:
    key = result.data.get("key")
    key_id = result.data.get("key_id")
    if not key or key_id in (None, ""):
        raise KeyDiscoveryError(
            f"{scope.value} public key response is missing key or key_id",
            status=result.status,
        )
    return PublicKeyInfo(public_key=key, key_id=str(key_id), scope=scope)


def _lookup_failed(result: Failed, scope: KeyScope) -> KeyDiscoveryError:
    return KeyDiscoveryError(
        f"{scope.value} public key lookup failed: "
        f"{result.status} {result.reason}".rstrip(),
        status=result.status,
        body=result.body,
    )


def discover_public_key(client: SecretStoreClient, repo: str) -> PublicKeyInfo:
    """Resolve the recipient public key for ``repo``.

    Args:
        client: Authenticated API client.
        repo: ``owner/name`` resource identifier.

    Returns:
        PublicKeyInfo tagged with the scope that answered.

    Raises:
        KeyNotFound: If both the repository and organization lookups 404.
        KeyDiscoveryError: On any other non-success response.
    """
    org, _ = split_repo(repo)

    result: ApiResult = client.get_repository_public_key(repo)
    if isinstance(result, Found):
        info = _to_key_info(result, KeyScope.REPOSITORY)
        logger.info("Using repository public key %s", info.key_id)
        return info
    if isinstance(result, Failed):
        raise _lookup_failed(result, KeyScope.REPOSITORY)

    logger.info("No repository public key for %s, trying organization %s", repo, org)
    result = client.get_organization_public_key(org)
    if isinstance(result, Found):
        info = _to_key_info(result, KeyScope.ORGANIZATION)
        logger.info("Using organization public key %s", info.key_id)
        return info
    if isinstance(result, NotFound):
        raise KeyNotFound(
            "Neither repository nor organization public key found",
            status=result.status,
        )
    raise _lookup_failed(result, KeyScope.ORGANIZATION)
