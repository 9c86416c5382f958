"""
Sync Engine -- parse, discover, seal, push, report.

    check access -> parse env -> discover key (once)
        -> for each secret: seal -> push -> record
        -> SyncReport

Access, parse and discovery failures end the run. A single secret
failing to seal or push never does: it is recorded and the loop moves
on, so the report always says exactly which keys still need retrying.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

import requests

from ..config import EnvsealConfig
from ..envparser import parse_env
from ..errors import (
    EncryptionError,
    InputError,
    KeyDiscoveryError,
    PushError,
    ResourceAccessError,
)
from ..models import PublicKeyInfo, PushOutcome, RunResult, SyncReport
from .client import Failed, NotFound, SecretStoreClient, split_repo
from .discovery import discover_public_key
from .pusher import SecretPusher
from .sealer import Sealer

logger = logging.getLogger("envseal.sync.engine")

REPO_ACCESS_ERROR = "Repository access error"


def validate_inputs(
    repo: Optional[str], token: Optional[str], env_text: Optional[str],
) -> str:
    """Reject a run before any network activity.

    Returns:
        The normalized ``owner/name`` identifier.

    Raises:
        InputError: If any input is missing or the repo id is malformed.
    """
    if not repo or not token or not env_text:
        raise InputError("Missing required parameters: repo, token, or env")
    try:
        owner, name = split_repo(repo)
    except ValueError as exc:
        raise InputError(str(exc)) from exc
    return f"{owner}/{name}"


class SyncEngine:
    """Orchestrates one sealed-secret sync against a single resource.

    Args:
        client: Authenticated secret store client.
        config: Run configuration (worker count).
        sealer: Ready sealer handle. Created via Sealer.ready() if omitted.
    """

    def __init__(
        self,
        client: SecretStoreClient,
        config: Optional[EnvsealConfig] = None,
        sealer: Optional[Sealer] = None,
    ) -> None:
        self.client = client
        self.config = config or client.config
        self.pusher = SecretPusher(client)
        self._sealer = sealer

    def check_access(self, repo: str) -> None:
        """Fail fast if the resource is missing or invisible to the token.

        Raises:
            ResourceAccessError: If the access check reports not-found.
        """
        result = self.client.get_repository(repo)
        if isinstance(result, NotFound):
            logger.error("Repository %s not found or token lacks access", repo)
            raise ResourceAccessError(REPO_ACCESS_ERROR)
        if isinstance(result, Failed):
            logger.warning(
                "Access check for %s returned %d %s, continuing",
                repo, result.status, result.reason,
            )

    def sync(self, repo: str, env_text: str) -> SyncReport:
        """Run the full pipeline.

        Args:
            repo: ``owner/name`` resource identifier.
            env_text: Raw .env contents.

        Returns:
            SyncReport accounting for every parsed key exactly once.

        Raises:
            ResourceAccessError: Access check said not-found.
            KeyDiscoveryError: No usable public key.
        """
        self.check_access(repo)

        secrets = MappingProxyType(parse_env(env_text))
        logger.info("Parsed %d secret(s) for %s", len(secrets), repo)

        key_info = discover_public_key(self.client, repo)
        sealer = self._sealer or Sealer.ready()

        report = SyncReport(repo=repo, scope=key_info.scope)
        for outcome in self._run_all(secrets, key_info, repo, sealer):
            report.record(outcome)

        logger.info(
            "Sync of %s finished: %d succeeded, %d failed",
            repo, len(report.succeeded_keys), len(report.failed_keys),
        )
        return report

    def _run_all(
        self,
        secrets: Mapping[str, str],
        key_info: PublicKeyInfo,
        repo: str,
        sealer: Sealer,
    ) -> Iterator[PushOutcome]:
        """Yield one outcome per secret, in SecretMap order."""
        items = list(secrets.items())
        workers = min(self.config.workers, len(items))

        if workers <= 1:
            for key, value in items:
                yield self._sync_one(key, value, key_info, repo, sealer)
            return

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="envseal-push",
        ) as pool:
            yield from pool.map(
                lambda item: self._sync_one(item[0], item[1], key_info, repo, sealer),
                items,
            )

    def _sync_one(
        self,
        key: str,
        value: str,
        key_info: PublicKeyInfo,
        repo: str,
        sealer: Sealer,
    ) -> PushOutcome:
        logger.debug("Processing secret %s", key)
        try:
            ciphertext = sealer.seal(value, key_info.public_key)
            outcome = self.pusher.push(key, ciphertext, key_info, repo)
            outcome.raise_for_status()
        except EncryptionError as exc:
            logger.error("Secret %s: %s", key, exc)
            return PushOutcome.failure(key, str(exc))
        except PushError as exc:
            logger.warning("%s", exc)
            return exc.outcome
        except Exception as exc:
            logger.exception("Secret %s: unexpected error", key)
            return PushOutcome.failure(key, str(exc) or type(exc).__name__)
        return outcome


def run_sync(
    repo: Optional[str],
    token: Optional[str],
    env_text: Optional[str],
    config: Optional[EnvsealConfig] = None,
    session: Optional[requests.Session] = None,
) -> RunResult:
    """Run a sync and map every possible ending onto a RunResult.

    This is the boundary a transport (CLI, HTTP handler) calls. It
    never raises.
    """
    try:
        repo = validate_inputs(repo, token, env_text)
        config = config or EnvsealConfig()
        client = SecretStoreClient(token, config=config, session=session)
        try:
            report = SyncEngine(client, config=config).sync(repo, env_text)
        finally:
            client.close()
    except InputError as exc:
        logger.error("Invalid input: %s", exc)
        return RunResult(success=False, variables=[str(exc)], status_code=400)
    except ResourceAccessError as exc:
        return RunResult(success=False, variables=[str(exc)], status_code=404)
    except KeyDiscoveryError as exc:
        logger.error("Key discovery failed: %s", exc)
        return RunResult(success=False, variables=[str(exc)], status_code=500)
    except Exception as exc:
        logger.exception("Unexpected error syncing secrets")
        return RunResult(
            success=False, variables=[str(exc) or "Unknown error"], status_code=500,
        )
    return report.to_result()
