"""
Sealed secret sync -- the pipeline from .env text to the secret store.

Values are sealed to the store's public key before they leave the
process. The store never sees plaintext; neither does the wire.
"""

from .client import SecretStoreClient
from .engine import SyncEngine, run_sync
from .sealer import Sealer

__all__ = ["SecretStoreClient", "Sealer", "SyncEngine", "run_sync"]
