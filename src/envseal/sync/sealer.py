"""
Sealed-box encryption for secret values.

Anonymous public-key encryption: the recipient's public key is all we
need, a fresh ephemeral key pair is generated per call, and only the
holder of the matching private key can open the result. We never
decrypt anything.

libsodium has a one-time initialization step. ``Sealer.ready()``
performs it explicitly and hands back a handle; every encryption in a
run goes through that handle.
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading

from nacl import encoding, exceptions, public
from nacl.bindings import sodium_init

from ..errors import EncryptionError

logger = logging.getLogger("envseal.sync.sealer")

_init_lock = threading.Lock()


class Sealer:
    """A ready-to-use sealed-box encryptor.

    Obtain one with :meth:`ready`, not the constructor.
    """

    _initialized = False

    @classmethod
    def ready(cls) -> "Sealer":
        """Initialize libsodium (once per process) and return a handle.

        Safe to call any number of times, from any thread.
        """
        with _init_lock:
            if not cls._initialized:
                sodium_init()
                cls._initialized = True
                logger.debug("libsodium initialized")
        return cls()

    def seal(self, plaintext: str, public_key: str) -> str:
        """Encrypt ``plaintext`` to a base64 recipient key.

        Args:
            plaintext: Secret value.
            public_key: Recipient public key, standard base64.

        Returns:
            Standard base64 ciphertext. Differs on every call.

        Raises:
            EncryptionError: If the key is malformed or sealing fails.
        """
        try:
            recipient = public.PublicKey(
                public_key.encode("ascii"), encoder=encoding.Base64Encoder,
            )
            sealed = public.SealedBox(recipient).encrypt(plaintext.encode("utf-8"))
        except (exceptions.CryptoError, binascii.Error, ValueError, TypeError) as exc:
            raise EncryptionError(f"Sealing failed: {exc}") from exc
        return base64.b64encode(sealed).decode("ascii")
