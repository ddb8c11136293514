"""At-rest obfuscation of stored API tokens.

Tokens are encrypted with AES-256-CBC under a key derived (PBKDF2-SHA256,
100,000 iterations) from a passphrase and salt that ship with the program.
Anyone who has this source can decrypt the config file; the only thing
this protects against is a token being read off the screen or out of a
casually shared config file.

Envelope format: ``hex(iv) + ":" + hex(ciphertext)``.
"""

import os
import re
from functools import cached_property

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from slack_cli.errors import CryptoError

PASSPHRASE = b"slack-cli-key"
SALT = b"slack-cli-salt-v1"
KDF_ITERATIONS = 100_000
KEY_LENGTH = 32
IV_LENGTH = 16
SEPARATOR = ":"

_IV_PATTERN = re.compile(rf"^[0-9a-fA-F]{{{IV_LENGTH * 2}}}$")


class TokenCipher:
    def __init__(self, passphrase: bytes = PASSPHRASE, salt: bytes = SALT) -> None:
        self._passphrase = passphrase
        self._salt = salt

    @cached_property
    def _key(self) -> bytes:
        # Derived once per instance; the KDF is deliberately slow
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=self._salt,
            iterations=KDF_ITERATIONS,
        )
        return kdf.derive(self._passphrase)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt ``plaintext`` under a fresh random IV."""
        iv = os.urandom(IV_LENGTH)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return iv.hex() + SEPARATOR + ciphertext.hex()

    def decrypt(self, envelope: str) -> str:
        """Decrypt an envelope produced by :meth:`encrypt`.

        Raises CryptoError for a malformed envelope, a bad IV, or
        ciphertext the cipher rejects (truncated, corrupted, wrong key).
        """
        if not envelope or envelope.count(SEPARATOR) != 1:
            raise CryptoError("Invalid encrypted data format")
        iv_hex, ciphertext_hex = envelope.split(SEPARATOR)
        if not _IV_PATTERN.match(iv_hex):
            raise CryptoError("Invalid IV length")
        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except ValueError as exc:
            # UnicodeDecodeError is a ValueError too
            raise CryptoError("Failed to decrypt token") from exc

    def is_envelope(self, value: str) -> bool:
        """Structural check only; never attempts decryption."""
        if not value:
            return False
        parts = value.split(SEPARATOR)
        if len(parts) != 2:
            return False
        return bool(_IV_PATTERN.match(parts[0]))
