"""Private key validation and keystore encryption."""

import json
import os
import re
from typing import Any, Dict, Optional
from eth_account import Account
from eth_keys import keys
from web3 import Web3

from stowaway import config
from stowaway.errors import ConfigError, DecryptionError, InvalidKeyFormat, KeyOutOfRange
from stowaway.models import Credential, Keystore

# secp256k1 group order; valid private keys are 1 <= k <= n - 1
SECP256K1_ORDER = int(
    "0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16
)

PRIVATE_KEY_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def validate_private_key(raw_key: str) -> bytes:
    """
    Validate a raw private key and return its 32 bytes.

    Args:
        raw_key: Hex private key, "0x" followed by 64 hex characters

    Returns:
        Private key bytes

    Raises:
        InvalidKeyFormat: Missing 0x prefix, wrong length or non-hex characters
        KeyOutOfRange: Zero or not below the curve order
    """
    private_key = raw_key.strip()

    if not private_key.startswith("0x"):
        raise InvalidKeyFormat("Private key must start with '0x'")

    if len(private_key) != 66:
        raise InvalidKeyFormat(
            f"Private key must be 66 characters including 0x, got {len(private_key)}"
        )

    if not PRIVATE_KEY_PATTERN.match(private_key):
        raise InvalidKeyFormat("Private key must be 0x followed by 64 hex characters")

    value = int(private_key, 16)
    if value == 0:
        raise KeyOutOfRange("Private key must not be zero")
    if value >= SECP256K1_ORDER:
        raise KeyOutOfRange(
            f"Private key exceeds the secp256k1 range (max {hex(SECP256K1_ORDER - 1)})"
        )

    return bytes.fromhex(private_key[2:])


def derive_address(raw_key: str) -> str:
    """Derive the checksum address of a validated private key."""
    return Account.from_key(validate_private_key(raw_key)).address


def _credential_from_bytes(private_key_bytes: bytes) -> Credential:
    private_key_obj = keys.PrivateKey(private_key_bytes)
    account = Account.from_key(private_key_bytes)
    return Credential(
        private_key=private_key_bytes,
        public_key=private_key_obj.public_key.to_hex(),
        address=account.address,
    )


def encrypt(
    raw_key: str,
    password: str,
    path: str = config.KEYSTORE_PATH,
    kdf: Optional[str] = None,
    iterations: Optional[int] = None,
) -> Keystore:
    """
    Encrypt a private key into a Web3 Secret Storage keystore file.

    The file at path is overwritten if it exists.

    Args:
        raw_key: Hex private key
        password: Keystore password
        path: Output file
        kdf: "scrypt" (default) or "pbkdf2"
        iterations: KDF work factor, eth_account default when None

    Returns:
        Keystore written to path
    """
    if not password:
        raise ConfigError("Encryption password must not be empty")

    private_key_bytes = validate_private_key(raw_key)
    address = Account.from_key(private_key_bytes).address

    payload = Account.encrypt(private_key_bytes, password, kdf=kdf, iterations=iterations)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f)

    return Keystore(address=address, path=path, payload=payload)


def read_keystore(path: str = config.KEYSTORE_PATH) -> Keystore:
    """Read a keystore file written by encrypt."""
    if not os.path.exists(path):
        raise ConfigError(f"Encrypted keystore not found: {path}. Run `stowaway encrypt` first")

    try:
        with open(path, "r", encoding="utf-8") as f:
            payload: Dict[str, Any] = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DecryptionError(f"Keystore {path} is not readable JSON: {e}")

    if not isinstance(payload, dict) or ("crypto" not in payload and "Crypto" not in payload):
        raise DecryptionError(f"Keystore {path} is not a Web3 Secret Storage file")

    address = payload.get("address", "")
    if address and not address.startswith("0x"):
        address = "0x" + address
    if address:
        address = Web3.to_checksum_address(address)

    return Keystore(address=address, path=path, payload=payload)


def decrypt(keystore: Keystore, password: str) -> Credential:
    """
    Decrypt a keystore into a signing credential.

    Raises:
        DecryptionError: Wrong password or corrupted keystore
    """
    if not password:
        raise DecryptionError("Decryption password must not be empty")

    try:
        private_key_bytes = bytes(Account.decrypt(keystore.payload, password))
    except (ValueError, KeyError, TypeError) as e:
        raise DecryptionError(f"Failed to decrypt keystore: wrong password or corrupted file ({e})")

    return _credential_from_bytes(private_key_bytes)


def is_canonical_key(private_key_hex: str) -> bool:
    """Return True if the key is 0x followed by 64 hex characters."""
    return bool(PRIVATE_KEY_PATTERN.match(private_key_hex))
