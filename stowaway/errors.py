"""Exceptions raised by Stowaway."""

from typing import Any, Optional


class StowawayError(Exception):
    """Base class for every failure the CLI reports and exits on."""


class ConfigError(StowawayError, ValueError):
    """A required environment variable or file is missing."""


class InvalidKeyFormat(StowawayError, ValueError):
    """Private key is not 0x followed by 64 hex characters."""


class KeyOutOfRange(StowawayError, ValueError):
    """Private key is zero or not below the secp256k1 group order."""


class DecryptionError(StowawayError, ValueError):
    """Keystore could not be decrypted (wrong password or corrupted file)."""


class RpcConnectionError(StowawayError, ConnectionError):
    """RPC endpoint is malformed or unreachable."""


class WrongNetwork(StowawayError, ValueError):
    """Connected chain does not match the expected chain id."""

    def __init__(self, expected: int, observed: int) -> None:
        super().__init__(f"Expected chain id {expected}, but the endpoint reports {observed}")
        self.expected = expected
        self.observed = observed


class ZeroBalance(StowawayError, ValueError):
    """Signing account has no funds to pay for gas."""


class ArtifactError(StowawayError, ValueError):
    """Contract ABI or bytecode is unreadable or malformed."""


class InvalidAddressFormat(StowawayError, ValueError):
    """Stored deployment record is not a valid address."""


class MissingDeploymentRecord(StowawayError, FileNotFoundError):
    """No deployment record exists yet."""


class RemoteError(StowawayError):
    """A transaction was rejected or reverted by the remote node."""

    def __init__(
        self,
        message: str,
        code: Optional[Any] = None,
        data: Optional[Any] = None,
        tx_hash: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.data = data
        self.tx_hash = tx_hash


class DeploymentFailed(RemoteError):
    """Contract-creation transaction was rejected or reverted."""


class CallReverted(RemoteError):
    """State-changing call was rejected by the contract."""


def remote_error_details(exc: BaseException) -> tuple[Optional[Any], Optional[Any]]:
    """
    Pull the RPC error code and data out of a client library exception.

    web3 raises ``ContractLogicError`` with ``.data`` and ``Web3RPCError`` /
    ``ValueError`` carrying a JSON-RPC error dict as the first argument.
    """
    code = getattr(exc, "code", None)
    data = getattr(exc, "data", None)

    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict):
        rpc_error = rpc_response.get("error")
        if isinstance(rpc_error, dict):
            code = code if code is not None else rpc_error.get("code")
            data = data if data is not None else rpc_error.get("data")

    if exc.args and isinstance(exc.args[0], dict):
        payload = exc.args[0]
        code = code if code is not None else payload.get("code")
        data = data if data is not None else payload.get("data")

    return code, data
