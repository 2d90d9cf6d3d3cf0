"""EVM JSON-RPC client."""

from decimal import Decimal
from typing import Any, Dict, List
from urllib.parse import urlparse
from web3 import Web3

from stowaway import config
from stowaway.errors import RpcConnectionError, WrongNetwork, ZeroBalance
from stowaway.models import Credential, NetworkInfo

SUPPORTED_SCHEMES = ("http", "https", "ws", "wss")


def _make_provider(rpc_url: str) -> Any:
    scheme = urlparse(rpc_url).scheme.lower()
    if scheme in ("ws", "wss"):
        return Web3.LegacyWebSocketProvider(rpc_url)
    return Web3.HTTPProvider(rpc_url)


class EVMClient:
    """EVM blockchain client that manages one RPC connection."""

    def __init__(self, w3: Web3, rpc_url: str = ""):
        """
        Wrap an already constructed Web3 instance.

        Use EVMClient.connect to open a connection from a URL.
        """
        self.w3 = w3
        self.rpc_url = rpc_url

    @classmethod
    def connect(cls, rpc_url: str) -> "EVMClient":
        """
        Return a client connected to rpc_url.

        Raises:
            RpcConnectionError: If the URL is malformed or the endpoint is unreachable
        """
        parsed = urlparse(rpc_url or "")
        if parsed.scheme.lower() not in SUPPORTED_SCHEMES or not parsed.netloc:
            raise RpcConnectionError(f"Malformed RPC endpoint: {rpc_url!r}")

        try:
            w3 = Web3(_make_provider(rpc_url))
            connected = w3.is_connected()
        except Exception as e:
            raise RpcConnectionError(f"Failed to connect to RPC endpoint {rpc_url}: {e}")

        if not connected:
            raise RpcConnectionError(f"Failed to connect to RPC endpoint: {rpc_url}")

        return cls(w3, rpc_url)

    def network_info(self) -> NetworkInfo:
        """Query the chain's self-reported identity."""
        try:
            chain_id = int(self.w3.eth.chain_id)
        except Exception as e:
            raise RpcConnectionError(f"Failed to query chain id: {e}")
        return NetworkInfo(name=config.get_network_name(chain_id), chain_id=chain_id)

    def validate_network(self, expected_chain_id: int) -> NetworkInfo:
        """
        Check the connected chain against the expected chain id.

        Raises:
            WrongNetwork: If the chain ids differ
        """
        info = self.network_info()
        if info.chain_id != expected_chain_id:
            raise WrongNetwork(expected_chain_id, info.chain_id)
        return info

    def get_balance(self, address: str) -> int:
        """Get the native balance of address in wei."""
        return int(self.w3.eth.get_balance(Web3.to_checksum_address(address)))

    def require_funds(self, address: str) -> int:
        """
        Get the balance of address, refusing an empty account.

        Raises:
            ZeroBalance: If the balance is exactly zero
        """
        balance = self.get_balance(address)
        if balance == 0:
            raise ZeroBalance(f"Account {address} has zero balance; fund it before sending transactions")
        return balance

    def block_number(self) -> int:
        """Get the latest block number."""
        return int(self.w3.eth.block_number)

    def base_fee(self, block_number: int) -> int:
        """Get baseFeePerGas of a block, 0 for pre-London blocks."""
        block = self.w3.eth.get_block(block_number)
        return int(block.get("baseFeePerGas") or 0)

    def contract(self, address: str, abi: List[Dict[str, Any]]) -> Any:
        """Return a web3 contract bound to address."""
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def transaction_params(self, credential: Credential) -> Dict[str, Any]:
        """Base transaction fields for a transaction sent by credential."""
        return {
            "from": credential.address,
            "nonce": self.w3.eth.get_transaction_count(credential.address),
            "chainId": self.w3.eth.chain_id,
        }

    def sign_and_send(self, transaction: Dict[str, Any], credential: Credential) -> str:
        """Sign transaction with credential, broadcast it and return the hash."""
        signed_txn = self.w3.eth.account.sign_transaction(transaction, credential.private_key)
        tx_hash = self.w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        return Web3.to_hex(tx_hash)

    def wait_for_receipt(self, tx_hash: str) -> Any:
        """Block until the transaction is mined; library default timeout."""
        return self.w3.eth.wait_for_transaction_receipt(tx_hash)

    def get_transaction(self, tx_hash: str) -> Any:
        """Fetch a transaction by hash."""
        return self.w3.eth.get_transaction(tx_hash)


def format_ether(amount_wei: int) -> str:
    """Format a wei amount in ether without float rounding."""
    return f"{Decimal(Web3.from_wei(amount_wei, 'ether')):f}"
