"""Data models for Stowaway."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Union


@dataclass
class Credential:
    """Decrypted signing credential. Never written to disk."""
    private_key: bytes = field(repr=False)
    public_key: str
    address: str

    @property
    def private_key_hex(self) -> str:
        return "0x" + self.private_key.hex()


@dataclass
class Keystore:
    """Password-encrypted keystore and the file it lives in."""
    address: str
    path: str
    payload: Dict[str, Any]


@dataclass(frozen=True)
class NetworkInfo:
    """Self-reported chain identity."""
    name: str
    chain_id: int


@dataclass
class ContractArtifacts:
    """Compiled contract interface description and creation bytecode."""
    abi: List[Dict[str, Any]]
    bytecode: str


@dataclass
class DeploymentResult:
    """Outcome of a confirmed contract-creation transaction."""
    address: str
    tx_hash: str
    receipt: Any
    transaction: Any


@dataclass
class CallResult:
    """Outcome of a confirmed state-changing call."""
    tx_hash: str
    receipt: Any
    transaction: Any


@dataclass(frozen=True)
class LegacyFee:
    """Single flat gas price (pre-London transactions)."""
    gas_price: int


@dataclass(frozen=True)
class DynamicFee:
    """EIP-1559 fee market fields."""
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    base_fee_per_gas: int


Fee = Union[LegacyFee, DynamicFee]


@dataclass(frozen=True)
class GasReport:
    """Fee consumed by a confirmed transaction."""
    tx_hash: str
    block_number: int
    gas_used: int
    effective_price: int
    total_cost_wei: int
    total_cost_gwei: Decimal
    total_cost_ether: Decimal
    total_cost_usd: Decimal
    fee: Fee
