"""Gas usage and fee reporting for confirmed transactions."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Mapping, Optional
from web3 import Web3

from stowaway import config, utils
from stowaway.models import DynamicFee, Fee, GasReport, LegacyFee

USD_PLACES = Decimal("0.000001")


def _int(value: Optional[Any]) -> int:
    return int(value) if value is not None else 0


def to_gwei(amount_wei: int) -> Decimal:
    return Decimal(Web3.from_wei(amount_wei, "gwei"))


def to_ether(amount_wei: int) -> Decimal:
    return Decimal(Web3.from_wei(amount_wei, "ether"))


def fee_from_transaction(transaction: Mapping[str, Any], base_fee: int = 0) -> Fee:
    """
    Classify a transaction's fee fields.

    Transactions carrying maxFeePerGas or maxPriorityFeePerGas are EIP-1559;
    anything else is legacy. Missing numbers are reported as 0.
    """
    max_fee = transaction.get("maxFeePerGas")
    priority_fee = transaction.get("maxPriorityFeePerGas")

    if max_fee is not None or priority_fee is not None:
        return DynamicFee(
            max_fee_per_gas=_int(max_fee),
            max_priority_fee_per_gas=_int(priority_fee),
            base_fee_per_gas=_int(base_fee),
        )

    return LegacyFee(gas_price=_int(transaction.get("gasPrice")))


def report(receipt: Mapping[str, Any], transaction: Mapping[str, Any], base_fee: int = 0) -> GasReport:
    """
    Build a gas report from a receipt and its transaction.

    Args:
        receipt: Transaction receipt (gasUsed, effectiveGasPrice, blockNumber)
        transaction: The transaction (fee fields, hash)
        base_fee: baseFeePerGas of the inclusion block

    Returns:
        GasReport; missing numeric fields count as 0
    """
    gas_used = _int(receipt.get("gasUsed"))

    effective_price = receipt.get("effectiveGasPrice")
    if effective_price is None:
        effective_price = transaction.get("gasPrice")
    effective_price = _int(effective_price)

    total_cost = gas_used * effective_price
    total_ether = to_ether(total_cost)

    tx_hash = receipt.get("transactionHash") or transaction.get("hash") or ""
    if isinstance(tx_hash, (bytes, bytearray)):
        tx_hash = "0x" + bytes(tx_hash).hex()

    return GasReport(
        tx_hash=str(tx_hash),
        block_number=_int(receipt.get("blockNumber")),
        gas_used=gas_used,
        effective_price=effective_price,
        total_cost_wei=total_cost,
        total_cost_gwei=to_gwei(total_cost),
        total_cost_ether=total_ether,
        total_cost_usd=(total_ether * config.ETH_USD_PRICE).quantize(USD_PLACES, rounding=ROUND_HALF_UP),
        fee=fee_from_transaction(transaction, base_fee),
    )


def format_report(gas_report: GasReport, symbol: str = "ETH") -> List[str]:
    """Render a gas report as console lines."""
    lines = [
        f"Block: {gas_report.block_number}",
        f"Gas used: {gas_report.gas_used} units",
        f"Effective gas price: {to_gwei(gas_report.effective_price):f} Gwei "
        f"({to_ether(gas_report.effective_price):f} {symbol})",
        f"Total cost: {gas_report.total_cost_wei} wei = {gas_report.total_cost_gwei:f} Gwei "
        f"= {gas_report.total_cost_ether:f} {symbol}",
        f"Estimated cost: {gas_report.total_cost_usd:f} USD "
        f"(at {config.ETH_USD_PRICE} USD/ETH, approximate)",
    ]

    fee = gas_report.fee
    if isinstance(fee, DynamicFee):
        lines.append("EIP-1559 transaction:")
        lines.append(f"  Max fee: {to_gwei(fee.max_fee_per_gas):f} Gwei")
        lines.append(f"  Priority fee: {to_gwei(fee.max_priority_fee_per_gas):f} Gwei")
        lines.append(f"  Base fee: {to_gwei(fee.base_fee_per_gas):f} Gwei")
    else:
        lines.append("Legacy transaction:")
        lines.append(f"  Gas price: {to_gwei(fee.gas_price):f} Gwei")

    return lines


def print_report(gas_report: GasReport, symbol: str = "ETH") -> None:
    """Print a gas report under its own section header."""
    utils.section_header("Gas report")
    for line in format_report(gas_report, symbol):
        utils.result(line)
