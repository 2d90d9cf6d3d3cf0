"""Calls into a previously deployed contract."""

import os
from typing import Any, Dict, List, Sequence
from web3 import Web3
from web3.exceptions import ContractLogicError

from stowaway import config, utils
from stowaway.errors import (
    ArtifactError,
    CallReverted,
    InvalidAddressFormat,
    MissingDeploymentRecord,
    RemoteError,
    remote_error_details,
)
from stowaway.evm import EVMClient
from stowaway.models import CallResult, Credential


def load_record(path: str = config.ADDRESS_PATH) -> str:
    """
    Read the deployed contract address.

    Returns:
        Checksum address

    Raises:
        MissingDeploymentRecord: If the record file does not exist
        InvalidAddressFormat: If the stored text is not a valid address
    """
    if not os.path.exists(path):
        raise MissingDeploymentRecord(f"{path} not found. Run `stowaway deploy` first")

    with open(path, "r", encoding="utf-8") as f:
        address = f.read().strip()

    if not Web3.is_address(address):
        raise InvalidAddressFormat(f"Invalid contract address in {path}: {address!r}")

    return Web3.to_checksum_address(address)


def _get_function(contract: Any, abi: List[Dict[str, Any]], function_name: str, args: Sequence[Any]) -> Any:
    names = {entry.get("name") for entry in abi if entry.get("type") == "function"}
    if function_name not in names:
        raise ArtifactError(f"Function {function_name!r} not found in ABI")
    return contract.functions[function_name](*args)


def _is_revert(e: Exception) -> bool:
    return isinstance(e, ContractLogicError) or "revert" in str(e).lower()


def read(
    client: EVMClient,
    address: str,
    abi: List[Dict[str, Any]],
    function_name: str,
    args: Sequence[Any] = (),
) -> Any:
    """Call a read-only contract function."""
    contract = client.contract(address, abi)
    return _get_function(contract, abi, function_name, args).call()


def call(
    client: EVMClient,
    address: str,
    abi: List[Dict[str, Any]],
    credential: Credential,
    function_name: str,
    args: Sequence[Any] = (),
) -> CallResult:
    """
    Send a state-changing contract call and wait for it to be mined.

    Gas is estimated before anything is signed, so a call the contract
    rejects up front is never broadcast.

    Raises:
        CallReverted: If the contract rejects the call
        RemoteError: If the node rejects the transaction for another reason
    """
    contract = client.contract(address, abi)
    contract_function = _get_function(contract, abi, function_name, args)

    try:
        gas_estimate = contract_function.estimate_gas({"from": credential.address})
    except Exception as e:
        code, data = remote_error_details(e)
        if _is_revert(e):
            raise CallReverted(f"{function_name} reverted: {e}", code=code, data=data)
        raise RemoteError(f"Failed to estimate gas for {function_name}: {e}", code=code, data=data)

    tx_params = client.transaction_params(credential)
    tx_params["gas"] = int(gas_estimate * 1.2)

    try:
        transaction = contract_function.build_transaction(tx_params)
        tx_hash = client.sign_and_send(transaction, credential)
    except Exception as e:
        code, data = remote_error_details(e)
        if _is_revert(e):
            raise CallReverted(f"{function_name} reverted: {e}", code=code, data=data)
        raise RemoteError(f"Transaction for {function_name} was rejected: {e}", code=code, data=data)

    utils.info(f"Transaction hash: {tx_hash}")
    utils.info("Waiting for confirmation...")
    receipt = client.wait_for_receipt(tx_hash)

    if receipt.get("status") == 0:
        raise CallReverted(f"{function_name} reverted on chain", tx_hash=tx_hash)

    return CallResult(tx_hash=tx_hash, receipt=receipt, transaction=client.get_transaction(tx_hash))


def verify(expected: Any, observed: Any) -> bool:
    """Compare a written value with the one read back; warn on mismatch."""
    if expected == observed:
        return True
    utils.warn(f"Value was not updated as expected: expected {expected}, got {observed}")
    return False
