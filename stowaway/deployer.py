"""Contract deployment and the deployment record file."""

import json
import os
from typing import Any, Dict, List

from stowaway import config, utils
from stowaway.errors import ArtifactError, ConfigError, DeploymentFailed, remote_error_details
from stowaway.evm import EVMClient
from stowaway.models import ContractArtifacts, Credential, DeploymentResult


def load_abi(abi_path: str = config.ABI_PATH) -> List[Dict[str, Any]]:
    """
    Load a JSON ABI file.

    Raises:
        ConfigError: If the file does not exist
        ArtifactError: If the file is not a JSON array
    """
    if not os.path.exists(abi_path):
        raise ConfigError(f"ABI file not found: {abi_path}")

    try:
        with open(abi_path, "r", encoding="utf-8") as f:
            abi = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ArtifactError(f"Failed to parse ABI file {abi_path}: {e}")

    if not isinstance(abi, list):
        raise ArtifactError(f"ABI file {abi_path} must contain a JSON array")

    return abi


def load_bytecode(bin_path: str = config.BIN_PATH) -> str:
    """Load hex bytecode, adding the 0x prefix when missing."""
    if not os.path.exists(bin_path):
        raise ConfigError(f"Bytecode file not found: {bin_path}")

    with open(bin_path, "r", encoding="utf-8") as f:
        bytecode = f.read().strip()

    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    body = bytecode[2:]
    if not body:
        raise ArtifactError(f"Bytecode file {bin_path} is empty")
    if len(body) % 2 != 0:
        raise ArtifactError(f"Bytecode in {bin_path} has an odd number of hex digits")
    try:
        bytes.fromhex(body)
    except ValueError:
        raise ArtifactError(f"Bytecode in {bin_path} is not valid hex")

    return bytecode


def load_artifacts(abi_path: str = config.ABI_PATH, bin_path: str = config.BIN_PATH) -> ContractArtifacts:
    """Load the ABI and bytecode of the contract to deploy."""
    return ContractArtifacts(abi=load_abi(abi_path), bytecode=load_bytecode(bin_path))


def deploy(
    client: EVMClient,
    artifacts: ContractArtifacts,
    credential: Credential,
    constructor_args: tuple = (),
) -> DeploymentResult:
    """
    Submit a contract-creation transaction and wait for it to be mined.

    Args:
        client: Connected EVM client
        artifacts: ABI and bytecode
        credential: Signing credential
        constructor_args: Arguments passed to the constructor

    Returns:
        DeploymentResult with the new contract address and transaction hash

    Raises:
        DeploymentFailed: If the transaction is rejected or reverts
    """
    factory = client.w3.eth.contract(abi=artifacts.abi, bytecode=artifacts.bytecode)

    try:
        transaction = factory.constructor(*constructor_args).build_transaction(
            client.transaction_params(credential)
        )
        utils.info("Deploying contract...")
        tx_hash = client.sign_and_send(transaction, credential)
    except Exception as e:
        code, data = remote_error_details(e)
        raise DeploymentFailed(f"Deployment transaction was rejected: {e}", code=code, data=data)

    utils.info(f"Transaction hash: {tx_hash}")
    utils.info("Waiting for the deployment to be mined...")
    receipt = client.wait_for_receipt(tx_hash)

    if receipt.get("status") == 0:
        raise DeploymentFailed("Deployment transaction reverted", tx_hash=tx_hash)

    address = receipt.get("contractAddress")
    if not address:
        raise DeploymentFailed("Receipt carries no contract address", tx_hash=tx_hash)

    return DeploymentResult(
        address=address,
        tx_hash=tx_hash,
        receipt=receipt,
        transaction=client.get_transaction(tx_hash),
    )


def persist_address(address: str, path: str = config.ADDRESS_PATH) -> None:
    """Overwrite the deployment record with address."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(address)
