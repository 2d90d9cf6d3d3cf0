"""Shared fixtures: a fake Web3 connection and a cheap keystore."""

import json
from unittest.mock import MagicMock

import pytest

from stowaway import config, keys
from stowaway.evm import EVMClient

# Web3 Secret Storage example key
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
CONTRACT_ADDRESS = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"
TX_HASH = b"\xab" * 32
PASSWORD = "correct horse battery staple"

STORAGE_ABI = [
    {
        "inputs": [],
        "name": "retrieve",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "num", "type": "uint256"}],
        "name": "store",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


@pytest.fixture
def private_key() -> str:
    return TEST_PRIVATE_KEY


@pytest.fixture
def address() -> str:
    return keys.derive_address(TEST_PRIVATE_KEY)


@pytest.fixture
def contract_address() -> str:
    return CONTRACT_ADDRESS


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
def storage_abi() -> list:
    return STORAGE_ABI


@pytest.fixture
def keystore(tmp_path):
    """Keystore encrypted with a fast pbkdf2 setting."""
    path = tmp_path / "encryptedKey.json"
    return keys.encrypt(TEST_PRIVATE_KEY, PASSWORD, str(path), kdf="pbkdf2", iterations=2)


@pytest.fixture
def credential(keystore):
    return keys.decrypt(keystore, PASSWORD)


@pytest.fixture
def artifact_files(tmp_path):
    """Write an ABI and bytecode pair; returns (abi_path, bin_path)."""
    abi_path = tmp_path / "Storage.abi"
    bin_path = tmp_path / "Storage.bin"
    abi_path.write_text(json.dumps(STORAGE_ABI), encoding="utf-8")
    bin_path.write_text("6080604052348015600f57600080fd5b50\n", encoding="utf-8")
    return str(abi_path), str(bin_path)


@pytest.fixture
def receipt():
    return {
        "status": 1,
        "transactionHash": TX_HASH,
        "blockNumber": 42,
        "gasUsed": 21000,
        "effectiveGasPrice": 1_000_000_000,
        "contractAddress": CONTRACT_ADDRESS,
    }


@pytest.fixture
def transaction():
    return {
        "hash": TX_HASH,
        "maxFeePerGas": 2_000_000_000,
        "maxPriorityFeePerGas": 100_000_000,
    }


@pytest.fixture
def fake_w3(receipt, transaction):
    """MagicMock standing in for a connected Web3 instance on Sepolia."""
    w3 = MagicMock()
    w3.is_connected.return_value = True
    w3.eth.chain_id = 11155111
    w3.eth.block_number = 1234
    w3.eth.get_balance.return_value = 10**18
    w3.eth.get_transaction_count.return_value = 3
    w3.eth.get_block.return_value = {"baseFeePerGas": 900_000_000}
    w3.eth.account.sign_transaction.return_value = MagicMock(raw_transaction=b"\x02signed")
    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = receipt
    w3.eth.get_transaction.return_value = transaction

    contract = w3.eth.contract.return_value
    contract.constructor.return_value.build_transaction.return_value = {"data": "0x6080"}
    store_or_retrieve = contract.functions.__getitem__.return_value.return_value
    store_or_retrieve.estimate_gas.return_value = 30000
    store_or_retrieve.build_transaction.return_value = {"data": "0x6057361d"}
    store_or_retrieve.call.return_value = 0
    return w3


@pytest.fixture
def client(fake_w3):
    return EVMClient(fake_w3, "http://localhost:8545")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Isolate a test from the developer's Stowaway configuration.

    Removes the Stowaway variables, stops load_settings() from reading any
    .env file and runs the test from tmp_path, so default keystore and
    record paths never touch the working tree.
    """
    for name in (
        "REMOTE_TEST_PRIVATE_KEY",
        "ENCRYPTION_PASSWORD",
        "REMOTE_TEST_RPC_URL",
        "EXPECTED_CHAIN_ID",
    ):
        # setenv first so monkeypatch restores the original state even if
        # a test's own .env file sets the variable later
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
