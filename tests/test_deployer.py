"""Tests for contract deployment and the deployment record."""

import json

import pytest

from stowaway import deployer, invoker
from stowaway.errors import ArtifactError, ConfigError, DeploymentFailed


def test_load_artifacts_adds_0x_prefix(artifact_files, storage_abi):
    abi_path, bin_path = artifact_files
    artifacts = deployer.load_artifacts(abi_path, bin_path)
    assert artifacts.abi == storage_abi
    assert artifacts.bytecode == "0x6080604052348015600f57600080fd5b50"


def test_load_bytecode_keeps_existing_prefix(tmp_path):
    path = tmp_path / "c.bin"
    path.write_text("0x6080", encoding="utf-8")
    assert deployer.load_bytecode(str(path)) == "0x6080"


def test_load_abi_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        deployer.load_abi(str(tmp_path / "missing.abi"))


def test_load_abi_must_be_array(tmp_path):
    path = tmp_path / "c.abi"
    path.write_text(json.dumps({"abi": []}), encoding="utf-8")
    with pytest.raises(ArtifactError):
        deployer.load_abi(str(path))


@pytest.mark.parametrize("content", ["", "0x", "608", "60zz"])
def test_load_bytecode_rejects_bad_hex(tmp_path, content):
    path = tmp_path / "c.bin"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ArtifactError):
        deployer.load_bytecode(str(path))


def test_deploy_returns_address_and_hash(client, fake_w3, credential, artifact_files, contract_address):
    artifacts = deployer.load_artifacts(*artifact_files)

    result = deployer.deploy(client, artifacts, credential)

    assert result.address == contract_address
    assert result.tx_hash == "0x" + "ab" * 32
    fake_w3.eth.contract.assert_called_with(abi=artifacts.abi, bytecode=artifacts.bytecode)
    fake_w3.eth.wait_for_transaction_receipt.assert_called_once_with(result.tx_hash)


def test_deploy_rejected_at_submit(client, fake_w3, credential, artifact_files):
    fake_w3.eth.send_raw_transaction.side_effect = ValueError(
        {"code": -32000, "message": "insufficient funds for gas * price + value"}
    )
    with pytest.raises(DeploymentFailed) as exc_info:
        deployer.deploy(client, deployer.load_artifacts(*artifact_files), credential)
    assert exc_info.value.code == -32000
    fake_w3.eth.wait_for_transaction_receipt.assert_not_called()


def test_deploy_reverted(client, fake_w3, credential, artifact_files, receipt):
    fake_w3.eth.wait_for_transaction_receipt.return_value = dict(receipt, status=0, contractAddress=None)
    with pytest.raises(DeploymentFailed) as exc_info:
        deployer.deploy(client, deployer.load_artifacts(*artifact_files), credential)
    assert exc_info.value.tx_hash == "0x" + "ab" * 32


def test_deploy_persist_load_roundtrip(tmp_path, client, credential, artifact_files):
    record = tmp_path / "contractAddress.txt"
    result = deployer.deploy(client, deployer.load_artifacts(*artifact_files), credential)

    deployer.persist_address(result.address, str(record))

    assert record.read_text(encoding="utf-8") == result.address
    assert invoker.load_record(str(record)) == result.address


def test_persist_address_overwrites(tmp_path, contract_address):
    record = tmp_path / "contractAddress.txt"
    record.write_text("0x0000000000000000000000000000000000000001", encoding="utf-8")
    deployer.persist_address(contract_address, str(record))
    assert record.read_text(encoding="utf-8") == contract_address
