"""Main CLI interface for Stowaway."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from stowaway import config, deployer, evm, gas, invoker, keys, utils
from stowaway.config import Settings
from stowaway.errors import RemoteError, StowawayError
from stowaway.models import Credential, DeploymentResult, NetworkInfo


class StowawayCLI:
    """Main CLI class for Stowaway."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.actions: Dict[str, Tuple[str, Callable[[], Any]]] = {
            "1": ("Encrypt private key", self.encrypt_key),
            "2": ("Decrypt keystore", self.decrypt_key),
            "3": ("Show network", self.show_network),
            "4": ("Deploy contract", self.deploy_contract),
            "5": ("Write value", self.prompt_write_value),
            "0": ("Exit", self.exit_program),
        }
        self.should_exit = False

    def run(self) -> None:
        """Run the interactive menu loop."""
        utils.print_banner()
        print()
        print(f"{utils.bold('Expected chain id:')} {utils.bold_yellow(str(self.settings.expected_chain_id))}")

        while not self.should_exit:
            try:
                choice = self.prompt_main_menu()
                action = self.actions.get(choice)
                if action:
                    label, callback = action
                    utils.section_header(label)
                    try:
                        callback()
                    except RemoteError as e:
                        report_remote_error(e)
                    except (StowawayError, ConnectionError) as e:
                        utils.error(str(e))
                    except KeyboardInterrupt:
                        utils.section_footer("Cancelled. Returning to main menu.")
                else:
                    utils.warn(f"Unknown choice: {choice!r}")
            except KeyboardInterrupt:
                utils.section_footer("Interrupted. Returning to main menu.")
            except EOFError:
                print("\nGoodbye!")
                break

    def prompt_main_menu(self) -> str:
        """Prompt for main menu choice."""
        menu_items = {key: label for key, (label, _) in self.actions.items()}
        utils.print_menu("Stowaway Main Menu", menu_items)
        return input("Choose an option: ").strip()

    def prompt_write_value(self) -> None:
        """Ask for the value to store, then write it."""
        value_str = input(f"Enter value to store (default {config.DEFAULT_STORE_VALUE}): ").strip()
        try:
            value = int(value_str) if value_str else config.DEFAULT_STORE_VALUE
        except ValueError:
            utils.warn(f"Invalid value: {value_str!r}")
            return
        self.write_value(value)

    def exit_program(self) -> None:
        """Exit the program."""
        print("\nExiting Stowaway. Goodbye!")
        self.should_exit = True

    # Commands

    def encrypt_key(self) -> None:
        """Encrypt the raw private key from the environment into the keystore file."""
        settings = self.settings.require("private_key", "password")
        utils.info(f"Validating private key ({len(settings.private_key.strip())} characters)...")
        keystore = keys.encrypt(settings.private_key, settings.password, settings.keystore_path)
        utils.success("Private key format is valid")
        print(f"{utils.bold('Address:')} {utils.bold_cyan(keystore.address)}")
        utils.success(f"Encrypted keystore saved to {keystore.path}")
        utils.info("Next step: stowaway deploy")

    def decrypt_key(self, show_key: bool = False) -> Credential:
        """Decrypt the keystore file and report the recovered key."""
        credential = self.load_credential()
        utils.success("Keystore decrypted")
        print(f"{utils.bold('Address:')} {utils.bold_cyan(credential.address)}")
        print(f"{utils.bold('Public key:')} {credential.public_key}")
        canonical = keys.is_canonical_key(credential.private_key_hex)
        print(f"{utils.bold('Private key format valid:')} {'yes' if canonical else 'no'}")
        if show_key:
            utils.warn("Keep this private key secret!")
            print(f"{utils.bold('Private key:')} {credential.private_key_hex}")
        return credential

    def show_network(self) -> NetworkInfo:
        """Connect, validate the chain and show the keystore account's balance."""
        client, network = self.connect()
        print(f"{utils.bold('Latest block:')} {client.block_number()}")

        if os.path.exists(self.settings.keystore_path):
            keystore = keys.read_keystore(self.settings.keystore_path)
            if keystore.address:
                balance = client.get_balance(keystore.address)
                self.print_balance(keystore.address, balance, network)
        return network

    def deploy_contract(self) -> DeploymentResult:
        """Deploy the contract, record its address and report gas."""
        self.settings.require("password", "rpc_url")
        credential = self.load_credential()
        client, network = self.connect()

        balance = client.require_funds(credential.address)
        self.print_balance(credential.address, balance, network)

        artifacts = deployer.load_artifacts(self.settings.abi_path, self.settings.bin_path)
        utils.info("Loaded ABI and bytecode")

        result = deployer.deploy(client, artifacts, credential)
        utils.success(f"Contract deployed at {utils.bold_cyan(result.address)}")

        deployer.persist_address(result.address, self.settings.address_path)
        utils.info(f"Address saved to {self.settings.address_path}")

        if _has_function(artifacts.abi, config.READ_FUNCTION):
            initial = invoker.read(client, result.address, artifacts.abi, config.READ_FUNCTION)
            print(f"{utils.bold('Initial value:')} {initial}")

        self.print_gas_report(client, result.receipt, result.transaction, network)
        utils.success("Deployment complete. Next step: stowaway write")
        return result

    def write_value(self, value: int = config.DEFAULT_STORE_VALUE) -> bool:
        """
        Store value in the deployed contract and read it back.

        Returns:
            True if the value read back matches value
        """
        self.settings.require("password", "rpc_url")
        credential = self.load_credential()
        client, network = self.connect()
        client.require_funds(credential.address)

        address = invoker.load_record(self.settings.address_path)
        print(f"{utils.bold('Contract address:')} {utils.bold_cyan(address)}")
        abi = deployer.load_abi(self.settings.abi_path)

        before = invoker.read(client, address, abi, config.READ_FUNCTION)
        print(f"{utils.bold('Value before:')} {before}")

        utils.info(f"Calling {config.WRITE_FUNCTION}({value})...")
        call_result = invoker.call(client, address, abi, credential, config.WRITE_FUNCTION, [value])
        utils.success(f"Transaction confirmed in block {call_result.receipt.get('blockNumber')}")

        after = invoker.read(client, address, abi, config.READ_FUNCTION)
        print(f"{utils.bold('Value after:')} {after}")
        verified = invoker.verify(value, after)
        if verified:
            utils.success("Value updated")

        self.print_gas_report(client, call_result.receipt, call_result.transaction, network)
        return verified

    # Shared steps

    def load_credential(self) -> Credential:
        """Read and decrypt the keystore."""
        settings = self.settings.require("password")
        keystore = keys.read_keystore(settings.keystore_path)
        utils.info(f"Loaded keystore {keystore.path}")
        return keys.decrypt(keystore, settings.password)

    def connect(self) -> Tuple[evm.EVMClient, NetworkInfo]:
        """Connect to the RPC endpoint and validate the chain id."""
        settings = self.settings.require("rpc_url")
        utils.info(f"Connecting to RPC: {settings.rpc_url}")
        client = evm.EVMClient.connect(settings.rpc_url)
        network = client.validate_network(settings.expected_chain_id)
        print(f"{utils.bold('Network:')} {network.name}")
        print(f"{utils.bold('Chain ID:')} {network.chain_id}")
        return client, network

    def print_balance(self, address: str, balance: int, network: NetworkInfo) -> None:
        symbol = config.get_native_symbol(network.chain_id)
        print(f"{utils.bold('Wallet address:')} {address}")
        print(f"{utils.bold('Balance:')} {utils.bold_yellow(f'{evm.format_ether(balance)} {symbol}')}")

    def print_gas_report(self, client: evm.EVMClient, receipt: Any, transaction: Any, network: NetworkInfo) -> None:
        base_fee = 0
        if transaction.get("maxFeePerGas") is not None:
            base_fee = client.base_fee(receipt.get("blockNumber"))
        gas_report = gas.report(receipt, transaction, base_fee)
        gas.print_report(gas_report, config.get_native_symbol(network.chain_id))


def _has_function(abi: List[Dict[str, Any]], name: str) -> bool:
    return any(entry.get("type") == "function" and entry.get("name") == name for entry in abi)


def report_remote_error(e: RemoteError) -> None:
    """Print a remote failure with its RPC code and data when present."""
    utils.error(str(e))
    if e.code is not None:
        utils.error(f"Error code: {e.code}")
    if e.data is not None:
        utils.error(f"Error data: {e.data}")
    if e.tx_hash:
        utils.error(f"Transaction hash: {e.tx_hash}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stowaway",
        description="Encrypt a key, deploy the storage contract and call it",
    )
    parser.add_argument("--env-file", help="Path to a .env file (default: search for .env)")
    parser.add_argument("--chain-id", type=int, help="Expected chain id (default: EXPECTED_CHAIN_ID or 11155111)")
    parser.add_argument("--keystore", help=f"Keystore file (default: {config.KEYSTORE_PATH})")
    parser.add_argument("--record", help=f"Deployment record file (default: {config.ADDRESS_PATH})")

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("encrypt", help="Encrypt REMOTE_TEST_PRIVATE_KEY into the keystore file")

    decrypt_parser = subparsers.add_parser("decrypt", help="Decrypt the keystore and show its address")
    decrypt_parser.add_argument("--show-key", action="store_true", help="Also print the private key")

    subparsers.add_parser("network", help="Validate the RPC endpoint and show balance")

    deploy_parser = subparsers.add_parser("deploy", help="Deploy the contract")
    deploy_parser.add_argument("--abi", help=f"ABI file (default: {config.ABI_PATH})")
    deploy_parser.add_argument("--bin", help=f"Bytecode file (default: {config.BIN_PATH})")

    write_parser = subparsers.add_parser("write", help="Call store() on the deployed contract")
    write_parser.add_argument("--abi", help=f"ABI file (default: {config.ABI_PATH})")
    write_parser.add_argument("--value", type=int, default=config.DEFAULT_STORE_VALUE, help="Value to store")
    write_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when the value read back does not match",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = config.load_settings(args.env_file).with_overrides(
            expected_chain_id=args.chain_id,
            keystore_path=args.keystore,
            address_path=args.record,
            abi_path=getattr(args, "abi", None),
            bin_path=getattr(args, "bin", None),
        )
        cli = StowawayCLI(settings)

        if args.command is None:
            cli.run()
        elif args.command == "encrypt":
            cli.encrypt_key()
        elif args.command == "decrypt":
            cli.decrypt_key(show_key=args.show_key)
        elif args.command == "network":
            cli.show_network()
        elif args.command == "deploy":
            cli.deploy_contract()
        elif args.command == "write":
            verified = cli.write_value(args.value)
            if args.strict and not verified:
                utils.error("Stored value does not match (--strict)")
                return 1
    except RemoteError as e:
        report_remote_error(e)
        return 1
    except (StowawayError, ConnectionError) as e:
        utils.error(str(e))
        return 1
    except KeyboardInterrupt:
        utils.error("Interrupted")
        return 1
    except Exception as e:
        utils.error(f"Unexpected {type(e).__name__}: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
