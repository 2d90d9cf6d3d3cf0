"""
Configuration module for Stowaway.
Reads the RPC endpoint, keystore password and raw key from the environment
(optionally through a .env file) and holds the fixed file locations and
chain constants used by every command.
"""

import os
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, Optional
from dotenv import load_dotenv

from stowaway.errors import ConfigError

# Environment variable names
PRIVATE_KEY_VAR = "REMOTE_TEST_PRIVATE_KEY"
PASSWORD_VAR = "ENCRYPTION_PASSWORD"
RPC_URL_VAR = "REMOTE_TEST_RPC_URL"
CHAIN_ID_VAR = "EXPECTED_CHAIN_ID"

# Sepolia
DEFAULT_CHAIN_ID = 11155111

# Fixed approximation used for the fiat estimate, not a live quote
ETH_USD_PRICE = Decimal("3000")

# Default file locations, relative to the working directory
KEYSTORE_PATH = "encryptedKey.json"
ADDRESS_PATH = "contractAddress.txt"
ABI_PATH = "SimpleStorage_sol_SimpleStorage.abi"
BIN_PATH = "SimpleStorage_sol_SimpleStorage.bin"

# Storage contract functions used by deploy and write
READ_FUNCTION = "retrieve"
WRITE_FUNCTION = "store"

# Value written by the `write` command when none is given
DEFAULT_STORE_VALUE = 7


# Chain display names and native currency symbols keyed by chain id
NETWORKS: Dict[int, Dict[str, str]] = {
    1: {"name": "mainnet", "symbol": "ETH"},
    11155111: {"name": "sepolia", "symbol": "SepoliaETH"},
    17000: {"name": "holesky", "symbol": "HoleskyETH"},
    421614: {"name": "arbitrum-sepolia", "symbol": "ETH"},
    80002: {"name": "polygon-amoy", "symbol": "POL"},
    84532: {"name": "base-sepolia", "symbol": "ETH"},
    97: {"name": "bsc-testnet", "symbol": "tBNB"},
    31337: {"name": "hardhat", "symbol": "ETH"},
    1337: {"name": "localhost", "symbol": "ETH"},
}


@dataclass(frozen=True)
class Settings:
    """Configuration built once at startup and handed to each command."""
    rpc_url: Optional[str] = None
    password: Optional[str] = None
    private_key: Optional[str] = None
    expected_chain_id: int = DEFAULT_CHAIN_ID
    keystore_path: str = KEYSTORE_PATH
    address_path: str = ADDRESS_PATH
    abi_path: str = ABI_PATH
    bin_path: str = BIN_PATH

    def require(self, *fields: str) -> "Settings":
        """
        Check that the given settings are present.

        Args:
            fields: Attribute names ("rpc_url", "password", "private_key")

        Returns:
            self, so calls can be chained

        Raises:
            ConfigError: Naming every missing environment variable
        """
        env_names = {
            "rpc_url": RPC_URL_VAR,
            "password": PASSWORD_VAR,
            "private_key": PRIVATE_KEY_VAR,
        }
        missing = [env_names.get(name, name) for name in fields if not getattr(self, name)]
        if missing:
            raise ConfigError(
                f"Missing required setting(s): {', '.join(missing)}. "
                "Set them in the environment or in .env"
            )
        return self

    def with_overrides(self, **changes: object) -> "Settings":
        """Return a copy with the non-None values in changes applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable, treating blank values as unset."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load settings from the environment.

    Args:
        env_file: Optional .env path; defaults to searching for .env

    Returns:
        Settings instance

    Raises:
        ConfigError: If EXPECTED_CHAIN_ID is set but not an integer
    """
    if env_file:
        if not os.path.exists(env_file):
            raise ConfigError(f"Env file not found: {env_file}")
        load_dotenv(env_file)
    else:
        load_dotenv()

    chain_id_raw = get_env(CHAIN_ID_VAR)
    try:
        chain_id = int(chain_id_raw, 0) if chain_id_raw else DEFAULT_CHAIN_ID
    except ValueError:
        raise ConfigError(f"{CHAIN_ID_VAR} must be an integer, got {chain_id_raw!r}")

    return Settings(
        rpc_url=get_env(RPC_URL_VAR),
        password=os.getenv(PASSWORD_VAR) or None,
        private_key=get_env(PRIVATE_KEY_VAR),
        expected_chain_id=chain_id,
    )


def get_network_name(chain_id: int) -> str:
    """Get network display name for a chain id, or "unknown"."""
    return NETWORKS.get(chain_id, {}).get("name", "unknown")


def get_native_symbol(chain_id: int) -> str:
    """Get native currency symbol for a chain id (defaults to ETH)."""
    return NETWORKS.get(chain_id, {}).get("symbol", "ETH")
