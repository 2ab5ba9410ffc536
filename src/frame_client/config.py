"""
Client configuration.

Values come from keyword arguments, or from the environment via
``FrameConfig.from_env()``, which first loads ``~/.frame-client/.env``
when it exists.

Wallet error codes are configuration: which code means "chain not
recognized" or "user rejected" depends on the wallet build in use. The
defaults follow EIP-1193 / EIP-3326 (4001 and 4902).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError, RpcError

# Default config directory
CONFIG_DIR = Path.home() / ".frame-client"
CONFIG_ENV = CONFIG_DIR / ".env"

# Frame listens on this port for both HTTP and WebSocket
DEFAULT_ENDPOINT = "http://127.0.0.1:1248"
DEFAULT_TIMEOUT = 30.0
DEFAULT_ORIGIN = "frame-client"

UNRECOGNIZED_CHAIN = 4902
USER_REJECTED = 4001


@dataclass(frozen=True)
class WalletMethods:
    accounts: str = "eth_accounts"
    chain_id: str = "eth_chainId"
    switch_chain: str = "wallet_switchEthereumChain"
    add_chain: str = "wallet_addEthereumChain"
    send_transaction: str = "eth_sendTransaction"
    call: str = "eth_call"
    subscribe: str = "eth_subscribe"


@dataclass(frozen=True)
class FrameConfig:
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT
    origin: str = DEFAULT_ORIGIN
    unrecognized_chain_codes: tuple[int, ...] = (UNRECOGNIZED_CHAIN,)
    user_rejected_codes: tuple[int, ...] = (USER_REJECTED,)
    methods: WalletMethods = field(default_factory=WalletMethods)

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if not self.endpoint:
            raise ConfigError("endpoint must not be empty")

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "FrameConfig":
        """
        Build a config from environment variables.

        Args:
            env_path: Path to a .env file (default: ~/.frame-client/.env)

        Returns:
            FrameConfig with every unset variable left at its default
        """
        env_path = env_path or CONFIG_ENV
        if env_path.exists():
            load_dotenv(env_path, override=False)

        kwargs: dict = {}
        if os.environ.get("FRAME_RPC_URL"):
            kwargs["endpoint"] = os.environ["FRAME_RPC_URL"]
        if os.environ.get("FRAME_TIMEOUT"):
            try:
                kwargs["timeout"] = float(os.environ["FRAME_TIMEOUT"])
            except ValueError:
                raise ConfigError(f"FRAME_TIMEOUT is not a number: {os.environ['FRAME_TIMEOUT']!r}")
        if os.environ.get("FRAME_ORIGIN"):
            kwargs["origin"] = os.environ["FRAME_ORIGIN"]
        if os.environ.get("FRAME_UNRECOGNIZED_CHAIN_CODES"):
            kwargs["unrecognized_chain_codes"] = parse_codes(os.environ["FRAME_UNRECOGNIZED_CHAIN_CODES"])
        if os.environ.get("FRAME_USER_REJECTED_CODES"):
            kwargs["user_rejected_codes"] = parse_codes(os.environ["FRAME_USER_REJECTED_CODES"])
        if os.environ.get("FRAME_ACCOUNTS_METHOD"):
            kwargs["methods"] = WalletMethods(accounts=os.environ["FRAME_ACCOUNTS_METHOD"])
        return cls(**kwargs)

    def is_unrecognized_chain(self, error: RpcError) -> bool:
        return bool(error.codes() & set(self.unrecognized_chain_codes))

    def is_user_rejection(self, error: RpcError) -> bool:
        return bool(error.codes() & set(self.user_rejected_codes))


def parse_codes(raw: str) -> tuple[int, ...]:
    """Parse a comma-separated list of integer error codes."""
    codes = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            codes.append(int(part, 0))
        except ValueError:
            raise ConfigError(f"Invalid error code: {part!r}")
    if not codes:
        raise ConfigError("Error code list must not be empty")
    return tuple(codes)
