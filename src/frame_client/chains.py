"""Chain descriptors and registries used by the add-chain fallback."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional, Protocol

from .schemas import CHAIN_DESCRIPTOR_SCHEMA, SchemaRegistry
from .utils import from_quantity, to_quantity


@dataclass(frozen=True)
class NativeCurrency:
    name: str
    symbol: str
    decimals: int = 18


@dataclass(frozen=True)
class ChainDescriptor:
    """Metadata the wallet needs before it can switch to an unknown chain."""

    chain_id: int
    chain_name: str
    native_currency: NativeCurrency
    rpc_urls: tuple[str, ...]
    block_explorer_urls: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ChainDescriptor":
        """Accept either the EIP-3085 camelCase shape or snake_case keys."""
        if not isinstance(payload, Mapping):
            raise ValueError(f"Chain descriptor must be an object, got {payload!r}")
        raw_id = payload.get("chainId", payload.get("chain_id"))
        chain_id = from_quantity(raw_id) if isinstance(raw_id, str) else raw_id
        if isinstance(chain_id, bool) or not isinstance(chain_id, int):
            raise ValueError(f"Chain descriptor needs an integer chain id, got {raw_id!r}")
        currency = payload.get("nativeCurrency", payload.get("native_currency")) or {}
        if not isinstance(currency, Mapping):
            raise ValueError(f"Chain {chain_id} native currency must be an object, got {currency!r}")
        return cls(
            chain_id=chain_id,
            chain_name=payload.get("chainName", payload.get("chain_name", "")),
            native_currency=NativeCurrency(
                name=currency.get("name", ""),
                symbol=currency.get("symbol", ""),
                decimals=currency.get("decimals", 18),
            ),
            rpc_urls=tuple(payload.get("rpcUrls", payload.get("rpc_urls", ()))),
            block_explorer_urls=tuple(
                payload.get("blockExplorerUrls", payload.get("block_explorer_urls", ()))
            ),
        )

    def to_rpc(self) -> dict[str, Any]:
        """``wallet_addEthereumChain`` parameter object."""
        params: dict[str, Any] = {
            "chainId": to_quantity(self.chain_id),
            "chainName": self.chain_name,
            "nativeCurrency": {
                "name": self.native_currency.name,
                "symbol": self.native_currency.symbol,
                "decimals": self.native_currency.decimals,
            },
            "rpcUrls": list(self.rpc_urls),
        }
        if self.block_explorer_urls:
            params["blockExplorerUrls"] = list(self.block_explorer_urls)
        return params

    def validate(self, registry: SchemaRegistry | None = None) -> None:
        """Raises SchemaValidationError if the wallet would reject the shape."""
        registry = registry or SchemaRegistry.default()
        registry.validate_instance(self.to_rpc(), CHAIN_DESCRIPTOR_SCHEMA)


class ChainRegistry(Protocol):
    def get(self, chain_id: int) -> Optional[ChainDescriptor]:
        ...


class StaticChainRegistry:
    """In-memory registry, optionally loaded from a JSON list of descriptors."""

    def __init__(self, descriptors: Iterable[ChainDescriptor] = ()) -> None:
        self._chains: dict[int, ChainDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: ChainDescriptor) -> None:
        self._chains[descriptor.chain_id] = descriptor

    def get(self, chain_id: int) -> Optional[ChainDescriptor]:
        return self._chains.get(chain_id)

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._chains

    def __len__(self) -> int:
        return len(self._chains)

    def __iter__(self) -> Iterator[ChainDescriptor]:
        return iter(self._chains.values())

    @classmethod
    def from_path(cls, path: Path) -> "StaticChainRegistry":
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
        if isinstance(payload, dict):
            payload = payload.get("chains", [])
        if not isinstance(payload, list):
            raise ValueError(f"Expected a list of chain descriptors in {path}")
        return cls(ChainDescriptor.from_dict(item) for item in payload)

    @classmethod
    def default(cls) -> "StaticChainRegistry":
        return cls(WELL_KNOWN_CHAINS)


_ETH = NativeCurrency(name="Ether", symbol="ETH", decimals=18)

WELL_KNOWN_CHAINS: tuple[ChainDescriptor, ...] = (
    ChainDescriptor(
        chain_id=1,
        chain_name="Ethereum Mainnet",
        native_currency=_ETH,
        rpc_urls=("https://eth.llamarpc.com",),
        block_explorer_urls=("https://etherscan.io",),
    ),
    ChainDescriptor(
        chain_id=10,
        chain_name="OP Mainnet",
        native_currency=_ETH,
        rpc_urls=("https://mainnet.optimism.io",),
        block_explorer_urls=("https://optimistic.etherscan.io",),
    ),
    ChainDescriptor(
        chain_id=137,
        chain_name="Polygon",
        native_currency=NativeCurrency(name="POL", symbol="POL", decimals=18),
        rpc_urls=("https://polygon-rpc.com",),
        block_explorer_urls=("https://polygonscan.com",),
    ),
    ChainDescriptor(
        chain_id=8453,
        chain_name="Base",
        native_currency=_ETH,
        rpc_urls=("https://mainnet.base.org",),
        block_explorer_urls=("https://basescan.org",),
    ),
    ChainDescriptor(
        chain_id=42161,
        chain_name="Arbitrum One",
        native_currency=_ETH,
        rpc_urls=("https://arb1.arbitrum.io/rpc",),
        block_explorer_urls=("https://arbiscan.io",),
    ),
    ChainDescriptor(
        chain_id=11155111,
        chain_name="Sepolia",
        native_currency=NativeCurrency(name="Sepolia Ether", symbol="ETH", decimals=18),
        rpc_urls=("https://rpc.sepolia.org",),
        block_explorer_urls=("https://sepolia.etherscan.io",),
    ),
)
