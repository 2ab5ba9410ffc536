__all__ = [
    # Client
    "FrameClient",
    "ClientState",
    "MismatchPolicy",
    "SwitchAck",
    # Config
    "FrameConfig",
    "WalletMethods",
    # Chains
    "ChainDescriptor",
    "ChainRegistry",
    "NativeCurrency",
    "StaticChainRegistry",
    # Transactions
    "TransactionRequest",
    # RPC
    "HttpTransport",
    "NotificationChannel",
    "RpcCorrelator",
    "Transport",
    "WalletNotification",
    "WebSocketTransport",
    "open_transport",
    # Errors
    "FrameClientError",
    "TransportError",
    "ConnectionRefused",
    "ConnectionReset",
    "RequestTimeout",
    "ClientClosed",
    "ProtocolError",
    "ResultShapeError",
    "RpcError",
    "OperationError",
    "InitError",
    "ChainMismatch",
    "SwitchError",
    "SwitchRejected",
    "ChainNotRegistered",
    "SendError",
    "TransactionInvalid",
    "CallError",
    "ConfigError",
    "SchemaValidationError",
]

__version__ = "0.1.0"

from loguru import logger

from .chains import ChainDescriptor, ChainRegistry, NativeCurrency, StaticChainRegistry
from .client import ClientState, FrameClient, MismatchPolicy, SwitchAck
from .config import FrameConfig, WalletMethods
from .errors import (
    CallError,
    ChainMismatch,
    ChainNotRegistered,
    ClientClosed,
    ConfigError,
    ConnectionRefused,
    ConnectionReset,
    FrameClientError,
    InitError,
    OperationError,
    ProtocolError,
    RequestTimeout,
    ResultShapeError,
    RpcError,
    SchemaValidationError,
    SendError,
    SwitchError,
    SwitchRejected,
    TransactionInvalid,
    TransportError,
)
from .rpc.correlator import RpcCorrelator
from .rpc.messages import WalletNotification
from .rpc.notifications import NotificationChannel
from .rpc.transport import HttpTransport, Transport, WebSocketTransport, open_transport
from .tx import TransactionRequest

# Library logging stays silent until the application opts in.
logger.disable("frame_client")
