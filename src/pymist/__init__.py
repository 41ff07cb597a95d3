"""pymist - Async Python client that mirrors MistServer state."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pymist")
except PackageNotFoundError:
    __version__ = "0+local"
from pymist.client import MistClient
from pymist.config import MistConfig
from pymist.exceptions import (
    MistConfigError,
    MistError,
    MistHTTPError,
    MistMalformedRequestError,
    MistNetworkError,
    MistNoDataError,
    MistParseError,
    MistRequestError,
    NetworkFailureReason,
)
from pymist.models import (
    AggregateStats,
    ClientSession,
    CommandAck,
    ConfigSummary,
    ProtocolState,
    PushId,
    PushRecord,
    ServerStats,
    Snapshot,
    StreamConfig,
    StreamName,
    StreamStat,
    UpdateCheck,
    UpdateResult,
)
from pymist.poller import PollOutcome

__all__ = [
    "__version__",
    "AggregateStats",
    "ClientSession",
    "CommandAck",
    "ConfigSummary",
    "MistClient",
    "MistConfig",
    "MistConfigError",
    "MistError",
    "MistHTTPError",
    "MistMalformedRequestError",
    "MistNetworkError",
    "MistNoDataError",
    "MistParseError",
    "MistRequestError",
    "NetworkFailureReason",
    "PollOutcome",
    "ProtocolState",
    "PushId",
    "PushRecord",
    "ServerStats",
    "Snapshot",
    "StreamConfig",
    "StreamName",
    "StreamStat",
    "UpdateCheck",
    "UpdateResult",
]
