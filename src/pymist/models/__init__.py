"""Data models for control API responses and requests."""

from pymist.models._base import MistBaseModel
from pymist.models.client import ClientSession
from pymist.models.command_responses import CommandAck, UpdateCheck, UpdateResult
from pymist.models.protocol import ProtocolState
from pymist.models.push import PushRecord
from pymist.models.server import ConfigSummary, ServerStats
from pymist.models.snapshot import AggregateStats, PushId, SessionId, Snapshot, StreamName
from pymist.models.stream import StreamConfig, StreamStat

__all__ = [
    "AggregateStats",
    "ClientSession",
    "CommandAck",
    "ConfigSummary",
    "MistBaseModel",
    "ProtocolState",
    "PushId",
    "PushRecord",
    "ServerStats",
    "SessionId",
    "Snapshot",
    "StreamConfig",
    "StreamName",
    "StreamStat",
    "UpdateCheck",
    "UpdateResult",
]
