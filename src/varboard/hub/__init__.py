"""Hub 模块

- messages: 实时通道事件名与帧编解码
- queue: actor 命令队列
- registry: 连接注册表与广播
- hub: SyncHub 同步中枢
"""

from .messages import Inbound, Outbound, decode, encode
from .queue import ActorQueue, CommandKind, CommandQueue, HubCommand
from .registry import Connection, ConnectionRegistry
from .hub import SyncHub, port_saved_message

__all__ = [
    "Inbound",
    "Outbound",
    "decode",
    "encode",
    "ActorQueue",
    "CommandKind",
    "CommandQueue",
    "HubCommand",
    "Connection",
    "ConnectionRegistry",
    "SyncHub",
    "port_saved_message",
]
