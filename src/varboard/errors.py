"""varboard 异常类型"""


class VarboardError(Exception):
    """varboard 异常基类"""


class MalformedPayloadError(VarboardError):
    """客户端 payload 结构不合法

    在 handler 边界被捕获并记录，不会影响 Hub 或其他连接。
    """

    def __init__(self, event: str, reason: str):
        self.event = event
        self.reason = reason
        super().__init__(f"{event}: {reason}")


class ListenerBindError(VarboardError):
    """监听端口绑定失败（启动期致命错误）"""

    def __init__(self, host: str, port: int, cause: OSError):
        self.host = host
        self.port = port
        self.cause = cause
        super().__init__(f"Cannot listen on {host}:{port}: {cause.strerror or cause}")
