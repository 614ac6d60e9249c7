"""varboard 配置

配置分为以下几类：
- 服务配置：监听地址、端口解析
- 存储配置：数据目录、文档 key、默认文档
- 布局配置：背景判定、设计器默认占位符
- 队列配置：Hub actor 队列参数
- 日志/指标配置
"""

import os
from pathlib import Path

# === 服务配置 ===
HOST = os.environ.get("VARBOARD_HOST", "0.0.0.0")  # 监听地址
DEFAULT_PORT = 3333  # 端口兜底值
PORT_ENV_VAR = "PORT"  # 端口环境变量（优先级最高）
WS_PATH = "/ws"  # 实时通道路径
VIEWER_PATH = "/viewer"  # viewer 页面路径

# === 存储配置 ===
DATA_DIR = Path(os.environ.get("VARBOARD_DATA_DIR", Path.home() / ".varboard"))
LAYOUT_KEY = "layout"  # 布局文档 key
SETTINGS_KEY = "settings"  # 设置文档 key

# === 默认文档 ===
DEFAULT_BACKGROUND = "#333333"
DEFAULT_LAYOUT: dict = {"background": DEFAULT_BACKGROUND, "variables": []}
DEFAULT_SETTINGS: dict = {"port": DEFAULT_PORT}

# === 布局配置 ===
LOCATOR_PREFIXES = ("http", "/", ".")  # 以这些前缀开头的 background 视为资源地址
VIEWER_DEFAULT_FONT_SIZE = "1em"
VIEWER_DEFAULT_COLOR = "#ffffff"
VIEWER_DEFAULT_POSITION = "0%"

# 设计器默认占位符（空布局时生成）
DEFAULT_PLACEHOLDER_COUNT = 10
DEFAULT_PLACEHOLDER_PREFIX = "text_"
DEFAULT_PLACEHOLDER_OFFSET = 10  # 首个占位符 top/left（px）
DEFAULT_PLACEHOLDER_ROW_STEP = 60  # 行间距（px）
DEFAULT_PLACEHOLDER_COLUMN_STEP = 180  # 换列间距（px）
DEFAULT_PLACEHOLDER_BOTTOM_MARGIN = 50  # 距底部小于该值时换列（px）
DEFAULT_PLACEHOLDER_COLOR = "#000000"

# === 端口校验 ===
PORT_MIN = 1
PORT_MAX = 65535

# === Actor 队列配置 ===
QUEUE_MAX_SIZE = 1024  # 队列最大长度
QUEUE_HIGH_WATERMARK = 0.75  # 高水位阈值（打印 debug 日志）

# === 日志配置 ===
LOG_LEVEL = os.environ.get("VARBOARD_LOG_LEVEL", "INFO")  # 日志级别
LOG_PAYLOAD_MAX_LEN = 200  # payload 日志截断长度

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集
