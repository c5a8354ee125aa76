import collections
import logging
import logging.handlers
import re
from pathlib import Path
from typing import List, Optional

from bangumi_matcher.core.config import LogConfig, get_config_dir, settings

# 这个双端队列用于在内存中保存最新的日志，供 API 查看
_logs_deque = collections.deque(maxlen=200)


class DequeHandler(logging.Handler):
    def __init__(self, deque):
        super().__init__()
        self.deque = deque

    def emit(self, record):
        # 只存储格式化后的消息字符串
        self.deque.appendleft(self.format(record))


class NoHttpxLogFilter(logging.Filter):
    def filter(self, record):
        # 不记录来自 'httpx' logger 的日志
        return not record.name.startswith('httpx')


class SensitiveInfoFilter(logging.Filter):
    """过滤器，用于隐藏日志中的敏感信息"""

    PATTERNS = [
        (re.compile(r'(access_token=)([a-zA-Z0-9_-]{20,})'), r'\1****'),
        (re.compile(r'(token=)([a-zA-Z0-9_-]{20,})'), r'\1****'),
        (re.compile(r'(Authorization:\s*Bearer\s+)([a-zA-Z0-9_-]{20,})'), r'\1****'),
        (re.compile(r'(Bearer\s+)([a-zA-Z0-9_-]{20,})'), r'\1****'),
    ]

    def filter(self, record):
        msg = record.getMessage()
        for pattern, replacement in self.PATTERNS:
            msg = pattern.sub(replacement, msg)
        record.msg = msg
        record.args = ()  # 消息已格式化，清空args
        return True


def get_log_dir(config: Optional[LogConfig] = None) -> Path:
    config = config or settings.log
    if config.directory:
        return Path(config.directory)
    return get_config_dir() / "logs"


def setup_logging(config: Optional[LogConfig] = None):
    """
    配置根日志记录器，输出到控制台、可轮转的文件和内存双端队列。
    应在应用启动时调用一次。
    """
    config = config or settings.log
    log_dir = get_log_dir(config)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # 无法创建日志目录时使用当前目录
        print(f"警告: 无法创建日志目录 {log_dir}: {e}，将使用当前目录")
        log_dir = Path(".")
    log_file = log_dir / "app.log"

    verbose_formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s:%(lineno)d] [%(levelname)s] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    ui_formatter = logging.Formatter('[%(asctime)s] %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    # 日志级别无效时默认为 INFO
    log_level = getattr(logging, config.level.upper(), logging.INFO)
    logger = logging.getLogger()
    logger.setLevel(log_level)

    # 清理已存在的处理器，避免重复添加
    if logger.hasHandlers():
        logger.handlers.clear()

    logger.addHandler(logging.StreamHandler())
    logger.addHandler(logging.handlers.RotatingFileHandler(
        log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8'
    ))

    httpx_logger = logging.getLogger("httpx")
    httpx_logger.addFilter(SensitiveInfoFilter())

    deque_handler = DequeHandler(_logs_deque)
    deque_handler.addFilter(NoHttpxLogFilter())
    logger.addHandler(deque_handler)

    for handler in logger.handlers:
        handler.addFilter(SensitiveInfoFilter())
        if isinstance(handler, DequeHandler):
            handler.setFormatter(ui_formatter)
        else:
            handler.setFormatter(verbose_formatter)

    # Bangumi 原始响应单独记录，启动时清空
    responses_file = log_dir / "metadata_responses.log"
    if responses_file.exists():
        try:
            responses_file.write_text("", encoding='utf-8')
        except OSError as e:
            logging.error(f"清空 {responses_file.name} 失败: {e}")
    responses_logger = logging.getLogger("metadata_responses")
    responses_logger.setLevel(logging.DEBUG)
    responses_logger.propagate = False
    responses_logger.handlers.clear()
    responses_handler = logging.handlers.RotatingFileHandler(
        responses_file, maxBytes=10 * 1024 * 1024, backupCount=3, encoding='utf-8'
    )
    responses_handler.setFormatter(logging.Formatter('[%(asctime)s] - %(message)s', datefmt='%Y-%m-%d %H:%M:%S'))
    responses_handler.addFilter(SensitiveInfoFilter())
    responses_logger.addHandler(responses_handler)

    logging.info(f"日志系统已初始化 (目录: {log_dir})")


def get_logs() -> List[str]:
    """返回内存中保存的日志条目列表。"""
    return list(_logs_deque)
