"""
分集文件名解析模块

从单个分集文件名中得到三类信号：
1. 去除噪声后的文件名（分辨率、编码、CRC 等非集数标记）
2. 分集类型（OP / ED / SP / PV），无法判断时为 None
3. 集数猜测值

所有规则均以有序的正则表列出，由 _strip_patterns / _first_type / _first_number
这几个小解释器按顺序执行，新增规则只需要在表中追加一行。
"""

import logging
import ntpath
import re
from typing import Iterable, List, Optional, Tuple

from bangumi_matcher.models import EpisodeType, FilenameSignal

logger = logging.getLogger(__name__)


# ============================================================================
# 常量 — 正则模式
# ============================================================================

# 非集数标记，按顺序累积剥离：后面的模式作用于已清理过的字符串
NON_EPISODE_PATTERNS: List[re.Pattern] = [
    # CRC32 校验值，如 [ABCDEF12] / (ABCDEF12)
    re.compile(r'[\[\(][0-9A-F]{8}[\]\)]', re.IGNORECASE),
    # 季度标记，如 S01
    re.compile(r'S\d{2,}', re.IGNORECASE),
    # 色度采样，如 yuv420p10
    re.compile(r'yuv[4|2|0]{3}p(10|8)?', re.IGNORECASE),
    # 分辨率
    re.compile(r'\d{3,4}p', re.IGNORECASE),
    re.compile(r'\d{3,4}x\d{3,4}', re.IGNORECASE),
    # 位深
    re.compile(r'(Hi)?10p', re.IGNORECASE),
    re.compile(r'(8|10)bit', re.IGNORECASE),
    # 视频编码
    re.compile(r'(x|h)(264|265)', re.IGNORECASE),
]

OPENING_RE = re.compile(r'(NC)?OP\d')
ENDING_RE = re.compile(r'(NC)?ED\d')
SPECIAL_RE = re.compile(r'[^\w](SP|OVA|OAD)\d*[^\w]')
PREVIEW_RE = re.compile(r'[^\w]PV\d*[^\w]')

# 分集类型判断，先匹配先生效
EPISODE_TYPE_PATTERNS: List[Tuple[re.Pattern, EpisodeType]] = [
    (OPENING_RE, EpisodeType.OPENING),
    (ENDING_RE, EpisodeType.ENDING),
    (SPECIAL_RE, EpisodeType.SPECIAL),
    (PREVIEW_RE, EpisodeType.PREVIEW),
]

# 任一命中即认为文件是非本篇分集
ALL_SPECIAL_EPISODE_PATTERNS: List[re.Pattern] = [
    SPECIAL_RE,
    PREVIEW_RE,
    OPENING_RE,
    ENDING_RE,
]

# 集数提取，先匹配且能解析为数字的模式生效
EPISODE_NUMBER_PATTERNS: List[re.Pattern] = [
    re.compile(r'\[([\d\.]{2,})\]'),
    re.compile(r'- ?([\d\.]{2,})'),
    re.compile(r'EP?([\d\.]{2,})', re.IGNORECASE),
    re.compile(r'\[([\d\.]{2,})'),
    re.compile(r'#([\d\.]{2,})'),
    re.compile(r'(\d{2,})'),
]


# ============================================================================
# 解释器
# ============================================================================

def _strip_patterns(text: str, patterns: Iterable[re.Pattern]) -> str:
    """按顺序删除每个模式的全部匹配"""
    for pattern in patterns:
        if pattern.search(text):
            text = pattern.sub('', text)
    return text


def _first_type(text: str, table: Iterable[Tuple[re.Pattern, EpisodeType]]) -> Optional[EpisodeType]:
    for pattern, episode_type in table:
        if pattern.search(text):
            return episode_type
    return None


def _parse_number(raw: str) -> Optional[float]:
    """解析捕获到的集数，去掉首尾多余的点号"""
    try:
        return float(raw.strip('.'))
    except ValueError:
        return None


def _first_number(text: str, patterns: Iterable[re.Pattern]) -> Optional[float]:
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        number = _parse_number(match.group(1))
        if number is None:
            continue
        return number
    return None


# ============================================================================
# 对外接口
# ============================================================================

def get_file_name(path: str) -> str:
    """同时兼容 / 和 \\ 分隔的路径"""
    return ntpath.basename(path)


def strip_non_episode_tokens(filename: str) -> str:
    """
    去除分辨率、编码、CRC 等会被误认为集数的数字标记。

    Examples:
        "Show - 12 [1080p][ABCDEF12].mkv" → "Show - 12 [].mkv"
    """
    return _strip_patterns(filename, NON_EPISODE_PATTERNS)


def guess_episode_type(filename: str) -> Optional[EpisodeType]:
    """根据文件名判断分集类型，无法判断时返回 None（下游按本篇处理）"""
    return _first_type(strip_non_episode_tokens(filename), EPISODE_TYPE_PATTERNS)


def extract_episode_number(filename: str) -> Optional[float]:
    """从文件名中提取集数，支持 12.5 这类小数集数"""
    return _first_number(strip_non_episode_tokens(filename), EPISODE_NUMBER_PATTERNS)


def is_special_episode_file(path: str) -> bool:
    return any(pattern.search(path) for pattern in ALL_SPECIAL_EPISODE_PATTERNS)


def parse_filename_signal(filename: str) -> FilenameSignal:
    stripped = strip_non_episode_tokens(filename)
    signal = FilenameSignal(
        stripped_name=stripped,
        guessed_type=_first_type(stripped, EPISODE_TYPE_PATTERNS),
        guessed_number=_first_number(stripped, EPISODE_NUMBER_PATTERNS),
    )
    logger.debug(f"文件名解析: '{filename}' -> {signal}")
    return signal
