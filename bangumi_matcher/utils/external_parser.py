"""第三方文件名解析 (guessit)，仅在开启相应配置时使用"""
import logging
from typing import Optional

from guessit import guessit

logger = logging.getLogger(__name__)


def extract_number_externally(filename: str) -> Optional[str]:
    """
    使用 guessit 提取集数，返回数字字符串。
    多集文件（如 01-02）取第一个集数；无法识别时返回 None。
    """
    try:
        details = guessit(filename, {"type": "episode"})
    except Exception as e:
        # guessit 内部规则异常不应中断识别流程
        logger.warning(f"guessit 解析 '{filename}' 失败: {e}")
        return None

    episode = details.get("episode")
    if isinstance(episode, list):
        episode = episode[0] if episode else None
    if episode is None:
        return None
    return str(episode)
