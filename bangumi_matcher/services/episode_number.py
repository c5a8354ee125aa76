"""
集数校正

综合文件名中的集数、媒体库已有的集数以及 Bangumi 分集列表中的最大序号，
得出最终使用的集数。规则按顺序判断，先命中先生效：

1. 配置为总是使用文件名集数 → 文件名集数
2. 文件名集数与已有集数相同 → 已有集数
3. 已有集数超出分集列表的最大序号 → 文件名集数
4. 已有集数缺失(<=0)而文件名集数有效 → 文件名集数
5. 其他情况 → 已有集数
"""
import logging
import math
from typing import Callable, Optional

from bangumi_matcher.core.config import ResolverConfig
from bangumi_matcher.utils.external_parser import extract_number_externally
from bangumi_matcher.utils.filename_parser import extract_episode_number

logger = logging.getLogger(__name__)


def reconcile_episode_number(
    current: Optional[float],
    from_filename: Optional[float],
    max_bound: float = math.inf,
    always_replace: bool = False,
    file_name: str = "",
) -> float:
    current = current or 0
    from_filename = from_filename or 0

    if always_replace:
        logger.warning(f"使用文件名 '{file_name}' 中的集数 {from_filename:g}")
        return from_filename

    if from_filename == current:
        logger.info(f"使用已有集数 {current:g} (文件: '{file_name}')")
        return current

    if current > max_bound:
        logger.warning(
            f"文件 '{file_name}' 的集数 {current:g} 超出范围 (最大 {max_bound:g})，改为 {from_filename:g}"
        )
        return from_filename

    if from_filename > 0 and current <= 0:
        logger.warning(f"文件 '{file_name}' 的集数 {current:g} 可能有误，应为 {from_filename:g}")
        return from_filename

    logger.info(f"保留已有集数 {current:g}，忽略文件名 '{file_name}' 中的 {from_filename:g}")
    return current


def guess_episode_number(
    current: Optional[float],
    file_name: str,
    config: ResolverConfig,
    max_bound: float = math.inf,
    external_extractor: Callable[[str], Optional[str]] = extract_number_externally,
) -> float:
    """
    从文件名猜测集数并与已有集数校正。
    开启第三方解析时，其结果直接作为最终集数。
    """
    if config.always_get_episode_by_anitomy_sharp:
        external = external_extractor(file_name)
        if external:
            try:
                return float(external)
            except ValueError:
                logger.warning(f"第三方解析得到的集数 '{external}' 无法识别，改用内置规则")

    return reconcile_episode_number(
        current,
        extract_episode_number(file_name),
        max_bound=max_bound,
        always_replace=config.always_replace_episode_number,
        file_name=file_name,
    )
