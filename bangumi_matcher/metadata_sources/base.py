import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from bangumi_matcher.models import EpisodeRecord, EpisodeType, SeriesRecord


class BaseEpisodeCatalog(ABC):
    """
    分集目录数据源的抽象基类。

    所有方法在"未找到"时返回 None 而不是抛出异常，
    调用方据此走降级分支。取消 (asyncio.CancelledError) 不在此列，会直接向上传播。
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def fetch_episode(self, episode_id: str) -> Optional[EpisodeRecord]:
        """按分集ID获取分集"""

    @abstractmethod
    async def fetch_episode_catalog(
        self,
        series_id: str,
        type_hint: Optional[EpisodeType],
        index_hint: float,
    ) -> Optional[List[EpisodeRecord]]:
        """获取条目下的分集列表。type_hint 为 None 时不按类型过滤，index_hint 用于定位分页"""

    @abstractmethod
    async def fetch_series(self, series_id: str) -> Optional[SeriesRecord]:
        """按条目ID获取条目"""
