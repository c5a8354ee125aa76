"""
分集识别

按顺序尝试以下步骤，任一步骤返回分集即结束：
1. 已知的 Bangumi 分集ID：获取后按信任规则决定是否采用
2. 分集列表：按类型与集数在条目的分集列表中查找

每个步骤返回 EpisodeRecord 或 None，None 表示交给下一步处理。
"""
import logging
import math
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from bangumi_matcher.core.config import ResolverConfig
from bangumi_matcher.metadata_sources.base import BaseEpisodeCatalog
from bangumi_matcher.models import EpisodeRecord, EpisodeType, ParentContainer, ResolutionInput, Season
from bangumi_matcher.utils.external_parser import extract_number_externally
from bangumi_matcher.utils.filename_parser import get_file_name, guess_episode_type, is_special_episode_file
from .episode_number import guess_episode_number

logger = logging.getLogger(__name__)

# 分集ID对应的序号与当前集数的允许误差（不含边界）
ORDER_TOLERANCE = 0.1


@dataclass(frozen=True)
class EpisodeLookup:
    """一次识别中各步骤共享的只读上下文"""
    path: str
    file_name: str
    series_id: str
    episode_id: Optional[str]
    episode_type: Optional[EpisodeType]
    starting_index: float


def _type_sort_key(episode: EpisodeRecord) -> int:
    # 无法识别的类型排在最后
    return int(episode.type) if episode.type is not None else len(EpisodeType)


class EpisodeResolver:
    def __init__(
        self,
        catalog: BaseEpisodeCatalog,
        config: ResolverConfig,
        external_extractor: Callable[[str], Optional[str]] = extract_number_externally,
    ):
        self.catalog = catalog
        self.config = config
        self.external_extractor = external_extractor
        self._steps: List[Callable[[EpisodeLookup], Awaitable[Optional[EpisodeRecord]]]] = [
            self._from_episode_id,
            self._from_episode_catalog,
        ]

    def _guess_number(self, current: Optional[float], file_name: str, max_bound: float = math.inf) -> float:
        return guess_episode_number(
            current, file_name, self.config, max_bound=max_bound, external_extractor=self.external_extractor
        )

    @staticmethod
    def resolve_series_id(info: ResolutionInput, parent: Optional[ParentContainer]) -> Optional[str]:
        """季容器上的条目ID优先于剧集级别的条目ID"""
        series_id = info.series_id
        if isinstance(parent, Season) and parent.bangumi_id:
            series_id = parent.bangumi_id
        return series_id or None

    def starting_index(self, index_number: Optional[float], file_name: str) -> float:
        if self.config.always_replace_episode_number or not index_number:
            return self._guess_number(index_number, file_name)
        return index_number

    async def resolve(self, info: ResolutionInput, parent: Optional[ParentContainer]) -> Optional[EpisodeRecord]:
        file_name = get_file_name(info.path)
        if not file_name:
            return None

        series_id = self.resolve_series_id(info, parent)
        if not series_id:
            logger.info(f"文件 '{file_name}' 没有关联的 Bangumi 条目，跳过")
            return None

        lookup = EpisodeLookup(
            path=info.path,
            file_name=file_name,
            series_id=series_id,
            episode_id=info.episode_id or None,
            episode_type=guess_episode_type(file_name),
            starting_index=self.starting_index(info.index_number, file_name),
        )

        for step in self._steps:
            episode = await step(lookup)
            if episode is not None:
                return episode
        return None

    async def _from_episode_id(self, lookup: EpisodeLookup) -> Optional[EpisodeRecord]:
        if not lookup.episode_id:
            return None

        episode = await self.catalog.fetch_episode(lookup.episode_id)
        if episode is None:
            logger.info(f"分集ID {lookup.episode_id} 获取失败，改为从分集列表查找")
            return None

        if self.config.trust_existed_bangumi_id:
            return episode

        # 非本篇有独立的编号，文件名中的集数不能否定它
        if episode.type != EpisodeType.NORMAL or is_special_episode_file(lookup.path):
            return episode

        if (
            str(episode.subject_id) == lookup.series_id
            and abs(episode.order - lookup.starting_index) < ORDER_TOLERANCE
        ):
            return episode

        logger.warning(
            f"分集ID {lookup.episode_id} (条目 {episode.subject_id}, 序号 {episode.order:g}) "
            f"与文件 '{lookup.file_name}' (条目 {lookup.series_id}, 集数 {lookup.starting_index:g}) 不符，已忽略"
        )
        return None

    async def _from_episode_catalog(self, lookup: EpisodeLookup) -> Optional[EpisodeRecord]:
        episodes = await self.catalog.fetch_episode_catalog(
            lookup.series_id, lookup.episode_type, lookup.starting_index
        )
        if not episodes:
            logger.info(f"条目 {lookup.series_id} 没有可用的分集列表")
            return None

        episode_index = lookup.starting_index
        # 只有本篇共享同一个序号上限
        if lookup.episode_type in (None, EpisodeType.NORMAL):
            max_order = max(episode.order for episode in episodes)
            episode_index = self._guess_number(episode_index, lookup.file_name, max_order)

        for episode in sorted(episodes, key=_type_sort_key):
            if episode.order == episode_index:
                return episode

        logger.info(f"条目 {lookup.series_id} 中没有序号为 {episode_index:g} 的分集")
        return None
