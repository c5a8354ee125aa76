import logging
from typing import Optional

from bangumi_matcher.metadata_sources.base import BaseEpisodeCatalog
from bangumi_matcher.models import EpisodeRecord, EpisodeType, ParentContainer, ResolutionResult, Season

logger = logging.getLogger(__name__)


class SeasonPlacementResolver:
    """计算分集所在的季序号；非本篇分集标记为特别篇，并根据播出日期放在对应季之前或之后"""

    def __init__(self, catalog: BaseEpisodeCatalog):
        self.catalog = catalog

    async def place(
        self,
        episode: EpisodeRecord,
        parent: Optional[ParentContainer],
        series_id: Optional[str] = None,
    ) -> ResolutionResult:
        result = ResolutionResult(episode=episode, index_number=int(episode.order), parent_index_number=1)

        season_number = 1
        if isinstance(parent, Season):
            result.season_id = parent.id
            result.parent_index_number = parent.index_number
            season_number = parent.index_number

        if episode.type == EpisodeType.NORMAL:
            return result

        # 季序号 0 表示特别篇
        result.parent_index_number = 0

        # 分集自带的条目ID优先，否则使用识别时确定的条目ID
        subject_id = str(episode.subject_id) if episode.subject_id is not None else series_id
        if not subject_id:
            return result
        series = await self.catalog.fetch_series(subject_id)
        if series is None:
            logger.info(f"条目 {subject_id} 获取失败，无法判断特别篇 {episode.id} 的播出位置")
            return result

        # ISO 日期字符串可直接按字典序比较
        if episode.air_date < series.air_date:
            result.airs_before_season_number = season_number
        else:
            result.airs_after_season_number = season_number
        return result
