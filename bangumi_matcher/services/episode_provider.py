import logging
import ntpath
from typing import Callable, Optional

from bangumi_matcher.core.config import ResolverConfig
from bangumi_matcher.metadata_sources.base import BaseEpisodeCatalog
from bangumi_matcher.models import ResolutionInput, ResolutionResult
from bangumi_matcher.utils.external_parser import extract_number_externally
from bangumi_matcher.utils.filename_parser import get_file_name
from .episode_resolver import EpisodeResolver
from .library import BaseLibrary
from .season_placement import SeasonPlacementResolver

logger = logging.getLogger(__name__)


class EpisodeProvider:
    """
    单个分集文件的元数据识别入口。

    流程: 查询父容器 → 识别分集 → 计算季内位置。
    识别失败时返回空的 ResolutionResult，不会抛出异常；取消会直接向上传播。
    """

    def __init__(
        self,
        catalog: BaseEpisodeCatalog,
        library: BaseLibrary,
        config: ResolverConfig,
        external_extractor: Callable[[str], Optional[str]] = extract_number_externally,
    ):
        self.library = library
        self.resolver = EpisodeResolver(catalog, config, external_extractor=external_extractor)
        self.placement = SeasonPlacementResolver(catalog)

    async def get_metadata(self, info: ResolutionInput) -> ResolutionResult:
        parent = await self.library.find_parent_container(ntpath.dirname(info.path))
        episode = await self.resolver.resolve(info, parent)

        logger.info(f"metadata for {get_file_name(info.path)}: {episode}")
        if episode is None:
            return ResolutionResult()

        series_id = self.resolver.resolve_series_id(info, parent)
        return await self.placement.place(episode, parent, series_id=series_id)
