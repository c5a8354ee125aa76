import json
import logging
from typing import Any, Dict, List, Optional, Set

import httpx
from pydantic import BaseModel, ValidationError

from bangumi_matcher.core.config import BangumiConfig
from bangumi_matcher.models import EpisodeRecord, EpisodeType, SeriesRecord
from .base import BaseEpisodeCatalog

# 原始响应单独记录到 metadata_responses.log
response_logger = logging.getLogger("metadata_responses")


class BangumiEpisodePage(BaseModel):
    data: List[EpisodeRecord] = []
    total: int = 0
    limit: int = 0
    offset: int = 0


def attach_subject_id(series_id: str, episodes: List[EpisodeRecord]) -> List[EpisodeRecord]:
    """/v0/episodes 列表中的分集不带 subject_id，用请求的条目ID补上"""
    if not series_id.isdigit():
        return episodes
    return [
        e if e.subject_id is not None else e.model_copy(update={"subject_id": int(series_id)})
        for e in episodes
    ]


class BangumiApi(BaseEpisodeCatalog):
    """
    Bangumi API (https://api.bgm.tv) 的分集目录实现。

    使用方式:
        async with BangumiApi(settings.bangumi) as api:
            episode = await api.fetch_episode("12345")
    """

    def __init__(self, config: BangumiConfig, client: Optional[httpx.AsyncClient] = None):
        super().__init__()
        self.config = config
        self.page_size = config.page_size
        self._client = client or self._create_client()

    def _create_client(self) -> httpx.AsyncClient:
        headers = {"User-Agent": self.config.user_agent}
        if self.config.token:
            self.logger.debug("Bangumi: 正在使用 Access Token 进行认证。")
            headers["Authorization"] = f"Bearer {self.config.token}"
        return httpx.AsyncClient(
            base_url=self.config.api_base_url,
            headers=headers,
            timeout=self.config.timeout,
            follow_redirects=True,
        )

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self) -> "BangumiApi":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """GET 请求，404 与网络/状态码错误都视为未找到"""
        try:
            response = await self._client.get(url, params=params)
            if response.status_code == 404:
                self.logger.info(f"Bangumi: {url} 不存在 (404)")
                return None
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            self.logger.warning(f"Bangumi: 请求 {url} 失败，状态码 {e.response.status_code}")
            return None
        except httpx.HTTPError as e:
            self.logger.warning(f"Bangumi: 请求 {url} 失败: {e}")
            return None
        except json.JSONDecodeError as e:
            self.logger.warning(f"Bangumi: {url} 返回了无效的 JSON: {e}")
            return None

        response_logger.debug(f"GET {url} {params or ''}\n{json.dumps(data, ensure_ascii=False)}")
        return data

    async def fetch_episode(self, episode_id: str) -> Optional[EpisodeRecord]:
        data = await self._get_json(f"/v0/episodes/{episode_id}")
        if data is None:
            return None
        try:
            return EpisodeRecord.model_validate(data)
        except ValidationError as e:
            self.logger.warning(f"Bangumi: 分集 {episode_id} 数据格式无效: {e}")
            return None

    async def fetch_series(self, series_id: str) -> Optional[SeriesRecord]:
        data = await self._get_json(f"/v0/subjects/{series_id}")
        if data is None:
            return None
        try:
            return SeriesRecord.model_validate(data)
        except ValidationError as e:
            self.logger.warning(f"Bangumi: 条目 {series_id} 数据格式无效: {e}")
            return None

    async def _fetch_episode_page(
        self,
        series_id: str,
        type_hint: Optional[EpisodeType],
        offset: int,
    ) -> Optional[BangumiEpisodePage]:
        params: Dict[str, Any] = {"subject_id": series_id, "limit": self.page_size, "offset": offset}
        if type_hint is not None:
            params["type"] = int(type_hint)
        data = await self._get_json("/v0/episodes", params=params)
        if data is None:
            return None
        try:
            return BangumiEpisodePage.model_validate(data)
        except ValidationError as e:
            self.logger.warning(f"Bangumi: 条目 {series_id} 的分集列表格式无效: {e}")
            return None

    async def fetch_episode_catalog(
        self,
        series_id: str,
        type_hint: Optional[EpisodeType],
        index_hint: float,
    ) -> Optional[List[EpisodeRecord]]:
        """
        获取包含 index_hint 的那一页分集。

        先请求第一页；目标集数不在第一页时，按总数估算偏移量，
        再根据返回页的首尾序号上下翻页，直到该页覆盖目标集数。
        翻页过程中任何失败都退回第一页的数据。
        """
        first_page = await self._fetch_episode_page(series_id, type_hint, 0)
        if first_page is None:
            return None
        if index_hint < self.page_size and index_hint < first_page.total:
            return attach_subject_id(series_id, first_page.data)

        offset = int(min(index_hint, first_page.total)) - self.page_size
        visited: Set[int] = set()
        while True:
            if offset < 0 or offset > first_page.total or offset in visited:
                return attach_subject_id(series_id, first_page.data)
            visited.add(offset)

            page = await self._fetch_episode_page(series_id, type_hint, offset)
            if page is None or not page.data:
                return attach_subject_id(series_id, first_page.data)
            if page.data[0].order > index_hint:
                offset -= self.page_size
                continue
            if page.data[-1].order < index_hint:
                offset += self.page_size
                continue
            self.logger.debug(f"Bangumi: 条目 {series_id} 在偏移 {offset} 处找到集数 {index_hint:g}")
            return attach_subject_id(series_id, page.data)
