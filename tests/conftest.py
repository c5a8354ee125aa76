from typing import Dict, List, Optional

import pytest

from bangumi_matcher.core.config import ResolverConfig
from bangumi_matcher.metadata_sources.base import BaseEpisodeCatalog
from bangumi_matcher.models import EpisodeRecord, EpisodeType, SeriesRecord


def make_episode(
    episode_id: int,
    order: float,
    episode_type: EpisodeType = EpisodeType.NORMAL,
    subject_id: Optional[int] = 100,
    air_date: str = "2020-01-01",
) -> EpisodeRecord:
    return EpisodeRecord(
        id=episode_id,
        subject_id=subject_id,
        type=episode_type,
        order=order,
        air_date=air_date,
        name=f"Episode {order:g}",
    )


class FakeCatalog(BaseEpisodeCatalog):
    """内存中的分集目录，记录每次调用"""

    def __init__(
        self,
        episodes: Optional[List[EpisodeRecord]] = None,
        catalogs: Optional[Dict[str, List[EpisodeRecord]]] = None,
        series: Optional[List[SeriesRecord]] = None,
    ):
        super().__init__()
        self.episodes = {str(e.id): e for e in episodes or []}
        self.catalogs = catalogs or {}
        self.series = {str(s.id): s for s in series or []}
        self.calls: List[tuple] = []

    async def fetch_episode(self, episode_id):
        self.calls.append(("episode", episode_id))
        return self.episodes.get(episode_id)

    async def fetch_episode_catalog(self, series_id, type_hint, index_hint):
        self.calls.append(("catalog", series_id, type_hint, index_hint))
        episodes = self.catalogs.get(series_id)
        if episodes is None:
            return None
        if type_hint is None:
            return list(episodes)
        return [e for e in episodes if e.type == type_hint]

    async def fetch_series(self, series_id):
        self.calls.append(("series", series_id))
        return self.series.get(series_id)

    def calls_of(self, kind: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == kind]


def no_external(file_name: str) -> Optional[str]:
    raise AssertionError("external extractor should not be called")


@pytest.fixture
def config() -> ResolverConfig:
    return ResolverConfig()
