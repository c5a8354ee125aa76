from .base import BaseEpisodeCatalog
from .bangumi import BangumiApi, BangumiEpisodePage

__all__ = ['BaseEpisodeCatalog', 'BangumiApi', 'BangumiEpisodePage']
