from .episode_number import reconcile_episode_number, guess_episode_number
from .episode_resolver import EpisodeResolver, EpisodeLookup
from .season_placement import SeasonPlacementResolver
from .library import BaseLibrary, StaticLibrary
from .episode_provider import EpisodeProvider

__all__ = [
    'reconcile_episode_number',
    'guess_episode_number',
    'EpisodeResolver',
    'EpisodeLookup',
    'SeasonPlacementResolver',
    'BaseLibrary',
    'StaticLibrary',
    'EpisodeProvider',
]
