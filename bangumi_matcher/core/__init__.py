"""
核心模块 - 纯静态配置

使用方式:
    from bangumi_matcher.core import settings
    from bangumi_matcher.core.config import ResolverConfig
"""

from .config import (
    settings,
    Settings,
    LogConfig,
    ServerConfig,
    BangumiConfig,
    ResolverConfig,
    LibraryConfig,
    get_config_dir,
)

__all__ = [
    'settings',
    'Settings',
    'LogConfig',
    'ServerConfig',
    'BangumiConfig',
    'ResolverConfig',
    'LibraryConfig',
    'get_config_dir',
]
