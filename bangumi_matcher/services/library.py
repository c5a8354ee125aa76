"""
媒体库父容器查询

宿主媒体库负责告诉我们某个目录对应的是季还是剧集。
这里提供抽象接口和一个基于配置的内存实现。
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from bangumi_matcher.core.config import LibraryConfig
from bangumi_matcher.models import ParentContainer, Season, Series

logger = logging.getLogger(__name__)


def normalize_directory(directory: str) -> str:
    normalized = directory.replace("\\", "/")
    return normalized.rstrip("/") or "/"


class BaseLibrary(ABC):
    @abstractmethod
    async def find_parent_container(self, directory: str) -> Optional[ParentContainer]:
        """返回目录对应的父容器，不存在时返回 None"""


class StaticLibrary(BaseLibrary):
    """目录到容器的静态映射，通常来自 config.yml 的 library.containers"""

    def __init__(self, containers: Optional[Dict[str, ParentContainer]] = None):
        self._containers: Dict[str, ParentContainer] = {}
        for directory, container in (containers or {}).items():
            self.add(directory, container)

    def add(self, directory: str, container: ParentContainer):
        self._containers[normalize_directory(directory)] = container

    @classmethod
    def from_config(cls, config: LibraryConfig) -> "StaticLibrary":
        library = cls()
        for item in config.containers:
            container_id = item.id or item.path
            if item.kind == "season":
                container: ParentContainer = Season(
                    id=container_id, index_number=item.index_number, bangumi_id=item.bangumi_id
                )
            elif item.kind == "series":
                container = Series(id=container_id)
            else:
                raise ValueError(f"未知的容器类型 '{item.kind}' (路径: {item.path})")
            library.add(item.path, container)
        logger.info(f"已加载 {len(library._containers)} 个媒体库容器")
        return library

    async def find_parent_container(self, directory: str) -> Optional[ParentContainer]:
        return self._containers.get(normalize_directory(directory))
