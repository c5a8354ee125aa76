"""
数据模型

- EpisodeRecord / SeriesRecord: Bangumi API 返回的分集与条目 (只读)
- Season / Series: 宿主媒体库中的父容器
- FilenameSignal: 单次解析中由文件名得到的临时信号
- ResolutionInput / ResolutionResult: 一次分集识别的输入与输出
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EpisodeType(IntEnum):
    """
    Bangumi 分集类型。数值与 API 中的 type 字段一致。
    按类型升序排序时本篇必须排在最前，候选集选择依赖这一顺序。
    """
    NORMAL = 0
    SPECIAL = 1
    OPENING = 2
    ENDING = 3
    PREVIEW = 4


class EpisodeRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    subject_id: Optional[int] = None
    # Bangumi 还会返回 5(MAD) / 6(其他)，这些类型不参与识别
    type: Optional[EpisodeType] = None
    order: float = Field(default=0, alias="sort")
    air_date: str = Field(default="", alias="airdate")
    name: str = ""
    name_cn: str = ""
    description: str = Field(default="", alias="desc")

    @field_validator("type", mode="before")
    @classmethod
    def unknown_type_to_none(cls, value):
        if value is None or isinstance(value, EpisodeType):
            return value
        try:
            return EpisodeType(int(value))
        except (TypeError, ValueError):
            return None

    @field_validator("air_date", "name", "name_cn", "description", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return value or ""

    @property
    def display_name(self) -> str:
        return self.name_cn or self.name

    def __str__(self) -> str:
        type_name = self.type.name if self.type is not None else "UNKNOWN"
        return f"<Episode {self.id} {type_name} #{self.order:g} '{self.display_name}'>"


class SeriesRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    air_date: str = Field(default="", alias="date")
    name: str = ""
    name_cn: str = ""

    @field_validator("air_date", "name", "name_cn", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return value or ""

    @property
    def display_name(self) -> str:
        return self.name_cn or self.name


# ====================================================================
# 宿主媒体库中的父容器
# ====================================================================

@dataclass(frozen=True)
class Season:
    """季容器。bangumi_id 不为空时覆盖剧集级别的条目ID。"""
    id: str
    index_number: Optional[int] = None
    bangumi_id: Optional[str] = None


@dataclass(frozen=True)
class Series:
    id: str


ParentContainer = Union[Season, Series]


# ====================================================================
# 单次识别的输入、临时信号与输出
# ====================================================================

@dataclass(frozen=True)
class FilenameSignal:
    """文件名解析结果，只在一次识别调用内有效"""
    stripped_name: str
    guessed_type: Optional[EpisodeType] = None
    guessed_number: Optional[float] = None


@dataclass(frozen=True)
class ResolutionInput:
    path: str
    series_id: Optional[str] = None
    episode_id: Optional[str] = None
    index_number: Optional[float] = None


@dataclass
class ResolutionResult:
    episode: Optional[EpisodeRecord] = None
    index_number: Optional[int] = None
    parent_index_number: Optional[int] = None
    season_id: Optional[str] = None
    airs_before_season_number: Optional[int] = None
    airs_after_season_number: Optional[int] = None

    @property
    def has_metadata(self) -> bool:
        return self.episode is not None
