from typing import Optional

from pydantic import BaseModel, Field

from bangumi_matcher.models import EpisodeRecord, FilenameSignal, ResolutionInput, ResolutionResult


class ResolveRequest(BaseModel):
    path: str = Field(..., description="分集文件的完整路径")
    seriesId: Optional[str] = Field(None, description="剧集已关联的 Bangumi 条目ID")
    episodeId: Optional[str] = Field(None, description="分集已关联的 Bangumi 分集ID")
    indexNumber: Optional[float] = Field(None, description="媒体库中已有的集数")

    def to_input(self) -> ResolutionInput:
        return ResolutionInput(
            path=self.path,
            series_id=self.seriesId,
            episode_id=self.episodeId,
            index_number=self.indexNumber,
        )


class EpisodeSummary(BaseModel):
    id: int
    subjectId: Optional[int] = None
    type: Optional[int] = None
    order: float
    airDate: str = ""
    name: str = ""
    nameCn: str = ""
    description: str = ""

    @classmethod
    def from_record(cls, episode: EpisodeRecord) -> "EpisodeSummary":
        return cls(
            id=episode.id,
            subjectId=episode.subject_id,
            type=int(episode.type) if episode.type is not None else None,
            order=episode.order,
            airDate=episode.air_date,
            name=episode.name,
            nameCn=episode.name_cn,
            description=episode.description,
        )


class ResolveResponse(BaseModel):
    hasMetadata: bool
    episode: Optional[EpisodeSummary] = None
    indexNumber: Optional[int] = None
    parentIndexNumber: Optional[int] = None
    seasonId: Optional[str] = None
    airsBeforeSeasonNumber: Optional[int] = None
    airsAfterSeasonNumber: Optional[int] = None

    @classmethod
    def from_result(cls, result: ResolutionResult) -> "ResolveResponse":
        return cls(
            hasMetadata=result.has_metadata,
            episode=EpisodeSummary.from_record(result.episode) if result.episode else None,
            indexNumber=result.index_number,
            parentIndexNumber=result.parent_index_number,
            seasonId=result.season_id,
            airsBeforeSeasonNumber=result.airs_before_season_number,
            airsAfterSeasonNumber=result.airs_after_season_number,
        )


class FilenameSignalResponse(BaseModel):
    strippedName: str
    episodeType: Optional[str] = None
    episodeNumber: Optional[float] = None

    @classmethod
    def from_signal(cls, signal: FilenameSignal) -> "FilenameSignalResponse":
        return cls(
            strippedName=signal.stripped_name,
            episodeType=signal.guessed_type.name.lower() if signal.guessed_type is not None else None,
            episodeNumber=signal.guessed_number,
        )
