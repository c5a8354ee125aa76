"""
分集识别API
包含: /episodes/resolve, /episodes/parse, /logs
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request

from bangumi_matcher.services.episode_provider import EpisodeProvider
from bangumi_matcher.services.log_manager import get_logs
from bangumi_matcher.utils.filename_parser import parse_filename_signal

from .models import FilenameSignalResponse, ResolveRequest, ResolveResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def get_episode_provider(request: Request) -> EpisodeProvider:
    """Dependency to get EpisodeProvider from app state."""
    return request.app.state.episode_provider


@router.post("/episodes/resolve", response_model=ResolveResponse, summary="识别分集")
async def resolve_episode(
    payload: ResolveRequest,
    provider: EpisodeProvider = Depends(get_episode_provider),
):
    """
    ### 功能
    根据文件路径、已有的条目/分集ID和集数，识别文件对应的 Bangumi 分集，
    并给出季序号与特别篇的播出位置。
    ### 规则
    - 无法识别时返回 `hasMetadata: false`，不会返回错误。
    """
    result = await provider.get_metadata(payload.to_input())
    return ResolveResponse.from_result(result)


@router.get("/episodes/parse", response_model=FilenameSignalResponse, summary="解析分集文件名")
async def parse_episode_file_name(
    fileName: str = Query(..., description="分集文件名"),
):
    """
    ### 功能
    返回文件名去噪后的结果、猜测的分集类型和集数，便于排查识别问题。
    """
    return FilenameSignalResponse.from_signal(parse_filename_signal(fileName))


@router.get("/logs", response_model=List[str], summary="获取最近的日志")
async def list_recent_logs():
    return get_logs()
