import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from bangumi_matcher.api.resolve_routes import router as resolve_router
from bangumi_matcher.core import settings
from bangumi_matcher.metadata_sources.bangumi import BangumiApi
from bangumi_matcher.services.episode_provider import EpisodeProvider
from bangumi_matcher.services.library import StaticLibrary
from bangumi_matcher.services.log_manager import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 外部注入了 provider (如测试) 时不创建自己的客户端
    if getattr(app.state, "episode_provider", None) is not None:
        yield
        return

    setup_logging(settings.log)
    catalog = BangumiApi(settings.bangumi)
    library = StaticLibrary.from_config(settings.library)
    app.state.episode_provider = EpisodeProvider(catalog, library, settings.resolver)
    logger.info(f"分集识别服务已启动 (Bangumi API: {settings.bangumi.api_base_url})")
    try:
        yield
    finally:
        await catalog.close()
        app.state.episode_provider = None


def create_app(provider: Optional[EpisodeProvider] = None) -> FastAPI:
    app = FastAPI(title="Bangumi Episode Matcher", lifespan=lifespan)
    app.state.episode_provider = provider
    app.include_router(resolve_router, prefix="/api")
    return app


app = create_app()


def main():
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log.level.lower(),
    )


if __name__ == "__main__":
    main()
