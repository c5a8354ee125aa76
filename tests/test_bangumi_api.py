import asyncio
from typing import List

import httpx

from bangumi_matcher.core.config import BangumiConfig
from bangumi_matcher.metadata_sources.bangumi import BangumiApi
from bangumi_matcher.models import EpisodeType


EPISODE_PAYLOAD = {
    "id": 1234,
    "type": 0,
    "name": "始まりの日",
    "name_cn": "开始的日子",
    "sort": 3,
    "ep": 3,
    "airdate": "2020-04-17",
    "comment": 10,
    "duration": "00:24:00",
    "desc": "",
    "disc": 0,
    "subject_id": 100,
}


def make_api(handler, config=None) -> BangumiApi:
    config = config or BangumiConfig()
    client = httpx.AsyncClient(base_url=config.api_base_url, transport=httpx.MockTransport(handler))
    return BangumiApi(config, client=client)


def run(api: BangumiApi, coro):
    async def _run():
        async with api:
            return await coro

    return asyncio.run(_run())


def paged_handler(total: int, first_order: int, requested: List[int]):
    def handler(request: httpx.Request) -> httpx.Response:
        offset = int(request.url.params["offset"])
        limit = int(request.url.params["limit"])
        requested.append(offset)
        data = [
            {"id": i + 1, "type": 0, "sort": first_order + i, "airdate": ""}
            for i in range(offset, min(offset + limit, total))
        ]
        return httpx.Response(200, json={"data": data, "total": total, "limit": limit, "offset": offset})

    return handler


def test_fetch_episode():
    def handler(request):
        assert request.url.path == "/v0/episodes/1234"
        return httpx.Response(200, json=EPISODE_PAYLOAD)

    api = make_api(handler)
    episode = run(api, api.fetch_episode("1234"))

    assert episode.id == 1234
    assert episode.subject_id == 100
    assert episode.type == EpisodeType.NORMAL
    assert episode.order == 3
    assert episode.air_date == "2020-04-17"
    assert episode.display_name == "开始的日子"


def test_fetch_episode_with_unknown_type():
    api = make_api(lambda request: httpx.Response(200, json={**EPISODE_PAYLOAD, "type": 6}))
    episode = run(api, api.fetch_episode("1234"))
    assert episode.type is None


def test_fetch_episode_not_found():
    api = make_api(lambda request: httpx.Response(404, json={"title": "Not Found"}))
    assert run(api, api.fetch_episode("1")) is None


def test_fetch_episode_server_error_is_absent():
    api = make_api(lambda request: httpx.Response(500))
    assert run(api, api.fetch_episode("1")) is None


def test_fetch_episode_network_error_is_absent():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = make_api(handler)
    assert run(api, api.fetch_episode("1")) is None


def test_fetch_episode_invalid_payload_is_absent():
    api = make_api(lambda request: httpx.Response(200, json={"name": "missing id"}))
    assert run(api, api.fetch_episode("1")) is None


def test_fetch_series():
    def handler(request):
        assert request.url.path == "/v0/subjects/100"
        return httpx.Response(200, json={"id": 100, "name": "Show", "name_cn": None, "date": "2020-04-03"})

    api = make_api(handler)
    series = run(api, api.fetch_series("100"))
    assert series.air_date == "2020-04-03"
    assert series.name_cn == ""
    assert series.display_name == "Show"


def test_catalog_returns_first_page_for_small_index():
    requested: List[int] = []
    api = make_api(paged_handler(total=24, first_order=1, requested=requested))
    episodes = run(api, api.fetch_episode_catalog("100", None, 12))
    assert [e.order for e in episodes] == list(range(1, 25))
    assert requested == [0]
    assert all(e.subject_id == 100 for e in episodes)


def test_catalog_passes_type_filter():
    def handler(request):
        assert request.url.params["subject_id"] == "100"
        assert request.url.params["type"] == "2"
        return httpx.Response(200, json={"data": [{"id": 1, "type": 2, "sort": 1}], "total": 1})

    api = make_api(handler)
    episodes = run(api, api.fetch_episode_catalog("100", EpisodeType.OPENING, 1))
    assert episodes[0].type == EpisodeType.OPENING


def test_catalog_omits_type_filter_for_unknown_type():
    def handler(request):
        assert "type" not in request.url.params
        return httpx.Response(200, json={"data": [], "total": 0})

    api = make_api(handler)
    assert run(api, api.fetch_episode_catalog("100", None, 1)) == []


def test_catalog_jumps_to_page_containing_index():
    requested: List[int] = []
    api = make_api(paged_handler(total=250, first_order=1, requested=requested))
    episodes = run(api, api.fetch_episode_catalog("100", None, 180))
    assert requested == [0, 80]
    assert episodes[0].order == 81
    assert episodes[-1].order == 180
    assert episodes[0].subject_id == 100


def test_catalog_walks_pages_when_numbering_is_offset():
    requested: List[int] = []
    # 续作的集数从 201 开始
    api = make_api(paged_handler(total=250, first_order=201, requested=requested))
    episodes = run(api, api.fetch_episode_catalog("100", None, 300))
    assert requested == [0, 150, 50]
    assert any(e.order == 300 for e in episodes)


def test_catalog_falls_back_to_first_page_when_index_is_missing():
    requested: List[int] = []
    api = make_api(paged_handler(total=150, first_order=1, requested=requested))
    episodes = run(api, api.fetch_episode_catalog("100", None, 500))
    assert episodes[0].order == 1
    assert requested == [0, 50, 150]


def test_catalog_not_found():
    api = make_api(lambda request: httpx.Response(404))
    assert run(api, api.fetch_episode_catalog("100", None, 1)) is None


def test_token_is_sent_as_bearer():
    api = BangumiApi(BangumiConfig(token="secret-token"))
    try:
        assert api._client.headers["Authorization"] == "Bearer secret-token"
        assert api._client.headers["User-Agent"].startswith("BangumiMatcher/")
    finally:
        asyncio.run(api.close())


def test_catalog_keeps_existing_subject_id():
    def handler(request):
        return httpx.Response(200, json={"data": [{"id": 1, "type": 0, "sort": 1, "subject_id": 300}], "total": 1})

    api = make_api(handler)
    episodes = run(api, api.fetch_episode_catalog("100", None, 1))
    assert episodes[0].subject_id == 300
