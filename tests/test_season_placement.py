import asyncio

from bangumi_matcher.models import EpisodeType, Season, Series, SeriesRecord
from bangumi_matcher.services.season_placement import SeasonPlacementResolver

from conftest import FakeCatalog, make_episode


def place(catalog, episode, parent=None):
    return asyncio.run(SeasonPlacementResolver(catalog).place(episode, parent))


def test_normal_episode_defaults_to_first_season():
    catalog = FakeCatalog()
    result = place(catalog, make_episode(1, 5))
    assert result.has_metadata
    assert result.parent_index_number == 1
    assert result.index_number == 5
    assert result.season_id is None
    assert catalog.calls == []


def test_normal_episode_uses_season_container():
    result = place(FakeCatalog(), make_episode(1, 5), parent=Season(id="season-2", index_number=2))
    assert result.parent_index_number == 2
    assert result.season_id == "season-2"


def test_series_container_keeps_default_season():
    result = place(FakeCatalog(), make_episode(1, 5), parent=Series(id="show"))
    assert result.parent_index_number == 1
    assert result.season_id is None


def test_fractional_order_is_truncated():
    assert place(FakeCatalog(), make_episode(1, 2.5)).index_number == 2


def test_special_airing_before_series():
    catalog = FakeCatalog(series=[SeriesRecord(id=100, air_date="2020-04-01")])
    special = make_episode(9, 1, EpisodeType.SPECIAL, air_date="2020-03-15")
    result = place(catalog, special)
    assert result.parent_index_number == 0
    assert result.airs_before_season_number == 1
    assert result.airs_after_season_number is None


def test_special_airing_after_series_in_season():
    catalog = FakeCatalog(series=[SeriesRecord(id=100, air_date="2020-04-01")])
    special = make_episode(9, 1, EpisodeType.OPENING, air_date="2020-04-01")
    result = place(catalog, special, parent=Season(id="season-2", index_number=2))
    assert result.parent_index_number == 0
    assert result.season_id == "season-2"
    assert result.airs_before_season_number is None
    assert result.airs_after_season_number == 2


def test_special_without_series_record_only_marks_special():
    catalog = FakeCatalog()
    result = place(catalog, make_episode(9, 1, EpisodeType.PREVIEW))
    assert result.parent_index_number == 0
    assert result.airs_before_season_number is None
    assert result.airs_after_season_number is None
    assert catalog.calls == [("series", "100")]


def test_special_with_unknown_air_date_airs_before():
    catalog = FakeCatalog(series=[SeriesRecord(id=100, air_date="2020-04-01")])
    result = place(catalog, make_episode(9, 1, EpisodeType.SPECIAL, air_date=""))
    assert result.airs_before_season_number == 1


def test_special_without_subject_id_uses_resolved_series_id():
    catalog = FakeCatalog(series=[SeriesRecord(id=200, air_date="2021-01-01")])
    episode = make_episode(9, 1, EpisodeType.SPECIAL, subject_id=None, air_date="2021-03-01")

    result = asyncio.run(
        SeasonPlacementResolver(catalog).place(episode, Season(id="s2", index_number=2), series_id="200")
    )

    assert result.parent_index_number == 0
    assert result.airs_after_season_number == 2
    assert catalog.calls_of("series") == [("series", "200")]


def test_special_without_any_series_id_skips_lookup():
    catalog = FakeCatalog()
    result = place(catalog, make_episode(9, 1, EpisodeType.SPECIAL, subject_id=None))
    assert result.parent_index_number == 0
    assert result.airs_before_season_number is None
    assert result.airs_after_season_number is None
    assert catalog.calls == []
