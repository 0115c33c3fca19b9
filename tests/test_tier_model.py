import json

import pytest

from dailyroll.operations.tier_model import DEFAULT_HERO_TIERS, TierModel
from dailyroll.utils.roll_exceptions import ConfigurationError


def test_default_tiers_are_valid_and_disjoint():
    model = TierModel.load()
    seen = set()
    for tier in range(1, 6):
        heroes = model.heroes(tier)
        assert heroes
        assert not seen & set(heroes)
        seen.update(heroes)


def test_tier_lookup_by_number():
    model = TierModel(DEFAULT_HERO_TIERS)
    assert 'Wrecking Ball' in model.heroes(1)
    assert set(model.heroes(5)) == {'Mercy', 'Kiriko', 'Widowmaker', 'Freja'}
    assert model.tier_of('Mercy') == 5
    assert model.tier_of('Not A Hero') is None


def test_unknown_tier_number_rejected():
    with pytest.raises(ValueError):
        TierModel(DEFAULT_HERO_TIERS).heroes(6)


def test_missing_tier_is_fatal():
    pools = {k: v for k, v in DEFAULT_HERO_TIERS.items() if k != 'bigbrain'}
    with pytest.raises(ConfigurationError, match='bigbrain'):
        TierModel(pools)


def test_empty_tier_is_fatal():
    pools = dict(DEFAULT_HERO_TIERS, unga=[])
    with pytest.raises(ConfigurationError, match='unga'):
        TierModel(pools)


def test_duplicate_hero_is_fatal():
    pools = dict(DEFAULT_HERO_TIERS, overqualified=['Mercy', 'Tracer'])
    with pytest.raises(ConfigurationError, match='Tracer'):
        TierModel(pools)


def test_load_from_file(tmp_path):
    path = tmp_path / 'tiers.json'
    pools = {name: [f'{name}-hero'] for name in DEFAULT_HERO_TIERS}
    path.write_text(json.dumps(pools), encoding='utf-8')

    model = TierModel.load(str(path))

    assert model.heroes(3) == ('normal-hero',)


def test_load_from_unreadable_file(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('{not json', encoding='utf-8')
    with pytest.raises(ConfigurationError):
        TierModel.load(str(path))


@pytest.mark.parametrize('pool', ['Mercy', None, ['Mercy', ''], ['Mercy', 7]])
def test_tier_must_be_list_of_names(pool):
    pools = dict(DEFAULT_HERO_TIERS, overqualified=pool)
    with pytest.raises(ConfigurationError, match='overqualified'):
        TierModel(pools)


def test_string_tier_in_file_is_fatal(tmp_path):
    path = tmp_path / 'tiers.json'
    pools = dict(DEFAULT_HERO_TIERS, overqualified='Mercy')
    path.write_text(json.dumps(pools), encoding='utf-8')
    with pytest.raises(ConfigurationError, match='overqualified'):
        TierModel.load(str(path))
