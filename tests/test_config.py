from feedback360 import config
from feedback360.core.engine import AggregationParameters


def test_tier_scale_parsing():
    assert config._parse_tier_scale("1,3,5") == {1: 1.0, 2: 3.0, 3: 5.0}
    assert config._parse_tier_scale(" 0 , 2.5 ,5 ") == {1: 0.0, 2: 2.5, 3: 5.0}


def test_tier_scale_falls_back_to_default():
    default = {1: 1.0, 2: 2.0, 3: 3.0}
    assert config._parse_tier_scale("") == default
    assert config._parse_tier_scale("1,2") == default
    assert config._parse_tier_scale("a,b,c") == default


def test_bool_parsing():
    assert config._parse_bool("", default=True) is True
    assert config._parse_bool("false", default=True) is False
    assert config._parse_bool(" YES ", default=False) is True


def test_default_parameters_follow_config():
    params = AggregationParameters()
    assert params.tier_scores == config.TIER_SCORES
    assert params.tier_scores is not config.TIER_SCORES
    assert params.drop_zero_averages == config.RADAR_DROP_ZERO_AVERAGES
