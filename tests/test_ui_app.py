import pytest

from feedback360 import config

app = pytest.importorskip("feedback360.ui.app")


@pytest.mark.parametrize("drop_zero, expected", [(True, False), (False, True)])
def test_keep_zero_checkbox_follows_config(monkeypatch, drop_zero, expected):
    monkeypatch.setattr(config, "RADAR_DROP_ZERO_AVERAGES", drop_zero)
    assert app._keep_zero_default() is expected
