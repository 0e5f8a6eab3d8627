import pytest

from spring_cloth import ClothConfig


def test_defaults():
    config = ClothConfig()
    assert (config.rest_length, config.spring_coeff, config.damp_coeff) == (1.0, 10.0, 0.03)
    assert (config.g, config.mass, config.g_on) == (9.81, 0.01, True)
    assert config.floor_y == -32.0
    assert config.backend == "sequential"
    assert config.device is None


def test_warp_device_resolved():
    config = ClothConfig(backend="warp")
    assert config.device is not None
    assert config.wp_device is not None


@pytest.mark.parametrize(
    "kwargs", [{"mass": 0.0}, {"mass": -1.0}, {"dt": 0.0}, {"backend": "gpu"}]
)
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        ClothConfig(**kwargs)
