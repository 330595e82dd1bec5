import pytest

from pipeshell.config import ShellConfig


def test_defaults():
    config = ShellConfig()
    assert config.max_args == 10
    assert config.create_mode == 0o666
    assert not config.wait_each_stage
    assert config.banner


def test_invalid_values():
    with pytest.raises(ValueError):
        ShellConfig(max_args=0)
    with pytest.raises(ValueError):
        ShellConfig(create_mode=0o17777)
