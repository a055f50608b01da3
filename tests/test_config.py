"""
Tests for RenderConfig and its environment loading.
"""

import os

import pytest

from bodymovin_pipeline.core.config import RenderConfig, default_worker_count

ENV_NAMES = (
    'BODYMOVIN_WORKERS',
    'BODYMOVIN_USE_PROCESSES',
    'BODYMOVIN_FAIL_FAST',
    'BODYMOVIN_FLOOR_SCALE',
    'BODYMOVIN_SCALE_ANCHOR',
    'BODYMOVIN_DEFAULT_WIDTH',
    'BODYMOVIN_DEFAULT_HEIGHT',
    'BODYMOVIN_SHOW_PROGRESS',
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No BODYMOVIN_* variables set; .env files load into a throwaway environment."""
    monkeypatch.setattr(os, 'environ', os.environ.copy())
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestRenderConfig:
    def test_defaults(self):
        config = RenderConfig()
        assert config.fail_fast is True
        assert config.floor_scale is False
        assert config.scale_anchor is True
        assert (config.default_width, config.default_height) == (540, 800)
        assert config.worker_count == default_worker_count()

    def test_default_worker_count_is_bounded(self):
        assert 1 <= default_worker_count() <= 8

    def test_explicit_workers(self):
        assert RenderConfig(max_workers=3).worker_count == 3

    @pytest.mark.parametrize("kwargs", [
        {'max_workers': 0},
        {'default_width': 0},
        {'default_height': -5},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RenderConfig(**kwargs)


class TestFromEnv:
    def test_without_variables_matches_defaults(self, clean_env):
        assert RenderConfig.from_env() == RenderConfig()

    def test_reads_variables(self, clean_env):
        clean_env.setenv('BODYMOVIN_WORKERS', '2')
        clean_env.setenv('BODYMOVIN_USE_PROCESSES', 'true')
        clean_env.setenv('BODYMOVIN_FAIL_FAST', '0')
        clean_env.setenv('BODYMOVIN_FLOOR_SCALE', 'yes')
        clean_env.setenv('BODYMOVIN_DEFAULT_WIDTH', '320')

        config = RenderConfig.from_env()

        assert config.max_workers == 2
        assert config.use_processes is True
        assert config.fail_fast is False
        assert config.floor_scale is True
        assert config.default_width == 320

    def test_overrides_win_and_none_is_ignored(self, clean_env):
        clean_env.setenv('BODYMOVIN_WORKERS', '2')
        config = RenderConfig.from_env(max_workers=5, floor_scale=None)
        assert config.max_workers == 5
        assert config.floor_scale is False

    def test_reads_dotenv_from_working_directory(self, clean_env, tmp_path):
        (tmp_path / '.env').write_text("BODYMOVIN_WORKERS=3\nBODYMOVIN_SCALE_ANCHOR=false\n")
        config = RenderConfig.from_env()
        assert config.max_workers == 3
        assert config.scale_anchor is False

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        (tmp_path / '.env').write_text("BODYMOVIN_WORKERS=3\n")
        clean_env.setenv('BODYMOVIN_WORKERS', '6')
        assert RenderConfig.from_env().max_workers == 6

    def test_bad_integer_raises(self, clean_env):
        clean_env.setenv('BODYMOVIN_WORKERS', 'many')
        with pytest.raises(ValueError, match='BODYMOVIN_WORKERS'):
            RenderConfig.from_env()
