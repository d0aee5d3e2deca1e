"""Tests for LayoutConfig validation and load_config merging."""

import pytest

from lanegraph.config import DEFAULT_PALETTE, LayoutConfig, load_config
from lanegraph.exceptions import ConfigurationError, InvalidConfigError


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """No global/project config files and no LANEGRAPH_* variables."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    (tmp_path / "home").mkdir()
    for field_name in LayoutConfig.__dataclass_fields__:
        monkeypatch.delenv(f"LANEGRAPH_{field_name.upper()}", raising=False)
    return tmp_path


class TestLayoutConfig:
    """Test LayoutConfig defaults and validation."""

    def test_defaults(self):
        config = LayoutConfig()
        assert config.strategy == "branch-first"
        assert config.palette == DEFAULT_PALETTE
        assert len(config.palette) == 8
        assert config.mainline_name == "main"

    def test_color_for_lane_wraps(self):
        config = LayoutConfig(palette=("a", "b", "c"))
        assert config.color_for_lane(4) == "b"
        assert config.color_for_lane(-1) == config.fallback_color

    def test_explicit_default_branch_is_mainline_name(self):
        assert LayoutConfig(default_branch="trunk").mainline_name == "trunk"

    @pytest.mark.parametrize(
        "kwargs,key",
        [
            ({"strategy": "zigzag"}, "strategy"),
            ({"palette": ()}, "palette"),
            ({"palette": ("#fff", "")}, "palette"),
            ({"mainline_candidates": ()}, "mainline_candidates"),
            ({"default_branch": "  "}, "default_branch"),
            ({"max_commits": 0}, "max_commits"),
            ({"verbosity": "loud"}, "verbosity"),
        ],
    )
    def test_invalid_values(self, kwargs, key):
        with pytest.raises(InvalidConfigError) as exc_info:
            LayoutConfig(**kwargs)
        assert exc_info.value.key == key


class TestLoadConfig:
    """Test load_config source priority."""

    def test_defaults_only(self, isolated):
        assert load_config() == LayoutConfig()

    def test_project_file(self, isolated):
        (isolated / "lanegraph.toml").write_text(
            '[lanegraph]\nstrategy = "row-by-row"\npalette = ["#000000", "#ffffff"]\n'
        )
        config = load_config()
        assert config.strategy == "row-by-row"
        assert config.palette == ("#000000", "#ffffff")

    def test_global_file_overridden_by_project_file(self, isolated):
        (isolated / "home" / ".lanegraph.toml").write_text('max_commits = 10\nstrategy = "row-by-row"\n')
        (isolated / "lanegraph.toml").write_text('strategy = "branch-first"\n')
        config = load_config()
        assert config.max_commits == 10
        assert config.strategy == "branch-first"

    def test_env_overrides_files(self, isolated, monkeypatch):
        (isolated / "lanegraph.toml").write_text('strategy = "branch-first"\n')
        monkeypatch.setenv("LANEGRAPH_STRATEGY", "row-by-row")
        monkeypatch.setenv("LANEGRAPH_MAINLINE_CANDIDATES", "trunk, develop")
        monkeypatch.setenv("LANEGRAPH_COMPACT_LANES", "false")
        monkeypatch.setenv("LANEGRAPH_MAX_COMMITS", "200")
        config = load_config()
        assert config.strategy == "row-by-row"
        assert config.mainline_candidates == ("trunk", "develop")
        assert config.compact_lanes is False
        assert config.max_commits == 200

    def test_overrides_win_and_none_ignored(self, isolated, monkeypatch):
        monkeypatch.setenv("LANEGRAPH_STRATEGY", "row-by-row")
        config = load_config(strategy="branch-first", max_commits=None)
        assert config.strategy == "branch-first"
        assert config.max_commits == 5000

    def test_verbosity_flags(self, isolated):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False, quiet=False).verbosity == "normal"

    def test_explicit_file(self, isolated):
        path = isolated / "custom.toml"
        path.write_text('default_branch = "trunk"\n')
        assert load_config(config_file=path).default_branch == "trunk"

    def test_missing_explicit_file(self, isolated):
        with pytest.raises(ConfigurationError):
            load_config(config_file=isolated / "absent.toml")

    def test_invalid_toml(self, isolated):
        path = isolated / "broken.toml"
        path.write_text("strategy = \n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=path)

    def test_unknown_key(self, isolated):
        (isolated / "lanegraph.toml").write_text("colour_scheme = 3\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert "colour_scheme" in str(exc_info.value)

    def test_bad_env_value(self, isolated, monkeypatch):
        monkeypatch.setenv("LANEGRAPH_MAX_COMMITS", "lots")
        with pytest.raises(InvalidConfigError):
            load_config()
