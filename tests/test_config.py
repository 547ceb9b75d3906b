"""Tests for the token store."""

from __future__ import annotations

import stat

import pytest
import yaml

from propener.config import Config, ConfigError, default_config_path, load_config, save_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("GITHUB_TOKEN", "GH_TOKEN", "GITLAB_TOKEN", "PRO_CONFIG", "XDG_CONFIG_HOME"):
        monkeypatch.delenv(var, raising=False)


class TestDefaultConfigPath:
    def test_pro_config(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PRO_CONFIG", str(tmp_path / "pro.yml"))
        assert default_config_path() == tmp_path / "pro.yml"

    def test_xdg_config_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert default_config_path() == tmp_path / "pro" / "config.yml"

    def test_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert default_config_path() == tmp_path / ".config" / "pro" / "config.yml"


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        config = load_config(tmp_path / "config.yml")
        assert config.get_token("github") == ""
        assert config.get_token("gitlab") == ""

    def test_tokens(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("github_token: gh-tok\ngitlab_token: gl-tok\n", encoding="utf-8")
        config = load_config(path)
        assert config.get_token("github") == "gh-tok"
        assert config.get_token("gitlab") == "gl-tok"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("", encoding="utf-8")
        assert load_config(path).tokens == {}

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- github_token\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("github_token: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_environment_takes_precedence(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yml"
        path.write_text("github_token: stored\n", encoding="utf-8")
        monkeypatch.setenv("GH_TOKEN", "from-gh")
        config = load_config(path)
        assert config.get_token("github") == "from-gh"

        monkeypatch.setenv("GITHUB_TOKEN", "from-github")
        assert config.get_token("github") == "from-github"

    def test_gitlab_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GITLAB_TOKEN", "from-env")
        assert load_config(tmp_path / "config.yml").get_token("gitlab") == "from-env"


class TestSaveConfig:
    def test_round_trip_and_permissions(self, tmp_path):
        path = tmp_path / "nested" / "config.yml"
        config = Config(path=path)
        config.set_token("gitlab", "gl-tok")
        save_config(config)

        assert yaml.safe_load(path.read_text(encoding="utf-8")) == {"gitlab_token": "gl-tok"}
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert load_config(path).get_token("gitlab") == "gl-tok"

    def test_keeps_other_tokens(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("github_token: gh-tok\n", encoding="utf-8")
        config = load_config(path)
        config.set_token("gitlab", "gl-tok")
        save_config(config)

        assert yaml.safe_load(path.read_text(encoding="utf-8")) == {
            "github_token": "gh-tok",
            "gitlab_token": "gl-tok",
        }

    def test_unknown_provider(self, tmp_path):
        with pytest.raises(ConfigError):
            Config(path=tmp_path / "config.yml").set_token("bitbucket", "tok")
