"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from digraph.config import ConfigError, DigraphConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from DIGRAPH_* variables and any ./digraph.yaml."""
    for name in ("DIGRAPH_PRETTY", "DIGRAPH_VERBOSITY", "DIGRAPH_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    """Test load_config."""

    def test_defaults_without_file(self) -> None:
        """No ./digraph.yaml means built-in defaults."""
        assert load_config() == DigraphConfig()

    def test_default_file_in_cwd(self, tmp_path: Path) -> None:
        """./digraph.yaml is picked up automatically."""
        _write(tmp_path / "digraph.yaml", "json:\n  pretty: true\n")
        assert load_config().pretty is True

    def test_full_file(self, tmp_path: Path) -> None:
        """All sections are read."""
        path = _write(
            tmp_path / "conf.yaml",
            "json:\n  pretty: true\nlogging:\n  verbosity: 2\n  file: logs/dg.jsonl\n",
        )

        config = load_config(path)

        assert config == DigraphConfig(pretty=True, verbosity=2, log_file=Path("logs/dg.jsonl"))

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file means defaults."""
        assert load_config(_write(tmp_path / "empty.yaml", "")) == DigraphConfig()

    def test_explicit_missing_file(self, tmp_path: Path) -> None:
        """An explicitly requested file must exist."""
        with pytest.raises(ConfigError, match="File not found"):
            load_config(tmp_path / "nope.yaml")

    @pytest.mark.parametrize(
        "text",
        [
            "json:\n  pretty: maybe\n",
            "logging:\n  verbosity: -1\n",
            "logging:\n  verbosity: loud\n",
            "- just\n- a list\n",
            "json: [unclosed\n",
        ],
        ids=["pretty-not-bool", "negative-verbosity", "verbosity-not-int", "not-mapping", "bad-yaml"],
    )
    def test_invalid_file(self, tmp_path: Path, text: str) -> None:
        """Invalid content raises ConfigError naming the file."""
        path = _write(tmp_path / "bad.yaml", text)
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.path == path


class TestEnvOverrides:
    """Test DIGRAPH_* environment overrides."""

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment wins over file values."""
        path = _write(tmp_path / "conf.yaml", "json:\n  pretty: true\nlogging:\n  verbosity: 1\n")
        monkeypatch.setenv("DIGRAPH_PRETTY", "no")
        monkeypatch.setenv("DIGRAPH_VERBOSITY", "2")
        monkeypatch.setenv("DIGRAPH_LOG_FILE", "out.jsonl")

        config = load_config(path)

        assert config == DigraphConfig(pretty=False, verbosity=2, log_file=Path("out.jsonl"))

    def test_invalid_bool(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DIGRAPH_PRETTY", "sometimes")
        with pytest.raises(ConfigError, match="DIGRAPH_PRETTY"):
            load_config()

    def test_invalid_int(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DIGRAPH_VERBOSITY", "very")
        with pytest.raises(ConfigError, match="DIGRAPH_VERBOSITY"):
            load_config()
