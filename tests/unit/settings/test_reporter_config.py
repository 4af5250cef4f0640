"""
verity — unit tests for reporter configuration

File: tests/unit/settings/test_reporter_config.py

Purpose
- Validate deterministic config loading from defaults, ``[tool.verity]`` and env.

What this test file should cover
- Precedence: env > file > defaults.
- Type validation and unknown-key rejection with ConfigError.
- NO_COLOR handling, palette validation and the always-internal own package.
- Derived FrameFilter and Painter.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from verity.config import ReporterConfig, load_config
from verity.constants import DEFAULT_MAX_DEPTH
from verity.errors import ConfigError
from verity.paint import Painter


def _write_pyproject(path: Path, body: str) -> Path:
    target = path / "pyproject.toml"
    target.write_text(f'[project]\nname = "demo"\n\n[tool.verity]\n{body}\n', encoding="utf-8")
    return target


@pytest.mark.unit
def test_defaults_without_a_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={})

    assert config == ReporterConfig()
    assert config.max_depth == DEFAULT_MAX_DEPTH
    assert config.internal_packages == ("verity",)


@pytest.mark.unit
def test_file_is_discovered_from_parent_directories(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _write_pyproject(tmp_path, "max_depth = 32")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    assert load_config(environ={}).max_depth == 32


@pytest.mark.unit
def test_precedence_env_over_file_over_defaults(tmp_path: Path) -> None:
    config_path = _write_pyproject(
        tmp_path,
        'max_depth = 64\ncolor = false\nentry_prefixes = ["check"]',
    )

    from_file = load_config(config_path, environ={})
    from_env = load_config(
        config_path,
        environ={"VERITY_MAX_DEPTH": "8", "VERITY_COLOR": "yes", "VERITY_ENTRY_PREFIXES": "spec, it"},
    )

    assert (from_file.max_depth, from_file.color, from_file.entry_prefixes) == (64, False, ("check",))
    assert (from_env.max_depth, from_env.color, from_env.entry_prefixes) == (8, True, ("spec", "it"))


@pytest.mark.unit
def test_internal_packages_always_include_verity(tmp_path: Path) -> None:
    config_path = _write_pyproject(tmp_path, 'internal_packages = ["helpers"]')

    config = load_config(config_path, environ={"VERITY_INTERNAL_PACKAGES": "support,verity"})

    assert config.internal_packages == ("verity", "support")
    assert load_config(config_path, environ={}).internal_packages == ("verity", "helpers")


@pytest.mark.unit
def test_no_color_disables_color_unless_overridden(tmp_path: Path) -> None:
    config_path = _write_pyproject(tmp_path, "")

    assert load_config(config_path, environ={"NO_COLOR": "1"}).color is False
    assert load_config(config_path, environ={"NO_COLOR": "1", "VERITY_COLOR": "1"}).color is True


@pytest.mark.unit
@pytest.mark.parametrize(
    ("body", "environ", "message"),
    [
        ("verbose = true", {}, "unknown \\[tool.verity\\] keys"),
        ('max_depth = "deep"', {}, "max_depth"),
        ("max_depth = 0", {}, "max_depth"),
        ('color = "on"', {}, "color"),
        ("entry_prefixes = [1]", {}, "entry_prefixes"),
        ('palette = { gray = "not-a-color" }', {}, "invalid palette color"),
        ('palette = { purple = "red" }', {}, "unknown palette role"),
        ("", {"VERITY_MAX_DEPTH": "lots"}, "VERITY_MAX_DEPTH"),
        ("", {"VERITY_COLOR": "maybe"}, "VERITY_COLOR"),
    ],
)
def test_invalid_values_raise_config_error(
    tmp_path: Path, body: str, environ: dict[str, str], message: str
) -> None:
    config_path = _write_pyproject(tmp_path, body)

    with pytest.raises(ConfigError, match=message):
        load_config(config_path, environ=environ)


@pytest.mark.unit
def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(tmp_path / "missing.toml", environ={})


@pytest.mark.unit
def test_malformed_toml_is_an_error(tmp_path: Path) -> None:
    broken = tmp_path / "pyproject.toml"
    broken.write_text("[tool.verity\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="failed to read"):
        load_config(broken, environ={})


@pytest.mark.unit
def test_palette_overrides_merge_with_defaults(tmp_path: Path) -> None:
    config_path = _write_pyproject(tmp_path, 'palette = { gray = "white" }')

    palette = dict(load_config(config_path, environ={}).palette)

    assert palette["gray"] == "white"
    assert palette["cyan"] == "cyan"


@pytest.mark.unit
def test_derived_frame_filter_and_painter() -> None:
    config = ReporterConfig(internal_packages=("verity", "support"), color=False)

    assert config.frame_filter().is_internal("support.matchers")
    assert config.painter().enabled is False
    assert config.painter().paint("text", "gray") == "text"


@pytest.mark.unit
def test_painter_renders_ansi_only_when_enabled() -> None:
    painted = Painter().paint("hint", "gray")

    assert painted.startswith("\x1b[")
    assert "hint" in painted
    assert Painter(enabled=False).paint("hint", "gray") == "hint"
    assert Painter().paint("hint", "no-such-role") == "hint"
    assert Painter().paint("", "gray") == ""
