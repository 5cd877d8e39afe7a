"""Tests for the configuration schema and loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from importcost.config import ImportCostConfig
from importcost.parsers.base import ConfigurationError
from importcost.runtime.config_loader import load_config


def test_defaults() -> None:
    """Verify the default extension patterns and limits."""

    config = ImportCostConfig.default()

    assert config.typescript_regex().search("app.tsx")
    assert config.javascript_regex().search("app.js")
    assert not config.source_file_regex().search("styles.css")
    assert config.ignore_paths == []
    assert config.max_manifest_watches == 256


def test_camel_case_round_trip() -> None:
    """Verify camelCase option names map onto attributes and back."""

    config = ImportCostConfig.from_dict({"ignorePaths": ["^@internal/"], "pollInterval": 0.5})

    assert config.ignore_paths == ["^@internal/"]
    assert config.to_dict()["ignorePaths"] == ["^@internal/"]
    assert config.to_dict()["pollInterval"] == 0.5


def test_empty_extension_list_matches_nothing() -> None:
    config = ImportCostConfig(typescriptExtensions=[])

    assert not config.typescript_regex().search("app.ts")


def test_invalid_regex_is_rejected() -> None:
    with pytest.raises(ValidationError, match="Invalid regular expression"):
        ImportCostConfig(ignorePaths=["[unclosed"])


def test_load_config_defaults_and_dicts() -> None:
    assert load_config(None) == ImportCostConfig.default()
    assert load_config({"maxManifestWatches": 3}).max_manifest_watches == 3


def test_load_config_from_toml_file(tmp_path: Path) -> None:
    """Verify a TOML file with an importCost table is loaded."""

    path = tmp_path / "importcost.toml"
    path.write_text(
        '[importCost]\nignorePaths = ["^virtual:"]\njavascriptExtensions = ["\\\\.mjs$"]\n',
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.ignore_paths == ["^virtual:"]
    assert config.javascript_extensions == [r"\.mjs$"]


def test_load_config_from_json_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('{"importcost": {"pollInterval": 2}}', encoding="utf-8")

    assert load_config(str(path)).poll_interval == 2.0


def test_load_config_inline_toml() -> None:
    assert load_config('ignorePaths = ["^x"]').ignore_paths == ["^x"]


def test_load_config_errors() -> None:
    """Verify malformed sources raise the documented errors."""

    with pytest.raises(ConfigurationError):
        load_config('{"ignorePaths": ')
    with pytest.raises(ConfigurationError):
        load_config({"maxManifestWatches": 0})
    with pytest.raises(ValueError):
        load_config("[1, 2]")
    with pytest.raises(TypeError):
        load_config(42)
