from pathlib import Path

from vaultkeeper.core.config import HotPathsConfig, RecencyRule, VaultConfig
from vaultkeeper.core.env_validation import validate_environment


def config_with(always: list[str], recency: list[str]) -> VaultConfig:
    config = VaultConfig()
    config.vault.root = ""
    config.hot_paths = HotPathsConfig(
        always_scan=always,
        recency_scan=[RecencyRule(path, 14) for path in recency],
        system_files=[],
        excluded=[],
    )
    return config


def test_missing_vault_path_is_an_error() -> None:
    result = validate_environment(environ={}, config=config_with([], []))

    assert result.valid is False
    assert any("OBSIDIAN_VAULT_PATH" in error and "not set" in error for error in result.errors)


def test_inaccessible_vault_path_is_an_error(tmp_path: Path) -> None:
    missing = tmp_path / "nope"

    result = validate_environment(
        environ={"OBSIDIAN_VAULT_PATH": str(missing)}, config=config_with([], [])
    )

    assert result.valid is False
    assert any("not accessible" in error for error in result.errors)


def test_valid_vault(tmp_path: Path) -> None:
    (tmp_path / "TaskNotes").mkdir()
    (tmp_path / "Emails").mkdir()

    result = validate_environment(
        environ={"OBSIDIAN_VAULT_PATH": str(tmp_path)},
        config=config_with(["TaskNotes"], ["Emails"]),
    )

    assert result.valid is True
    assert result.errors == []
    assert result.warnings == []


def test_missing_hot_path_directory_is_a_warning(tmp_path: Path) -> None:
    (tmp_path / "TaskNotes").mkdir()

    result = validate_environment(
        environ={"OBSIDIAN_VAULT_PATH": str(tmp_path)},
        config=config_with(["TaskNotes", "Calendar"], ["Emails"]),
    )

    assert result.valid is True
    assert len(result.warnings) == 2
    assert any('"Calendar"' in warning for warning in result.warnings)
    assert any('"Emails"' in warning for warning in result.warnings)


def test_configured_root_is_used_without_env(tmp_path: Path) -> None:
    config = config_with([], [])
    config.vault.root = str(tmp_path)

    result = validate_environment(environ={}, config=config)

    assert result.valid is True
