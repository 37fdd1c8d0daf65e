"""
Configuration module for vaultkeeper.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from vaultkeeper.core.errors import VaultNotConfiguredError
from vaultkeeper.core.path_utils import normalize_path

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Environment variable holding the vault root
VAULT_PATH_ENV = "OBSIDIAN_VAULT_PATH"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section, {})
    value = section_defaults.get(key, fallback)
    # Lists are copied so instances never share mutable defaults
    if isinstance(value, list):
        return list(value)
    return value


@dataclass
class RecencyRule:
    """A high-volume directory scanned only for recently modified files."""

    path: str
    max_age_days: float

    def __post_init__(self) -> None:
        if self.max_age_days <= 0:
            raise ValueError(
                f"max_age_days must be positive for '{self.path}', got {self.max_age_days}"
            )


def _parse_recency_rules(raw: list[Any]) -> list[RecencyRule]:
    """Build RecencyRule objects from dicts, tuples or existing rules."""
    rules = []
    for item in raw or []:
        if isinstance(item, RecencyRule):
            rules.append(item)
        elif isinstance(item, dict):
            rules.append(RecencyRule(**item))
        else:
            path, max_age_days = item
            rules.append(RecencyRule(path=path, max_age_days=max_age_days))
    return rules


@dataclass
class VaultSection:
    """Configuration for the vault location."""

    root: str = field(default_factory=lambda: _get_default("vault", "root", ""))


@dataclass
class HotPathsConfig:
    """Scan scope: which parts of the vault are walked on every scan."""

    always_scan: list[str] = field(
        default_factory=lambda: _get_default(
            "hot_paths", "always_scan", ["TaskNotes", "01-Projects", "Calendar"]
        )
    )
    recency_scan: list[RecencyRule] = field(
        default_factory=lambda: _parse_recency_rules(
            _get_default("hot_paths", "recency_scan", [])
        )
    )
    system_files: list[str] = field(
        default_factory=lambda: _get_default("hot_paths", "system_files", [])
    )
    excluded: list[str] = field(
        default_factory=lambda: _get_default("hot_paths", "excluded", [])
    )

    def __post_init__(self) -> None:
        self.recency_scan = _parse_recency_rules(self.recency_scan)


@dataclass
class ScannerConfig:
    """Configuration for the hot-path scanner."""

    cache_ttl_seconds: float = field(
        default_factory=lambda: _get_default("scanner", "cache_ttl_seconds", 60)
    )
    extension: str = field(default_factory=lambda: _get_default("scanner", "extension", ".md"))


@dataclass
class SafeWriteConfig:
    """Configuration for durable vault writes."""

    backup: bool = field(default_factory=lambda: _get_default("safe_write", "backup", True))
    max_backups: int = field(
        default_factory=lambda: _get_default("safe_write", "max_backups", 5)
    )
    retry_delays_ms: list[int] = field(
        default_factory=lambda: _get_default(
            "safe_write", "retry_delays_ms", [200, 400, 800, 1600]
        )
    )

    def __post_init__(self) -> None:
        if self.max_backups < 1:
            raise ValueError(f"max_backups must be at least 1, got {self.max_backups}")

    @property
    def retry_delays(self) -> tuple[float, ...]:
        """Backoff schedule in seconds."""
        return tuple(delay / 1000.0 for delay in self.retry_delays_ms)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "INFO"))
    format: str = field(
        default_factory=lambda: _get_default(
            "logging", "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )


@dataclass
class VaultConfig:
    """Main configuration class for vaultkeeper."""

    vault: VaultSection = field(default_factory=VaultSection)
    hot_paths: HotPathsConfig = field(default_factory=HotPathsConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    safe_write: SafeWriteConfig = field(default_factory=SafeWriteConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "VaultConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            VaultConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text(encoding="utf-8")

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif path.suffix == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "VaultConfig":
        """Create VaultConfig from a dictionary."""
        config = cls()

        if "vault" in data:
            config.vault = VaultSection(**data["vault"])
        if "hot_paths" in data:
            config.hot_paths = HotPathsConfig(**data["hot_paths"])
        if "scanner" in data:
            config.scanner = ScannerConfig(**data["scanner"])
        if "safe_write" in data:
            config.safe_write = SafeWriteConfig(**data["safe_write"])
        if "logging" in data:
            config.logging = LoggingConfig(**data["logging"])

        return config

    def apply_env_overrides(self, environ: Optional[dict[str, str]] = None) -> "VaultConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: VAULTKEEPER_<SECTION>_<KEY>
        Examples:
            - VAULTKEEPER_SCANNER_CACHE_TTL_SECONDS
            - VAULTKEEPER_SAFE_WRITE_MAX_BACKUPS
            - VAULTKEEPER_HOT_PATHS_ALWAYS_SCAN (comma separated)

        OBSIDIAN_VAULT_PATH sets the vault root and wins over
        VAULTKEEPER_VAULT_ROOT.

        Returns:
            Self with environment overrides applied
        """
        env = os.environ if environ is None else environ
        env_mappings = {
            # Vault
            "VAULTKEEPER_VAULT_ROOT": ("vault", "root", str),
            VAULT_PATH_ENV: ("vault", "root", str),
            # Hot paths
            "VAULTKEEPER_HOT_PATHS_ALWAYS_SCAN": ("hot_paths", "always_scan", _parse_list),
            "VAULTKEEPER_HOT_PATHS_SYSTEM_FILES": ("hot_paths", "system_files", _parse_list),
            "VAULTKEEPER_HOT_PATHS_EXCLUDED": ("hot_paths", "excluded", _parse_list),
            # Scanner
            "VAULTKEEPER_SCANNER_CACHE_TTL_SECONDS": ("scanner", "cache_ttl_seconds", float),
            "VAULTKEEPER_SCANNER_EXTENSION": ("scanner", "extension", str),
            # Safe write
            "VAULTKEEPER_SAFE_WRITE_BACKUP": ("safe_write", "backup", _parse_bool),
            "VAULTKEEPER_SAFE_WRITE_MAX_BACKUPS": ("safe_write", "max_backups", int),
            "VAULTKEEPER_SAFE_WRITE_RETRY_DELAYS_MS": (
                "safe_write",
                "retry_delays_ms",
                _parse_int_list,
            ),
            # Logging
            "VAULTKEEPER_LOGGING_LEVEL": ("logging", "level", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = env.get(env_var)
            if value is not None:
                section_obj = getattr(self, section)
                setattr(section_obj, key, converter(value))

        return self

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def to_json(self) -> str:
        """Serialize configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> None:
        """
        Save configuration to a file.

        Args:
            path: Path to save the configuration (.yaml, .yml, or .json)

        Raises:
            ValueError: If the file format is unsupported
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml()
        elif path.suffix == ".json":
            content = self.to_json()
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _parse_bool(value: str) -> bool:
    """Parse a string to boolean."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_list(value: str) -> list[str]:
    """Parse a comma separated string into a list of non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_int_list(value: str) -> list[int]:
    """Parse a comma separated string into a list of integers."""
    return [int(item) for item in _parse_list(value)]


def load_config(config_path: Optional[Path | str] = None, apply_env: bool = True) -> VaultConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, uses defaults.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        VaultConfig instance
    """
    if config_path:
        config = VaultConfig.from_file(config_path)
    else:
        config = VaultConfig()

    if apply_env:
        config.apply_env_overrides()

    return config


def get_vault_root(config: VaultConfig) -> str:
    """
    Return the normalized vault root.

    Raises:
        VaultNotConfiguredError: If no vault root is configured
    """
    root = (config.vault.root or "").strip()
    if not root:
        raise VaultNotConfiguredError(
            f"{VAULT_PATH_ENV} is not set and no vault root is configured"
        )
    return normalize_path(os.path.expanduser(root))


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """
    Apply the logging section to the vaultkeeper package logger.

    Unknown level names fall back to INFO. A stream handler is attached
    only when the package logger has none yet.
    """
    package_logger = logging.getLogger("vaultkeeper")
    package_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.format))
        package_logger.addHandler(handler)
    return package_logger
