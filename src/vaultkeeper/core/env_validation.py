"""
Startup environment checks.

Validates that the vault root is configured and reachable and reports
problems as plain messages instead of raising.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from vaultkeeper.core.config import VAULT_PATH_ENV, VaultConfig, load_config
from vaultkeeper.core.path_utils import check_path_length, normalize_path, vault_path


@dataclass
class EnvValidationResult:
    """Result of environment validation.

    Attributes:
        valid: True if no errors were found.
        errors: Problems that prevent vault access.
        warnings: Problems that degrade but do not prevent vault access.
    """

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_environment(
    environ: Optional[Mapping[str, str]] = None,
    config: Optional[VaultConfig] = None,
) -> EnvValidationResult:
    """
    Validate the vault root and hot-path directories at startup.

    Args:
        environ: Environment to read; defaults to os.environ.
        config: Configuration to check; defaults to load_config(). The vault
                root from the environment takes precedence over it.

    Returns:
        EnvValidationResult with collected errors and warnings.
    """
    env = os.environ if environ is None else environ
    config = config or load_config(apply_env=False)
    errors: list[str] = []
    warnings: list[str] = []

    raw_root = env.get(VAULT_PATH_ENV) or config.vault.root
    if not raw_root:
        errors.append(
            f"{VAULT_PATH_ENV} is not set. Point it at the root folder of your vault."
        )
        return EnvValidationResult(valid=False, errors=errors, warnings=warnings)

    root = normalize_path(os.path.expanduser(raw_root))
    if not os.path.isdir(root) or not os.access(root, os.R_OK):
        errors.append(
            f'{VAULT_PATH_ENV} is not accessible: "{raw_root}". '
            "Check that the path exists and the sync client is running."
        )
        return EnvValidationResult(valid=False, errors=errors, warnings=warnings)

    length_warning = check_path_length(root)
    if length_warning:
        warnings.append(f"Vault root is long, nested files may fail: {length_warning}")

    configured_dirs = list(config.hot_paths.always_scan)
    configured_dirs.extend(rule.path for rule in config.hot_paths.recency_scan)
    for directory in configured_dirs:
        if not os.path.isdir(vault_path(root, directory)):
            warnings.append(f'Hot path directory not found in vault: "{directory}"')

    return EnvValidationResult(valid=not errors, errors=errors, warnings=warnings)
