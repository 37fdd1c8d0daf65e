"""
Services Layer - Vault access composition and user-facing error mapping.
"""

from vaultkeeper.services.user_errors import (
    UserError,
    to_user_error,
    write_result_to_user_error,
)
from vaultkeeper.services.vault_store import VaultStore, create_vault_store

__all__ = [
    "VaultStore",
    "create_vault_store",
    "UserError",
    "to_user_error",
    "write_result_to_user_error",
]
