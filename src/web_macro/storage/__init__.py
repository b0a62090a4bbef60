"""
Storage module - Persistent repository and account import.
"""

from web_macro.storage.repository import JsonRepository
from web_macro.storage.importer import parse_accounts, import_accounts

__all__ = ["JsonRepository", "parse_accounts", "import_accounts"]
