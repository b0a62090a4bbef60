"""
Account import from plain-text email lists.
"""

import logging
from pathlib import Path
from typing import List, Union

from web_macro.exceptions.base import StorageError
from web_macro.models.account import Account

logger = logging.getLogger(__name__)


def parse_accounts(text: str) -> List[Account]:
    """
    Parse one email per line into fresh idle accounts.
    
    Lines are trimmed; blank lines and lines without "@" are skipped.
    Duplicate emails are kept.
    """
    accounts = []
    for line in text.splitlines():
        email = line.strip()
        if email and "@" in email:
            accounts.append(Account.create(email))
    return accounts


def import_accounts(path: Union[str, Path]) -> List[Account]:
    """
    Read accounts from a text file.
    
    Raises:
        StorageError: If the file cannot be read
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(f"Could not read account list: {e}", path=str(path))
    
    accounts = parse_accounts(text)
    logger.info(f"Parsed {len(accounts)} account(s) from {path}")
    return accounts
