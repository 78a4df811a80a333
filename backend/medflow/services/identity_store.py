"""
Identity store: registered accounts and the active session marker.

Accounts are persisted as one JSON array under ``<namespace>_users``; the
active session is a copy of the account record under
``<namespace>_current_user``. Every mutation rewrites the whole value.
"""

import hashlib
import hmac
import os
import uuid
from typing import Optional
from pydantic import TypeAdapter
from medflow.exceptions import AuthenticationFailed, DuplicateUsername
from medflow.schemas.account import Account
from medflow.services.storage import KeyValueStorage
from medflow.utils.logger import get_logger

logger = get_logger(__name__)

HASH_SCHEME = "pbkdf2_sha256"
SALT_BYTES = 16

_accounts_adapter = TypeAdapter(list[Account])


def hash_password(password: str, iterations: int) -> str:
    salt = os.urandom(SALT_BYTES).hex()
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), iterations)
    return f"{HASH_SCHEME}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        scheme, iterations, salt, expected = encoded.split("$")
    except ValueError:
        return False
    if scheme != HASH_SCHEME:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


class IdentityStore:
    def __init__(self, storage: KeyValueStorage, hash_iterations: int = 100_000):
        self.storage = storage
        self.hash_iterations = hash_iterations
        self.users_key = storage.key("users")
        self.current_user_key = storage.key("current_user")

    def list_accounts(self) -> list[Account]:
        raw = self.storage.get_item(self.users_key)
        return _accounts_adapter.validate_json(raw) if raw else []

    def register(self, username: str, password: str) -> Account:
        digest = hash_password(password, self.hash_iterations)
        with self.storage.lock:
            accounts = self.list_accounts()
            if any(a.username == username for a in accounts):
                logger.info(f"Registration rejected, username taken: {username}")
                raise DuplicateUsername(username)

            account = Account(id=uuid.uuid4().hex, username=username, password=digest)
            accounts.append(account)
            self.storage.set_item(self.users_key, _accounts_adapter.dump_json(accounts).decode())
            self._set_current(account)
        logger.info(f"Registered account {account.id} ({username})")
        return account

    def login(self, username: str, password: str) -> Account:
        for account in self.list_accounts():
            if account.username == username and verify_password(password, account.password):
                self._set_current(account)
                logger.info(f"Login succeeded for account {account.id}")
                return account
        logger.info("Login failed")
        raise AuthenticationFailed()

    def logout(self) -> None:
        self.storage.remove_item(self.current_user_key)

    def current_session(self) -> Optional[Account]:
        raw = self.storage.get_item(self.current_user_key)
        return Account.model_validate_json(raw) if raw else None

    def _set_current(self, account: Account) -> None:
        self.storage.set_item(self.current_user_key, account.model_dump_json())
