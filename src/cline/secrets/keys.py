# src/cline/secrets/keys.py

from __future__ import annotations
from typing import Mapping, Optional
import getpass
import logging
import os

import keyring

from cline.core.ports import SecretStore

_LOGGER = logging.getLogger(__name__)

SERVICE = "cline"


def key_env_var(provider: str) -> str:
    """Environment variable that overrides the stored key, e.g. 'openai' -> 'OPENAI_API_KEY'."""
    return f"{provider.upper()}_API_KEY"


def key_account(provider: str, user: Optional[str] = None) -> str:
    return f"{provider}:{user or getpass.getuser()}"


class KeyringStore:
    """
    SecretStore backed by the system keychain through `keyring`.
    'backend' defaults to the keyring module itself; tests pass a fake.
    """

    def __init__(self, backend=None):
        self._backend = backend

    @property
    def backend(self):
        return self._backend if self._backend is not None else keyring

    def get(self, service: str, account: str) -> Optional[str]:
        return self.backend.get_password(service, account)

    def set(self, service: str, account: str, secret: str) -> None:
        self.backend.set_password(service, account, secret)


class CredentialResolver:
    """
    Resolve provider API keys:
      1) <PROVIDER>_API_KEY from 'environ' (explicit mapping, defaults to os.environ)
      2) secret store entry (service='cline', account='<provider>:<user>')
    store() only ever writes to the secret store.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        store: Optional[SecretStore] = None,
        *,
        service: str = SERVICE,
        user: Optional[str] = None,
    ):
        self._environ = environ if environ is not None else os.environ
        self._store = store if store is not None else KeyringStore()
        self.service = service
        self._user = user

    def resolve(self, provider: str) -> Optional[str]:
        val = self._environ.get(key_env_var(provider))
        if val:
            return val

        account = key_account(provider, self._user)
        try:
            val = self._store.get(self.service, account)
        except Exception as e:
            _LOGGER.warning("Error retrieving key for %s: %s", provider, e)
            return None
        return val or None

    def store(self, provider: str, secret: str) -> None:
        account = key_account(provider, self._user)
        try:
            self._store.set(self.service, account, secret)
        except Exception as e:
            _LOGGER.error("Error storing key for %s: %s", provider, e)
            raise
