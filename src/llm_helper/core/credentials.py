"""
API credential resolution.

The credential is looked up in a durable key-value store and, failing that,
asked from the user once per process.
"""
import asyncio
import json
import os
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional, Protocol

from llm_helper.config import CREDENTIAL_KEY
from llm_helper.logging_config import get_logger


logger = get_logger(__name__)

CredentialPrompt = Callable[[], Awaitable[Optional[str]]]


class SecretStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class JsonSecretStore:
    """
    Key-value store kept in a JSON file readable only by its owner.
    """

    def __init__(self, path: Path):
        self.path = path

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable secret store at %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w', encoding='utf-8') as fh:
            json.dump(data, fh, indent=2)


class CredentialProvider:
    def __init__(self, store: SecretStore, prompt: CredentialPrompt, key: str = CREDENTIAL_KEY):
        """
        Args:
            store: durable storage consulted before prompting
            prompt: coroutine factory asking the user; returns None when dismissed
            key: storage key of the credential
        """
        self.store = store
        self.prompt = prompt
        self.key = key
        self._credential: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def cached(self) -> Optional[str]:
        return self._credential

    async def ensure_credential(self) -> str:
        """
        Return the credential, prompting at most once per process.

        A dismissed prompt caches an empty credential; the backend call is
        what eventually fails on it.
        """
        async with self._lock:
            if self._credential is not None:
                return self._credential

            value = self.store.get(self.key)
            if value:
                logger.debug("Credential loaded from secret store")
                self._credential = value
                return value

            answer = (await self.prompt() or '').strip()
            self._credential = answer
            if answer:
                self.store.set(self.key, answer)
                logger.info("Credential saved to secret store")
            else:
                logger.warning("Credential prompt dismissed; continuing with an empty credential")
            return answer
