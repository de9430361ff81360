import asyncio
import sys
import textwrap
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from llm_helper.config import Settings
from llm_helper.core.credentials import CredentialProvider
from llm_helper.core.domain import BackendKind
from llm_helper.core.errors import InvocationFailure
from llm_helper.core.resolver import PIPELINE_MODULE_NAME, BackendResolver
from llm_helper.core.session import SessionController
from llm_helper.models import Turn


class MemorySecretStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data = dict(initial or {})
        self.writes = 0

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.writes += 1
        self.data[key] = value


class CountingPrompt:
    def __init__(self, answer: Optional[str] = 'sk-test'):
        self.answer = answer
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(0)
        return self.answer


class RecordingBackend:
    """Answers with canned text and remembers every transcript it was given."""

    kind = BackendKind.PIPELINE

    def __init__(self, answer: str = 'answer', fail: bool = False):
        self.answer = answer
        self.fail = fail
        self.calls: List[Sequence[Turn]] = []
        self.gate: Optional[asyncio.Event] = None

    async def ainvoke(self, transcript):
        self.calls.append(transcript)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise InvocationFailure("model exploded")
        last = transcript[-1].content
        return f"{self.answer} to {last}"


class StaticResolver:
    def __init__(self, backend):
        self.backend = backend
        self.credentials_seen: List[str] = []

    async def resolve(self, credential):
        self.credentials_seen.append(credential)
        return self.backend


def drain(queue: asyncio.Queue) -> list:
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


@pytest.fixture
def settings(tmp_path):
    return Settings(home=tmp_path / 'home')


@pytest.fixture
def secret_store():
    return MemorySecretStore({'openai-api-key': 'sk-stored'})


@pytest.fixture
def prompt():
    return CountingPrompt()


@pytest.fixture
def credentials(secret_store, prompt):
    return CredentialProvider(secret_store, prompt)


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def events_q():
    return asyncio.Queue()


@pytest.fixture
def controller(events_q, credentials, backend):
    return SessionController(events_q, credentials, StaticResolver(backend))


@pytest.fixture
def workspace(tmp_path) -> Path:
    root = tmp_path / 'project'
    root.mkdir()
    return root


@pytest.fixture
def write_pipeline(workspace):
    def _write(source: str) -> Path:
        path = workspace / '.llm-helper' / 'pipeline.py'
        path.parent.mkdir(exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding='utf-8')
        return path
    return _write


@pytest.fixture
def resolver(settings, workspace):
    return BackendResolver(settings, workspace)


@pytest.fixture(autouse=True)
def _forget_pipeline_module():
    sys.modules.pop(PIPELINE_MODULE_NAME, None)
    yield
    sys.modules.pop(PIPELINE_MODULE_NAME, None)
