import os
import sys
from dataclasses import replace

import pytest

from llm_helper.core.backends import HostedApiBackend, UserPipelineBackend
from llm_helper.core.domain import BackendKind, PipelineInput
from llm_helper.core.errors import LoadFailure, NoBackendConfigured, NoWorkspace
from llm_helper.core.resolver import PIPELINE_MODULE_NAME, BackendResolver
from llm_helper.models import Turn


ECHO_PIPELINE = """
    from langchain_core.runnables import RunnableLambda

    INPUT_KEY = "messages"

    def build_chain(api_key):
        return RunnableLambda(lambda payload: f"{api_key}:{len(payload['messages'])}")
"""


async def test_missing_workspace(settings):
    resolver = BackendResolver(settings, None)

    with pytest.raises(NoWorkspace):
        await resolver.resolve('sk')
    assert resolver.resolved is None


async def test_missing_pipeline_file(resolver):
    with pytest.raises(NoBackendConfigured):
        await resolver.resolve('sk')


async def test_credential_is_passed_to_build_chain(resolver, write_pipeline, monkeypatch):
    monkeypatch.delenv('OPENAI_API_KEY', raising=False)
    write_pipeline(ECHO_PIPELINE)

    backend = await resolver.resolve('sk-injected')

    assert isinstance(backend, UserPipelineBackend)
    assert backend.input_key is PipelineInput.MESSAGES
    assert await backend.ainvoke([Turn.user('hi')]) == 'sk-injected:1'
    assert 'OPENAI_API_KEY' not in os.environ


async def test_resolved_backend_is_cached_even_if_file_changes(resolver, write_pipeline):
    write_pipeline(ECHO_PIPELINE)
    first = await resolver.resolve('sk')

    write_pipeline("""
        def build_chain(api_key):
            return lambda payload: "changed"
    """)
    second = await resolver.resolve('sk')

    assert first is second
    assert await second.ainvoke([Turn.user('hi')]) == 'sk:1'


async def test_plain_callable_from_build_chain_with_input_convention(resolver, write_pipeline):
    write_pipeline("""
        INPUT_KEY = "input"

        def build_chain(api_key):
            def chain(payload):
                return {"content": payload["input"].upper()}
            return chain
    """)

    backend = await resolver.resolve('sk')
    transcript = [Turn.user('first'), Turn.assistant('ok'), Turn.user('second')]

    assert backend.input_key is PipelineInput.INPUT
    assert await backend.ainvoke(transcript) == 'SECOND'


async def test_chain_only_export_is_rejected_with_build_chain_hint(resolver, write_pipeline, monkeypatch):
    monkeypatch.delenv('OPENAI_API_KEY', raising=False)
    write_pipeline("""
        import os
        from langchain_core.runnables import RunnableLambda

        chain = RunnableLambda(lambda payload: os.environ.get('OPENAI_API_KEY', '<unset>'))
    """)

    with pytest.raises(LoadFailure) as excinfo:
        await resolver.resolve('sk-prompted')

    assert 'build_chain(api_key)' in excinfo.value.message
    assert 'OPENAI_API_KEY' not in os.environ
    assert resolver.resolved is None


@pytest.mark.parametrize('source', [
    "def build_chain(api_key)\n    return None\n",
    "raise RuntimeError('boom')\n",
    "value = 1\n",
    "build_chain = 'not callable'\n",
    "def build_chain(api_key):\n    return 42\n",
    "INPUT_KEY = 'prompt'\ndef build_chain(api_key):\n    return lambda payload: ''\n",
    "def build_chain(api_key):\n    raise ValueError('no key')\n",
])
async def test_load_failures(resolver, write_pipeline, source):
    write_pipeline(source)

    with pytest.raises(LoadFailure):
        await resolver.resolve('sk')
    assert resolver.resolved is None
    assert PIPELINE_MODULE_NAME not in sys.modules


async def test_pipeline_dataclasses_resolve_their_module(resolver, write_pipeline):
    write_pipeline("""
        from __future__ import annotations

        from dataclasses import dataclass

        @dataclass
        class Reply:
            text: str

        def build_chain(api_key):
            return lambda payload: {"content": Reply(text=api_key).text}
    """)

    backend = await resolver.resolve('sk-dc')

    assert await backend.ainvoke([Turn.user('hi')]) == 'sk-dc'
    assert sys.modules[PIPELINE_MODULE_NAME].Reply.__module__ == PIPELINE_MODULE_NAME


async def test_failed_resolution_is_retried_on_next_call(resolver, write_pipeline):
    write_pipeline("raise RuntimeError('boom')\n")
    with pytest.raises(LoadFailure):
        await resolver.resolve('sk')

    write_pipeline(ECHO_PIPELINE)
    backend = await resolver.resolve('sk')

    assert backend is resolver.resolved


async def test_custom_pipeline_path(settings, workspace):
    from pathlib import PurePosixPath

    path = workspace / 'tools' / 'chain.py'
    path.parent.mkdir()
    path.write_text("def build_chain(api_key):\n    return lambda payload: 'custom'\n", encoding='utf-8')
    resolver = BackendResolver(replace(settings, pipeline_path=PurePosixPath('tools/chain.py')), workspace)

    backend = await resolver.resolve('sk')

    assert await backend.ainvoke([Turn.user('hi')]) == 'custom'


async def test_hosted_backend_needs_no_workspace(settings):
    resolver = BackendResolver(replace(settings, backend=BackendKind.HOSTED, model='gpt-4o-mini'), None)

    backend = await resolver.resolve('sk-hosted')

    assert isinstance(backend, HostedApiBackend)
    assert backend.model == 'gpt-4o-mini'
    assert await resolver.resolve('sk-other') is backend
