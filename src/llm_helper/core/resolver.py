"""
Backend selection and pipeline loading.

A pipeline file is a Python module at `<project root>/.llm-helper/pipeline.py`
exporting

    - `build_chain(api_key)` returning a langchain Runnable (or a plain
      callable), called with the resolved credential, and
    - optionally `INPUT_KEY = "messages" | "input"` (default "messages") to
      declare what the chain is invoked with.

The credential is only ever handed to `build_chain`; nothing is published
to the environment.
"""
import asyncio
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Optional

from langchain_core.runnables import Runnable, RunnableLambda

from llm_helper.config import Settings
from llm_helper.core.backends import Backend, HostedApiBackend, UserPipelineBackend
from llm_helper.core.domain import BackendKind, PipelineInput
from llm_helper.core.errors import LoadFailure, NoBackendConfigured, NoWorkspace
from llm_helper.logging_config import get_logger


logger = get_logger(__name__)

PIPELINE_MODULE_NAME = 'llm_helper_pipeline'


def _import_file(path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(PIPELINE_MODULE_NAME, path)
    if spec is None or spec.loader is None:
        raise LoadFailure("Pipeline file is not loadable as a module", {'path': str(path)})
    module = importlib.util.module_from_spec(spec)
    # dataclasses and pydantic resolve annotations through sys.modules[__module__]
    sys.modules[PIPELINE_MODULE_NAME] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(PIPELINE_MODULE_NAME, None)
        raise
    return module


def _as_runnable(obj, path: Path) -> Runnable:
    if isinstance(obj, Runnable):
        return obj
    if callable(obj):
        return RunnableLambda(obj)
    raise LoadFailure(
        "build_chain returned neither a Runnable nor a callable",
        {'path': str(path), 'type': type(obj).__name__},
    )


def load_pipeline(path: Path, api_key: str) -> UserPipelineBackend:
    """
    Import the pipeline file and build its chain with `api_key`. Raises
    LoadFailure for anything that goes wrong, including errors in the
    user's code; the module is unregistered again in that case.
    """
    try:
        return _build_backend(path, api_key)
    except LoadFailure:
        sys.modules.pop(PIPELINE_MODULE_NAME, None)
        raise


def _build_backend(path: Path, api_key: str) -> UserPipelineBackend:
    try:
        module = _import_file(path)
    except LoadFailure:
        raise
    except Exception as exc:
        raise LoadFailure(f"Unexpected error loading pipeline: {exc}", {'path': str(path)}) from exc

    raw_key = getattr(module, 'INPUT_KEY', PipelineInput.MESSAGES.value)
    try:
        input_key = PipelineInput(raw_key)
    except ValueError:
        raise LoadFailure(
            "INPUT_KEY must be 'messages' or 'input'", {'path': str(path), 'value': raw_key}
        ) from None

    factory = getattr(module, 'build_chain', None)
    if not callable(factory):
        raise LoadFailure(
            "Pipeline file must export build_chain(api_key) returning the chain",
            {'path': str(path)},
        )
    try:
        chain = factory(api_key)
    except Exception as exc:
        raise LoadFailure(f"build_chain failed: {exc}", {'path': str(path)}) from exc

    return UserPipelineBackend(_as_runnable(chain, path), input_key, path)


class BackendResolver:
    """
    Resolves the backend once and hands out the same object afterwards.
    Failed resolutions are not cached.
    """

    def __init__(self, settings: Settings, workspace_root: Optional[Path] = None):
        self.settings = settings
        self.workspace_root = workspace_root
        self._backend: Optional[Backend] = None
        self._lock = asyncio.Lock()

    @property
    def resolved(self) -> Optional[Backend]:
        return self._backend

    def pipeline_file(self) -> Path:
        if self.workspace_root is None:
            raise NoWorkspace("A workspace folder must be opened to use a pipeline.")
        return Path(self.workspace_root, *self.settings.pipeline_path.parts)

    async def resolve(self, credential: str) -> Backend:
        async with self._lock:
            if self._backend is None:
                self._backend = await self._build(credential)
                logger.info("Resolved %s backend", self._backend.kind.value)
            return self._backend

    async def _build(self, credential: str) -> Backend:
        if self.settings.backend is BackendKind.HOSTED:
            return HostedApiBackend(
                model=self.settings.model,
                api_key=credential,
                system_prompt=self.settings.system_prompt,
                temperature=self.settings.temperature,
            )

        path = self.pipeline_file()
        if not path.is_file():
            raise NoBackendConfigured(
                "No default chain configured yet.", {'expected': str(path)}
            )
        logger.debug("Loading pipeline from %s", path)
        return await asyncio.to_thread(load_pipeline, path, credential)
