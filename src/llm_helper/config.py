"""
Configuration for llm-helper.

Values come from the process environment, with a project `.env` file loaded
first:

    - LLM_HELPER_BACKEND: `pipeline` (default) or `hosted`
    - LLM_HELPER_PIPELINE_PATH: pipeline file relative to the project root
    - LLM_HELPER_MODEL / LLM_HELPER_TEMPERATURE / LLM_HELPER_SYSTEM_PROMPT:
      hosted chat model settings
    - LLM_HELPER_HOME: state directory holding the secret store and log file
    - LLM_HELPER_BUSY_POLICY: `queue` (default) or `reject`
    - LLM_HELPER_ON_FAILURE: `keep` (default) or `discard`
    - LLM_HELPER_LOG_LEVEL: logging level name
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Mapping, Optional

from dotenv import load_dotenv

from llm_helper.core.domain import BackendKind, BusyPolicy, FailurePolicy
from llm_helper.core.errors import ConfigurationError


DEFAULT_PIPELINE_PATH = PurePosixPath('.llm-helper') / 'pipeline.py'
DEFAULT_MODEL = 'gpt-4o'
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful programming assistant embedded in the user's editor. "
    "Answer concisely and use Markdown code blocks for code."
)
CREDENTIAL_KEY = 'openai-api-key'
SECRET_STORE_FILE = 'state.json'
LOG_FILE = 'llm-helper.log'


@dataclass(frozen=True)
class Settings:
    backend: BackendKind = BackendKind.PIPELINE
    pipeline_path: PurePosixPath = DEFAULT_PIPELINE_PATH
    model: str = DEFAULT_MODEL
    temperature: float = 0.0
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    home: Path = Path.home() / '.llm-helper'
    busy_policy: BusyPolicy = BusyPolicy.QUEUE
    on_failure: FailurePolicy = FailurePolicy.KEEP
    log_level: int = logging.INFO

    @property
    def secret_store_path(self) -> Path:
        return self.home / SECRET_STORE_FILE

    @property
    def log_file(self) -> Path:
        return self.home / LOG_FILE


def _enum_setting(env: Mapping[str, str], name: str, enum_cls, default):
    raw = env.get(name)
    if not raw:
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"{name} must be one of: {allowed}", {'value': raw}
        ) from None


def _float_setting(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number", {'value': raw}) from None


def _log_level(env: Mapping[str, str]) -> int:
    raw = env.get('LLM_HELPER_LOG_LEVEL')
    if not raw:
        return logging.INFO
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError("LLM_HELPER_LOG_LEVEL is not a logging level", {'value': raw})
    return level


def _pipeline_path(env: Mapping[str, str]) -> PurePosixPath:
    raw = env.get('LLM_HELPER_PIPELINE_PATH')
    if not raw:
        return DEFAULT_PIPELINE_PATH
    path = PurePosixPath(raw.replace('\\', '/'))
    if path.is_absolute() or '..' in path.parts:
        raise ConfigurationError(
            "LLM_HELPER_PIPELINE_PATH must be relative to the project root", {'value': raw}
        )
    return path


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build settings from the environment.

    Args:
        env: Mapping to read instead of `os.environ`. When omitted, `.env`
            is loaded into the process environment first.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    home = env.get('LLM_HELPER_HOME')
    return Settings(
        backend=_enum_setting(env, 'LLM_HELPER_BACKEND', BackendKind, BackendKind.PIPELINE),
        pipeline_path=_pipeline_path(env),
        model=env.get('LLM_HELPER_MODEL') or DEFAULT_MODEL,
        temperature=_float_setting(env, 'LLM_HELPER_TEMPERATURE', 0.0),
        system_prompt=env.get('LLM_HELPER_SYSTEM_PROMPT') or DEFAULT_SYSTEM_PROMPT,
        home=Path(home).expanduser() if home else Path.home() / '.llm-helper',
        busy_policy=_enum_setting(env, 'LLM_HELPER_BUSY_POLICY', BusyPolicy, BusyPolicy.QUEUE),
        on_failure=_enum_setting(env, 'LLM_HELPER_ON_FAILURE', FailurePolicy, FailurePolicy.KEEP),
        log_level=_log_level(env),
    )
