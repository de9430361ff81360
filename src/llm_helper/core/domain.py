"""
Events exchanged between the chat panel and the session controller, and the
enums the controller is configured with.
"""

from enum import Enum
from typing import Literal, Optional, TypedDict, Union


class AskEvent(TypedDict, total=False):
    type: Literal['askLLM', 'askChatGPT']
    value: str
    code: Optional[str]


class ClearChatEvent(TypedDict, total=False):
    type: Literal['clearChat']


InboundEvent = Union[AskEvent, ClearChatEvent]


class AddQuestionEvent(TypedDict, total=False):
    type: Literal['addQuestion']
    value: str
    code: None


class AddResponseEvent(TypedDict, total=False):
    type: Literal['addResponse']
    value: str


class ErrorEvent(TypedDict, total=False):
    type: Literal['error']
    message: str


class ClearedEvent(TypedDict, total=False):
    type: Literal['cleared']


OutboundEvent = Union[AddQuestionEvent, AddResponseEvent, ErrorEvent, ClearedEvent]

ASK_EVENT_TYPES = frozenset({'askLLM', 'askChatGPT'})


class SessionState(str, Enum):
    IDLE = 'idle'
    CREDENTIAL_PENDING = 'credential_pending'
    BACKEND_PENDING = 'backend_pending'
    INVOKING = 'invoking'
    COMPLETED = 'completed'
    FAILED = 'failed'


class BackendKind(str, Enum):
    """Which execution strategy answers prompts."""
    PIPELINE = 'pipeline'
    HOSTED = 'hosted'


class PipelineInput(str, Enum):
    """Invocation convention declared by a pipeline file's INPUT_KEY."""
    MESSAGES = 'messages'
    INPUT = 'input'


class BusyPolicy(str, Enum):
    """What happens to an ask that arrives while another is in flight."""
    QUEUE = 'queue'
    REJECT = 'reject'


class FailurePolicy(str, Enum):
    """What happens to the user turn of an ask whose backend call failed."""
    KEEP = 'keep'
    DISCARD = 'discard'
