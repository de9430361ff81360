import asyncio
from typing import Any, Dict, Optional

from llm_helper.core.context import compose_question
from llm_helper.core.conversation import ConversationStore
from llm_helper.core.credentials import CredentialProvider
from llm_helper.core.domain import (
    ASK_EVENT_TYPES, BusyPolicy, FailurePolicy, InboundEvent, OutboundEvent, SessionState,
)
from llm_helper.core.errors import LLMHelperError, SessionBusy
from llm_helper.core.resolver import BackendResolver
from llm_helper.logging_config import get_logger
from llm_helper.models import Turn


logger = get_logger(__name__)


class SessionController:
    """
    Runs ask-cycles against the conversation and reports every transcript
    change on `events_q` for the chat panel.
    """

    def __init__(
        self,
        events_q: asyncio.Queue,
        credentials: CredentialProvider,
        resolver: BackendResolver,
        store: Optional[ConversationStore] = None,
        busy_policy: BusyPolicy = BusyPolicy.QUEUE,
        on_failure: FailurePolicy = FailurePolicy.KEEP,
    ):
        self.events_q = events_q
        self.credentials = credentials
        self.resolver = resolver
        self.store = store if store is not None else ConversationStore()
        self.busy_policy = busy_policy
        self.on_failure = on_failure
        self.state = SessionState.IDLE
        self._request_seq = 0
        self._in_flight = asyncio.Lock()

    async def _emit(self, ev: OutboundEvent):
        await self.events_q.put(ev)

    def _transition(self, request_id: int, state: SessionState):
        logger.debug("ask #%d: %s -> %s", request_id, self.state.value, state.value)
        self.state = state

    async def handle(self, event: InboundEvent | Dict[str, Any]) -> None:
        type = event.get('type', '')
        if type in ASK_EVENT_TYPES:
            await self.ask(event.get('value', ''), event.get('code'))
        elif type == 'clearChat':
            await self.clear_chat()
        else:
            logger.warning("Ignoring unknown event type %r", type)

    async def clear_chat(self) -> None:
        # an in-flight ask keeps its own snapshot and still appends its answer
        self.store.clear()
        logger.info("Conversation cleared")
        await self._emit({'type': 'cleared'})

    async def ask(self, prompt: str, code: Optional[str] = None) -> bool:
        """
        Run one ask-cycle. Returns True when an answer was appended.

        Failures never propagate; they are emitted as `error` events and the
        controller goes back to idle.
        """
        self._request_seq += 1
        request_id = self._request_seq

        if self.busy_policy is BusyPolicy.REJECT and self._in_flight.locked():
            exc = SessionBusy("Please wait for the current request to finish.")
            logger.warning("ask #%d rejected: %s", request_id, exc)
            await self._emit({'type': 'error', 'message': exc.message})
            return False

        async with self._in_flight:
            return await self._run(request_id, prompt, code)

    async def _run(self, request_id: int, prompt: str, code: Optional[str]) -> bool:
        question: Optional[Turn] = None
        try:
            self._transition(request_id, SessionState.CREDENTIAL_PENDING)
            credential = await self.credentials.ensure_credential()

            self._transition(request_id, SessionState.BACKEND_PENDING)
            backend = await self.resolver.resolve(credential)

            question = Turn.user(compose_question(prompt, code))
            self.store.append(question)
            transcript = self.store.snapshot()
            await self._emit({'type': 'addQuestion', 'value': question.content, 'code': None})

            self._transition(request_id, SessionState.INVOKING)
            answer = await backend.ainvoke(transcript)
        except LLMHelperError as exc:
            logger.warning("ask #%d failed: %s", request_id, exc)
            await self._fail(request_id, exc.message, question)
            return False
        except Exception as exc:
            logger.exception("ask #%d failed unexpectedly", request_id)
            await self._fail(request_id, f"Unexpected error: {exc}", question)
            return False

        self.store.append(Turn.assistant(answer))
        await self._emit({'type': 'addResponse', 'value': answer})
        self._transition(request_id, SessionState.COMPLETED)
        self._transition(request_id, SessionState.IDLE)
        return True

    async def _fail(self, request_id: int, message: str, question: Optional[Turn]):
        self._transition(request_id, SessionState.FAILED)
        if question is not None and self.on_failure is FailurePolicy.DISCARD:
            if self.store.discard_last(question):
                logger.debug("ask #%d: unanswered question discarded", request_id)
        await self._emit({'type': 'error', 'message': message})
        self._transition(request_id, SessionState.IDLE)
