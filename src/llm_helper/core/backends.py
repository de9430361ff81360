"""
Execution backends that turn a transcript into response text.
"""
from pathlib import Path
from typing import Annotated, Any, Optional, Protocol, Sequence, TypedDict

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, SystemMessage
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI
from langgraph.graph import END, START, StateGraph
from langgraph.graph.message import add_messages

from llm_helper.core.domain import BackendKind, PipelineInput
from llm_helper.core.errors import InvocationFailure
from llm_helper.models import Turn, to_messages


class Backend(Protocol):
    kind: BackendKind

    async def ainvoke(self, transcript: Sequence[Turn]) -> str: ...


class ChatState(TypedDict):
    messages: Annotated[list[BaseMessage], add_messages]


def build_llm(model: str, api_key: str, temperature: float = 0) -> ChatOpenAI:
    return ChatOpenAI(
        model=model,
        api_key=api_key,
        temperature=temperature,
    )


def chatbot_factory(llm: BaseChatModel, system_prompt: str):
    async def chatbot(state: ChatState):
        msgs = [SystemMessage(system_prompt), *state["messages"]]
        ai_msg = await llm.ainvoke(msgs)
        return {'messages': [ai_msg]}
    return chatbot


def build_chat_graph(llm: BaseChatModel, system_prompt: str):
    graph_builder = StateGraph(ChatState)
    graph_builder.add_node('chatbot', chatbot_factory(llm, system_prompt))
    graph_builder.add_edge(START, 'chatbot')
    graph_builder.add_edge('chatbot', END)
    return graph_builder.compile(name="hosted_chat")


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and isinstance(part.get('text'), str):
                parts.append(part['text'])
        return ''.join(parts)
    return str(content)


def response_text(result: Any) -> str:
    """
    Extract the answer from whatever a chain returned: a message, a plain
    string, or a mapping with `content` / `output`.
    """
    if isinstance(result, BaseMessage):
        return _content_text(result.content)
    if isinstance(result, str):
        return result
    if isinstance(result, dict):
        for key in ('content', 'output'):
            if key in result:
                return _content_text(result[key])
    raise InvocationFailure(
        "Backend returned a value without response text",
        {'type': type(result).__name__},
    )


class HostedApiBackend:
    """Fixed hosted chat-completion API with the credential passed in explicitly."""

    kind = BackendKind.HOSTED

    def __init__(
        self,
        model: str,
        api_key: str,
        system_prompt: str,
        temperature: float = 0,
        llm: Optional[BaseChatModel] = None,
    ):
        self.model = model
        self.system_prompt = system_prompt
        self.temperature = temperature
        self._api_key = api_key
        self._llm = llm
        self._graph = None

    def _get_graph(self):
        if self._graph is None:
            llm = self._llm or build_llm(self.model, self._api_key, self.temperature)
            self._graph = build_chat_graph(llm, self.system_prompt)
        return self._graph

    async def ainvoke(self, transcript: Sequence[Turn]) -> str:
        try:
            graph = self._get_graph()
            state = await graph.ainvoke({'messages': to_messages(transcript)})
        except Exception as exc:
            raise InvocationFailure(
                f"Hosted model request failed: {exc}", {'model': self.model}
            ) from exc
        return response_text(state['messages'][-1])


class UserPipelineBackend:
    """A chain loaded from the project's pipeline file."""

    kind = BackendKind.PIPELINE

    def __init__(self, runnable: Runnable, input_key: PipelineInput, source: Path):
        self.runnable = runnable
        self.input_key = input_key
        self.source = source

    def build_input(self, transcript: Sequence[Turn]) -> dict:
        if self.input_key is PipelineInput.MESSAGES:
            return {'messages': to_messages(transcript)}

        latest = next((turn for turn in reversed(transcript) if turn.role == 'user'), None)
        if latest is None:
            raise InvocationFailure("No user question to send to the pipeline")
        return {'input': latest.content}

    async def ainvoke(self, transcript: Sequence[Turn]) -> str:
        payload = self.build_input(transcript)
        try:
            result = await self.runnable.ainvoke(payload)
        except Exception as exc:
            raise InvocationFailure(
                f"Pipeline failed: {exc}", {'pipeline': str(self.source)}
            ) from exc
        return response_text(result)
