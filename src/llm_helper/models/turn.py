"""
Data models for the llm-helper conversation transcript.
"""
from dataclasses import dataclass
from typing import Iterable, List, Literal

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage


Role = Literal['user', 'assistant']


@dataclass(frozen=True)
class Turn:
    """
    A single transcript entry, appended only once its content is known.
    """
    role: Role
    content: str

    def __post_init__(self):
        if self.role not in ('user', 'assistant'):
            raise ValueError(f"unknown turn role: {self.role!r}")

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls('user', content)

    @classmethod
    def assistant(cls, content: str) -> "Turn":
        return cls('assistant', content)

    def to_message(self) -> BaseMessage:
        if self.role == 'user':
            return HumanMessage(content=self.content)
        return AIMessage(content=self.content)


def to_messages(turns: Iterable[Turn]) -> List[BaseMessage]:
    """Convert a transcript into the langchain messages a chat model expects."""
    return [turn.to_message() for turn in turns]
