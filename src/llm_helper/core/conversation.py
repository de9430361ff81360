"""
Process-lifetime conversation transcript.
"""
from typing import Iterator, List, Tuple

from llm_helper.models import Turn


class ConversationStore:
    """
    Ordered transcript of turns. Only whole turns are appended; the only
    removal is a full clear (plus `discard_last` for the discard failure
    policy).
    """

    def __init__(self):
        self._turns: List[Turn] = []

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    def clear(self) -> None:
        # rebinding keeps snapshots already handed out intact
        self._turns = []

    def snapshot(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def discard_last(self, turn: Turn) -> bool:
        """Remove `turn` if it is still the final entry. Returns whether it was removed."""
        if self._turns and self._turns[-1] is turn:
            self._turns.pop()
            return True
        return False

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())
