"""
Data models for llm-helper.
"""
from .turn import Role, Turn, to_messages

__all__ = ["Role", "Turn", "to_messages"]
