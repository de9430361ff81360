"""
Custom UI widgets for the llm-helper chat panel.
"""
from .input_area import InputArea
from .chat_log import ChatLog

__all__ = ["InputArea", "ChatLog"]
