"""
llm-helper: a terminal chat panel that forwards prompts to a language model.
"""

__version__ = "0.1.0"
