"""
Modal screens for the llm-helper chat panel.
"""
from .credential_prompt_screen import CredentialPromptScreen
from .workspace_confirm_screen import WorkspaceConfirmScreen

__all__ = ["CredentialPromptScreen", "WorkspaceConfirmScreen"]
