"""
Exceptions raised by the llm-helper core.

Every ask-cycle failure is one of these; the session controller turns them
into human-readable error events for the chat panel.
"""


class LLMHelperError(Exception):
    """Base exception for all llm-helper errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(LLMHelperError):
    """Raised when an environment setting has an invalid value."""
    pass


class NoWorkspace(LLMHelperError):
    """Raised when a pipeline backend is needed but no project root is open."""
    pass


class NoBackendConfigured(LLMHelperError):
    """Raised when the project has no pipeline definition file."""
    pass


class LoadFailure(LLMHelperError):
    """Raised when the pipeline file cannot be imported or exports nothing usable."""
    pass


class InvocationFailure(LLMHelperError):
    """Raised when the backend fails to answer (network, auth, model error)."""
    pass


class SessionBusy(LLMHelperError):
    """Raised when an ask arrives while another one is in flight and the policy rejects it."""
    pass
