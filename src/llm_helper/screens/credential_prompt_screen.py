from typing import Optional

from textual import on
from textual.containers import Center, Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Static


class CredentialPromptScreen(ModalScreen[Optional[str]]):
    """Single-line masked prompt for the API key. Escape dismisses it with None."""
    CSS = """
#panel {
    width: 80%;
    max-width: 100;
    border: round $secondary;
    padding: 1 2;
}
    """
    BINDINGS = [
        ('escape', 'cancel', 'cancel'),
    ]

    def compose(self):
        """
        Create the UI layout for the API key prompt.

        Returns:
            The composed UI elements: instructions and a masked single-line input
        """
        yield Center(
            Vertical(
                Static(
                    "Please enter your OpenAI API Key, can be located at "
                    "https://platform.openai.com/api-keys\n"
                ),
                Input(id="api_key", password=True, placeholder="sk-..."),
            ),
            id="panel",
        )

    async def _on_mount(self):
        """Focus the key input so the user can type straight away."""
        self.query_one('#api_key', Input).focus()

    @on(Input.Submitted)
    def on_submitted(self, event: Input.Submitted) -> None:
        """
        Dismiss with whatever was typed; an empty value is passed through
        and treated as no credential by the caller.

        Args:
            event: The submission event carrying the input value
        """
        event.stop()
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        """Dismiss without a value (escape)."""
        self.dismiss(None)
