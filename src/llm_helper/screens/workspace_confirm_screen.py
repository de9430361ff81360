"""
Modal screens for the llm-helper chat panel.
"""

from textual import on
from textual.widgets import Static, OptionList
from textual.widgets.option_list import Option
from textual.containers import Center, Vertical
from textual.screen import ModalScreen


class WorkspaceConfirmScreen(ModalScreen[bool]):
    """Asks whether the current directory is the project root."""
    CSS = """
#panel {
    width: 80%;
    max-width: 100;
    border: round $secondary;
    padding: 1 2;
}
#ws_options {
    margin-top: 1;
}
#panel OptionList {
    border: none;
    background: transparent;
}
    """
    BINDINGS = [
        ('1', 'choose_yes', 'yes'),
        ('2', 'choose_no', 'no'),
    ]

    def __init__(self, cwd: str) -> None:
        """
        Initialize the project-root confirmation screen.

        Args:
            cwd (str): The directory offered as project root
        """
        super().__init__()
        self.cwd = cwd

    def compose(self):
        """
        Create the UI layout for the project-root dialog.

        Returns:
            The composed UI elements including title, pipeline warning, and options
        """
        yield Center(
                Vertical(
                    Static("[bold orange]Open this folder as your project?[/bold orange]\n", markup=True, classes="title"),
                    Static(f"[bold]{self.cwd}[/bold]\n", markup=True),
                    Static(
                        "The pipeline in .llm-helper/pipeline.py will be loaded and run from this folder. "
                        "Loading untrusted code is unsafe.\n",
                        markup=True,
                    ),
                    OptionList(
                        Option("1. Yes, open it", id="yes"),
                        Option("2. No, chat without a project", id="no"),
                        id="ws_options",
                    ),
                ),
                id="panel",
        )

    async def _on_mount(self):
        """
        Focus the option list with "open it" preselected, so a single Enter
        accepts the folder.
        """
        ol = self.query_one(OptionList)
        ol.focus()
        ol.index = 0

    @on(OptionList.OptionSelected)
    def on_option_selected(self, event: OptionList.OptionSelected) -> None:
        """
        Dismiss with the user's answer.

        Args:
            event: The option selection event; an id of 'yes' opens the folder
        """
        self.dismiss(event.option_id == 'yes')

    def action_choose_yes(self) -> None:
        """Open the folder as project root (key 1)."""
        self.dismiss(True)

    def action_choose_no(self) -> None:
        """Continue without a project root (key 2)."""
        self.dismiss(False)
