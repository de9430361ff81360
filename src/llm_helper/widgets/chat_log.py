from rich.markdown import Markdown
from rich.text import Text
from textual.widgets import RichLog


class ChatLog(RichLog):
    """Question/answer transcript; answers are rendered as Markdown."""

    def add_question(self, text: str) -> None:
        self.write(Text.assemble(("you: ", "bold cyan"), text))

    def add_response(self, text: str) -> None:
        self.write(Text("assistant:", style="bold green"))
        self.write(Markdown(text))
