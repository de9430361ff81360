"""
llm-helper chat panel
"""

import asyncio
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from textual import work
from textual.app import App, ComposeResult

from llm_helper.config import Settings, load_settings
from llm_helper.core.context import file_context
from llm_helper.core.credentials import CredentialProvider, JsonSecretStore
from llm_helper.core.errors import ConfigurationError
from llm_helper.core.resolver import BackendResolver
from llm_helper.core.session import SessionController
from llm_helper.logging_config import get_logger, setup_logging
from llm_helper.screens import CredentialPromptScreen, WorkspaceConfirmScreen
from llm_helper.widgets import ChatLog, InputArea


logger = get_logger(__name__)

DEFAULT_FILE_PROMPT = "Explain this"


def parse_command(text: str) -> Tuple[str, str]:
    """
    Split submitted input into ('clear' | 'file' | 'ask', argument).

    Commands only match as whole words, so "/filesystem layout?" is a
    question, not a `/file` command.
    """
    text = text.strip()
    word, _, rest = text.partition(' ')
    if word == '/clear' and not rest:
        return 'clear', ''
    if word == '/file':
        return 'file', rest.strip()
    return 'ask', text


class ChatApp(App):
    BINDINGS = [
        ('ctrl+l', 'clear_chat', 'clear chat'),
    ]

    def __init__(self, settings: Settings):
        super().__init__()
        self.settings = settings
        self.event_q: asyncio.Queue = asyncio.Queue()
        self.resolver = BackendResolver(settings)
        self.credentials = CredentialProvider(
            JsonSecretStore(settings.secret_store_path), self._prompt_credential
        )
        self.controller = SessionController(
            self.event_q,
            self.credentials,
            self.resolver,
            busy_policy=settings.busy_policy,
            on_failure=settings.on_failure,
        )

    def compose(self) -> ComposeResult:
        yield ChatLog(id="chat_log", markup=True, wrap=True)
        yield InputArea(id="input_text", placeholder="Ask a question...  (/file <path> [prompt], /clear)")

    async def on_mount(self) -> None:
        self._startup_flow()

    @work(exclusive=True, group="startup")
    async def _startup_flow(self) -> None:
        """
        Ask for the project root, greet the user and start consuming
        controller events.
        """
        result = await self.push_screen_wait(WorkspaceConfirmScreen(os.getcwd()))
        self.resolver.workspace_root = Path.cwd() if result else None

        chat_log = self.query_one("#chat_log", ChatLog)
        chat_log.write("[bold green]Welcome to llm-helper![/bold green]")
        if self.resolver.workspace_root:
            chat_log.write(f"[dim]project: {self.resolver.workspace_root}[/dim]")
        else:
            chat_log.write("[dim]No project opened. Pipeline backends are unavailable.[/dim]")
        chat_log.write(f"[dim]backend: {self.settings.backend.value}[/dim]")

        self.call_after_refresh(lambda: self.set_focus(self.query_one('#input_text', InputArea)))
        self._pump()

    async def _prompt_credential(self) -> Optional[str]:
        return await self.push_screen_wait(CredentialPromptScreen())

    async def on_input_area_submit(self, message: InputArea.Submit) -> None:
        command, arg = parse_command(message.value)

        if command == 'clear':
            await self.action_clear_chat()
        elif command == 'file':
            self._ask_about_file(arg)
        else:
            self.submit_event({'type': 'askLLM', 'value': arg})

    def _ask_about_file(self, args: str) -> None:
        if not args:
            self.notify("Usage: /file <path> [prompt]", severity="warning")
            return
        path_arg, _, prompt = args.partition(' ')
        path = Path(path_arg).expanduser()
        try:
            code = file_context(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            self.notify(f"Could not read {path}: {exc}", severity="error")
            return
        self.submit_event({'type': 'askChatGPT', 'value': prompt.strip() or DEFAULT_FILE_PROMPT, 'code': code})

    async def action_clear_chat(self) -> None:
        await self.controller.handle({'type': 'clearChat'})

    @work(group='ask')
    async def submit_event(self, event: Dict[str, Any]):
        """Hand an ask event to the controller, which serializes concurrent asks."""
        await self.controller.handle(event)

    @work(exclusive=True, group='pump')
    async def _pump(self):
        """
        Event processing loop.

        Event types handled:
        - 'addQuestion' / 'addResponse': transcript echo
        - 'error': failed ask, shown as a notification
        - 'cleared': transcript was reset
        """
        chat_log = self.query_one("#chat_log", ChatLog)

        while True:
            ev = await self.event_q.get()
            type = ev.get("type", '')

            if type == 'addQuestion':
                chat_log.add_question(ev.get('value', ''))
            elif type == 'addResponse':
                chat_log.add_response(ev.get('value', ''))
            elif type == 'error':
                self.notify(ev.get('message', ''), title="llm-helper", severity="error")
            elif type == 'cleared':
                chat_log.clear()


def main():
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        raise SystemExit(f"llm-helper: {exc}")
    setup_logging(settings.log_level, settings.log_file)
    app = ChatApp(settings)
    app.run()


if __name__ == "__main__":
    main()
