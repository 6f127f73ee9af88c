#!/usr/bin/env python3
"""Terminal client for the translation assistant.

The server keeps no session, so the client holds the conversation and resends
it with every request. Previews that end with the confirmation marker are
answered through a confirm/cancel prompt.
"""

import sys

import httpx
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt

from i18n_agent.services.confirmation import split_confirmation

DEFAULT_URL = "http://localhost:8000"

HELP_TEXT = """\
[bold]Commands[/bold]
  /help    show this message
  /clear   forget the conversation
  /history show how many turns are kept
  /quit    leave

[bold]Try[/bold]
  "Which languages are supported?"
  "What is the default language?"
  "Show the translations of common.welcome"
  "Add translations for 'Loading'" then answer confirm or cancel

Keys are namespaced dot-strings such as common.loading or button.submit.
Nothing is written until you confirm the preview."""


class TranslationChat:
    """Interactive session against a running assistant."""

    def __init__(self, base_url: str = DEFAULT_URL):
        self.base_url = base_url.rstrip("/")
        self.history: list[dict[str, str]] = []
        self.console = Console()
        self.http = httpx.Client(base_url=self.base_url, timeout=120.0)

    def run(self) -> None:
        self.console.print(
            Panel.fit(
                "[bold blue]i18n Translation Assistant[/bold blue]\nType /help for commands.",
                border_style="blue",
            )
        )
        if not self._is_healthy():
            self.console.print(f"[red]Service at {self.base_url} is not reachable.[/red]")
            return

        try:
            while True:
                text = Prompt.ask("\n[bold cyan]You[/bold cyan]").strip()
                if not text:
                    continue
                if text.startswith("/"):
                    if not self._command(text.lower()):
                        break
                    continue
                self._converse(text)
        except (KeyboardInterrupt, EOFError):
            self.console.print()
        finally:
            self.http.close()
            self.console.print("[yellow]Bye.[/yellow]")

    def _command(self, command: str) -> bool:
        """Run a slash command; returns False when the session should end."""
        match command:
            case "/quit" | "/exit":
                return False
            case "/help":
                self.console.print(Panel(HELP_TEXT, title="Help", border_style="cyan"))
            case "/clear":
                self.history.clear()
                self.console.print("[yellow]Conversation cleared.[/yellow]")
            case "/history":
                self.console.print(f"[dim]{len(self.history)} messages in this conversation.[/dim]")
            case _:
                self.console.print(f"[red]Unknown command {command}[/red]")
        return True

    def _converse(self, text: str) -> None:
        """Send a turn and keep answering confirmation prompts until none is pending."""
        pending = self._turn(text)
        while pending:
            answer = Prompt.ask("[bold yellow]Create these translations?[/bold yellow]", choices=["confirm", "cancel"])
            pending = self._turn(answer, confirmed=answer == "confirm")

    def _turn(self, content: str, confirmed: bool | None = None) -> bool:
        self.history.append({"role": "user", "content": content})
        raw = self._post_chat(confirmed)
        if raw is None:
            self.history.pop()
            return False

        shown, pending = split_confirmation(raw)
        self.history.append({"role": "assistant", "content": shown})
        self.console.print(
            Panel(Markdown(shown or "_(no reply)_"), title="[bold green]Assistant[/bold green]", border_style="green")
        )
        return pending

    def _post_chat(self, confirmed: bool | None) -> str | None:
        body: dict = {"messages": self.history}
        if confirmed is not None:
            body["confirmed"] = confirmed

        parts: list[str] = []
        try:
            with self.console.status("[dim]Working...[/dim]"), self.http.stream("POST", "/chat", json=body) as response:
                if response.status_code != 200:
                    response.read()
                    self.console.print(f"[red]HTTP {response.status_code}: {response.text}[/red]")
                    return None
                parts.extend(response.iter_text())
        except httpx.HTTPError as e:
            self.console.print(f"[red]Request failed: {e}[/red]")
            return None
        return "".join(parts)

    def _is_healthy(self) -> bool:
        try:
            return self.http.get("/health").status_code == 200
        except httpx.HTTPError:
            return False


def main() -> None:
    TranslationChat(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_URL).run()


if __name__ == "__main__":
    main()
