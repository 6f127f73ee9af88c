"""Agent loop: turns a conversation into model calls and tool invocations.

The loop is an explicit state machine. A worker task drives it and passes
text chunks to the consumer over a queue, so the HTTP layer only ever sees a
finite stream of strings.
"""

import asyncio
import re
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum

from i18n_agent.clients.base import ChatModel
from i18n_agent.config import AgentConfig
from i18n_agent.models.llm import LLMUsage, Message, ModelReply, ToolCall, ToolResult
from i18n_agent.services.confirmation import CONFIRM_SENTINEL, writes_confirmed
from i18n_agent.services.context_window import ContextWindow
from i18n_agent.services.prompts import (
    EMPTY_RESPONSE_APOLOGY,
    MAX_ITERATIONS_NOTICE,
    REGENERATE_INSTRUCTION,
    SYSTEM_PROMPT,
)
from i18n_agent.services.rate_limiter import RateLimiter
from i18n_agent.services.retry import call_with_retries
from i18n_agent.services.tool_summary import summarize_tool_results
from i18n_agent.tools.registry import ToolsRegistry
from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)

EmitFn = Callable[[str], None]
SleepFn = Callable[[float], Awaitable[None]]

_REASONING_RE = re.compile(r"<thinking>.*?</thinking>", re.DOTALL | re.IGNORECASE)

# Keeps worker tasks referenced until they finish, even if their consumer is gone
_background_tasks: set[asyncio.Task] = set()


class AgentState(StrEnum):
    AWAITING_MODEL = "awaiting_model"
    HAS_TOOL_CALLS = "has_tool_calls"
    EXECUTING_TOOLS = "executing_tools"
    FINAL_OUTPUT = "final_output"
    MAX_ITERATIONS_REACHED = "max_iterations_reached"


TERMINAL_STATES = frozenset({AgentState.FINAL_OUTPUT, AgentState.MAX_ITERATIONS_REACHED})


def visible_text(text: str) -> str:
    """Text meant for the user, with internal reasoning blocks removed."""
    return _REASONING_RE.sub("", text).strip()


@dataclass
class AgentRunResult:
    """Outcome of one agent run."""

    state: AgentState
    iterations: int
    model_calls: int
    tool_calls: int
    messages: list[Message]
    chunks: list[str]
    usage: LLMUsage

    @property
    def output(self) -> str:
        return "".join(self.chunks)

    @property
    def requires_confirmation(self) -> bool:
        return CONFIRM_SENTINEL in self.output


@dataclass
class _RunState:
    messages: list[Message]
    allow_writes: bool
    emit: EmitFn
    state: AgentState = AgentState.AWAITING_MODEL
    iterations: int = 0
    model_calls: int = 0
    pending_reply: ModelReply = field(default_factory=ModelReply)
    executed: list[tuple[ToolCall, ToolResult]] = field(default_factory=list)
    regenerating: bool = False
    regenerated: bool = False
    chunks: list[str] = field(default_factory=list)
    usage: LLMUsage = field(default_factory=LLMUsage)

    def output(self, text: str) -> None:
        # Blank line between successive chunks
        chunk = f"\n\n{text}" if self.chunks else text
        self.chunks.append(chunk)
        self.emit(chunk)


@dataclass
class _StreamEvent:
    kind: str
    text: str = ""
    error: BaseException | None = None


class AgentExecutor:
    """Runs the model/tool loop for one request at a time; safe to share between requests."""

    def __init__(
        self,
        model: ChatModel,
        registry: ToolsRegistry,
        rate_limiter: RateLimiter,
        config: AgentConfig | None = None,
        context_window: ContextWindow | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        """Initialize the executor.

        Args:
            model: Tool-calling chat model
            registry: Tools available to the model
            rate_limiter: Process-wide limiter shared by all runs
            config: Loop, retry and context settings
            context_window: History truncation (built from config when omitted)
            sleep: Awaitable sleep used for backoff and tool spacing
        """
        self.model = model
        self.registry = registry
        self.rate_limiter = rate_limiter
        self.config = config or AgentConfig()
        self.context_window = context_window or ContextWindow(
            max_history_messages=self.config.max_history_messages,
            max_message_tokens=self.config.max_message_tokens,
        )
        self.sleep = sleep
        self.tool_specs = registry.get_tool_specs()

    def build_messages(self, history: list[Message], user_input: str) -> list[Message]:
        return [
            Message(role="system", content=SYSTEM_PROMPT),
            *self.context_window.truncate(history),
            Message(role="user", content=user_input),
        ]

    async def run(
        self,
        history: list[Message],
        user_input: str,
        emit: EmitFn | None = None,
        confirmed: bool | None = None,
    ) -> AgentRunResult:
        """Execute the agent loop until it produces a final answer or hits the iteration cap.

        Args:
            history: Prior turns, oldest first
            user_input: The new user utterance
            emit: Callback receiving each text chunk as soon as it is produced
            confirmed: Caller's explicit answer to a pending confirmation

        Returns:
            The run outcome, including the full transcript
        """
        allow_writes = not self.config.enforce_write_confirmation or writes_confirmed(user_input, confirmed)
        run = _RunState(
            messages=self.build_messages(history, user_input),
            allow_writes=allow_writes,
            emit=emit or (lambda _chunk: None),
        )
        logger.info(
            f"Starting agent run with {len(run.messages)} messages, {len(self.tool_specs)} tools, "
            f"max_iterations: {self.config.max_iterations}, writes allowed: {allow_writes}"
        )

        while run.state not in TERMINAL_STATES:
            match run.state:
                case AgentState.AWAITING_MODEL:
                    await self._await_model(run)
                case AgentState.HAS_TOOL_CALLS:
                    self._announce_tool_calls(run, run.pending_reply)
                case AgentState.EXECUTING_TOOLS:
                    await self._execute_tools(run, run.pending_reply)

        if run.state == AgentState.MAX_ITERATIONS_REACHED:
            logger.warning(f"Agent run reached max iterations ({self.config.max_iterations})")
            run.output(MAX_ITERATIONS_NOTICE)
        else:
            logger.info(f"Agent run completed in {run.iterations} iterations, {run.model_calls} model calls")

        return AgentRunResult(
            state=run.state,
            iterations=run.iterations,
            model_calls=run.model_calls,
            tool_calls=len(run.executed),
            messages=run.messages,
            chunks=run.chunks,
            usage=run.usage,
        )

    async def stream(
        self,
        history: list[Message],
        user_input: str,
        confirmed: bool | None = None,
    ) -> AsyncIterator[str]:
        """Run the loop in a worker task and yield its text chunks as they arrive.

        If the consumer stops early the worker keeps going, so tool calls already
        dispatched complete normally.
        """
        queue: asyncio.Queue[_StreamEvent] = asyncio.Queue()

        async def worker() -> None:
            try:
                await self.run(
                    history,
                    user_input,
                    emit=lambda chunk: queue.put_nowait(_StreamEvent(kind="chunk", text=chunk)),
                    confirmed=confirmed,
                )
            except asyncio.CancelledError:
                queue.put_nowait(_StreamEvent(kind="error", error=RuntimeError("Agent run was cancelled")))
                raise
            except Exception as e:
                queue.put_nowait(_StreamEvent(kind="error", error=e))
            else:
                queue.put_nowait(_StreamEvent(kind="done"))

        task = asyncio.create_task(worker())
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)

        try:
            while True:
                event = await queue.get()
                if event.kind == "chunk":
                    yield event.text
                elif event.error is not None:
                    raise event.error
                else:
                    return
        finally:
            if not task.done():
                logger.info("Stream consumer went away; agent run continues in the background")

    async def _await_model(self, run: _RunState) -> None:
        if run.regenerating:
            run.regenerating = False
        else:
            run.iterations += 1
            if run.iterations > self.config.max_iterations:
                run.state = AgentState.MAX_ITERATIONS_REACHED
                return
            logger.debug(f"Agent iteration {run.iterations}/{self.config.max_iterations}")

        reply = await self._call_model(run)

        if reply.has_tool_calls:
            logger.info(f"Model requested {len(reply.tool_calls)} tool call(s)")
            run.pending_reply = reply
            run.state = AgentState.HAS_TOOL_CALLS
            return

        text = visible_text(reply.text)
        if text:
            run.messages.append(reply.to_message())
            run.output(text)
            run.state = AgentState.FINAL_OUTPUT
            return

        self._handle_empty_reply(run, reply)

    def _handle_empty_reply(self, run: _RunState, reply: ModelReply) -> None:
        if run.executed:
            logger.warning("Empty model reply after tool calls, summarizing tool results instead")
            summary = summarize_tool_results(run.executed)
            run.messages.append(Message(role="assistant", content=summary))
            run.output(summary)
            run.state = AgentState.FINAL_OUTPUT
            return

        run.messages.append(reply.to_message())

        if not run.regenerated:
            logger.warning("Empty model reply, asking the model to regenerate once")
            run.messages.append(Message(role="user", content=REGENERATE_INSTRUCTION))
            run.regenerated = True
            run.regenerating = True
            run.state = AgentState.AWAITING_MODEL
            return

        logger.warning("Model reply still empty after regeneration")
        run.output(EMPTY_RESPONSE_APOLOGY)
        run.state = AgentState.FINAL_OUTPUT

    def _announce_tool_calls(self, run: _RunState, reply: ModelReply) -> None:
        text = visible_text(reply.text)
        if text:
            run.output(text)
        run.messages.append(reply.to_message())
        run.state = AgentState.EXECUTING_TOOLS

    async def _execute_tools(self, run: _RunState, reply: ModelReply) -> None:
        for index, call in enumerate(reply.tool_calls):
            if index > 0 and self.config.tool_call_delay > 0:
                await self.sleep(self.config.tool_call_delay)

            result = await self._invoke_tool(call, run.allow_writes)
            run.executed.append((call, result))
            run.messages.append(Message.from_tool_result(result))

        run.pending_reply = ModelReply()
        run.state = AgentState.AWAITING_MODEL

    async def _invoke_tool(self, call: ToolCall, allow_writes: bool) -> ToolResult:
        started = time.perf_counter()
        try:
            return await self.registry.invoke(call, allow_writes=allow_writes)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.error(
                f"Tool {call.name} raised with args {call.arguments} after {elapsed:.3f}s: {e}", exc_info=True
            )
            return ToolResult(tool_call_id=call.id, name=call.name, success=False, error=f"Error: {e!s}")

    async def _call_model(self, run: _RunState) -> ModelReply:
        run.model_calls += 1
        messages = list(run.messages)

        started = time.perf_counter()
        reply = await call_with_retries(
            lambda: self.model.complete(messages, self.tool_specs),
            rate_limiter=self.rate_limiter,
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
            sleep=self.sleep,
        )
        elapsed = time.perf_counter() - started

        run.usage.add(reply.usage)
        logger.info(
            f"Model call {run.model_calls} finished in {elapsed:.2f}s - stop reason: {reply.stop_reason}, "
            f"tool calls: {len(reply.tool_calls)}"
        )
        return reply
