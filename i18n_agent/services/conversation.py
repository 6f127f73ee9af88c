"""Conversation service: the boundary between HTTP requests and agent runs."""

from collections.abc import AsyncIterator

from cuid2 import cuid_wrapper

from i18n_agent.config import AgentConfig, get_config
from i18n_agent.models.conversation import ChatRequest
from i18n_agent.models.llm import Message
from i18n_agent.services.agent import AgentExecutor
from i18n_agent.services.prompts import GENERIC_FAILURE_APOLOGY
from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()


class ConversationService:
    """Validates chat requests and streams agent replies.

    No conversation state is kept between requests; the client resends the
    whole history every time.
    """

    def __init__(self, executor: AgentExecutor):
        """Initialize conversation service with the shared agent executor."""
        self.executor = executor

    def prepare(self, request: ChatRequest) -> tuple[list[Message], str]:
        """Split a request into prior history and the new user utterance.

        Raises:
            ValueError: If the last message is not a non-empty user message or is too long
        """
        *prior, last = request.messages
        if last.role != "user":
            raise ValueError("Last message must be from user")
        if not last.content.strip():
            raise ValueError("Last message must not be empty")

        self.executor.context_window.validate_message(last.content)

        history = [Message(role=message.role, content=message.content) for message in prior]
        return history, last.content

    async def stream_reply(
        self, history: list[Message], user_input: str, confirmed: bool | None = None
    ) -> AsyncIterator[str]:
        """Stream the assistant reply; failures end the stream with a fixed apology."""
        run_id = cuid()
        logger.info(f"Agent run {run_id}: {len(history)} prior messages, input: {user_input[:50]}...")

        try:
            async for chunk in self.executor.stream(history, user_input, confirmed=confirmed):
                yield chunk
        except Exception as e:
            logger.error(f"Agent run {run_id} failed: {e}", exc_info=True)
            yield GENERIC_FAILURE_APOLOGY
            return

        logger.info(f"Agent run {run_id} finished")


def create_conversation_service(config: AgentConfig | None = None) -> ConversationService:
    """Wire the production executor: Anthropic model, shared limiter, seeded store."""
    from i18n_agent.clients.anthropic import get_chat_model
    from i18n_agent.services.rate_limiter import get_rate_limiter
    from i18n_agent.tools.registry import get_tools_registry

    config = config or get_config()
    executor = AgentExecutor(
        model=get_chat_model(),
        registry=get_tools_registry(),
        rate_limiter=get_rate_limiter(config.calls_per_minute),
        config=config,
    )
    return ConversationService(executor)


_conversation_service: ConversationService | None = None


def get_conversation_service() -> ConversationService:
    """Get or create the conversation service instance."""
    global _conversation_service
    if _conversation_service is None:
        _conversation_service = create_conversation_service()
    return _conversation_service
