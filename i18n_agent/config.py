"""Runtime configuration for the translation assistant."""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class AgentConfig:
    """Configuration for the agent loop and its upstream model calls."""

    model: str = "claude-3-5-sonnet-20241022"
    temperature: float = 0.3
    max_tokens: int = 2048
    request_timeout: float = 60.0

    # Context window
    max_history_messages: int = 4  # Roughly two conversational turns
    max_message_tokens: int = 2000

    # Loop control
    max_iterations: int = 20
    tool_call_delay: float = 0.5

    # Upstream quota and retries
    calls_per_minute: int = 20
    max_retries: int = 3
    retry_base_delay: float = 1.0

    enforce_write_confirmation: bool = True

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """Build a configuration from AGENT_* environment variables."""
        defaults = cls()
        return cls(
            model=os.getenv("AGENT_MODEL", defaults.model),
            temperature=float(os.getenv("AGENT_TEMPERATURE", defaults.temperature)),
            max_tokens=int(os.getenv("AGENT_MAX_TOKENS", defaults.max_tokens)),
            request_timeout=float(os.getenv("AGENT_REQUEST_TIMEOUT", defaults.request_timeout)),
            max_history_messages=int(os.getenv("AGENT_MAX_HISTORY_MESSAGES", defaults.max_history_messages)),
            max_message_tokens=int(os.getenv("AGENT_MAX_MESSAGE_TOKENS", defaults.max_message_tokens)),
            max_iterations=int(os.getenv("AGENT_MAX_ITERATIONS", defaults.max_iterations)),
            tool_call_delay=float(os.getenv("AGENT_TOOL_CALL_DELAY", defaults.tool_call_delay)),
            calls_per_minute=int(os.getenv("AGENT_CALLS_PER_MINUTE", defaults.calls_per_minute)),
            max_retries=int(os.getenv("AGENT_MAX_RETRIES", defaults.max_retries)),
            retry_base_delay=float(os.getenv("AGENT_RETRY_BASE_DELAY", defaults.retry_base_delay)),
            enforce_write_confirmation=_env_bool(
                "AGENT_ENFORCE_WRITE_CONFIRMATION", defaults.enforce_write_confirmation
            ),
        )


_config: AgentConfig | None = None


def get_config() -> AgentConfig:
    """Get or create the process configuration."""
    global _config
    if _config is None:
        _config = AgentConfig.from_env()
    return _config
