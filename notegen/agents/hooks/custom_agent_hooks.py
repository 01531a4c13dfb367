from typing import Any

from agents import Agent
from agents.lifecycle import AgentHooks
from agents.run_context import RunContextWrapper

from notegen.core.console_config import console
from notegen.core.logging_config import get_logger

logger = get_logger(__name__)


class CustomAgentHooks(AgentHooks):
    def __init__(self, verbose: bool = False):
        """
        Initialize agent hooks with optional verbose mode.

        Args:
            verbose: If True, prints agent lifecycle events to the console.
                    If False, lifecycle events only go to the debug log.
        """
        self.verbose = verbose

    async def on_start(
        self,
        context: RunContextWrapper[Any],
        agent: Agent[Any],
    ) -> None:
        logger.debug("Agent: %s started", agent.name)
        if self.verbose:
            console.log(f"[dim]Agent: {agent.name} started[/dim]")

    async def on_end(
        self,
        context: RunContextWrapper[Any],
        agent: Agent[Any],
        output: Any,
    ) -> None:
        size = len(output) if isinstance(output, str) else 0
        logger.debug("Agent: %s ended (%d chars)", agent.name, size)
        if self.verbose:
            console.log(f"[dim]Agent: {agent.name} ended[/dim]")


# Pipeline steps run under the live display, so their hooks stay quiet
QuietAgentHooks = lambda: CustomAgentHooks(verbose=False)
