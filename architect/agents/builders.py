from __future__ import annotations

from architect.utils.logging import get_logger
from architect.utils.schemas import Idea

from . import prompts
from .base import BaseAgent
from .prompts import PromptBuilder

LOGGER = get_logger(__name__)


class BuilderAgent(BaseAgent):
    """One of the four agents that run concurrently on the same idea."""

    start_message: str = ""
    done_message: str = ""

    def build_prompt(self, idea: Idea) -> str:
        raise NotImplementedError

    async def run(self, idea: Idea) -> str:
        await self._emitter.emit(self.start_message, "agent")
        output = await self._ask(self.build_prompt(idea))
        LOGGER.info("%s agent produced %d chars for %r", self.role, len(output), idea.name)
        await self._emitter.emit(self.done_message, "success")
        return output


class UIAgent(BuilderAgent):
    role = "ui"
    system_prompt = prompts.UI_SYSTEM_PROMPT
    temperature = 0.5
    start_message = "🎨 AGENT UI: Designing interface..."
    done_message = "✅ UI: Interface generated"

    def build_prompt(self, idea: Idea) -> str:
        return PromptBuilder.ui(idea)


class LogicAgent(BuilderAgent):
    role = "logic"
    system_prompt = prompts.LOGIC_SYSTEM_PROMPT
    temperature = 0.4
    start_message = "⚙️ AGENT LOGIC: Building core engine..."
    done_message = "✅ LOGIC: Core engine ready"

    def build_prompt(self, idea: Idea) -> str:
        return PromptBuilder.logic(idea)


class IntegratorAgent(BuilderAgent):
    role = "integrator"
    system_prompt = prompts.INTEGRATOR_SYSTEM_PROMPT
    temperature = 0.3
    start_message = "🔌 AGENT INTEGRATOR: Setting up configs..."
    done_message = "✅ INTEGRATOR: Configs ready"

    def build_prompt(self, idea: Idea) -> str:
        return PromptBuilder.integrator(idea)


class GrowthAgent(BuilderAgent):
    # Output is expected to be JSON but is stored as-is
    role = "growth"
    system_prompt = prompts.GROWTH_SYSTEM_PROMPT
    temperature = 0.8
    start_message = "📈 AGENT GROWTH: Crafting viral mechanics..."
    done_message = "✅ GROWTH: Viral mechanics defined"

    def build_prompt(self, idea: Idea) -> str:
        return PromptBuilder.growth(idea)
