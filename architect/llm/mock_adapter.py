from __future__ import annotations

import json

from architect.agents import prompts

from .adapter import BaseLLMAdapter


class MockLLMAdapter(BaseLLMAdapter):
    """Offline backend: answers each role's system prompt with canned output."""

    async def _invoke(self, system_prompt: str, user_prompt: str, temperature: float) -> str:
        if system_prompt == prompts.SCOUT_SYSTEM_PROMPT:
            return json.dumps(
                {
                    "name": "Mock Habit Duel",
                    "problem": "People drop new habits within a week",
                    "solution": "Pair users into daily streak duels with push reminders",
                    "stack": "React Native",
                    "monetization": "Freemium with paid streak shields",
                }
            )
        if system_prompt == prompts.QA_SYSTEM_PROMPT:
            return "APPROVED"
        if system_prompt == prompts.INTEGRATOR_SYSTEM_PROMPT:
            return json.dumps({"app.json": {"expo": {"name": "mock"}}, "eas.json": {"build": {}}})
        if system_prompt == prompts.GROWTH_SYSTEM_PROMPT:
            return json.dumps(
                {
                    "onboarding": "Pick a rival in 10 seconds",
                    "cta": "Start your first duel",
                    "shareText": "I just beat my streak rival",
                    "viralLoop": "Invite a friend to unlock duels",
                }
            )
        if system_prompt == prompts.UI_SYSTEM_PROMPT:
            return "export default function MainScreen() { return null; }"
        return "export function useMockLogic() { return {}; }"
