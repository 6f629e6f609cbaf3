from architect.utils.schemas import Idea

SCOUT_SYSTEM_PROMPT = (
    "You are a Market Intelligence AI. Your job is to find profitable app ideas.\n"
    "Analyze current trends in: AI tools, crypto, social media, productivity.\n"
    'Output a JSON with: {"name": "App Name", "problem": "What problem it solves", '
    '"solution": "Technical solution", "stack": "React Native|Web", '
    '"monetization": "How to make money"}\n'
    "Return ONLY the JSON object, no markdown fences."
)

UI_SYSTEM_PROMPT = (
    "You are a Senior React Native UI Developer.\n"
    "Generate COMPLETE React Native code for the main screen.\n"
    "Use: View, Text, TouchableOpacity, StyleSheet, ScrollView.\n"
    "Style: Cyberpunk/Modern. NO PLACEHOLDERS."
)

LOGIC_SYSTEM_PROMPT = (
    "You are a Backend Engineer specializing in React Native.\n"
    "Write the business logic and state management.\n"
    "Use: useState, useEffect, AsyncStorage, real API calls.\n"
    "Include error handling with try/catch."
)

INTEGRATOR_SYSTEM_PROMPT = (
    "You are a DevOps Engineer.\n"
    "Generate configuration files: app.json (Expo), eas.json (build config).\n"
    "Output valid JSON only."
)

GROWTH_SYSTEM_PROMPT = (
    "You are a Growth Hacker with expertise in viral loops.\n"
    "Create: App copy (headlines, CTAs), share mechanisms, gamification.\n"
    "Output: JSON with {onboarding, cta, shareText, viralLoop}"
)

QA_SYSTEM_PROMPT = (
    "You are a QA Engineer.\n"
    "Review the code for: Syntax errors, missing imports, security issues.\n"
    'Output: "APPROVED" or list of issues.'
)


class PromptBuilder:
    """User prompts for each role, built from the cycle's context."""

    @staticmethod
    def scout() -> str:
        return (
            "Find a NEW app idea that can be built in 24h and monetized immediately. "
            "Focus on viral potential."
        )

    @staticmethod
    def ui(idea: Idea) -> str:
        return (
            f"Create the main screen for: {idea.name}\n"
            f"Description: {idea.solution}\n"
            "Output: Full React Native component code."
        )

    @staticmethod
    def logic(idea: Idea) -> str:
        return (
            f"Write the logic layer for: {idea.name}\n"
            f"Features needed: {idea.solution}\n"
            "Output: Complete JavaScript functions and hooks."
        )

    @staticmethod
    def integrator(idea: Idea) -> str:
        return (
            f"Create config files for: {idea.name}\n"
            f"Stack: {idea.stack}\n"
            "Platform: Android APK via EAS Build."
        )

    @staticmethod
    def growth(idea: Idea) -> str:
        return (
            f"Design growth strategy for: {idea.name}\n"
            "Goal: Maximum viral spread and user retention."
        )

    @staticmethod
    def qa(code: str, max_chars: int) -> str:
        return f"Review this code:\n{code[:max_chars]}"
