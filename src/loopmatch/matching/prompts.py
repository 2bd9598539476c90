"""Prompt templates for the generation provider."""

from ..store.models import Goal

STYLE_GUIDES = {
    Goal.SLEEP: "Focus on release, relaxation, and peace. Use calming language.",
    Goal.FOCUS: "Emphasize clarity, capability, and completion. Use action-oriented language.",
    Goal.CALM: "Center on presence, acceptance, and groundedness. Stay in the NOW.",
    Goal.MANIFEST: "Balance desire with deserving. Use magnetic, receiving language.",
}

TONE_EXAMPLES = {
    Goal.SLEEP: "I release the day and welcome deep rest\nI am safe, supported, and at peace",
    Goal.FOCUS: "I complete what I start with clarity\nI am capable of achieving this goal",
    Goal.CALM: "I breathe and center myself right now\nI am grounded in this present moment",
    Goal.MANIFEST: "I am ready to receive what I desire\nI deserve the abundance I'm creating",
}

# Used when a request arrives without free-text intent
DEFAULT_INTENTS = {
    Goal.SLEEP: "I want to release the day and welcome deep, restorative rest",
    Goal.FOCUS: "I want to sharpen my focus and complete my tasks with clarity and purpose",
    Goal.CALM: "I want to find peace and center myself in the present moment",
    Goal.MANIFEST: "I want to create and receive the abundance and success I'm working toward",
}


def affirmation_prompt(intent: str, goal: Goal, min_lines: int = 6, max_lines: int = 10) -> str:
    """Build the goal-specific prompt asking for personalised affirmations."""
    goal = Goal(goal)
    return f"""You are an expert affirmation writer specializing in {goal.value} and personal transformation.

USER'S SPECIFIC INTENTION:

"{intent}"

Your task: Create {min_lines}-{max_lines} affirmations that feel personally crafted for THIS person's unique situation.

REQUIREMENTS:

1. FIRST PERSON ONLY: Start with "I am", "I", or "My"
2. PRESENT TENSE: Write as if it's already happening now
3. SPECIFIC: Reference their exact words and situation, not generic platitudes
4. CONCISE: Maximum 12 words per affirmation
5. VARIED STRUCTURE: Mix "I am" / "I [verb]" / "My [noun]"
6. NO FLUFF: No therapy jargon, medical claims, or abstract metaphors

STYLE GUIDE FOR {goal.value.upper()}:

{STYLE_GUIDES[goal]}

TONE EXAMPLES (for inspiration):

{TONE_EXAMPLES[goal]}

OUTPUT FORMAT:

Plain text only. One affirmation per line. No numbering. No bullets. No markdown.

Between {min_lines}-{max_lines} total lines."""


def theme_prompt(intent: str) -> str:
    """Build the constrained prompt asking for comma-separated themes."""
    return f"""Extract 3-5 key emotional themes from this intent: "{intent}"

Output only comma-separated single words like: anxiety,sleep,peace,rest

No explanations, just the words."""
