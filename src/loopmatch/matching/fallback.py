"""Fixed lines returned when every other tier fails."""

from ..store.models import Goal

FALLBACK_LINES: dict[Goal, tuple[str, ...]] = {
    Goal.SLEEP: (
        "I am safe and ready to rest",
        "My body knows how to relax deeply",
        "I deserve peaceful and restorative sleep",
        "My mind is calm and quiet",
        "I release all tension from my day",
        "I trust my body to restore itself",
    ),
    Goal.FOCUS: (
        "I am focused and in control",
        "My mind is clear and sharp",
        "I accomplish tasks with ease and confidence",
        "I am capable of great things",
        "My energy flows toward my goals",
        "I work with purpose and clarity",
    ),
    Goal.CALM: (
        "I am at peace with this moment",
        "My breath brings me back to center",
        "I am safe and supported right now",
        "I release what I cannot control",
        "My heart is open and at ease",
        "I trust the journey I am on",
    ),
    Goal.MANIFEST: (
        "I am a powerful creator of my reality",
        "My dreams are becoming my reality now",
        "I attract abundance with ease and joy",
        "My goals are aligning perfectly for me",
        "I am worthy of all I desire",
        "My success is inevitable and natural",
    ),
}


def fallback_lines(goal: Goal) -> list[str]:
    return list(FALLBACK_LINES[Goal(goal)])
