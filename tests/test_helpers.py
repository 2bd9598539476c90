"""Test helpers: fake providers and pool line builders."""

from loopmatch.providers.base import GenerationProvider, SynthesisProvider
from loopmatch.providers.models import SynthesisResult
from loopmatch.store.models import ContentLine, Goal

GENERATED_LINES = "\n".join(
    [
        "I let the day dissolve into quiet",
        "My shoulders soften as evening settles",
        "I am safe in this warm darkness",
        "I breathe slowly and my thoughts drift away",
        "My pillow holds every worry for me",
        "I welcome deep uninterrupted rest tonight",
        "I trust tomorrow to take care of itself",
        "My heartbeat slows into a gentle rhythm",
    ]
)


class FakeGenerationProvider(GenerationProvider):
    """Generation provider answering theme and affirmation prompts from fixtures."""

    def __init__(
        self,
        themes: str = "sleep,rest,peace",
        lines: str = GENERATED_LINES,
        error: Exception | None = None,
    ) -> None:
        self.themes = themes
        self.lines = lines
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, prompt: str, temperature: float, max_tokens: int) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if prompt.startswith("Extract"):
            return self.themes
        return self.lines

    @property
    def generation_calls(self) -> int:
        return sum(1 for p in self.prompts if not p.startswith("Extract"))


class FakeSynthesisProvider(SynthesisProvider):
    """Synthesis provider returning deterministic bytes and counting calls."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    async def synthesize(self, text: str, voice: str, pace: str) -> SynthesisResult:
        self.calls.append((text, voice, pace))
        if self.error is not None:
            raise self.error
        audio = f"{voice}|{pace}|{text}".encode() * 10
        return SynthesisResult(audio=audio, duration_ms=len(text) * 60)

    async def list_voices(self) -> list[dict]:
        return [{"id": "neutral", "name": "Neutral", "provider": "fake"}]


# Words longer than four letters, all distinct, so every line is diverse
POOL_WORDS = [
    "anchor", "breeze", "candle", "dawning", "ember", "feather", "garden",
    "harbor", "island", "jasmine", "kindle", "lantern", "meadow", "nectar",
    "orchard", "pebble", "quartz", "ripple", "shelter", "thistle", "umbra",
    "valley", "willow", "zephyr",
]


def make_pool_lines(
    goal: Goal, tags: list[str], count: int = 12, emotion: str | None = None
) -> list[ContentLine]:
    """Build diverse pool lines sharing the given tags."""
    return [
        ContentLine(
            text=f"My {POOL_WORDS[2 * i]} {POOL_WORDS[2 * i + 1]}",
            goal=goal,
            tags=tags,
            emotion=emotion,
            rating=float(5 - i % 5),
        )
        for i in range(count)
    ]
