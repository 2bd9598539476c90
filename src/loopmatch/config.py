"""Configuration management for loopmatch.

Loads configuration from ~/.config/loopmatch/config.toml (or the path in
LOOPMATCH_CONFIG). Priority chain: env vars > config file > defaults.

There is no process-wide cached config: callers own the EngineConfig they
load and pass it to the components that need it.
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

CONFIG_DIR = Path.home() / ".config" / "loopmatch"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "loopmatch"

# Names registered in ProviderRegistry
GENERATION_PROVIDERS = ("openai",)
SYNTHESIS_PROVIDERS = ("elevenlabs",)

DEFAULT_CONFIG = """\
# loopmatch configuration

[matching]
# Template similarity must exceed this for an exact match
exact_threshold = 0.75

# Theme coverage required to assemble a session from the pool
pooled_threshold = 0.65

# Templates below this keyword similarity are never considered
exact_min_similarity = 0.5

template_candidates = 5
pool_candidates = 30
min_lines = 6
max_lines = 10

# New users always get freshly generated content
always_generate_first = true

[costs]
# Price per request in USD; exact and fallback are free
pooled = 0.10
generated = 0.21

[generation]
provider = "openai"
model = "gpt-4o-mini"
temperature = 0.8
max_tokens = 300
theme_temperature = 0.3
theme_max_tokens = 50
timeout_seconds = 30.0

[storage]
# data_dir = "~/.local/share/loopmatch"
audio_bucket = "affirmations"

[tts]
provider = "elevenlabs"
voice = "neutral"
pace = "slow"

# Silence between lines in a whole-session render
spacing_ms = 8000

# API keys are read from environment variables, not this file:
#   OPENAI_API_KEY      - generation provider
#   ELEVENLABS_API_KEY  - synthesis provider
"""


@dataclass(frozen=True)
class MatchingConfig:
    """Tier thresholds and pool sizes."""

    exact_threshold: float = 0.75
    pooled_threshold: float = 0.65
    exact_min_similarity: float = 0.5
    template_candidates: int = 5
    pool_candidates: int = 30
    min_lines: int = 6
    max_lines: int = 10
    always_generate_first: bool = True


@dataclass(frozen=True)
class CostConfig:
    """Per-request price of the paid tiers."""

    pooled: float = 0.10
    generated: float = 0.21


@dataclass(frozen=True)
class GenerationConfig:
    """Text-generation provider configuration."""

    provider: str = "openai"
    model: str = "gpt-4o-mini"
    temperature: float = 0.8
    max_tokens: int = 300
    theme_temperature: float = 0.3
    theme_max_tokens: int = 50
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class StorageConfig:
    """Locations of the databases and audio blobs."""

    data_dir: Path = DEFAULT_DATA_DIR
    audio_bucket: str = "affirmations"

    @property
    def content_db(self) -> Path:
        return self.data_dir / "content.db"

    @property
    def audio_db(self) -> Path:
        return self.data_dir / "audio_cache.db"

    @property
    def blob_dir(self) -> Path:
        return self.data_dir / "blobs"


@dataclass(frozen=True)
class TTSConfig:
    """Speech-synthesis provider configuration."""

    provider: str = "elevenlabs"
    voice: str = "neutral"
    pace: str = "slow"
    spacing_ms: int = 8000


@dataclass(frozen=True)
class EngineConfig:
    """Top-level loopmatch configuration."""

    matching: MatchingConfig = field(default_factory=MatchingConfig)
    costs: CostConfig = field(default_factory=CostConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    tts: TTSConfig = field(default_factory=TTSConfig)


def default_config_path() -> Path:
    return Path(os.getenv("LOOPMATCH_CONFIG", str(CONFIG_PATH)))


def generate_config(path: Path | None = None) -> Path:
    """Write the commented default config file."""
    path = path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _section(data: dict, name: str, cls: type) -> object:
    values = data.get(name, {})
    if not isinstance(values, dict):
        raise ConfigError(f"[{name}] must be a table")
    known = set(cls.__dataclass_fields__)
    unknown = set(values) - known
    if unknown:
        raise ConfigError(
            f"Unknown keys in [{name}]: {', '.join(sorted(unknown))}"
        )
    try:
        return cls(**values)
    except TypeError as e:
        raise ConfigError(f"Invalid [{name}] section: {e}", e) from e


def _validate(config: EngineConfig) -> None:
    m = config.matching
    for name in ("exact_threshold", "pooled_threshold", "exact_min_similarity"):
        value = getattr(m, name)
        if not isinstance(value, int | float) or not 0.0 <= value <= 1.0:
            raise ConfigError(f"matching.{name} must be between 0.0 and 1.0, got {value}")
    if m.min_lines < 1 or m.max_lines < m.min_lines:
        raise ConfigError(
            f"matching.min_lines/max_lines invalid: {m.min_lines}/{m.max_lines}"
        )
    if m.template_candidates < 1 or m.pool_candidates < m.min_lines:
        raise ConfigError("matching candidate limits are too small")
    if config.costs.pooled < 0 or config.costs.generated < 0:
        raise ConfigError("costs must not be negative")
    if config.tts.pace not in ("slow", "normal"):
        raise ConfigError(f"tts.pace must be 'slow' or 'normal', got {config.tts.pace!r}")
    if config.tts.spacing_ms < 0:
        raise ConfigError(f"tts.spacing_ms must not be negative, got {config.tts.spacing_ms}")
    if config.generation.provider not in GENERATION_PROVIDERS:
        raise ConfigError(
            f"Unknown generation.provider {config.generation.provider!r}. "
            f"Available: {', '.join(GENERATION_PROVIDERS)}"
        )
    if config.tts.provider not in SYNTHESIS_PROVIDERS:
        raise ConfigError(
            f"Unknown tts.provider {config.tts.provider!r}. "
            f"Available: {', '.join(SYNTHESIS_PROVIDERS)}"
        )


def load_config(path: Path | None = None) -> EngineConfig:
    """Load configuration from a TOML file with env var overrides.

    A missing file yields the defaults.

    Args:
        path: Config file (defaults to LOOPMATCH_CONFIG or ~/.config/loopmatch)

    Returns:
        Loaded and validated EngineConfig.

    Raises:
        ConfigError: If the file is malformed or holds invalid values.
    """
    path = path or default_config_path()

    data: dict = {}
    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}", e) from e

    storage = dict(data.get("storage", {}))
    if "data_dir" in storage:
        storage["data_dir"] = Path(storage["data_dir"]).expanduser()
    generation = dict(data.get("generation", {}))
    tts = dict(data.get("tts", {}))

    # Env vars override config file values
    if os.getenv("LOOPMATCH_DATA_DIR"):
        storage["data_dir"] = Path(os.environ["LOOPMATCH_DATA_DIR"]).expanduser()
    if os.getenv("LOOPMATCH_MODEL"):
        generation["model"] = os.environ["LOOPMATCH_MODEL"]
    if os.getenv("LOOPMATCH_VOICE"):
        tts["voice"] = os.environ["LOOPMATCH_VOICE"]

    config = EngineConfig(
        matching=_section(data, "matching", MatchingConfig),
        costs=_section(data, "costs", CostConfig),
        generation=_section({"generation": generation}, "generation", GenerationConfig),
        storage=_section({"storage": storage}, "storage", StorageConfig),
        tts=_section({"tts": tts}, "tts", TTSConfig),
    )
    _validate(config)
    return config
