"""Unit tests for configuration loading and validation."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from loopmatch.config import (
    DEFAULT_DATA_DIR,
    GENERATION_PROVIDERS,
    SYNTHESIS_PROVIDERS,
    EngineConfig,
    default_config_path,
    generate_config,
    load_config,
)
from loopmatch.errors import ConfigError
from loopmatch.providers import ProviderRegistry


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove env overrides so tests see file values only."""
    for name in ("LOOPMATCH_CONFIG", "LOOPMATCH_DATA_DIR", "LOOPMATCH_MODEL", "LOOPMATCH_VOICE"):
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    """Test loading configuration files."""

    def test_missing_file_gives_defaults(self, temp_dir: Path) -> None:
        """Test a missing config file yields the default configuration."""
        config = load_config(temp_dir / "missing.toml")

        assert config == EngineConfig()
        assert config.matching.exact_threshold == 0.75
        assert config.matching.pooled_threshold == 0.65
        assert config.costs.pooled == 0.10
        assert config.costs.generated == 0.21
        assert config.storage.data_dir == DEFAULT_DATA_DIR
        assert config.tts.pace == "slow"

    def test_file_values_override_defaults(self, temp_dir: Path) -> None:
        """Test values in the TOML file replace defaults."""
        path = temp_dir / "config.toml"
        path.write_text(
            "[matching]\n"
            "exact_threshold = 0.8\n"
            "min_lines = 4\n"
            "[storage]\n"
            f'data_dir = "{temp_dir / "data"}"\n'
            "[tts]\n"
            'pace = "normal"\n'
        )

        config = load_config(path)

        assert config.matching.exact_threshold == 0.8
        assert config.matching.min_lines == 4
        assert config.matching.max_lines == 10
        assert config.storage.data_dir == temp_dir / "data"
        assert config.storage.content_db == temp_dir / "data" / "content.db"
        assert config.tts.pace == "normal"

    def test_env_overrides_file(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test env vars take priority over the config file."""
        path = temp_dir / "config.toml"
        path.write_text('[generation]\nmodel = "from-file"\n[tts]\nvoice = "confident"\n')
        monkeypatch.setenv("LOOPMATCH_MODEL", "from-env")
        monkeypatch.setenv("LOOPMATCH_VOICE", "premium1")
        monkeypatch.setenv("LOOPMATCH_DATA_DIR", str(temp_dir / "envdata"))

        config = load_config(path)

        assert config.generation.model == "from-env"
        assert config.tts.voice == "premium1"
        assert config.storage.data_dir == temp_dir / "envdata"

    def test_config_path_from_env(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test LOOPMATCH_CONFIG selects the config file."""
        path = temp_dir / "custom.toml"
        path.write_text("[costs]\npooled = 0.05\n")
        monkeypatch.setenv("LOOPMATCH_CONFIG", str(path))

        assert default_config_path() == path
        assert load_config().costs.pooled == 0.05

    def test_invalid_toml_raises(self, temp_dir: Path) -> None:
        """Test malformed TOML raises ConfigError."""
        path = temp_dir / "config.toml"
        path.write_text("[matching\nexact_threshold = ")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(path)

    def test_unknown_key_raises(self, temp_dir: Path) -> None:
        """Test misspelled keys are reported instead of ignored."""
        path = temp_dir / "config.toml"
        path.write_text("[matching]\nexact_treshold = 0.8\n")

        with pytest.raises(ConfigError, match="Unknown keys in \\[matching\\]"):
            load_config(path)

    @pytest.mark.parametrize(
        "body",
        [
            "[matching]\nexact_threshold = 1.5\n",
            "[matching]\npooled_threshold = -0.1\n",
            '[matching]\nexact_threshold = "high"\n',
            "[matching]\nmin_lines = 8\nmax_lines = 6\n",
            "[costs]\ngenerated = -1.0\n",
            '[tts]\npace = "fast"\n',
            "[tts]\nspacing_ms = -1\n",
        ],
    )
    def test_invalid_values_raise(self, temp_dir: Path, body: str) -> None:
        """Test out-of-range values raise ConfigError."""
        path = temp_dir / "config.toml"
        path.write_text(body)

        with pytest.raises(ConfigError):
            load_config(path)

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ('[generation]\nprovider = "opneai"\n', "Unknown generation.provider 'opneai'"),
            ('[tts]\nprovider = "eleven"\n', "Unknown tts.provider 'eleven'"),
        ],
    )
    def test_unknown_provider_raises(self, temp_dir: Path, body: str, message: str) -> None:
        """Test a misspelled provider name is a config error, not a registry KeyError."""
        path = temp_dir / "config.toml"
        path.write_text(body)

        with pytest.raises(ConfigError, match=message):
            load_config(path)

    def test_provider_names_match_registry(self) -> None:
        """Test every accepted provider name resolves in the registry."""
        for name in GENERATION_PROVIDERS + SYNTHESIS_PROVIDERS:
            assert ProviderRegistry.get(name) is not None


class TestGenerateConfig:
    """Test writing the default config file."""

    def test_generated_file_loads_as_defaults(self, temp_dir: Path) -> None:
        """Test the commented default file round-trips to the default config."""
        path = generate_config(temp_dir / "nested" / "config.toml")

        assert path.exists()
        assert "[matching]" in path.read_text()
        assert load_config(path) == EngineConfig()
