"""Pytest configuration and fixtures for loopmatch tests."""

import sys
from collections.abc import Generator
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from loopmatch.config import EngineConfig, StorageConfig
from loopmatch.store.audio import AudioCacheStore
from loopmatch.store.blob import LocalBlobStore
from loopmatch.store.content import ContentStore
from loopmatch.store.models import ContentLine, Goal, TemplateBundle


@pytest.fixture
def temp_dir() -> Generator[Path]:
    with TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def config(temp_dir: Path) -> EngineConfig:
    return EngineConfig(storage=StorageConfig(data_dir=temp_dir / "data"))


@pytest.fixture
def content_store(config: EngineConfig) -> ContentStore:
    return ContentStore(config.storage.content_db)


@pytest.fixture
def audio_store(config: EngineConfig) -> AudioCacheStore:
    return AudioCacheStore(config.storage.audio_db)


@pytest.fixture
def blobs(config: EngineConfig) -> LocalBlobStore:
    return LocalBlobStore(config.storage.blob_dir)


@pytest.fixture
def sleep_template(content_store: ContentStore) -> TemplateBundle:
    """A sleep template with six resolvable lines keyed on sleep/relax/rest."""
    lines = [
        ContentLine(text=text, goal=Goal.SLEEP, tags=["sleep"])
        for text in (
            "I am safe and ready to rest",
            "My body knows how to relax deeply",
            "I deserve peaceful and restorative sleep",
            "My mind is calm and quiet",
            "I release all tension from my day",
            "I trust my body to restore itself",
        )
    ]
    content_store.add_lines(lines)
    template = TemplateBundle(
        title="Deep Sleep",
        goal=Goal.SLEEP,
        keywords=["sleep", "relax", "rest"],
        affirmation_ids=[line.id for line in lines],
    )
    content_store.add_template(template)
    return template
