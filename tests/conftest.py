"""Pytest configuration and fixtures."""

import io
import json
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from gallery.core.deps import get_blob_store, get_db
from gallery.db import models_registry  # noqa: F401 - Import to register models
from gallery.db.base import Base
from gallery.images.files import ImageFile
from gallery.main import app
from gallery.models.card import Card
from gallery.schemas.card import CardDocument
from gallery.schemas.image import ImageRecord
from gallery.storage.memory import MemoryBlobStore

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

USER_ID = "user-001"


def make_image_bytes(width: int, height: int, fmt: str = "JPEG", color=(200, 30, 30)) -> bytes:
    """Encode a solid-color image."""
    mode = "RGBA" if fmt == "PNG" else "RGB"
    if mode == "RGBA" and len(color) == 3:
        color = (*color, 255)
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_jpeg(name: str = "photo.jpg", width: int = 640, height: int = 480) -> ImageFile:
    return ImageFile(name=name, content_type="image/jpeg", data=make_image_bytes(width, height))


def make_png(name: str = "scan.png", width: int = 320, height: int = 240) -> ImageFile:
    return ImageFile(
        name=name, content_type="image/png", data=make_image_bytes(width, height, "PNG")
    )


def make_record(image_id: str, order: int = 0, is_primary: bool = False) -> ImageRecord:
    return ImageRecord(
        id=image_id,
        url=f"https://cdn.test/{image_id}.jpg",
        filename=f"{image_id}.jpg",
        size=1024,
        type="image/jpeg",
        order=order,
        is_primary=is_primary,
    )


def make_card(*image_ids: str) -> CardDocument:
    """Card document whose images are already in canonical order."""
    images = [make_record(image_id, i, i == 0) for i, image_id in enumerate(image_ids)]
    return CardDocument(
        id="card-001",
        user_id=USER_ID,
        card_name="Charizard",
        collection="Default Collection",
        images=images,
        image_count=len(images),
        primary_image_id=images[0].id if images else None,
        primary_image_url=images[0].url if images else None,
        image_url=images[0].url if images else None,
        has_image=bool(images),
    )


@pytest.fixture
def jpeg_file() -> ImageFile:
    return make_jpeg()


@pytest.fixture
def png_file() -> ImageFile:
    return make_png()


@pytest.fixture
def memory_store() -> MemoryBlobStore:
    return MemoryBlobStore("https://blobs.test")


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession, memory_store: MemoryBlobStore
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with overridden dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: memory_store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def sample_cards(db_session: AsyncSession) -> list[Card]:
    """Create sample cards: multi-image, legacy single-image and empty."""
    records = [make_record("img_a", 0, True), make_record("img_b", 1), make_record("img_c", 2)]
    cards = [
        Card(
            id="card-multi",
            user_id=USER_ID,
            card_name="Pikachu",
            collection="Default Collection",
            images=json.dumps([r.model_dump(by_alias=True) for r in records]),
            image_count=3,
            primary_image_id="img_a",
            primary_image_url=records[0].url,
            image_url=records[0].url,
            has_image=True,
        ),
        Card(
            id="card-legacy",
            user_id=USER_ID,
            card_name="Blastoise",
            collection="Vintage",
            images=None,
            image_count=0,
            image_url="https://cdn.test/legacy/blastoise.jpg",
            has_image=True,
        ),
        Card(
            id="card-empty",
            user_id=USER_ID,
            card_name="Bulbasaur",
            collection="Default Collection",
            images=None,
            image_count=0,
            has_image=False,
        ),
        Card(
            id="card-other-user",
            user_id="user-002",
            card_name="Mewtwo",
            collection="Default Collection",
            images=None,
            image_count=0,
            image_url="https://cdn.test/legacy/mewtwo.jpg",
            has_image=True,
        ),
    ]

    for card in cards:
        db_session.add(card)
    await db_session.commit()

    return cards
