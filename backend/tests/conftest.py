import sys
from io import BytesIO
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture
def session_factory(tmp_path):
    """Sessionmaker bound to a throwaway SQLite file with the walks schema."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker

    from db import Base
    from repositories import models  # noqa: F401

    engine = create_engine(
        f"sqlite:///{tmp_path / 'walks.db'}", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def media_storage(tmp_path):
    from storage.file_storage import FileStorage

    return FileStorage(media_root=str(tmp_path / "media"), public_base_url="/media")


def png_bytes(color=(255, 0, 0), size=(64, 48)) -> bytes:
    from PIL import Image

    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()
