import pytest

from agritagger.app import create_app
from agritagger.domain import EditorState, Vocabulary
from agritagger.services.feature_store import FeatureStore
from agritagger.services.persistence import PersistenceAdapter
from agritagger.storage import LocalKeyValueStorage
from agritagger.surface import MemorySurface


@pytest.fixture
def vocabulary():
    return Vocabulary(
        crops=("Padi", "Jagung", "Kedelai"),
        seasons=("Musim Tanam 1", "Musim Tanam 2"),
    )


@pytest.fixture
def state():
    return EditorState(draw_color="#10b981")


@pytest.fixture
def store():
    return FeatureStore()


@pytest.fixture
def surface():
    return MemorySurface()


@pytest.fixture
def storage(tmp_path):
    return LocalKeyValueStorage(tmp_path / "storage")


@pytest.fixture
def persistence(storage):
    return PersistenceAdapter(storage, key="agritagger:features")


@pytest.fixture
def app(tmp_path):
    return create_app("testing", overrides={"STORAGE_DIR": str(tmp_path / "storage")})


@pytest.fixture
def client(app):
    return app.test_client()
