import pytest
import yaml

from scrud_generator.emitter import InMemoryArtifactStore

from model_bags import KNOWN_TYPES, shop_bags as make_shop_bags


@pytest.fixture
def shop_bags():
    """Fresh metadata bags of the shop domain."""
    return make_shop_bags()


@pytest.fixture
def in_memory_store():
    return InMemoryArtifactStore()


@pytest.fixture
def shop_project(tmp_path, shop_bags):
    """
    A project directory holding the shop metadata and a config file.

    Returns the path of the config file; generated code goes to
    ``<tmp_path>/generated``.
    """
    models_dir = tmp_path / "models"
    models_dir.mkdir()
    with open(models_dir / "shop.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump({"models": shop_bags}, f, sort_keys=False)

    config_path = tmp_path / "scrud.yaml"
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            {
                "models": ["models"],
                "output_dir": str(tmp_path / "generated"),
                "known_types": list(KNOWN_TYPES),
            },
            f,
        )
    return config_path
