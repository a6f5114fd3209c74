import pytest

from rest_resource.config import Config
from rest_resource.resource import DecoratorDriver, ResourceMetadataFactory


@pytest.fixture
def factory():
    return ResourceMetadataFactory(DecoratorDriver())


@pytest.fixture(autouse=True)
def reset_config():
    yield
    Config._config = {}
