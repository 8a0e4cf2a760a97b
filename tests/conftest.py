import pytest

from tests.utils import MockRedis, MockS3


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture
def mock_s3():
    return MockS3()
