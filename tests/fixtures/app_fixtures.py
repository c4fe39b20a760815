"""Settings and application fixtures for both storage modes."""
import pytest
from fastapi.testclient import TestClient

from uploads_api.config.settings import Settings
from uploads_api.main import create_app
from tests.consts import TEST_BUCKET_NAME, TEST_REGION


def make_settings(**overrides) -> Settings:
    """Settings isolated from the host environment and any .env file.

    Aliased fields are passed by their environment names so they win over
    variables set on the host.
    """
    values = {
        "AWS_IAM_USER_KEY": "",
        "AWS_IAM_USER_SECRET": "",
        "AWS_BUCKET_NAME": "",
        "AWS_DEFAULT_REGION": TEST_REGION,
        "AWS_ENDPOINT_URL": None,
        "storage_strict_config": False,
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def public_dir(tmp_path):
    return tmp_path / "public"


@pytest.fixture
def local_settings(public_dir) -> Settings:
    return make_settings(public_dir=str(public_dir))


@pytest.fixture
def s3_settings(public_dir) -> Settings:
    return make_settings(
        AWS_IAM_USER_KEY="test-access-key",
        AWS_IAM_USER_SECRET="test-secret-key",
        AWS_BUCKET_NAME=TEST_BUCKET_NAME,
        public_dir=str(public_dir),
    )


@pytest.fixture
def local_client(local_settings) -> TestClient:
    app = create_app(settings=local_settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def cloud_client(mocked_aws, s3_settings) -> TestClient:
    app = create_app(settings=s3_settings)
    with TestClient(app) as client:
        yield client
