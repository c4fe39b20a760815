import io

import pytest
from starlette.datastructures import FormData, Headers, UploadFile

from uploads_api.adapters.storage import LocalStorage, S3Storage
from uploads_api.errors import UnexpectedFieldError
from uploads_api.schemas import Category
from uploads_api.uploads import UploadService, extract_single_file
from tests.fixtures.app_fixtures import make_settings


def _file(name: str = "me.png") -> UploadFile:
    return UploadFile(file=io.BytesIO(b"data"), filename=name, headers=Headers({"content-type": "image/png"}))


def test_extract_single_file_returns_the_file():
    upload = _file()
    form = FormData([("caption", "hello"), ("avatar", upload)])

    assert extract_single_file(form, "avatar") is upload


def test_extract_single_file_without_file_returns_none():
    form = FormData([("caption", "hello")])

    assert extract_single_file(form, "avatar") is None


def test_extract_single_file_rejects_other_fields():
    form = FormData([("photo", _file())])

    with pytest.raises(UnexpectedFieldError) as exc_info:
        extract_single_file(form, "avatar")

    assert exc_info.value.field_name == "photo"
    assert exc_info.value.status_code == 400


def test_extract_single_file_rejects_a_second_file():
    form = FormData([("avatar", _file("one.png")), ("avatar", _file("two.png"))])

    with pytest.raises(UnexpectedFieldError):
        extract_single_file(form, "avatar")


def test_service_builds_one_handler_per_category(local_settings):
    service = UploadService.from_settings(local_settings)

    assert service.mode == "local"
    assert isinstance(service.storage, LocalStorage)
    assert service.avatar.category is Category.PROFILES
    assert service.post.category is Category.POSTS
    assert service.handler_for(Category.POSTS) is service.post
    assert service.avatar.storage is service.post.storage


def test_single_returns_a_named_request_step(local_settings):
    service = UploadService.from_settings(local_settings)

    step = service.avatar.single("avatar")

    assert step.__name__ == "accept_profiles_avatar"


def test_services_for_both_backends_side_by_side(mocked_aws, local_settings):
    local = UploadService.from_settings(local_settings)
    cloud = UploadService.from_settings(
        make_settings(AWS_IAM_USER_KEY="key", AWS_IAM_USER_SECRET="secret", AWS_BUCKET_NAME="bucket"),
        s3_client=mocked_aws,
    )

    assert local.mode == "local"
    assert cloud.mode == "s3"
    assert isinstance(cloud.storage, S3Storage)


async def test_service_delete_delegates_to_backend(local_settings):
    service = UploadService.from_settings(local_settings)

    result = await service.delete("http://host/public/uploads/posts/x.jpg")

    assert result.deleted is False
    assert result.error is None
