import io

from starlette.datastructures import Headers, UploadFile
from starlette.requests import Request


def make_upload(content: bytes, filename: str = "me.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def make_request(host: str = "example.com:8080", scheme: str = "http") -> Request:
    return Request({
        "type": "http",
        "scheme": scheme,
        "method": "POST",
        "path": "/v1/uploads/avatar",
        "query_string": b"",
        "server": ("internal", 8000),
        "headers": [(b"host", host.encode())],
    })
