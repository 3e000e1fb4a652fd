import re
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from videohost.core.errors import UploadError
from videohost.storage.object_store import S3ObjectStore, generate_object_key

_HEX32 = r"[0-9a-f]{32}"


@pytest.mark.parametrize(
    "filename,pattern",
    [
        ("clip.MP4", rf"^{_HEX32}\.mp4$"),
        ("archive.tar.gz", rf"^{_HEX32}\.gz$"),
        ("noextension", rf"^{_HEX32}$"),
        (None, rf"^{_HEX32}$"),
        ("../../etc/passwd", rf"^{_HEX32}$"),
        ("evil.mp4/../../x", rf"^{_HEX32}$"),
    ],
)
def test_generate_object_key(filename, pattern):
    assert re.match(pattern, generate_object_key(filename))


def test_keys_do_not_collide():
    assert len({generate_object_key("a.mp4") for _ in range(200)}) == 200


async def test_upload_puts_public_object():
    client = MagicMock()
    store = S3ObjectStore(client, "media", region="eu-west-1")

    url = await store.upload(b"abc", "video/mp4", "clip.mp4")

    params = client.put_object.call_args.kwargs
    assert params["Bucket"] == "media"
    assert params["Body"] == b"abc"
    assert params["ContentLength"] == 3
    assert params["ContentType"] == "video/mp4"
    assert params["ACL"] == "public-read"
    assert url == f"https://media.s3.eu-west-1.amazonaws.com/{params['Key']}"


@pytest.mark.parametrize(
    "kwargs,prefix",
    [
        ({"endpoint_url": "http://minio:9000"}, "http://minio:9000/media/"),
        ({"public_base_url": "https://cdn.example.com/"}, "https://cdn.example.com/"),
    ],
)
async def test_public_url_variants(kwargs, prefix):
    store = S3ObjectStore(MagicMock(), "media", **kwargs)
    url = await store.upload(b"abc", None, "a.png")
    assert url.startswith(prefix)
    assert url.endswith(".png")


async def test_acl_can_be_disabled():
    client = MagicMock()
    store = S3ObjectStore(client, "media", acl=None)
    await store.upload(b"abc", None, None)
    assert "ACL" not in client.put_object.call_args.kwargs
    assert client.put_object.call_args.kwargs["ContentType"] == "application/octet-stream"


@pytest.mark.parametrize(
    "error",
    [
        ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"),
        EndpointConnectionError(endpoint_url="http://minio:9000"),
    ],
)
async def test_upload_failure_raises_upload_error(error):
    client = MagicMock()
    client.put_object.side_effect = error
    store = S3ObjectStore(client, "media")

    with pytest.raises(UploadError):
        await store.upload(b"abc", "video/mp4", "clip.mp4")
