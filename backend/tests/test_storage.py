from __future__ import annotations
import threading
import pytest

from fitclub.services import storage


@pytest.mark.asyncio
async def test_signing_runs_off_the_event_loop(monkeypatch):
    seen = {}

    def fake_sign_get(bucket, path, ttl_seconds):
        seen["thread"] = threading.get_ident()
        return f"https://storage.test/{bucket}/{path}"

    monkeypatch.setattr(storage, "sign_get", fake_sign_get)

    url = await storage.create_signed_url("photos", "a.jpg", 60)

    assert url == "https://storage.test/photos/a.jpg"
    assert seen["thread"] != threading.get_ident()


def test_parse_endpoint():
    assert storage._parse_endpoint("https://s3.example.com") == ("s3.example.com", True)
    assert storage._parse_endpoint("http://minio:9000") == ("minio:9000", False)
