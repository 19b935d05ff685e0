from __future__ import annotations
import pytest

from fitclub.config import settings


@pytest.mark.asyncio
async def test_redirects_to_signed_url_and_caches(client, signer):
    bucket = settings.s3_bucket_uploads
    signer.objects.add((bucket, "posts/u/a.jpg"))

    first = await client.get(f"/i/signed/{bucket}/posts/u/a.jpg")
    second = await client.get(f"/i/signed/{bucket}/posts/u/a.jpg")

    assert first.status_code == 307
    assert first.headers["location"].startswith(f"https://storage.test/{bucket}/posts/u/a.jpg")
    assert first.headers["cache-control"] == "no-store"
    assert (first.headers["x-cache"], second.headers["x-cache"]) == ("miss", "hit")
    assert len(signer.calls) == 1


@pytest.mark.asyncio
async def test_card_photo_falls_back_to_legacy_bucket(client, signer):
    signer.objects.add((settings.s3_bucket_legacy_photos, "old/p.jpg"))
    r = await client.get(f"/i/signed/{settings.s3_bucket_card_photos}/old/p.jpg")
    assert r.status_code == 307
    assert settings.s3_bucket_legacy_photos in r.headers["location"]


@pytest.mark.asyncio
async def test_card_photo_hint_does_not_leak_into_uploads(client, signer):
    path = "cards/u/a.jpg"
    signer.objects.add((settings.s3_bucket_card_photos, path))
    signer.objects.add((settings.s3_bucket_uploads, path))
    assert (await client.get(f"/i/signed/{settings.s3_bucket_card_photos}/{path}")).status_code == 307

    r = await client.get(f"/i/signed/{settings.s3_bucket_uploads}/{path}")

    assert r.status_code == 307
    assert r.headers["location"].startswith(f"https://storage.test/{settings.s3_bucket_uploads}/")


@pytest.mark.asyncio
async def test_unknown_bucket_is_404(client, signer):
    r = await client.get("/i/signed/private-stuff/a.jpg")
    assert r.status_code == 404
    assert signer.calls == []


@pytest.mark.asyncio
async def test_missing_object_is_404(client):
    r = await client.get(f"/i/signed/{settings.s3_bucket_uploads}/nope.jpg")
    assert r.status_code == 404
