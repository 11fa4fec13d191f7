"""
CV uploads on S3 (MinIO locally, when ``s3_endpoint_url`` is set).

The browser uploads the PDF directly with a presigned POST. The API only
reads it back once, to extract the text that onboarding sends to the AI.
Every object a user owns sits under ``cv-uploads/{user_id}/`` so account
deletion is a single prefix sweep.
"""
import re
import uuid
from typing import Optional

import aioboto3

from app.core.config import settings

CV_ROOT = "cv-uploads"


def user_prefix(user_id: str) -> str:
    return f"{CV_ROOT}/{user_id}/"


def _safe_filename(name: str) -> str:
    stem = re.sub(r"\.pdf$", "", name.strip(), flags=re.IGNORECASE)
    stem = re.sub(r"[^A-Za-z0-9_-]+", "-", stem).strip("-")
    return f"{stem[:120] or 'cv'}.pdf"


def build_cv_key(user_id: str, filename: str, upload_id: Optional[str] = None) -> str:
    """``cv-uploads/{user_id}/{upload_id}/{name}.pdf``"""
    upload_id = upload_id or uuid.uuid4().hex
    return f"{user_prefix(user_id)}{upload_id}/{_safe_filename(filename)}"


def key_belongs_to_user(s3_key: str, user_id: str) -> bool:
    if ".." in s3_key or "//" in s3_key:
        return False
    return s3_key.startswith(user_prefix(user_id))


def _client():
    options = {
        "region_name": settings.s3_region,
        "aws_access_key_id": settings.s3_aws_access_key_id,
        "aws_secret_access_key": settings.s3_aws_secret_access_key,
    }
    if settings.s3_endpoint_url:
        options["endpoint_url"] = settings.s3_endpoint_url
    return aioboto3.Session().client("s3", **options)


async def generate_presign_upload(s3_key: str, max_size_bytes: int) -> dict:
    """
    Presigned POST restricted to a PDF of at most ``max_size_bytes``.

    Returns ``{"url": ..., "fields": {...}}`` for a multipart form upload.
    """
    async with _client() as s3:
        return await s3.generate_presigned_post(
            Bucket=settings.s3_bucket_name,
            Key=s3_key,
            Fields={"Content-Type": "application/pdf"},
            Conditions=[
                {"Content-Type": "application/pdf"},
                ["content-length-range", 1, max_size_bytes],
            ],
            ExpiresIn=settings.s3_presign_upload_expires,
        )


async def download_bytes(s3_key: str) -> bytes:
    async with _client() as s3:
        obj = await s3.get_object(Bucket=settings.s3_bucket_name, Key=s3_key)
        async with obj["Body"] as body:
            return await body.read()


async def delete_user_objects(user_id: str) -> int:
    """Remove every upload under the user's prefix. Returns the count."""
    removed = 0
    async with _client() as s3:
        pages = s3.get_paginator("list_objects_v2").paginate(
            Bucket=settings.s3_bucket_name, Prefix=user_prefix(user_id)
        )
        async for page in pages:
            batch = [{"Key": item["Key"]} for item in page.get("Contents", [])]
            if not batch:
                continue
            await s3.delete_objects(
                Bucket=settings.s3_bucket_name,
                Delete={"Objects": batch, "Quiet": True},
            )
            removed += len(batch)
    return removed
