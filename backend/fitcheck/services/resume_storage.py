"""
Resume Storage Service

Loads and saves résumé bytes by locator. Locators are either local
("/uploads/resumes/...", or an absolute filesystem path) or remote
("http(s)://..." object-store URLs).
"""
import os
import re
import uuid
import logging

import aiofiles
import httpx

from ..config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

LOCAL_PREFIX = "/uploads/"


class ResumeStorageError(Exception):
    """Resume bytes could not be saved or loaded."""


def is_remote(locator: str) -> bool:
    return locator.startswith("http://") or locator.startswith("https://")


def sanitize_filename(name: str) -> str:
    safe = re.sub(r"[^\w.\-]+", "_", name or "resume.pdf")
    return re.sub(r"_+", "_", safe)


def local_path_for(locator: str) -> str:
    """Map an "/uploads/..." locator onto the configured uploads directory."""
    if locator.startswith(LOCAL_PREFIX):
        return os.path.join(settings.uploads_dir, locator[len(LOCAL_PREFIX):])
    return locator


async def save_resume_bytes(user_id: str, filename: str, content: bytes) -> str:
    """Write a résumé to local storage and return its locator."""
    resumes_dir = os.path.join(settings.uploads_dir, "resumes")
    os.makedirs(resumes_dir, exist_ok=True)

    stored_name = f"user_{sanitize_filename(user_id)}_{uuid.uuid4().hex[:12]}_{sanitize_filename(filename)}"
    local_path = os.path.join(resumes_dir, stored_name)
    try:
        async with aiofiles.open(local_path, "wb") as f:
            await f.write(content)
    except OSError as e:
        raise ResumeStorageError(f"Failed to save resume file: {e}") from e

    locator = f"{LOCAL_PREFIX}resumes/{stored_name}"
    logger.info(f"Resume saved to local storage: {locator}")
    return locator


async def load_resume_bytes(locator: str) -> bytes:
    """Fetch résumé bytes from local or remote storage."""
    if not locator:
        raise ResumeStorageError("Resume locator is empty")

    if is_remote(locator):
        try:
            async with httpx.AsyncClient(timeout=settings.storage_fetch_timeout) as client:
                response = await client.get(locator)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ResumeStorageError(f"Could not fetch resume from storage: {e}") from e
        logger.info(f"Loaded resume from remote storage: {locator}")
        return response.content

    local_path = local_path_for(locator)
    if not os.path.exists(local_path):
        raise ResumeStorageError("Resume file not found. Please upload again.")
    try:
        async with aiofiles.open(local_path, "rb") as f:
            content = await f.read()
    except OSError as e:
        raise ResumeStorageError(f"Could not read resume file: {e}") from e
    logger.info(f"Loaded resume from local storage: {local_path}")
    return content


async def delete_resume_bytes(locator: str) -> None:
    """Remove a local résumé file. Remote objects are left to the object store."""
    if not locator or is_remote(locator):
        return
    local_path = local_path_for(locator)
    try:
        os.remove(local_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not delete resume file {local_path}: {e}")
