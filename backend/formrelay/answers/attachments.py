from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

from formrelay.answers.urls import DEFAULT_FORM_HOST


FILE_EXTENSIONS = {
    "jpg",
    "jpeg",
    "png",
    "gif",
    "webp",
    "bmp",
    "tif",
    "tiff",
    "heic",
    "svg",
    "pdf",
    "doc",
    "docx",
    "xls",
    "xlsx",
    "csv",
    "txt",
    "zip",
}

FILE_EXTENSION_PATTERN = re.compile(
    r"\.(?:" + "|".join(sorted(FILE_EXTENSIONS)) + r")$",
    flags=re.IGNORECASE,
)
REPORT_ENDPOINT_PATTERN = re.compile(r"^/api/report(?:/|$)", flags=re.IGNORECASE)
UPLOAD_INTAKE_PATTERN = re.compile(r"^/uploads?/?$", flags=re.IGNORECASE)
HOSTED_FILE_SEGMENT = "/jufs/"
# Used when urlsplit rejects the input (e.g. an unbalanced IPv6 bracket).
FALLBACK_URL_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://([^/?#]*)([^?#]*)")


def _split_host_and_path(url: str) -> tuple[str, str]:
    try:
        parts = urlsplit(url)
        host = parts.hostname or ""
    except ValueError:
        match = FALLBACK_URL_PATTERN.match(url)
        if match is None:
            return "", ""
        netloc, path = match.groups()
        host = netloc.rsplit("@", 1)[-1].split(":", 1)[0].strip("[]").lower()
        return host, path
    return host.lower(), parts.path


def _in_form_host_family(host: str, form_host: str) -> bool:
    form_host = form_host.lower()
    return host == form_host or host.endswith(f".{form_host}")


def has_file_extension(path: str) -> bool:
    return FILE_EXTENSION_PATTERN.search(path) is not None


def is_hosted_file(url: str, form_host: str = DEFAULT_FORM_HOST) -> bool:
    host, path = _split_host_and_path(url)
    if not _in_form_host_family(host, form_host):
        return False
    decoded = unquote(path)
    return HOSTED_FILE_SEGMENT in decoded and has_file_extension(decoded)


def is_file_attachment(url: str, form_host: str = DEFAULT_FORM_HOST) -> bool:
    """Return True when `url` points at a delivered file rather than a page.

    The service's own report endpoint and bare upload-intake URLs are always
    rejected. Everything else needs a recognized document, image or archive
    extension at the end of its path.
    """
    host, path = _split_host_and_path(url)
    if not host and not path:
        return False
    if REPORT_ENDPOINT_PATTERN.search(path):
        return False
    if UPLOAD_INTAKE_PATTERN.fullmatch(path):
        return False
    if has_file_extension(path):
        return True
    return is_hosted_file(url, form_host)
