"""Reusable validators for wizard and dashboard input.

Provides pure validation functions (no I/O, no debouncing):
- Time of day (HH:MM)
- Email address
- Forbidden-word matching (token based, word-boundary aware)
- Social media link normalization and validation
- Training file acceptance
"""

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterable, Literal

from nonplo.exceptions import FileRejectedError


# Regex patterns
TIME_REGEX = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
TOKEN_REGEX = re.compile(r"\w+", re.UNICODE)
PROTOCOL_REGEX = re.compile(r"^https?://")


def validate_time(value: str) -> str:
    """Validate a time of day and normalize it to zero-padded HH:MM.

    Raises:
        ValueError: If the value is not a 24h time
    """
    if not isinstance(value, str):
        raise ValueError("Time must be a string")

    match = TIME_REGEX.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time '{value}' (expected HH:MM)")

    return f"{int(match.group(1)):02d}:{match.group(2)}"


def validate_email(value: str) -> str:
    """Trim and lowercase a contact email; support tickets are keyed on it."""
    email = (value or "").strip().lower()
    if not email:
        raise ValueError("E-posta adresi gerekli")
    if len(email) > 254 or not EMAIL_REGEX.match(email):
        raise ValueError(f"Geçersiz e-posta adresi: {value}")
    return email


# ── Forbidden words ──────────────────────────────────────────

def _normalize(text: str) -> str:
    # Dotted capital İ lowercases to i + combining dot in Python
    return text.replace("İ", "i").lower()


def tokenize(text: str) -> list[str]:
    """Split text into lowercase word tokens (Turkish letters included)."""
    if not text:
        return []
    return TOKEN_REGEX.findall(_normalize(text))


def find_forbidden_words(text: str, words: Iterable[str]) -> list[str]:
    """Return the denylist entries that occur in ``text`` as whole words.

    Entries spanning several words match as a contiguous token sequence,
    so "kötü kelime" matches "Çok kötü kelime" but "sik" does not match
    "klasik".
    """
    tokens = tokenize(text)
    if not tokens:
        return []

    found: list[str] = []
    for word in words:
        needle = tokenize(word)
        if not needle:
            continue
        n = len(needle)
        for i in range(len(tokens) - n + 1):
            if tokens[i:i + n] == needle:
                if word not in found:
                    found.append(word)
                break
    return found


def contains_forbidden_word(text: str, words: Iterable[str]) -> bool:
    return bool(find_forbidden_words(text, words))


NameStatus = Literal["idle", "valid", "invalid"]


def business_name_status(name: str | None, words: Iterable[str]) -> NameStatus:
    """Moderation status for the business name field.

    Names shorter than two characters are not checked yet.
    """
    name = (name or "").strip()
    if len(name) < 2:
        return "idle"
    return "invalid" if contains_forbidden_word(name, words) else "valid"


# ── Social media links ───────────────────────────────────────

@dataclass(frozen=True)
class SocialPlatform:
    key: str
    name: str
    placeholder: str
    domains: tuple[str, ...]
    prefix: str            # prepended to a bare handle
    strip_at: bool         # drop a leading @ from a bare handle
    path_regex: re.Pattern


SOCIAL_PLATFORMS: dict[str, SocialPlatform] = {
    p.key: p
    for p in (
        SocialPlatform(
            key="instagram",
            name="Instagram",
            placeholder="instagram.com/your-account",
            domains=("instagram.com",),
            prefix="instagram.com/",
            strip_at=True,
            path_regex=re.compile(r"^[A-Za-z0-9._]{1,30}$"),
        ),
        SocialPlatform(
            key="facebook",
            name="Facebook",
            placeholder="facebook.com/your-page",
            domains=("facebook.com", "fb.com"),
            prefix="facebook.com/",
            strip_at=False,
            path_regex=re.compile(r"^[A-Za-z0-9.\-]{5,50}$"),
        ),
        SocialPlatform(
            key="twitter",
            name="Twitter/X",
            placeholder="twitter.com/your-account",
            domains=("twitter.com", "x.com"),
            prefix="twitter.com/",
            strip_at=True,
            path_regex=re.compile(r"^[A-Za-z0-9_]{1,15}$"),
        ),
        SocialPlatform(
            key="tiktok",
            name="TikTok",
            placeholder="tiktok.com/@your-account",
            domains=("tiktok.com",),
            prefix="tiktok.com/@",
            strip_at=True,
            path_regex=re.compile(r"^@[A-Za-z0-9._]{2,24}$"),
        ),
        SocialPlatform(
            key="youtube",
            name="YouTube",
            placeholder="youtube.com/your-channel",
            domains=("youtube.com",),
            prefix="youtube.com/",
            strip_at=False,
            path_regex=re.compile(
                r"^(@[A-Za-z0-9._\-]{3,30}"
                r"|channel/UC[A-Za-z0-9_\-]{22}"
                r"|(c|user)/[A-Za-z0-9_\-]{1,100}"
                r"|[A-Za-z0-9_\-]{3,100})$"
            ),
        ),
        SocialPlatform(
            key="linkedin",
            name="LinkedIn",
            placeholder="linkedin.com/company/your-company",
            domains=("linkedin.com",),
            prefix="linkedin.com/company/",
            strip_at=False,
            path_regex=re.compile(r"^(company|in|school)/[A-Za-z0-9\-_%.]{2,100}$"),
        ),
    )
}

# Matched as plain substrings of the account part
SOCIAL_DENYLIST: tuple[str, ...] = (
    # reserved
    "admin",
    "moderator",
    "support",
    "undefined",
    # inappropriate
    "orospu",
    "sikeyim",
    "siktir",
    "yarrak",
    "pezevenk",
    "kahpe",
    "fahişe",
    "fuck",
    "shit",
    "bitch",
    "asshole",
    "bastard",
    "whore",
    "slut",
    "cunt",
    "pussy",
)


def format_social_url(url: str, platform: str) -> str:
    """Normalize what the user typed into ``domain/path`` form.

    Strips http(s)://. A value without a dot is treated as a bare handle and
    gets the platform domain injected.
    """
    if not url:
        return ""

    clean = PROTOCOL_REGEX.sub("", url)

    config = SOCIAL_PLATFORMS.get(platform)
    if config and "." not in clean:
        handle = clean.replace("@", "", 1) if config.strip_at else clean
        clean = f"{config.prefix}{handle}"

    return clean


@dataclass(frozen=True)
class SocialLinkCheck:
    platform: str
    value: str
    valid: bool
    code: str | None = None
    message: str | None = None


def _split_link(link: str) -> tuple[str, str]:
    link = PROTOCOL_REGEX.sub("", link.strip())
    link = link.split("?", 1)[0].split("#", 1)[0]
    host, _, path = link.partition("/")
    host = host.lower()
    for prefix in ("www.", "m.", "mobile."):
        if host.startswith(prefix):
            host = host[len(prefix):]
    return host, path.strip("/")


def validate_social_link(platform: str, value: str | None) -> SocialLinkCheck:
    """Check format, domain and account name of a social media link.

    Empty values are valid (all social fields are optional).
    """
    value = (value or "").strip()
    if not value:
        return SocialLinkCheck(platform=platform, value="", valid=True)

    config = SOCIAL_PLATFORMS.get(platform)
    if config is None:
        return SocialLinkCheck(
            platform=platform,
            value=value,
            valid=False,
            code="unknown_platform",
            message=f"Bilinmeyen platform: {platform}",
        )

    normalized = format_social_url(value, platform)
    host, path = _split_link(normalized)

    if host not in config.domains:
        return SocialLinkCheck(
            platform=platform,
            value=normalized,
            valid=False,
            code="domain",
            message=f"{config.name} adresi {config.domains[0]} ile başlamalı",
        )

    if not path or not config.path_regex.match(path):
        return SocialLinkCheck(
            platform=platform,
            value=normalized,
            valid=False,
            code="format",
            message=f"Geçersiz {config.name} kullanıcı adı",
        )

    account = _normalize(path)
    if any(bad in account for bad in SOCIAL_DENYLIST):
        return SocialLinkCheck(
            platform=platform,
            value=normalized,
            valid=False,
            code="denylist",
            message="Kullanıcı adı uygunsuz veya ayrılmış bir ifade içeriyor",
        )

    return SocialLinkCheck(platform=platform, value=normalized, valid=True)


# ── Training files ───────────────────────────────────────────

ALLOWED_FILE_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".csv": "text/csv",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".md": "text/markdown",
}


def validate_training_file(filename: str, size: int, max_bytes: int) -> str:
    """Accept or reject a training file before upload.

    Returns:
        The MIME type for the file's extension

    Raises:
        FileRejectedError: If the extension is not allowed or the file is
            empty or too large
    """
    suffix = PurePath(filename).suffix.lower()
    mime_type = ALLOWED_FILE_TYPES.get(suffix)
    if mime_type is None:
        allowed = ", ".join(ext.lstrip(".").upper() for ext in ALLOWED_FILE_TYPES)
        raise FileRejectedError(filename, f"Desteklenmeyen dosya türü (izin verilenler: {allowed})")

    if size <= 0:
        raise FileRejectedError(filename, "Dosya boş")

    if size > max_bytes:
        raise FileRejectedError(
            filename,
            f"Dosya çok büyük (en fazla {format_file_size(max_bytes)})",
        )

    return mime_type


def format_file_size(size: int) -> str:
    """Human-readable size: 0 Bytes, 512 Bytes, 1.5 KB, 10 MB."""
    if size <= 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB"]
    i = 0
    value = float(size)
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"
