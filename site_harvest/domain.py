# File: site_harvest/domain.py
"""site_harvest.domain: определение домена URL и проверка принадлежности домену."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import urlparse

__all__: Sequence[str] = ("extract_domain", "is_same_domain")


def extract_domain(url: str) -> str:
    """Возвращает hostname из URL (нижний регистр, без порта) или ``""``, если разобрать не удалось."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_same_domain(url: str, domain: str) -> bool:
    """True, если хост URL совпадает с *domain* или является его поддоменом."""
    if not domain:
        return False
    host = extract_domain(url)
    if not host:
        return False
    domain = domain.lower()
    return host == domain or host.endswith(f".{domain}")
