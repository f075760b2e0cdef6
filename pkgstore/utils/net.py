"""网络工具 — URL 安全校验"""

from __future__ import annotations

from urllib.parse import urlparse

from pkgstore.core.exceptions import ValidationError

_ALLOWED_SCHEMES = frozenset(("http", "https"))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"Unsupported url scheme '{parsed.scheme}'{label}, "
            f"only http/https are allowed: {url}"
        )


def url_basename(url: str) -> str:
    """URL 路径的最后一段，作为下载文件名；无法确定时返回空串"""
    return urlparse(url).path.rstrip("/").split("/")[-1]
