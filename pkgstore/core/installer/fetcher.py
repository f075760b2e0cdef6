"""下载器: HTTP(S) 获取归档到下载目录

同名文件已存在即视为已下载（不访问网络），
传输失败时删除未写完的临时文件，避免被误认为缓存。
"""

from __future__ import annotations

import http.client
import logging
import os
import shutil
import urllib.error
import urllib.request
from pathlib import Path

from pkgstore.core.exceptions import DownloadError, ValidationError
from pkgstore.utils.net import url_basename, validate_url_scheme

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def download(url: str, download_dir: Path) -> tuple[Path, bool]:
    """下载 url，返回 (本地文件, 是否命中已有文件)

    Raises:
        DownloadError: 协议不支持、文件名无法确定、非 2xx 响应或传输失败
    """
    filename = url_basename(url)
    if not filename:
        raise DownloadError(f"Url <{url}> does not name a file", url)
    dest = download_dir / filename
    if dest.is_file():
        logger.debug("命中已下载文件: %s", dest)
        return dest, True

    try:
        validate_url_scheme(url, context="download")
    except ValidationError as e:
        raise DownloadError(e.message, url) from e

    part = dest.with_name(dest.name + ".part")
    logger.debug("开始下载: %s -> %s", url, dest)
    try:
        with urllib.request.urlopen(url) as resp:  # nosec B310
            status = getattr(resp, "status", 200)
            if not 200 <= status < 300:
                raise DownloadError(
                    f"Url <{url}> can not be downloaded: status {status}", url, status,
                )
            with open(part, "wb") as f:
                shutil.copyfileobj(resp, f, _CHUNK_SIZE)
        os.replace(part, dest)
    except urllib.error.HTTPError as e:
        _discard(part)
        raise DownloadError(
            f"Url <{url}> can not be downloaded: status {e.code}", url, e.code,
        ) from e
    except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
        _discard(part)
        raise DownloadError(f"Url <{url}> can not be downloaded: {e}", url) from e
    except DownloadError:
        _discard(part)
        raise
    return dest, False


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
