"""URL scheme 校验测试"""

import pytest

from pkgstore.core.exceptions import ValidationError
from pkgstore.utils.net import url_basename, validate_url_scheme


class TestValidateUrlScheme:
    def test_http_ok(self) -> None:
        validate_url_scheme("http://example.com/pkg.tar.gz")

    def test_https_ok(self) -> None:
        validate_url_scheme("https://example.com/pkg.tar.gz")

    def test_file_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported url scheme 'file'"):
            validate_url_scheme("file:///etc/passwd")

    def test_ftp_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported url scheme"):
            validate_url_scheme("ftp://evil.com/payload")

    def test_empty_scheme_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported url scheme"):
            validate_url_scheme("/local/path")

    def test_context_in_error(self) -> None:
        with pytest.raises(ValidationError, match="download foo"):
            validate_url_scheme("file:///x", context="download foo")


class TestUrlBasename:
    @pytest.mark.parametrize("url,expected", [
        ("http://h/dist/a-1.0.tar.gz", "a-1.0.tar.gz"),
        ("http://h/dist/a.zip?token=1", "a.zip"),
        ("http://h/dist/", "dist"),
        ("http://h", ""),
    ])
    def test_basename(self, url: str, expected: str) -> None:
        assert url_basename(url) == expected
