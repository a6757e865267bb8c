"""网络工具测试: URL 校验 / 文件名解析 / 下载"""

from __future__ import annotations

import io
import urllib.error

import pytest

from samurai.core.exceptions import FetchError, ValidationError
from samurai.utils import net
from samurai.utils.net import download, url_filename, validate_url_scheme


class TestValidateUrlScheme:
    def test_http_ok(self) -> None:
        validate_url_scheme("http://example.com/api")

    def test_https_ok(self) -> None:
        validate_url_scheme("https://example.com/api")

    def test_file_rejected(self) -> None:
        with pytest.raises(ValueError, match="不允许的 URL 协议"):
            validate_url_scheme("file:///etc/passwd")

    def test_empty_scheme_rejected(self) -> None:
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            validate_url_scheme("/local/path")

    def test_context_in_error(self) -> None:
        with pytest.raises(ValueError, match="archive zlib"):
            validate_url_scheme("ftp://x/zlib.tar.gz", context="archive zlib")


class TestUrlFilename:
    @pytest.mark.parametrize(("url", "name"), [
        ("https://x/releases/zlib-1.2.11.tar.gz", "zlib-1.2.11.tar.gz"),
        ("https://x/raw/json.hpp?token=abc#L1", "json.hpp"),
        ("https://x/a%20b.zip", "a b.zip"),
        ("https://x/dir/file.h/", "file.h"),
    ])
    def test_names(self, url, name) -> None:
        assert url_filename(url) == name

    def test_no_filename(self) -> None:
        with pytest.raises(ValidationError, match="无法从 URL 解析文件名"):
            url_filename("https://example.com")


class TestDownload:
    def test_writes_body(self, tmp_path, monkeypatch) -> None:
        body = b"x" * (200 * 1024)
        monkeypatch.setattr(net.urllib.request, "urlopen", lambda url, timeout: io.BytesIO(body))
        dest = download("https://x/blob.bin", tmp_path / "sub" / "blob.bin")
        assert dest.read_bytes() == body

    def test_error_removes_partial_file(self, tmp_path, monkeypatch) -> None:
        def boom(url, timeout):
            raise urllib.error.URLError("connection refused")

        monkeypatch.setattr(net.urllib.request, "urlopen", boom)
        dest = tmp_path / "blob.bin"
        dest.write_bytes(b"partial")
        with pytest.raises(FetchError, match="下载失败"):
            download("https://x/blob.bin", dest)
        assert not dest.exists()

    def test_rejects_scheme_before_network(self, tmp_path, monkeypatch) -> None:
        def never(url, timeout):
            raise AssertionError("不应发起网络请求")

        monkeypatch.setattr(net.urllib.request, "urlopen", never)
        with pytest.raises(ValidationError):
            download("file:///etc/passwd", tmp_path / "passwd")
