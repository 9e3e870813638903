import io
import os

import pytest

from yippee.completion import (
    CompletionError,
    create_aur_list,
    create_repo_list,
    show,
    update,
)
from yippee.db import Package

SAMPLE_PACKAGE_RESP = """
# AUR package list, generated on Fri, 24 Jul 2020 22:05:22 GMT
cytadela
bitefusion
globs-svn
ri-li
globs-benchmarks-svn
dunelegacy
lumina
eternallands-sound
"""

EXPECT_PACKAGE_COMPLETION = """cytadela\tAUR
bitefusion\tAUR
globs-svn\tAUR
ri-li\tAUR
globs-benchmarks-svn\tAUR
dunelegacy\tAUR
lumina\tAUR
eternallands-sound\tAUR
"""

URL = "https://aur.archlinux.org/packages.gz"


class FakeResponse:
    def __init__(self, status_code, text):
        self.status_code = status_code
        self.text = text


class FakeClient:
    def __init__(self, status=200, body=SAMPLE_PACKAGE_RESP, err=None):
        self.status, self.body, self.err = status, body, err
        self.urls = []

    def get(self, url):
        self.urls.append(url)
        if self.err:
            raise self.err
        return FakeResponse(self.status, self.body)


class FakeDB:
    def sync_packages(self, *names):
        return [Package(name="libzip", db_name="extra"),
                Package(name="dotnet-sdk-6.0", db_name="community")]


def test_create_aur_list():
    client = FakeClient()
    out = io.StringIO()
    create_aur_list(client, "https://aur.archlinux.org", out)
    assert client.urls == [URL]
    assert out.getvalue() == EXPECT_PACKAGE_COMPLETION


def test_create_aur_list_http_error():
    client = FakeClient(err=ConnectionError("Not available"))
    with pytest.raises(ConnectionError, match="^Not available$"):
        create_aur_list(client, "https://aur.archlinux.org", io.StringIO())
    assert client.urls == [URL]


def test_create_aur_list_status_error():
    client = FakeClient(status=503)
    with pytest.raises(CompletionError) as exc:
        create_aur_list(client, "https://aur.archlinux.org", io.StringIO())
    assert str(exc.value) == "invalid status code: 503"


def test_create_repo_list():
    out = io.StringIO()
    create_repo_list(FakeDB(), out)
    assert out.getvalue() == "libzip\textra\ndotnet-sdk-6.0\tcommunity\n"


def test_update_writes_cache(tmp_path):
    path = tmp_path / "sub" / "completion.cache"
    update(FakeClient(), FakeDB(), "https://aur.archlinux.org", str(path), 7, False)
    content = path.read_text()
    assert content.startswith(EXPECT_PACKAGE_COMPLETION)
    assert content.endswith("libzip\textra\ndotnet-sdk-6.0\tcommunity\n")


def test_update_skips_fresh_cache(tmp_path):
    path = tmp_path / "completion.cache"
    path.write_text("old\n")
    client = FakeClient()
    update(client, FakeDB(), "https://aur.archlinux.org", str(path), 7, False)
    assert path.read_text() == "old\n"
    assert client.urls == []


def test_update_removes_cache_on_aur_failure(tmp_path):
    path = tmp_path / "completion.cache"
    path.write_text("old\n")
    client = FakeClient(status=503)
    update(client, FakeDB(), "https://aur.archlinux.org", str(path), 7, True)
    assert client.urls == [URL]
    assert os.path.exists(path) is False


def test_show_prints_cache(tmp_path, capsys):
    path = tmp_path / "completion.cache"
    show(FakeClient(), FakeDB(), "https://aur.archlinux.org", str(path), -1, False)
    assert capsys.readouterr().out == path.read_text()