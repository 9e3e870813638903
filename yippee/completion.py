"""Shell completion cache built from the AUR package list and sync databases."""

from __future__ import annotations

import os
import posixpath
import shutil
import sys
import time
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any, TextIO


class CompletionError(Exception):
    """Raised when the AUR package list cannot be fetched."""


@dataclass
class _Response:
    status_code: int
    text: str


class _UrllibClient:
    def get(self, url: str) -> _Response:
        with urllib.request.urlopen(url) as resp:
            return _Response(resp.status, resp.read().decode("utf-8", "replace"))


def _client(http_client: Any) -> Any:
    return http_client if http_client is not None else _UrllibClient()


def create_aur_list(client: Any, aur_url: str, out: TextIO) -> None:
    """Write every AUR package name followed by a tab and "AUR"."""
    parts = urllib.parse.urlsplit(aur_url)
    path = posixpath.normpath(posixpath.join(parts.path, "packages.gz"))
    url = urllib.parse.urlunsplit(parts._replace(path=path))
    resp = _client(client).get(url)
    if resp.status_code != 200:
        raise CompletionError(f"invalid status code: {resp.status_code}")
    for line in resp.text.splitlines()[1:]:
        if line.startswith("#"):
            continue
        out.write(line + "\tAUR\n")


def create_repo_list(db_executor: Any, out: TextIO) -> None:
    """Write every sync package name followed by its repository."""
    for pkg in db_executor.sync_packages():
        out.write(f"{pkg.name}\t{pkg.db_name}\n")


def update(http_client, db_executor, aur_url: str, completion_path: str,
           interval: int, force: bool) -> None:
    """Refresh the completion cache when missing, stale or forced."""
    try:
        mtime = os.stat(completion_path).st_mtime
    except FileNotFoundError:
        mtime = None
    stale = mtime is not None and interval != -1 and (
        (time.time() - mtime) / 3600 >= interval * 24
    )
    if not (mtime is None or stale or force):
        return
    os.makedirs(os.path.dirname(completion_path) or ".", mode=0o755, exist_ok=True)
    aur_failed = False
    try:
        with open(completion_path, "w", encoding="utf-8") as out:
            try:
                create_aur_list(http_client, aur_url, out)
            except Exception:
                aur_failed = True
            create_repo_list(db_executor, out)
    finally:
        if aur_failed:
            try:
                os.remove(completion_path)
            except FileNotFoundError:
                pass


def show(http_client, db_executor, aur_url: str, completion_path: str,
         interval: int, force: bool) -> None:
    """Update the cache, then print it to standard output."""
    update(http_client, db_executor, aur_url, completion_path, interval, force)
    with open(completion_path, "a+", encoding="utf-8") as cache:
        cache.seek(0)
        shutil.copyfileobj(cache, sys.stdout)