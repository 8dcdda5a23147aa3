"""
Tests for versioned and unversioned command links.
"""

import os
import threading
from pathlib import Path

import pytest

from binr.core.config.settings import BinrConfig
from binr.core.domain.versioning import parse_version
from binr.core.errors import AlreadyLinkedError, StateCorruptionError
from binr.core.execution.links import LinkManager, link_target


@pytest.fixture
def links(binr_config: BinrConfig) -> LinkManager:
    manager = LinkManager(binr_config.paths())
    manager.paths.cache_dir.mkdir(parents=True)
    return manager


def _entry(links: LinkManager, digest: str, body: bytes = b"bin") -> str:
    links.paths.cache_entry(digest).write_bytes(body)
    return digest


def _latest_target(links: LinkManager, namespace: str, command: str) -> str:
    return os.readlink(links.paths.path(namespace, command))


class TestLink:
    def test_creates_relative_links(self, links: LinkManager):
        digest = _entry(links, "aaa", b"v1")
        links.link("myapp", "mybin", "v1.0.0", digest)

        versioned = links.paths.path("myapp", "mybin", "v1.0.0")
        assert versioned.is_symlink()
        assert os.readlink(versioned) == os.path.join("..", ".cache", "aaa")
        assert versioned.read_bytes() == b"v1"
        assert _latest_target(links, "myapp", "mybin") == link_target("aaa")

    def test_second_version_in_namespace(self, links: LinkManager):
        links.link("myapp", "mybin", "v1.0.0", _entry(links, "aaa"))
        links.link("myapp", "mybin", "v1.1.0", _entry(links, "bbb"))
        assert _latest_target(links, "myapp", "mybin") == link_target("bbb")

    def test_already_linked(self, links: LinkManager):
        links.link("myapp", "mybin", "v1.0.0", _entry(links, "aaa"))
        with pytest.raises(AlreadyLinkedError):
            links.link("myapp", "mybin", "v1.0.0", _entry(links, "bbb"))
        # Versioned links are never repointed
        versioned = links.paths.path("myapp", "mybin", "v1.0.0")
        assert os.readlink(versioned) == link_target("aaa")

    def test_older_version_leaves_latest(self, links: LinkManager):
        links.link("myapp", "mybin", "v1.2.0", _entry(links, "new"))
        links.link("myapp", "mybin", "v1.0.0", _entry(links, "old"))
        assert _latest_target(links, "myapp", "mybin") == link_target("new")
        assert links.paths.path("myapp", "mybin", "v1.0.0").is_symlink()

    def test_newest_wins_any_order(self, links: LinkManager):
        for version, digest in [("v1.1.0", "b"), ("v2.0.0", "d"), ("v1.0.0", "a"), ("v1.10.0", "c")]:
            links.link("myapp", "mybin", version, _entry(links, digest))
        assert _latest_target(links, "myapp", "mybin") == link_target("d")

    def test_prerelease_does_not_displace_release(self, links: LinkManager):
        links.link("myapp", "mybin", "v1.0.0", _entry(links, "rel"))
        links.link("myapp", "mybin", "v1.0.0-rc.1", _entry(links, "rc"))
        assert _latest_target(links, "myapp", "mybin") == link_target("rel")

    def test_namespaces_independent(self, links: LinkManager):
        links.link("app1", "mybin", "v2.0.0", _entry(links, "two"))
        links.link("app2", "mybin", "v1.0.0", _entry(links, "one"))
        assert _latest_target(links, "app1", "mybin") == link_target("two")
        assert _latest_target(links, "app2", "mybin") == link_target("one")

    def test_other_commands_ignored(self, links: LinkManager):
        links.link("myapp", "other", "v9.0.0", _entry(links, "nine"))
        links.link("myapp", "mybin", "v1.0.0", _entry(links, "one"))
        assert _latest_target(links, "myapp", "mybin") == link_target("one")

    def test_no_staging_links_left(self, links: LinkManager):
        links.link("myapp", "mybin", "v1.0.0", _entry(links, "aaa"))
        links.link("myapp", "mybin", "v1.1.0", _entry(links, "bbb"))
        names = sorted(p.name for p in links.paths.namespace_dir("myapp").iterdir())
        assert names == ["mybin", "mybin-v1.0.0", "mybin-v1.1.0"]


class TestStateCorruption:
    def test_unparseable_link_named(self, links: LinkManager):
        ns_dir = links.paths.namespace_dir("myapp")
        ns_dir.mkdir(parents=True)
        (ns_dir / "mybin-garbage").symlink_to("../.cache/nothing")

        with pytest.raises(StateCorruptionError) as exc_info:
            links.link("myapp", "mybin", "v1.0.0", _entry(links, "aaa"))
        assert exc_info.value.filename == "mybin-garbage"
        assert "mybin-garbage" in str(exc_info.value)

    def test_directories_skipped(self, links: LinkManager):
        (links.paths.namespace_dir("myapp") / "mybin-notes").mkdir(parents=True)
        links.link("myapp", "mybin", "v1.0.0", _entry(links, "aaa"))
        assert _latest_target(links, "myapp", "mybin") == link_target("aaa")


class TestVersions:
    def test_empty_namespace(self, links: LinkManager):
        assert links.versions("nothing", "mybin") == []
        assert links.latest("nothing", "mybin") is None

    def test_sorted_and_latest(self, links: LinkManager):
        links.link("myapp", "mybin", "v1.2.0", _entry(links, "b"))
        links.link("myapp", "mybin", "v1.0.0", _entry(links, "a"))
        assert links.versions("myapp", "mybin") == [
            parse_version("v1.0.0"),
            parse_version("v1.2.0"),
        ]
        assert links.latest("myapp", "mybin") == parse_version("v1.2.0")


class TestConcurrentLink:
    def test_same_version_races_resolve_to_one_link(self, links: LinkManager):
        digest = _entry(links, "aaa")
        outcomes: list[str] = []

        def worker():
            try:
                links.link("myapp", "mybin", "v1.0.0", digest)
                outcomes.append("linked")
            except AlreadyLinkedError:
                outcomes.append("already")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("linked") == 1
        assert outcomes.count("already") == 7
        assert _latest_target(links, "myapp", "mybin") == link_target("aaa")

    def test_many_versions_concurrently_keep_max(self, links: LinkManager, tmp_path: Path):
        versions = [f"v1.{i}.0" for i in range(10)]
        for i in range(10):
            _entry(links, f"d{i}")

        threads = [
            threading.Thread(target=links.link, args=("myapp", "mybin", v, f"d{i}"))
            for i, v in enumerate(versions)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert _latest_target(links, "myapp", "mybin") == link_target("d9")
