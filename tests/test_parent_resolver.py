"""Tests for parent-chain resolution guards and caching."""

import logging

from registry.maven.models import Coordinate
from registry.maven.parent_resolver import ParentChainResolver


class TestParentChainResolver:
    """resolve_chain behavior."""

    def test_builds_chain_bottom_up(self, repo):
        repo.add("org.g", "grand", "1", "<properties><a>1</a></properties>", jar=False)
        repo.add("org.p", "parent", "2", "<properties><b>2</b></properties>",
                 parent=("org.g", "grand", "1"), jar=False)
        info = ParentChainResolver(repo).resolve_chain(Coordinate("org.p", "parent", "2"))
        assert info.coordinate == Coordinate("org.p", "parent", "2")
        assert info.parent.coordinate == Coordinate("org.g", "grand", "1")
        assert info.parent.parent is None
        assert info.all_properties()["a"] == "1"
        assert info.all_properties()["b"] == "2"

    def test_cycle_is_rejected(self, repo, caplog):
        repo.add("org.a", "a", "1", parent=("org.b", "b", "1"), jar=False)
        repo.add("org.b", "b", "1", parent=("org.a", "a", "1"), jar=False)
        with caplog.at_level(logging.WARNING):
            info = ParentChainResolver(repo).resolve_chain(Coordinate("org.a", "a", "1"))
        assert info.parent.coordinate == Coordinate("org.b", "b", "1")
        assert info.parent.parent is None
        assert "Cyclic parent manifest reference" in caplog.text

    def test_self_parent_is_rejected(self, repo):
        repo.add("org.a", "a", "1", parent=("org.a", "a", "1"), jar=False)
        info = ParentChainResolver(repo).resolve_chain(Coordinate("org.a", "a", "1"))
        assert info is not None
        assert info.parent is None

    def test_depth_guard_stops_at_max_depth(self, repo, caplog):
        # chain p0 -> p1 -> ... -> p14
        for i in range(15):
            repo.add("org.chain", f"p{i}", "1", parent=("org.chain", f"p{i + 1}", "1"), jar=False)
        resolver = ParentChainResolver(repo, max_depth=3)
        with caplog.at_level(logging.WARNING):
            info = resolver.resolve_chain(Coordinate("org.chain", "p0", "1"))
        assert info.chain_depth() == 3
        assert "exceeds maximum depth" in caplog.text
        assert "org.chain:p5:1" not in repo.manifest_requests

    def test_default_depth_limit_is_ten(self, repo):
        for i in range(20):
            repo.add("org.chain", f"p{i}", "1", parent=("org.chain", f"p{i + 1}", "1"), jar=False)
        info = ParentChainResolver(repo).resolve_chain(Coordinate("org.chain", "p0", "1"))
        assert info.chain_depth() == 10

    def test_missing_manifest_returns_none(self, repo):
        assert ParentChainResolver(repo).resolve_chain(Coordinate("no", "such", "1")) is None

    def test_unparsable_manifest_returns_none(self, repo, cache):
        coord = Coordinate("org.bad", "bad", "1")
        cache.store_manifest(coord, "<project><broken>")
        assert ParentChainResolver(repo).resolve_chain(coord) is None

    def test_cached_manifest_skips_network(self, repo, cache):
        coord = Coordinate("org.c", "cached", "1")
        cache.store_manifest(coord, "<project><properties><k>v</k></properties></project>")
        info = ParentChainResolver(repo).resolve_chain(coord)
        assert info.properties["k"] == "v"
        assert repo.manifest_requests == []

    def test_fetched_manifest_is_cached(self, repo, cache):
        repo.add("org.n", "net", "1", jar=False)
        ParentChainResolver(repo).resolve_chain(Coordinate("org.n", "net", "1"))
        assert cache.read_manifest(Coordinate("org.n", "net", "1")) is not None
