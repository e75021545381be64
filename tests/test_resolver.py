"""Tests for search path resolution."""

import threading

import pytest
from unit_paths import DirectoryTier
from unit_paths import PathResolver
from unit_paths import ResolveOptions
from unit_paths import Scope
from unit_paths import SearchPathSet
from unit_paths import UnknownScopeError
from unit_paths import lookup_paths
from unit_paths import resolve
from unit_paths import resolve_candidates
from unit_paths.enumerator import enumerate_candidates

USER_ENV = {"HOME": "/home/alice", "XDG_RUNTIME_DIR": "/run/user/1000"}
ROOTS = [None, "/", "/srv/image", "/tmp/x/../y/"]


class TestResolve:
    """Test resolve function."""

    def test_returns_search_path_set(self):
        assert isinstance(resolve(Scope.SYSTEM, environ={}), SearchPathSet)

    def test_empty_environment_system(self):
        """Test default system path runs from admin override to vendor."""
        paths = resolve(Scope.SYSTEM, "/", environ={})
        assert len(paths) > 0
        assert paths[0] == "/etc/systemd/system.control"
        assert paths[1] == "/etc/systemd/system"
        assert paths[-1] == "/usr/lib/systemd/system"

    def test_matches_enumeration_without_overrides(self):
        expected = [c.path for c in enumerate_candidates(Scope.SYSTEM, environ={})]
        assert resolve(Scope.SYSTEM, environ={}).as_list() == expected

    @pytest.mark.parametrize("scope", list(Scope))
    def test_replace_override(self, scope):
        environ = {**USER_ENV, "SYSTEMD_UNIT_PATH": "/a:/b", "SYSTEMD_UNIT_PATH_EXTRA": "/x"}
        assert resolve(scope, environ=environ).as_list() == ["/a", "/b"]

    @pytest.mark.parametrize("root", ROOTS)
    def test_replace_override_ignores_root(self, root):
        environ = {"SYSTEMD_UNIT_PATH": "/a:/b"}
        assert resolve(Scope.SYSTEM, root, environ=environ).as_list() == ["/a", "/b"]

    def test_replace_override_is_normalized(self):
        environ = {"SYSTEMD_UNIT_PATH": "/a/::/b/./:/a:/c/../b"}
        assert resolve(Scope.SYSTEM, environ=environ).as_list() == ["/a", "/b"]

    def test_extra_override(self):
        environ = {"SYSTEMD_UNIT_PATH_EXTRA": "/x"}
        paths = resolve(Scope.SYSTEM, environ=environ).as_list()
        assert paths[0] == "/x"
        assert paths[1:] == resolve(Scope.SYSTEM, environ={}).as_list()

    def test_extra_override_deduplicated(self):
        environ = {"SYSTEMD_UNIT_PATH_EXTRA": "/usr/lib/systemd/system/"}
        paths = resolve(Scope.SYSTEM, environ=environ).as_list()
        assert paths[0] == "/usr/lib/systemd/system"
        assert paths.count("/usr/lib/systemd/system") == 1
        assert len(paths) == len(resolve(Scope.SYSTEM, environ={}))

    def test_extra_override_not_rerooted(self):
        environ = {"SYSTEMD_UNIT_PATH_EXTRA": "/x"}
        paths = resolve(Scope.SYSTEM, "/srv/image", environ=environ)
        assert paths[0] == "/x"
        assert paths[1] == "/srv/image/etc/systemd/system.control"

    def test_relative_override_anchored_at_cwd(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        paths = resolve(Scope.SYSTEM, environ={"SYSTEMD_UNIT_PATH": "units"})
        assert paths.as_list() == [str(tmp_path / "units")]

    @pytest.mark.parametrize("scope", list(Scope))
    @pytest.mark.parametrize("root", ROOTS)
    def test_deterministic(self, scope, root):
        assert resolve(scope, root, environ=USER_ENV) == resolve(scope, root, environ=USER_ENV)

    def test_injected_environment_isolated_from_process(self, monkeypatch):
        """Test user resolution without HOME does not follow the process HOME."""
        environ = {"XDG_RUNTIME_DIR": "/run/user/1"}

        monkeypatch.setenv("HOME", "/from/process")
        first = resolve(Scope.USER, environ=environ)
        monkeypatch.setenv("HOME", "/other/process")
        second = resolve(Scope.USER, environ=environ)

        assert first == second
        assert not any(path.startswith(("/from/process", "/other/process")) for path in first)

    @pytest.mark.parametrize("scope", list(Scope))
    @pytest.mark.parametrize("root", ROOTS)
    def test_no_duplicates(self, scope, root):
        environ = {**USER_ENV, "SYSTEMD_UNIT_PATH_EXTRA": "/etc/systemd/user:/etc/systemd/system:/x:/x/"}
        paths = resolve(scope, root, environ=environ).as_list()
        assert len(paths) == len(set(paths))

    @pytest.mark.parametrize("root", ROOTS)
    def test_admin_precedes_vendor(self, root):
        candidates = resolve_candidates(Scope.SYSTEM, root, environ={})
        tiers = [c.tier for c in candidates]
        last_admin = max(i for i, tier in enumerate(tiers) if tier is DirectoryTier.ADMINISTRATOR_OVERRIDE)
        first_vendor = min(i for i, tier in enumerate(tiers) if tier is DirectoryTier.VENDOR_SUPPLIED)
        assert last_admin < first_vendor

    @pytest.mark.parametrize("root", ROOTS)
    def test_scope_isolation(self, root):
        system = set(resolve(Scope.SYSTEM, root, environ=USER_ENV))
        user = set(resolve(Scope.USER, root, environ=USER_ENV))
        global_ = set(resolve(Scope.GLOBAL, root, environ=USER_ENV))

        assert not any("/systemd/system" in path for path in user | global_)
        assert not any("/systemd/user" in path for path in system)
        assert system.isdisjoint(user)

    def test_exclude_generated(self):
        paths = resolve(Scope.SYSTEM, environ={}, exclude_generated=True)
        assert not any("generator" in path for path in paths)

    def test_split_usr(self):
        assert resolve(Scope.SYSTEM, environ={}, split_usr=True)[-1] == "/lib/systemd/system"

    def test_unknown_scope(self):
        with pytest.raises(UnknownScopeError):
            resolve("bogus", environ={})  # type: ignore[arg-type]

    def test_unknown_scope_with_replace_override(self):
        with pytest.raises(UnknownScopeError):
            resolve("bogus", environ={"SYSTEMD_UNIT_PATH": "/a"})  # type: ignore[arg-type]

    def test_environment_not_mutated(self):
        environ = {"SYSTEMD_UNIT_PATH_EXTRA": "/x"}
        resolve(Scope.SYSTEM, environ=environ)
        assert environ == {"SYSTEMD_UNIT_PATH_EXTRA": "/x"}

    def test_concurrent_calls(self):
        expected = resolve(Scope.USER, environ=USER_ENV)
        results = []

        def worker():
            results.append(resolve(Scope.USER, environ=USER_ENV))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [expected] * 8


class TestResolveCandidates:
    """Test resolve_candidates function."""

    def test_paths_match_resolve(self):
        environ = {"SYSTEMD_UNIT_PATH_EXTRA": "/x:/etc/systemd/system"}
        candidates = resolve_candidates(Scope.SYSTEM, environ=environ)
        assert [c.path for c in candidates] == resolve(Scope.SYSTEM, environ=environ).as_list()

    def test_extra_entries_tagged(self):
        candidates = resolve_candidates(Scope.SYSTEM, environ={"SYSTEMD_UNIT_PATH_EXTRA": "/x"})
        assert candidates[0].path == "/x"
        assert candidates[0].tier is DirectoryTier.ENVIRONMENT_INJECTED

    def test_duplicate_keeps_first_tier(self):
        candidates = resolve_candidates(Scope.SYSTEM, environ={"SYSTEMD_UNIT_PATH_EXTRA": "/etc/systemd/system"})
        tiers = {c.path: c.tier for c in candidates}
        assert tiers["/etc/systemd/system"] is DirectoryTier.ENVIRONMENT_INJECTED

    def test_replace_entries_tagged(self):
        candidates = resolve_candidates(Scope.GLOBAL, environ={"SYSTEMD_UNIT_PATH": "/a:/b"})
        assert [c.tier for c in candidates] == [DirectoryTier.ENVIRONMENT_INJECTED] * 2


class TestPathResolver:
    """Test PathResolver class."""

    def test_options_applied(self):
        resolver = PathResolver({}, ResolveOptions(root_prefix="/srv/image", exclude_generated=True))
        paths = resolver.resolve(Scope.SYSTEM)
        assert paths[0] == "/srv/image/etc/systemd/system.control"
        assert not any("generator" in path for path in paths)

    def test_default_options(self):
        assert PathResolver({}).resolve(Scope.SYSTEM) == resolve(Scope.SYSTEM, environ={})

    def test_reads_process_environment_by_default(self, monkeypatch):
        monkeypatch.delenv("SYSTEMD_SYSTEM_UNIT_PATH", raising=False)
        monkeypatch.setenv("SYSTEMD_UNIT_PATH", "/from/env")
        assert PathResolver().resolve(Scope.SYSTEM).as_list() == ["/from/env"]

    def test_fresh_result_per_call(self):
        resolver = PathResolver({})
        first = resolver.resolve(Scope.SYSTEM)
        second = resolver.resolve(Scope.SYSTEM)
        assert first == second
        assert first is not second


class TestLookupPaths:
    """Test lookup_paths context manager."""

    def test_yields_resolved_paths(self):
        with lookup_paths(Scope.GLOBAL, environ={}) as paths:
            assert paths == resolve(Scope.GLOBAL, environ={})

    def test_released_on_error(self, caplog):
        caplog.set_level("DEBUG", logger="unit_paths.resolver")
        with pytest.raises(RuntimeError):
            with lookup_paths(Scope.SYSTEM, environ={}):
                raise RuntimeError("boom")
        assert "Released system search path" in caplog.text

    def test_options(self):
        with lookup_paths(Scope.SYSTEM, {}, ResolveOptions(split_usr=True)) as paths:
            assert paths[-1] == "/lib/systemd/system"
