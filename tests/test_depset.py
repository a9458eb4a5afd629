from __future__ import annotations

import pytest

from flatlock import DependencySet, Dependency, LockfileFormat
from flatlock.errors import DetectionError, ParseError, TraversalError


@pytest.fixture
def npm_set(npm_v3_content) -> DependencySet:
    return DependencySet.from_string(npm_v3_content)


@pytest.fixture
def yarn_set(yarn_classic_content) -> DependencySet:
    return DependencySet.from_string(yarn_classic_content)


class TestConstruction:
    def test_direct_construction_is_rejected(self):
        with pytest.raises(TypeError, match="from_string"):
            DependencySet(object(), {}, None)

    def test_from_string_detects_format(self, npm_set):
        assert npm_set.format is LockfileFormat.NPM
        assert npm_set.can_traverse
        assert npm_set.size == len(npm_set) == 6

    def test_explicit_format(self, yarn_berry_content):
        depset = DependencySet.from_string(yarn_berry_content, format="yarn-berry")
        assert depset.format is LockfileFormat.YARN_BERRY
        assert "lodash@4.17.21" in depset

    def test_explicit_format_mismatch_is_parse_error(self, npm_v3_content):
        with pytest.raises(ParseError):
            DependencySet.from_string(npm_v3_content, format=LockfileFormat.YARN_CLASSIC)

    def test_undetectable_content(self):
        with pytest.raises(DetectionError):
            DependencySet.from_string("not a lockfile")

    def test_unknown_explicit_format(self, npm_v3_content):
        with pytest.raises(DetectionError):
            DependencySet.from_string(npm_v3_content, format="cargo")

    def test_from_path(self, tmp_path, pnpm_v6_content):
        lockfile = tmp_path / "pnpm-lock.yaml"
        lockfile.write_text(pnpm_v6_content, encoding="utf-8")

        depset = DependencySet.from_path(lockfile)
        assert depset.format is LockfileFormat.PNPM
        assert depset.has("leftpad@1.0.0")


class TestInspection:
    def test_membership_by_key_or_dependency(self, npm_set):
        assert "tslib@2.6.2" in npm_set
        assert Dependency(name="tslib", version="2.6.2") in npm_set
        assert "tslib@9.9.9" not in npm_set
        assert 42 not in npm_set

    def test_get(self, npm_set):
        assert npm_set.get("tslib@2.6.2").integrity == "sha512-tslib"
        assert npm_set.get("missing@1.0.0") is None
        sentinel = Dependency(name="x", version="1")
        assert npm_set.get("missing@1.0.0", sentinel) is sentinel

    def test_views_follow_lockfile_order(self, npm_set):
        keys = list(npm_set.keys())
        assert keys[0] == "lodash@4.17.20"
        assert [dep.key for dep in npm_set] == keys
        assert [dep.key for dep in npm_set.values()] == keys
        assert [key for key, _ in npm_set.items()] == keys
        assert [dep.key for dep in npm_set.to_list()] == keys

    def test_workspace_paths(self, all_lockfiles):
        paths = {
            name: DependencySet.from_string(content).workspace_paths()
            for name, content in all_lockfiles.items()
        }
        assert paths["npm-v3"] == ["packages/foo"]
        assert sorted(paths["pnpm-v6"]) == ["packages/bar", "packages/baz"]
        assert paths["pnpm-v9"] == []
        assert paths["pnpm-v5-inline"] == []
        assert paths["pnpm-shrinkwrap"] == []
        assert paths["yarn-berry"] == ["packages/my-lib"]
        assert paths["yarn-classic"] == []


class TestAlgebra:
    def test_union_is_left_biased(self, yarn_set, npm_set):
        combined = yarn_set | npm_set
        assert combined.format is LockfileFormat.YARN_CLASSIC
        assert combined.get("lodash@4.17.21").integrity == "sha512-lodash4"
        assert combined.size == len(set(yarn_set.keys()) | set(npm_set.keys()))
        assert not combined.can_traverse

    def test_intersection_and_difference(self, yarn_set, npm_set):
        shared = yarn_set & npm_set
        assert set(shared.keys()) == {"lodash@4.17.21"}

        only_yarn = yarn_set - npm_set
        assert "lodash@4.17.21" not in only_yarn
        assert "lodash@3.10.1" in only_yarn
        assert not shared.can_traverse and not only_yarn.can_traverse

    def test_method_names_match_operators(self, yarn_set, npm_set):
        assert yarn_set.union(npm_set) == yarn_set | npm_set
        assert yarn_set.intersection(npm_set) == yarn_set & npm_set
        assert yarn_set.difference(npm_set) == yarn_set - npm_set

    def test_subset_predicates(self, yarn_set, npm_set):
        shared = yarn_set & npm_set
        assert shared.issubset(yarn_set) and shared <= npm_set
        assert yarn_set.issuperset(shared) and npm_set >= shared
        assert not yarn_set.issubset(npm_set)

    def test_disjoint(self, yarn_set, npm_set):
        assert not yarn_set.isdisjoint(npm_set)
        assert (yarn_set - npm_set).isdisjoint(npm_set)

    def test_laws(self, yarn_set, npm_set):
        assert (yarn_set | npm_set).issuperset(yarn_set)
        assert (yarn_set & npm_set).issubset(npm_set)
        assert (yarn_set - npm_set).isdisjoint(npm_set)
        assert (yarn_set - yarn_set).size == 0

    def test_operands_are_not_mutated(self, yarn_set, npm_set):
        before = list(yarn_set.keys())
        _ = yarn_set | npm_set
        _ = yarn_set - npm_set
        assert list(yarn_set.keys()) == before

    def test_operators_reject_other_types(self, yarn_set):
        with pytest.raises(TypeError):
            _ = yarn_set | {"lodash@4.17.21"}

    def test_derived_sets_cannot_traverse(self, yarn_set, npm_set):
        with pytest.raises(TraversalError, match="cannot be traversed"):
            (yarn_set | npm_set).dependencies_of({"dependencies": {"lodash": "^4.17.21"}})

    def test_derived_sets_have_no_workspaces(self, npm_set):
        assert (npm_set | npm_set).workspace_paths() == []
