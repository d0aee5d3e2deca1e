"""Shared test fixtures for lanegraph: the reference histories A-D."""

import pytest

from lanegraph.graph.models import Commit, Ref, RefKind


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def _history(rows, refs):
    """rows: (hash, parents, message) newest first; refs: (name, hash)."""
    commits = [Commit(hash=h, parents=tuple(p), message=m) for h, p, m in rows]
    return commits, [Ref(name=n, hash=h, kind=RefKind.BRANCH) for n, h in refs]


@pytest.fixture
def linear_history():
    """Scenario A: c3 -> c2 -> c1 on main."""
    return _history(
        [
            ("c3", ["c2"], "third"),
            ("c2", ["c1"], "second"),
            ("c1", [], "initial"),
        ],
        [("main", "c3")],
    )


FEATURE_ROWS = [
    ("m2", ["m1", "f2"], "Merge branch 'feature'"),
    ("f2", ["f1"], "feature work 2"),
    ("f1", ["m1"], "feature work 1"),
    ("m1", [], "initial"),
]


@pytest.fixture
def merged_feature_history():
    """Scenario B: feature forked at m1 (f1 -> f2), merged into main at m2."""
    return _history(FEATURE_ROWS, [("main", "m2"), ("feature", "f2")])


@pytest.fixture
def deleted_feature_history():
    """Scenario B after the feature ref was deleted."""
    return _history(FEATURE_ROWS, [("main", "m2")])


@pytest.fixture
def open_branches_history():
    """Scenario C: a and b both forked from m1, neither merged."""
    return _history(
        [
            ("m2", ["m1"], "main work"),
            ("a1", ["m1"], "a work"),
            ("b1", ["m1"], "b work"),
            ("m1", [], "initial"),
        ],
        [("main", "m2"), ("a", "a1"), ("b", "b1")],
    )


@pytest.fixture
def sequential_merges_history():
    """Scenario D: a forked and merged at m2, then b forked at m2 and merged at m3."""
    return _history(
        [
            ("m3", ["m2", "b1"], "Merge branch 'b'"),
            ("b1", ["m2"], "b work"),
            ("m2", ["m1", "a1"], "Merge branch 'a'"),
            ("a1", ["m1"], "a work"),
            ("m1", [], "initial"),
        ],
        [("main", "m3")],
    )


@pytest.fixture
def nested_merges_history():
    """f2 forked from f1 and merged back into f1; f1 then merged into main."""
    return _history(
        [
            ("m2", ["m1", "f3"], "Merge branch 'f1'"),
            ("f3", ["f1", "g1"], "Merge branch 'f2' into f1"),
            ("g1", ["f1"], "f2 work"),
            ("f1", ["m1"], "f1 work"),
            ("m1", [], "initial"),
        ],
        [("main", "m2")],
    )
