"""Pytest configuration and fixtures for CLI tests."""
import json
import logging
import textwrap

import pytest


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture(autouse=True)
def isolated_project(tmp_path, monkeypatch):
    """Run every command from an empty directory without DEPDOCTOR_* variables."""
    for variable in ("DEPDOCTOR_RULE_SET", "DEPDOCTOR_STRATEGY", "DEPDOCTOR_RESOLUTION", "DEPDOCTOR_LOG_LEVEL"):
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    # commands install a handler on the runner's captured stream
    root = logging.getLogger("depdoctor")
    for handler in list(root.handlers):
        root.removeHandler(handler)


@pytest.fixture
def maven_report(tmp_path):
    """Maven verbose tree with a jackson-core conflict"""
    path = tmp_path / "tree.txt"
    path.write_text(
        textwrap.dedent(
            """\
            [INFO] com.example:app:jar:1.0.0
            [INFO] +- com.fasterxml.jackson.core:jackson-databind:jar:2.11.0:compile
            [INFO] |  \\- com.fasterxml.jackson.core:jackson-core:jar:2.11.0:compile
            [INFO] \\- com.example:legacy-client:jar:0.9.0:compile
            [INFO]    \\- (com.fasterxml.jackson.core:jackson-core:jar:2.9.0:compile - omitted for conflict with 2.11.0)
            """
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def reactor_report(tmp_path):
    """Structured edges where every reactor-core version breaks the 3.4 rule"""
    path = tmp_path / "edges.json"
    edges = [
        {"parent": "com.example:app", "child": "io.projectreactor:reactor-core:3.5.0"},
        {"parent": "com.example:app", "child": "com.example:lib:1.0"},
        {"parent": "com.example:lib", "child": "io.projectreactor:reactor-core:3.6.0"},
    ]
    path.write_text(json.dumps({"edges": edges}), encoding="utf-8")
    return path


@pytest.fixture
def reactor_rules(tmp_path):
    """Rule set without BOMs"""
    path = tmp_path / "rules.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            version: "1"
            rules:
              - artifact: io.projectreactor:reactor-core
                policy: exact-major-minor
                version: "3.4"
            """
        ),
        encoding="utf-8",
    )
    return path
