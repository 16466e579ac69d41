"""Pytest configuration and fixtures for SDK tests."""
import textwrap

import pytest

from depdoctor_sdk import RuleSet


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


MAVEN_VERBOSE_TREE = textwrap.dedent(
    """\
    [INFO] Scanning for projects...
    [INFO]
    [INFO] --- maven-dependency-plugin:3.6.0:tree (default-cli) @ app ---
    [INFO] com.example:app:jar:1.0.0
    [INFO] +- com.fasterxml.jackson.core:jackson-databind:jar:2.11.0:compile
    [INFO] |  +- com.fasterxml.jackson.core:jackson-annotations:jar:2.11.0:compile
    [INFO] |  \\- com.fasterxml.jackson.core:jackson-core:jar:2.11.0:compile
    [INFO] +- com.example:legacy-client:jar:0.9.0:compile
    [INFO] |  \\- (com.fasterxml.jackson.core:jackson-core:jar:2.9.0:compile - omitted for conflict with 2.11.0)
    [INFO] \\- io.projectreactor:reactor-core:jar:3.4.1:compile
    [INFO]    \\- org.reactivestreams:reactive-streams:jar:1.0.3:compile
    [INFO] ------------------------------------------------------------------------
    [INFO] BUILD SUCCESS
    """
)

GRADLE_TREE = textwrap.dedent(
    """\
    ------------------------------------------------------------
    Project ':app'
    ------------------------------------------------------------

    runtimeClasspath - Runtime classpath of source set 'main'.
    +--- io.projectreactor:reactor-core:3.4.1 -> 3.5.0
    |    \\--- org.reactivestreams:reactive-streams:1.0.4
    +--- com.example:reactive-lib:1.2.0
    |    +--- io.projectreactor:reactor-core:3.5.0 (*)
    |    \\--- com.google.guava:guava:{strictly 31.1-jre} -> 31.1-jre
    +--- project :lib
    |    \\--- org.slf4j:slf4j-api:1.7.30 -> 1.7.36
    \\--- org.slf4j:slf4j-api:1.7.36

    (*) - dependencies omitted (listed previously)
    """
)

STRICT_RULES = {
    "version": "1",
    "rules": [
        {"artifact": "jackson-core", "policy": "minimum", "version": "2.10"},
        {"artifact": "io.projectreactor:reactor-core", "policy": "exact-major-minor", "version": "3.4"},
    ],
}


@pytest.fixture
def maven_tree():
    """Maven dependency:tree -Dverbose output with one conflict"""
    return MAVEN_VERBOSE_TREE


@pytest.fixture
def gradle_tree():
    """Gradle dependencies output with selections and markers"""
    return GRADLE_TREE


@pytest.fixture
def rule_set():
    """Small rule set without BOMs"""
    return RuleSet.from_dict(STRICT_RULES, source="test-rules")


@pytest.fixture
def rules_file(tmp_path):
    """Rule-set YAML written to disk"""
    path = tmp_path / "rules.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            version: "1"
            rules:
              - artifact: jackson-core
                version: "2.10"
              - artifact: io.projectreactor:reactor-core
                policy: exact-major-minor
                version: "3.4"
            boms:
              - coordinates: io.projectreactor:reactor-bom
                version: "2020.0.34"
            """
        ),
        encoding="utf-8",
    )
    return path
