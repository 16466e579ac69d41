"""Pytest configuration and fixtures for schema tests."""
import pytest


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def minimal_rule_set():
    """Minimal valid rule-set document"""
    return {
        "version": "1",
        "rules": [{"artifact": "jackson-core", "version": "2.10"}],
    }


@pytest.fixture
def full_rule_set():
    """Rule-set document using every field"""
    return {
        "version": "1",
        "rules": [
            {
                "artifact": "io.projectreactor:reactor-core",
                "policy": "exact-major-minor",
                "version": "3.4",
                "description": "Spring Boot 2.7 line",
            },
            {"artifact": "io.netty:netty-*", "policy": "range", "version": "[4.1.60,4.2)"},
        ],
        "boms": [
            {
                "coordinates": "com.fasterxml.jackson:jackson-bom",
                "version": "2.15.2",
                "covers": ["com.fasterxml.jackson.core:*"],
            },
            {"coordinates": "io.netty:netty-bom", "version": "4.1.100.Final"},
        ],
    }
