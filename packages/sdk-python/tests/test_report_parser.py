"""
Tests for tokenizing dependency-tree lines and coordinates.
"""

import pytest

from depdoctor_sdk.dependencies.parser import (
    OMITTED_CONFLICT,
    OMITTED_CYCLE,
    OMITTED_DUPLICATE,
    ArtifactKey,
    parse_coordinate,
    parse_project_header,
    parse_tree_line,
    strip_log_prefix,
)


class TestArtifactKey:
    """Tests for ArtifactKey."""

    def test_str(self):
        assert str(ArtifactKey("io.netty", "netty-handler")) == "io.netty:netty-handler"
        assert str(ArtifactKey("", "guava")) == "guava"

    def test_from_string(self):
        assert ArtifactKey.from_string("io.netty:netty-handler") == ArtifactKey("io.netty", "netty-handler")
        assert ArtifactKey.from_string(" guava ") == ArtifactKey("", "guava")


class TestParseCoordinate:
    """Tests for single coordinate tokens."""

    def test_gradle_three_parts(self):
        c = parse_coordinate("com.google.guava:guava:31.1-jre")
        assert (c.group, c.name, c.version) == ("com.google.guava", "guava", "31.1-jre")

    def test_gradle_managed_no_version(self):
        c = parse_coordinate("org.slf4j:slf4j-api")
        assert c.version is None
        assert c.key == ArtifactKey("org.slf4j", "slf4j-api")

    def test_maven_root(self):
        c = parse_coordinate("com.example:app:jar:1.0.0")
        assert c.packaging == "jar"
        assert c.version == "1.0.0"
        assert c.scope is None

    def test_maven_with_scope(self):
        c = parse_coordinate("com.fasterxml.jackson.core:jackson-core:jar:2.9.0:compile")
        assert c.version == "2.9.0"
        assert c.scope == "compile"

    def test_maven_with_classifier(self):
        c = parse_coordinate("io.netty:netty-transport-native-epoll:jar:linux-x86_64:4.1.100.Final:runtime")
        assert c.classifier == "linux-x86_64"
        assert c.version == "4.1.100.Final"
        assert c.scope == "runtime"

    def test_classifier_without_scope(self):
        c = parse_coordinate("io.netty:netty-tcnative:jar:osx-x86_64:2.0.61.Final")
        assert c.classifier == "osx-x86_64"
        assert c.version == "2.0.61.Final"

    def test_gradle_rich_version(self):
        c = parse_coordinate("com.google.guava:guava:{strictly 31.1-jre}")
        assert c.version == "31.1-jre"

    def test_name_at_version(self):
        c = parse_coordinate("Jackson-core@2.9.0")
        assert (c.group, c.name, c.version) == ("", "Jackson-core", "2.9.0")

    def test_bare_name(self):
        c = parse_coordinate("App")
        assert c.name == "App"
        assert c.version is None

    def test_str(self):
        assert str(parse_coordinate("g:a:1.0")) == "g:a:1.0"

    @pytest.mark.parametrize("token", ["", "---", "name@", ":a:1.0", "g::1.0", "a:b:c:d:e:f:g"])
    def test_not_a_coordinate(self, token):
        assert parse_coordinate(token) is None


class TestParseTreeLine:
    """Tests for tree lines."""

    def test_strip_log_prefix(self):
        assert strip_log_prefix("[INFO] +- g:a:jar:1.0:compile") == "+- g:a:jar:1.0:compile"
        assert strip_log_prefix("no prefix") == "no prefix"

    def test_maven_root_line(self):
        line = parse_tree_line("[INFO] com.example:app:jar:1.0.0")
        assert line.column == 0
        assert line.coordinate.name == "app"

    def test_maven_nested_columns(self):
        first = parse_tree_line("[INFO] +- g:a:jar:1.0:compile")
        nested = parse_tree_line("[INFO] |  \\- g:b:jar:2.0:runtime")
        assert first.column == 3
        assert nested.column == 6
        assert nested.coordinate.scope == "runtime"

    def test_maven_omitted_for_conflict(self):
        line = parse_tree_line(
            "[INFO] |  \\- (com.fasterxml.jackson.core:jackson-core:jar:2.9.0:compile"
            " - omitted for conflict with 2.11.0)"
        )
        assert line.omitted == OMITTED_CONFLICT
        assert line.coordinate.version == "2.9.0"
        assert line.selected == "2.11.0"
        assert line.requested == "2.9.0"

    def test_maven_omitted_for_duplicate(self):
        line = parse_tree_line("|  +- (g:a:jar:1.0:compile - omitted for duplicate)")
        assert line.omitted == OMITTED_DUPLICATE
        assert line.selected is None

    def test_maven_omitted_for_cycle(self):
        line = parse_tree_line("|  \\- (g:a:jar:1.0:compile - omitted for cycle)")
        assert line.omitted == OMITTED_CYCLE

    def test_maven_version_managed(self):
        line = parse_tree_line(
            "+- (io.netty:netty-codec:jar:4.1.100.Final:compile - version managed from 4.1.50.Final;"
            " omitted for duplicate)"
        )
        assert line.managed_from == "4.1.50.Final"
        assert line.requested == "4.1.50.Final"

    def test_gradle_arrow(self):
        line = parse_tree_line("+--- io.projectreactor:reactor-core:3.4.1 -> 3.5.0")
        assert line.column == 5
        assert line.coordinate.version == "3.4.1"
        assert line.selected == "3.5.0"
        assert line.requested == "3.4.1"

    def test_gradle_managed_arrow(self):
        line = parse_tree_line("\\--- org.slf4j:slf4j-api -> 1.7.36")
        assert line.coordinate.version is None
        assert line.requested == "1.7.36"

    def test_gradle_markers(self):
        repeated = parse_tree_line("|    +--- g:a:1.0 (*)")
        constraint = parse_tree_line("+--- g:a:1.0 (c)")
        unresolved = parse_tree_line("+--- g:a:1.0 (n)")
        assert repeated.repeated and not repeated.constraint
        assert constraint.constraint
        assert unresolved.unresolved

    def test_gradle_strictly(self):
        line = parse_tree_line("|    \\--- com.google.guava:guava:{strictly 31.1-jre} -> 31.1-jre")
        assert line.coordinate.version == "31.1-jre"
        assert line.selected == "31.1-jre"

    def test_gradle_project_dependency(self):
        line = parse_tree_line("+--- project :lib")
        assert line.coordinate.name == ":lib"
        assert line.coordinate.version == "unspecified"

    @pytest.mark.parametrize(
        "text",
        ["", "[INFO]", "[INFO] BUILD SUCCESS", "------------------------", "runtimeClasspath - Runtime classpath"],
    )
    def test_non_dependency_lines(self, text):
        assert parse_tree_line(text) is None

    def test_project_header(self):
        assert parse_project_header("Project ':app'") == ":app"
        assert parse_project_header("Root project 'demo'") == "demo"
        assert parse_project_header("+--- g:a:1.0") is None
