"""Tests for the raw project.json document helpers."""

from __future__ import annotations

import json

import pytest

from projctl.domain.descriptor import (
    add_dependency,
    dependency_list,
    merge_properties,
    parse_document,
    remove_dependency,
    render_document,
    stamp,
)
from projctl.domain.errors import ParseError
from projctl.domain.types import Dependency


class TestParseDocument:
    @pytest.mark.parametrize("content", ["", None, b""])
    def test_empty_content_is_empty_object(self, content: str | bytes | None) -> None:
        assert parse_document(content) == {}

    def test_parses_object(self) -> None:
        assert parse_document('{"Version": 2}') == {"Version": 2}

    def test_malformed_json_raises_parse_error(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_document("{not json", location="/app/project.json")
        assert exc_info.value.code == "PARSE_ERROR"
        assert exc_info.value.detail["location"] == "/app/project.json"

    @pytest.mark.parametrize("content", ["[]", "42", '"text"', "null"])
    def test_non_object_raises_parse_error(self, content: str) -> None:
        with pytest.raises(ParseError):
            parse_document(content)


class TestRenderDocument:
    def test_strips_location_stamps(self) -> None:
        document = {
            "Name": "app",
            "ContentLocation": "/app/",
            "WorkspaceLocation": "/",
            "ProjectJsonLocation": "/app/project.json",
            "Version": 1,
        }
        assert json.loads(render_document(document)) == {"Name": "app", "Version": 1}

    def test_two_space_indent_and_unicode(self) -> None:
        rendered = render_document({"Owner": "Zoë"})
        assert rendered == '{\n  "Owner": "Zoë"\n}'

    def test_does_not_mutate_input(self) -> None:
        document = {"ContentLocation": "/app/"}
        render_document(document)
        assert document == {"ContentLocation": "/app/"}


class TestDependencyList:
    def test_creates_missing_list(self) -> None:
        document: dict = {}
        assert dependency_list(document) == []
        assert document == {"Dependencies": []}

    def test_rejects_non_list(self) -> None:
        with pytest.raises(ParseError):
            dependency_list({"Dependencies": {"Type": "file"}})


class TestAddDependency:
    def test_appends_new_dependency(self) -> None:
        document: dict = {"Version": 1}
        dep = Dependency(type="file", name="utils", location="lib/utils.py")
        assert add_dependency(document, dep) is True
        assert document["Dependencies"] == [
            {"Type": "file", "Name": "utils", "Location": "lib/utils.py"}
        ]
        assert document["Version"] == 1

    def test_duplicate_location_is_ignored_regardless_of_type(self) -> None:
        document = {"Dependencies": [{"Type": "file", "Location": "lib"}]}
        dep = Dependency(type="git", location="lib")
        assert add_dependency(document, dep) is False
        assert len(document["Dependencies"]) == 1

    def test_keeps_extra_dependency_fields(self) -> None:
        document: dict = {}
        dep = Dependency.model_validate({"Type": "git", "Location": "u", "Branch": "main"})
        add_dependency(document, dep)
        assert document["Dependencies"][0]["Branch"] == "main"


class TestRemoveDependency:
    def test_removes_every_match(self) -> None:
        document = {
            "Dependencies": [
                {"Type": "file", "Location": "lib"},
                {"Type": "git", "Location": "lib"},
                {"Type": "file", "Location": "lib"},
                {"Type": "file", "Location": "other"},
            ]
        }
        removed = remove_dependency(document, Dependency(type="file", location="lib"))
        assert removed == 2
        assert document["Dependencies"] == [
            {"Type": "git", "Location": "lib"},
            {"Type": "file", "Location": "other"},
        ]

    def test_type_mismatch_removes_nothing(self) -> None:
        document = {"Dependencies": [{"Type": "file", "Location": "lib"}]}
        assert remove_dependency(document, Dependency(type="git", location="lib")) == 0
        assert len(document["Dependencies"]) == 1

    def test_malformed_entries_are_kept(self) -> None:
        deps = ["lib", {"Location": "lib"}, {"Type": "file", "Location": "lib"}]
        document = {"Dependencies": deps}
        assert remove_dependency(document, Dependency(type="file", location="lib")) == 1
        assert document["Dependencies"] == ["lib", {"Location": "lib"}]


class TestMergeProperties:
    def test_shallow_merge_replaces_nested_values(self) -> None:
        document = {"Build": {"cmd": "make", "env": {"CI": "1"}}, "Version": 1}
        changed = merge_properties(document, {"Build": {"cmd": "ninja"}, "Owner": "me"})
        assert document == {"Build": {"cmd": "ninja"}, "Version": 1, "Owner": "me"}
        assert changed == ["Build", "Owner"]


class TestStamp:
    def test_folder_name_fills_missing_name(self) -> None:
        project = stamp(
            {"Version": 1},
            name="app",
            content_location="/app/",
            workspace_location="/",
            project_json_location="/app/project.json",
        )
        assert project.name == "app"
        assert project.content_location == "/app/"
        assert project.workspace_location == "/"
        assert project.project_json_location == "/app/project.json"
        assert project.model_extra == {"Version": 1}

    def test_document_name_wins(self) -> None:
        project = stamp({"Name": "Tooling"}, name="tools", content_location="/tools/")
        assert project.name == "Tooling"

    def test_stale_stamps_in_file_are_overwritten(self) -> None:
        project = stamp(
            {"ContentLocation": "/old/", "ProjectJsonLocation": "/old/project.json"},
            name="app",
            content_location="/app/",
            project_json_location="/app/project.json",
        )
        assert project.content_location == "/app/"
        assert project.project_json_location == "/app/project.json"

    def test_invalid_dependency_entry_raises_parse_error(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            stamp({"Dependencies": [{"Name": "no type"}]}, name="app", content_location="/app/")
        assert exc_info.value.detail["errors"]
