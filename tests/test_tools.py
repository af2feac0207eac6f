"""Tests for tool dispatch and argument validation."""

import asyncio

import pytest


@pytest.fixture
def allowed_root(tmp_path):
    root = tmp_path / "Developer"
    root.mkdir(exist_ok=True)
    return root


@pytest.fixture
def dispatcher(store, allowed_root):
    from project_coordinator.config import SecurityConfig
    from project_coordinator.protocol import ToolDispatcher
    from project_coordinator.utils.validators import SecurityValidator

    validator = SecurityValidator(SecurityConfig(allowed_paths=[str(allowed_root)], max_status_length=20))
    return ToolDispatcher(store, validator)


def _call(dispatcher, name, arguments):
    content = asyncio.run(dispatcher.call(name, arguments))
    assert len(content) == 1
    return content[0].text


def test_catalog_matches_dispatch_table(dispatcher):
    from project_coordinator.protocol import TOOL_CATALOG

    assert [tool.name for tool in TOOL_CATALOG] == dispatcher.tool_names


def test_unknown_tool(dispatcher):
    from project_coordinator.errors import UnknownToolError

    with pytest.raises(UnknownToolError):
        asyncio.run(dispatcher.call("drop_tables", {}))


def test_missing_required_argument(dispatcher):
    from project_coordinator.errors import InvalidArgumentsError

    with pytest.raises(InvalidArgumentsError) as exc_info:
        asyncio.run(dispatcher.call("search_code_patterns", {}))

    assert str(exc_info.value) == "Invalid arguments provided"
    assert "pattern" in exc_info.value.details


def test_add_project_normalizes_path(dispatcher, allowed_root):
    project_dir = allowed_root / "Foo"
    project_dir.mkdir()

    text = _call(dispatcher, "add_project", {
        "name": "  Foo ",
        "path": str(allowed_root) + "//Foo/",
        "description": "<script>alert(1)</script>Weather\x07 app",
    })
    project = asyncio.run(dispatcher.store.get_project("Foo"))

    assert "Successfully added project: Foo" in text
    assert project.path == str(project_dir)
    assert "<script" not in project.description.lower()
    assert "\x07" not in project.description
    assert project.description.endswith("Weather app")


def test_add_project_outside_allowed_paths(dispatcher, tmp_path):
    from project_coordinator.errors import ValidationError

    elsewhere = tmp_path / "Elsewhere"
    elsewhere.mkdir()

    with pytest.raises(ValidationError) as exc_info:
        _call(dispatcher, "add_project", {"name": "Foo", "path": str(elsewhere)})

    assert "Allowed directories" in str(exc_info.value)
    assert asyncio.run(dispatcher.store.project_names()) == []


@pytest.mark.parametrize("arguments,fragment", [
    ({"name": "Foo/Bar", "path": "{root}/Foo"}, "path separators"),
    ({"name": "Foo;rm", "path": "{root}/Foo"}, "invalid characters"),
    ({"name": "Foo", "path": "{root}/../etc"}, "Path traversal"),
    ({"name": "Foo", "path": "{root}/Missing"}, "does not exist"),
])
def test_add_project_rejections(dispatcher, allowed_root, arguments, fragment):
    from project_coordinator.errors import ValidationError

    arguments = {k: v.format(root=allowed_root) for k, v in arguments.items()}

    with pytest.raises(ValidationError) as exc_info:
        _call(dispatcher, "add_project", arguments)

    assert fragment in str(exc_info.value)


def test_search_rejects_injection(dispatcher):
    from project_coordinator.errors import ValidationError

    with pytest.raises(ValidationError):
        _call(dispatcher, "search_code_patterns", {"pattern": "swift; rm -rf /"})


def test_search_trims_pattern(dispatcher):
    assert _call(dispatcher, "search_code_patterns", {"pattern": "  kubernetes  "}) == \
        "No results found for pattern: kubernetes"


def test_update_status_length_limit(dispatcher, allowed_root):
    from project_coordinator.errors import ValidationError

    (allowed_root / "Foo").mkdir()
    _call(dispatcher, "add_project", {"name": "Foo", "path": str(allowed_root / "Foo")})

    with pytest.raises(ValidationError):
        _call(dispatcher, "update_project_status", {"projectName": "Foo", "status": "x" * 21})

    assert _call(dispatcher, "update_project_status", {"projectName": "Foo", "status": " Beta "}) == \
        "Successfully updated Foo"
    assert asyncio.run(dispatcher.store.get_project("Foo")).status == "Beta"


def test_validation_disabled_passes_arguments_through(store):
    from project_coordinator.protocol import ToolDispatcher

    dispatcher = ToolDispatcher(store)

    text = _call(dispatcher, "add_project", {"name": "Foo", "path": "/not/allowed/anywhere"})

    assert "Detected tech stack: Swift" in text
    assert asyncio.run(store.get_project("Foo")).path == "/not/allowed/anywhere"
