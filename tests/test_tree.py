"""Tests for the recursive repository tree walker."""

import httpx
import pytest

from repo_scout.core.clients.github import GitHubClient
from repo_scout.core.models import ContentEntry, FileEntry
from repo_scout.core.tree import list_files
from tests._fixtures.github import FakeGitHub, dir_entry, file_entry


def _sample_tree() -> dict:
    return {
        "": [file_entry("README.md"), dir_entry("src"), dir_entry("docs"), file_entry("setup.PY")],
        "src": [file_entry("src/main.py"), dir_entry("src/util"), file_entry("src/app.JS")],
        "src/util": [file_entry("src/util/helpers.py")],
        "docs": [file_entry("docs/index.md"), file_entry("docs/Guide.MD")],
    }


def _paths(files: list[FileEntry]) -> list[str]:
    return [f.path for f in files]


class TestListFiles:
    @pytest.mark.asyncio
    async def test_lists_all_files_depth_first(self):
        client = FakeGitHub(tree=_sample_tree())

        files = await list_files(client, "acme", "widgets")

        assert _paths(files) == [
            "README.md",
            "src/main.py",
            "src/util/helpers.py",
            "src/app.JS",
            "docs/index.md",
            "docs/Guide.MD",
            "setup.PY",
        ]

    @pytest.mark.asyncio
    async def test_extension_filter_is_case_insensitive(self):
        client = FakeGitHub(tree=_sample_tree())

        python_files = await list_files(client, "acme", "widgets", extensions=[".py"])
        markdown_files = await list_files(client, "acme", "widgets", extensions=[".MD"])

        assert _paths(python_files) == ["src/main.py", "src/util/helpers.py", "setup.PY"]
        assert _paths(markdown_files) == ["README.md", "docs/index.md", "docs/Guide.MD"]

    @pytest.mark.asyncio
    async def test_multiple_extensions(self):
        client = FakeGitHub(tree=_sample_tree())

        files = await list_files(client, "acme", "widgets", extensions=[".js", ".py"])

        assert {f.extension for f in files} == {".py", ".js"}
        assert len(files) == 4

    @pytest.mark.asyncio
    async def test_file_entry_fields(self):
        client = FakeGitHub(tree={"": [file_entry("Makefile", size=42), file_entry(".gitignore")]})

        files = await list_files(client, "acme", "widgets")

        assert files[0] == FileEntry(
            name="Makefile",
            path="Makefile",
            size_bytes=42,
            download_url="https://raw.example/Makefile",
            extension="",
        )
        assert files[1].extension == ""

    @pytest.mark.asyncio
    async def test_one_call_per_directory_with_ref(self):
        client = FakeGitHub(tree=_sample_tree())

        await list_files(client, "acme", "widgets", ref="develop")

        assert sorted(path for path, _ in client.content_calls) == ["", "docs", "src", "src/util"]
        assert {ref for _, ref in client.content_calls} == {"develop"}

    @pytest.mark.asyncio
    async def test_order_does_not_depend_on_completion_order(self):
        fast = FakeGitHub(tree=_sample_tree())
        slow_src = FakeGitHub(tree=_sample_tree(), delays={"src": 0.05, "src/util": 0.02})

        expected = await list_files(fast, "acme", "widgets")
        actual = await list_files(slow_src, "acme", "widgets")

        assert actual == expected

    @pytest.mark.asyncio
    async def test_repeated_walks_are_identical(self):
        client = FakeGitHub(tree=_sample_tree())

        first = await list_files(client, "acme", "widgets")
        second = await list_files(client, "acme", "widgets")

        assert first == second

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        tree = {"": [dir_entry(f"d{i}") for i in range(8)]}
        for i in range(8):
            tree[f"d{i}"] = [file_entry(f"d{i}/f.txt")]
        client = FakeGitHub(tree=tree, delays={f"d{i}": 0.01 for i in range(8)})

        files = await list_files(client, "acme", "widgets", max_concurrency=2)

        assert len(files) == 8
        assert client.max_in_flight <= 2

    @pytest.mark.asyncio
    async def test_failed_subtree_is_skipped(self):
        client = FakeGitHub(tree=_sample_tree(), failing_paths={"src"})

        files = await list_files(client, "acme", "widgets")

        assert _paths(files) == ["README.md", "docs/index.md", "docs/Guide.MD", "setup.PY"]

    @pytest.mark.asyncio
    async def test_malformed_subdirectory_listing_is_skipped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/repos/acme/widgets/contents":
                return httpx.Response(200, json=[
                    {"type": "file", "name": "a.py", "path": "a.py", "size": 10},
                    {"type": "dir", "name": "sub", "path": "sub", "size": 0},
                ])
            return httpx.Response(200, json={"message": "weird body"})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://api.github.test")
        async with http, GitHubClient(http_client=http) as client:
            files = await list_files(client, "acme", "widgets")

        assert _paths(files) == ["a.py"]

    @pytest.mark.asyncio
    async def test_missing_subtree_is_skipped(self):
        tree = _sample_tree()
        del tree["src/util"]
        client = FakeGitHub(tree=tree)

        files = await list_files(client, "acme", "widgets")

        assert "src/util/helpers.py" not in _paths(files)
        assert "src/app.JS" in _paths(files)

    @pytest.mark.asyncio
    async def test_failed_root_returns_empty(self):
        client = FakeGitHub(tree=_sample_tree(), failing_paths={""})

        assert await list_files(client, "acme", "widgets") == []

    @pytest.mark.asyncio
    async def test_starts_from_subdirectory(self):
        client = FakeGitHub(tree=_sample_tree())

        files = await list_files(client, "acme", "widgets", path="src")

        assert _paths(files) == ["src/main.py", "src/util/helpers.py", "src/app.JS"]

    @pytest.mark.asyncio
    async def test_path_pointing_at_a_file(self):
        client = FakeGitHub(tree={"README.md": file_entry("README.md")})

        files = await list_files(client, "acme", "widgets", path="README.md")

        assert _paths(files) == ["README.md"]

    @pytest.mark.asyncio
    async def test_max_depth_limits_descent(self):
        client = FakeGitHub(tree=_sample_tree())

        files = await list_files(client, "acme", "widgets", max_depth=1)

        assert "src/util/helpers.py" not in _paths(files)
        assert "src/main.py" in _paths(files)
        assert "src/util" not in [path for path, _ in client.content_calls]

    @pytest.mark.asyncio
    async def test_symlinks_and_submodules_are_ignored(self):
        client = FakeGitHub(tree={
            "": [
                ContentEntry(type="symlink", name="latest", path="latest"),
                ContentEntry(type="submodule", name="vendor", path="vendor"),
                file_entry("main.go"),
            ],
        })

        files = await list_files(client, "acme", "widgets")

        assert _paths(files) == ["main.go"]
        assert [path for path, _ in client.content_calls] == [""]
