"""
Tests for tree.py and the TreeNode/FlatEntry interfaces.

Covers:
- TreeNode parsing and payload validation
- Locating the `src` directory
- Flattening order and path consistency
- Fetching the listing and mapping API failures
"""

import pytest

from vercel_source.download.interfaces import FlatEntry, TreeNode
from vercel_source.download.tree import (
    fetch_source_entries,
    find_source_root,
    flatten_tree,
)
from vercel_source.exceptions import (
    APIError,
    DeploymentNotFound,
    SourceNotFound,
    TransportError,
)

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]


def _node(name, children=None, uid=None):
    if children is None:
        return TreeNode(name=name, type="file", uid=uid)
    return TreeNode(name=name, type="directory", children=children)


@pytest.fixture
def deep_tree():
    return _node(
        "src",
        [
            _node("z.txt", uid="1"),
            _node(
                "lib",
                [
                    _node("util", [_node("deep.py", uid="2")]),
                    _node("a.py", uid="3"),
                ],
            ),
            _node("empty", []),
            _node("b.txt", uid="4"),
        ],
    )


class TestTreeNodeFromDict:
    def test_nested_payload(self, sample_listing):
        node = TreeNode.from_dict(sample_listing[1])

        assert node.name == "src"
        assert node.is_directory
        assert [c.name for c in node.children] == ["a.txt", "pkg"]
        assert node.children[0].uid == "u1"
        assert node.children[1].children[0].name == "b.txt"

    def test_file_children_are_dropped(self):
        node = TreeNode.from_dict(
            {"name": "a", "type": "file", "uid": "u", "children": [{"name": "x", "type": "file"}]}
        )
        assert node.children == []

    def test_other_types_are_kept(self):
        node = TreeNode.from_dict({"name": "api", "type": "lambda"})
        assert node.type == "lambda"
        assert not node.is_directory

    @pytest.mark.parametrize(
        "payload",
        [
            "src",
            {"type": "directory"},
            {"name": "src"},
            {"name": 1, "type": "file"},
            {"name": "src", "type": "directory", "children": "nope"},
            {"name": "src", "type": "directory", "children": [42]},
        ],
    )
    def test_malformed_payloads(self, payload):
        with pytest.raises(APIError):
            TreeNode.from_dict(payload)


class TestFindSourceRoot:
    def test_finds_src(self, sample_listing):
        nodes = [TreeNode.from_dict(item) for item in sample_listing]
        assert find_source_root(nodes).name == "src"

    def test_missing_src(self):
        with pytest.raises(SourceNotFound):
            find_source_root([_node("out", []), _node("public", [])])

    def test_src_file_is_not_a_source_root(self):
        with pytest.raises(SourceNotFound):
            find_source_root([_node("src", uid="x")])

    def test_nested_src_is_ignored(self):
        with pytest.raises(SourceNotFound):
            find_source_root([_node("app", [_node("src", [])])])

    def test_name_must_match_exactly(self):
        with pytest.raises(SourceNotFound):
            find_source_root([_node("SRC", []), _node("src2", [])])


class TestFlattenTree:
    def test_scenario_order(self, sample_listing):
        source = TreeNode.from_dict(sample_listing[1])

        assert list(flatten_tree(source)) == [
            FlatEntry("src/a.txt", "file", "u1"),
            FlatEntry("src/pkg", "directory", None),
            FlatEntry("src/pkg/b.txt", "file", "u2"),
        ]

    def test_root_is_not_emitted(self, deep_tree):
        names = [e.name for e in flatten_tree(deep_tree)]
        assert "src" not in names

    def test_depth_first_preorder(self, deep_tree):
        assert [e.name for e in flatten_tree(deep_tree)] == [
            "src/z.txt",
            "src/lib",
            "src/lib/util",
            "src/lib/util/deep.py",
            "src/lib/a.py",
            "src/empty",
            "src/b.txt",
        ]

    def test_paths_are_prefix_consistent(self, deep_tree):
        entries = list(flatten_tree(deep_tree))
        seen = {"src"}
        for entry in entries:
            parent, _, segment = entry.name.rpartition("/")
            assert segment
            assert parent in seen, f"{entry.name} emitted before {parent}"
            seen.add(entry.name)

    def test_sibling_order_preserved(self, deep_tree):
        entries = [e.name for e in flatten_tree(deep_tree)]
        top_level = [e for e in entries if e.count("/") == 1]
        assert top_level == ["src/z.txt", "src/lib", "src/empty", "src/b.txt"]

    def test_empty_root(self):
        assert list(flatten_tree(_node("src", []))) == []

    def test_source_nodes_are_not_mutated(self, deep_tree):
        list(flatten_tree(deep_tree))
        assert deep_tree.children[1].name == "lib"

    def test_entry_helpers(self):
        entry = FlatEntry("src/pkg/b.txt", "file", "u2")
        assert entry.segments == ("src", "pkg", "b.txt")
        assert entry.is_file and not entry.is_directory


@pytest.mark.asyncio
class TestFetchSourceEntries:
    async def test_fetch_and_flatten(self, fake_client, sample_routes):
        entries = await fetch_source_entries(fake_client, "dpl_abc123")

        assert [e.name for e in entries] == ["src/a.txt", "src/pkg", "src/pkg/b.txt"]
        fake_client.get_json.assert_awaited_once_with("/v6/deployments/dpl_abc123/files")

    async def test_team_scope_applied(self, api_routes, sample_listing, mocker):
        from vercel_source.config import Settings
        from vercel_source.download.async_client import AsyncVercelClient

        client = AsyncVercelClient(Settings(token="t", team_id="team_1"))  # noqa: S106
        client.get_json = mocker.AsyncMock(return_value=sample_listing)

        await fetch_source_entries(client, "dpl_abc123")

        client.get_json.assert_awaited_once_with(
            "/v6/deployments/dpl_abc123/files?teamId=team_1"
        )

    async def test_deployment_not_found(self, fake_client):
        with pytest.raises(DeploymentNotFound) as exc_info:
            await fetch_source_entries(fake_client, "6CR1uw9hBdpWgrMvPkncsTGRC18A")

        message = str(exc_info.value)
        assert "Deployment not found with ID: 6CR1uw9hBdpWgrMvPkncsTGRC18A" in message
        assert "deployment URL" in message

    async def test_missing_src(self, fake_client, api_routes):
        api_routes["/v6/deployments/dpl_1/files"] = [
            {"name": "out", "type": "directory", "children": []}
        ]

        with pytest.raises(SourceNotFound):
            await fetch_source_entries(fake_client, "dpl_1")

    async def test_non_list_payload(self, fake_client, api_routes):
        api_routes["/v6/deployments/dpl_1/files"] = {"files": []}

        with pytest.raises(APIError, match="expected list"):
            await fetch_source_entries(fake_client, "dpl_1")

    async def test_other_failures_propagate(self, fake_client, api_routes):
        error = TransportError("HTTP error 500", status_code=500)
        api_routes["/v6/deployments/dpl_1/files"] = error

        with pytest.raises(TransportError) as exc_info:
            await fetch_source_entries(fake_client, "dpl_1")

        assert exc_info.value is error
