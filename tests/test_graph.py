"""Tests for the configuration and project graph builders."""

import pytest

from orbitmap.core.graph import (
    ADAPTER_ID,
    build_config_graph,
    build_project_files,
    build_project_graph,
    classify_file_type,
    compute_importance,
    file_category,
    parse_imports,
    should_skip,
    tier_for,
)
from orbitmap.core.schemas import (
    ConfigSnapshot,
    ConnectionType,
    NodeTier,
    NodeType,
    ProjectFile,
)


@pytest.fixture
def snapshot():
    return ConfigSnapshot.model_validate({
        "skills": [{"name": "pdf", "description": "PDF tools"}],
        "mcps": [{"name": "github", "enabled": False}],
        "hooks": [{"name": "fmt", "type": "PostToolUse"}],
        "model": "opus",
    })


@pytest.fixture
def sources():
    return {
        "stores/useStore.ts": "import { api } from '../services/api'\nexport const useStore = 1\n",
        "services/api.ts": "import { helper } from '@/utils/helper'\nexport const api = 1\n",
        "utils/helper.ts": "export const helper = 1\n",
        "components/ui/Button.tsx": (
            "import React from 'react'\n"
            "import { useStore } from '../../stores/useStore'\n"
            "import { helper } from '@/utils/helper'\n"
        ),
        "node_modules/lib/index.ts": "export {}\n",
        "README.md": "# readme\n",
    }


class TestConfigGraph:
    """Layered configuration graph."""

    def test_center_and_all_categories(self, snapshot):
        graph = build_config_graph(snapshot)
        types = [n.type for n in graph.nodes]
        assert types[0] == NodeType.CLAUDE
        assert types.count(NodeType.CATEGORY) == 7
        assert graph.nodes[0].description == "Model: opus"

    def test_leaves_attached_to_their_category(self, snapshot):
        graph = build_config_graph(snapshot)
        edges = {(c.source, c.target) for c in graph.connections}
        assert ("category-skills", "skill-pdf") in edges
        assert ("category-mcp", "mcp-github") in edges
        assert ("category-hooks", "hook-fmt") in edges

    def test_disabled_leaf_kept_with_low_importance(self, snapshot):
        nodes = {n.id: n for n in build_config_graph(snapshot).nodes}
        assert nodes["mcp-github"].enabled is False
        assert nodes["mcp-github"].importance == pytest.approx(0.3)
        assert nodes["skill-pdf"].importance == pytest.approx(0.7)

    def test_hook_description(self, snapshot):
        nodes = {n.id: n for n in build_config_graph(snapshot).nodes}
        assert nodes["hook-fmt"].description == "PostToolUse hook"

    def test_direct_hub_edges(self, snapshot):
        graph = build_config_graph(snapshot)
        hub_edges = [c for c in graph.connections if c.source == "center"]
        assert len(hub_edges) == 7
        assert all(c.type == ConnectionType.DEPENDENCY for c in hub_edges)

    def test_adapter_routing(self, snapshot):
        graph = build_config_graph(snapshot, include_adapter=True)
        assert ADAPTER_ID in {n.id for n in graph.nodes}
        from_center = [c for c in graph.connections if c.source == "center"]
        assert [c.target for c in from_center] == [ADAPTER_ID]
        routes = [c for c in graph.connections if c.source == ADAPTER_ID]
        assert len(routes) == 7
        assert all(c.type == ConnectionType.ROUTE for c in routes)

    def test_connection_ids_unique(self):
        snapshot = ConfigSnapshot.model_validate({"skills": [{"name": "dup"}, {"name": "dup"}]})
        graph = build_config_graph(snapshot)
        ids = [c.id for c in graph.connections]
        assert len(ids) == len(set(ids))
        assert "category-skills->skill-dup#1" in ids

    def test_empty_snapshot(self):
        graph = build_config_graph(ConfigSnapshot())
        assert len(graph.nodes) == 8
        assert len(graph.connections) == 7


class TestFileClassification:
    """Type and category inference from paths."""

    @pytest.mark.parametrize("path,expected", [
        ("app/page.tsx", NodeType.PAGE),
        ("app/api/users/route.ts", NodeType.API_ROUTE),
        ("components/scene/Orbit.tsx", NodeType.COMPONENT_SCENE),
        ("components/ui/Button.tsx", NodeType.COMPONENT_UI),
        ("services/api.ts", NodeType.SERVICE),
        ("stores/useStore.ts", NodeType.STORE),
        ("utils/math.ts", NodeType.UTIL),
        ("types/index.ts", NodeType.TYPE_DEF),
        ("main.ts", NodeType.DOCUMENT),
    ])
    def test_classify(self, path, expected):
        assert classify_file_type(path) == expected

    def test_category(self):
        assert file_category("components/ui/Button.tsx") == "components"
        assert file_category("main.ts") == "root"

    def test_skip(self):
        assert should_skip("node_modules/x/index.ts")
        assert not should_skip("src/index.ts")


class TestImports:
    """Import resolution."""

    def test_relative_alias_and_package(self):
        known = ["stores/useStore.ts", "utils/helper.ts", "components/ui/index.tsx"]
        content = (
            "import React from 'react'\n"
            "import { s } from '../../stores/useStore'\n"
            "import { h } from '@/utils/helper'\n"
            "import { b } from '../ui'\n"
        )
        imports = parse_imports(content, "components/ui/Button.tsx", known)
        assert imports == ["stores/useStore.ts", "utils/helper.ts", "components/ui/index.tsx"]

    def test_unresolved_is_dropped(self):
        assert parse_imports("import x from './missing'", "a.ts", ["a.ts"]) == []

    def test_duplicates_collapsed(self):
        content = "import a from './b'\nimport { c } from './b'\n"
        assert parse_imports(content, "a.ts", ["b.ts"]) == ["b.ts"]


class TestProjectFiles:
    """Analysis of project sources."""

    def test_filters_non_source_and_skipped(self, sources):
        ids = {f.id for f in build_project_files(sources)}
        assert ids == {
            "stores/useStore.ts",
            "services/api.ts",
            "utils/helper.ts",
            "components/ui/Button.tsx",
        }

    def test_exported_by(self, sources):
        files = {f.id: f for f in build_project_files(sources)}
        assert sorted(files["utils/helper.ts"].exported_by) == [
            "components/ui/Button.tsx",
            "services/api.ts",
        ]

    def test_importance_bounds_and_order(self, sources):
        files = {f.id: f for f in build_project_files(sources)}
        assert all(0.0 <= f.importance <= 1.0 for f in files.values())
        assert files["utils/helper.ts"].importance > files["components/ui/Button.tsx"].importance

    def test_compute_importance_formula(self):
        files = [
            ProjectFile(id="a", type=NodeType.STORE, lines=10, exported_by=["b"]),
            ProjectFile(id="b", type=NodeType.UTIL, lines=5),
        ]
        scored = {f.id: f.importance for f in compute_importance(files)}
        assert scored["a"] == pytest.approx(0.5 + 0.2 + 0.3)
        assert scored["b"] == pytest.approx(0.1 + 0.15)

    def test_compute_importance_empty(self):
        assert compute_importance([]) == []


class TestProjectGraph:
    """Nodes and import connections."""

    def test_root_and_edges(self, sources):
        graph = build_project_graph(build_project_files(sources))
        assert graph.nodes[0].id == "__root__"
        edges = {(c.source, c.target) for c in graph.connections}
        assert ("services/api.ts", "utils/helper.ts") in edges
        assert all(c.type == ConnectionType.IMPORT for c in graph.connections)

    def test_tiers(self):
        assert tier_for(0.9) == NodeTier.CORE_SKILL
        assert tier_for(0.5) == NodeTier.SKILL
        assert tier_for(0.4) == NodeTier.ITEM
