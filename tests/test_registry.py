"""Tests for the node type registry and styling."""

import pytest

from orbitmap.core.registry import (
    CATEGORIES,
    DISABLED_COLOR,
    FILE_TYPE_ICONS,
    LAYER_COLORS,
    LAYER_SIZES,
    PROJECT_TYPES,
    SEMANTIC_COLORS,
    category_for,
    color_for_name,
    color_for_type,
    connection_color,
    connection_style,
    full_color_scheme,
    layer_for,
    role_for,
    style_node,
    style_nodes,
)
from orbitmap.core.schemas import (
    ConnectionKind,
    Node,
    NodeLayer,
    NodeRole,
    NodeType,
    ShapeType,
)


class TestLayersAndRoles:
    """Every node type maps to exactly one layer and role."""

    @pytest.mark.parametrize("node_type,layer", [
        (NodeType.CLAUDE, NodeLayer.CENTER),
        (NodeType.ADAPTER, NodeLayer.CORE),
        (NodeType.CATEGORY, NodeLayer.TOOL),
        (NodeType.SKILL, NodeLayer.RESOURCE),
        (NodeType.MEMORY, NodeLayer.RESOURCE),
        (NodeType.SERVICE, NodeLayer.RESOURCE),
        (NodeType.FOLDER, NodeLayer.RESOURCE),
    ])
    def test_layer_for(self, node_type, layer):
        assert layer_for(node_type) == layer

    def test_every_type_has_layer_and_role(self):
        for node_type in NodeType:
            assert isinstance(layer_for(node_type), NodeLayer)
            assert isinstance(role_for(node_type), NodeRole)

    def test_project_types_are_documents(self):
        for node_type in PROJECT_TYPES:
            assert role_for(node_type) == NodeRole.DOCUMENT

    def test_config_leaf_roles_match_type(self):
        assert role_for(NodeType.HOOK) == NodeRole.HOOK
        assert role_for(NodeType.AGENT) == NodeRole.AGENT


class TestCategories:
    """Category hubs and leaf ownership."""

    def test_seven_categories_in_fixed_order(self):
        assert [c.id for c in CATEGORIES] == [
            "category-skills",
            "category-mcp",
            "category-plugins",
            "category-rules",
            "category-agents",
            "category-memory",
            "category-hooks",
        ]

    def test_category_for_leaf(self):
        assert category_for(NodeType.SKILL) == "category-skills"
        assert category_for(NodeType.HOOK) == "category-hooks"

    def test_category_for_non_leaf_is_none(self):
        assert category_for(NodeType.CLAUDE) is None
        assert category_for(NodeType.CATEGORY) is None
        assert category_for(NodeType.PAGE) is None


class TestColors:
    """Semantic color lookup."""

    def test_exact_type_match(self):
        assert color_for_type("mcp") == SEMANTIC_COLORS["mcp"]
        assert color_for_type("MCP") == SEMANTIC_COLORS["mcp"]

    def test_keyword_match(self):
        assert color_for_type("react-widgets") == SEMANTIC_COLORS["frontend"]
        assert color_for_type("unit-testing") == SEMANTIC_COLORS["review"]

    def test_unknown_and_empty_fall_back_to_default(self):
        assert color_for_type(None) == SEMANTIC_COLORS["default"]
        assert color_for_type("zzz") == SEMANTIC_COLORS["default"]

    def test_color_for_name(self):
        assert color_for_name("Deploy Helper") == SEMANTIC_COLORS["infra"]
        assert color_for_name("") == SEMANTIC_COLORS["default"]

    def test_full_scheme_variants(self):
        scheme = full_color_scheme("skill")
        base = SEMANTIC_COLORS["skill"]
        assert scheme.primary == base.primary
        assert scheme.hover == base.glow
        assert scheme.selected == base.secondary

    def test_experimental_keeps_opacity(self):
        assert full_color_scheme("beta-feature").opacity == pytest.approx(0.6)


class TestConnectionStyle:
    """Line styling per kind and focus state."""

    def test_colors_per_kind(self):
        assert connection_color(ConnectionKind.SKELETON) == "#00FFFF"
        assert connection_color(ConnectionKind.ROUTING) == "#FF00FF"
        assert connection_color(ConnectionKind.LEAF) == "#FFA500"
        assert connection_color(None) == "#808080"

    def test_rest_state(self):
        skeleton = connection_style(ConnectionKind.SKELETON)
        leaf = connection_style(ConnectionKind.LEAF)
        assert skeleton.width > leaf.width
        assert skeleton.opacity > leaf.opacity
        assert not skeleton.dashed

    def test_routing_is_dashed(self):
        assert connection_style(ConnectionKind.ROUTING).dashed

    def test_dimmed_wins_over_highlighted(self):
        style = connection_style(ConnectionKind.LEAF, highlighted=True, dimmed=True)
        assert style.opacity == pytest.approx(0.06)

    def test_highlighted(self):
        style = connection_style(ConnectionKind.LEAF, highlighted=True)
        assert style.width == pytest.approx(2.0)
        assert style.opacity == pytest.approx(0.85)


class TestNodeStyling:
    """Derived visual attributes of placed nodes."""

    def test_enabled_config_node(self):
        node = Node(id="skill-a", type=NodeType.SKILL, title="a")
        placed = style_node(node, (1.0, 2.0, 3.0))
        assert placed.position == (1.0, 2.0, 3.0)
        assert placed.layer == NodeLayer.RESOURCE
        assert placed.role == NodeRole.SKILL
        assert placed.visual.size == pytest.approx(LAYER_SIZES[NodeLayer.RESOURCE])
        assert placed.visual.shape == ShapeType.CUBE
        assert placed.visual.glow is False

    def test_center_glows(self):
        placed = style_node(Node(id="center", type=NodeType.CLAUDE), (0.0, 0.0, 0.0))
        assert placed.visual.glow is True
        assert placed.visual.size == pytest.approx(2.0)

    def test_enabled_nodes_take_layer_or_file_color(self):
        for node_type in NodeType:
            placed = style_node(Node(id=f"n-{node_type.value}", type=node_type), (0.0, 0.0, 0.0))
            if node_type in PROJECT_TYPES:
                expected = color_for_type(node_type.value).primary
            else:
                expected = LAYER_COLORS[placed.layer].primary
            assert placed.visual.color == expected

    def test_disabled_node_is_dimmed_not_hidden(self):
        node = Node(id="mcp-x", type=NodeType.MCP, enabled=False)
        placed = style_node(node, (0.0, 0.0, 0.0))
        assert placed.visual.color == DISABLED_COLOR
        assert placed.visual.size <= 0.5
        assert placed.visual.glow is False

    def test_project_file_sized_by_importance(self):
        node = Node(id="src/stores/a.ts", type=NodeType.STORE, importance=0.9)
        placed = style_node(node, (0.0, 0.0, 0.0))
        assert placed.visual.size == pytest.approx(0.95)
        assert placed.visual.glow is True
        assert placed.visual.icon == FILE_TYPE_ICONS[NodeType.STORE]
        assert placed.visual.color == SEMANTIC_COLORS["store"].primary

    def test_missing_position_uses_origin(self):
        nodes = [Node(id="a", type=NodeType.RULE)]
        placed = style_nodes(nodes, {})
        assert placed[0].position == (0.0, 0.0, 0.0)
