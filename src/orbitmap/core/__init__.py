"""Core of orbitmap: graph building, layout, visibility and recommendations.

1. Schemas (schemas.py):
   - Closed node/connection enumerations and pydantic value objects
   - Configuration snapshots, project files, modules and sessions

2. Registry (registry.py):
   - Node type -> layer/role mapping, category table
   - Shapes, sizes, icons and colors; node and connection styling

3. Graph Builders (graph.py):
   - Configuration graph: center, optional adapter, categories, leaves
   - Project graph: import scanning, importance scoring, tiers

4. Layout (layout/):
   - Layered radial layout with proportional resource sectors
   - Project orbit layout and workspace session grid

5. Visibility (visibility.py):
   - Which connections are drawn for a hover/selection state, with a cache

6. Recommendations (recommender.py, intent.py, analysis.py):
   - Keyword scoring of modules against a requirement
   - Bilingual intent detection and session analysis with suggested actions

7. Workspace (workspace.py):
   - Sessions, attached modules, chat log and drag-and-drop targets

Example Usage:

    from orbitmap.core.graph import build_config_graph
    from orbitmap.core.layout import layout
    from orbitmap.core.registry import style_nodes

    graph = build_config_graph(snapshot)
    positions = layout(graph.nodes)
    for node in style_nodes(graph.nodes, positions):
        print(node.id, node.position, node.visual.color)
"""
