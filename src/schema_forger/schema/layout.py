"""Layered graph layout for a schema.

Turns a snapshot into node placements (one per table) and edges (one per
foreign-key column) for rendering.

Placement is a dependency-ordered layering of the foreign-key graph: an edge
runs from the referenced table to the referencing table, and tables are
peeled off in Kahn order, one layer per round of zero in-degree tables.
Tables left over because of cycles (including self references) go into one
trailing layer in schema order.  Layers advance along x; tables in a layer
stack along y, spaced by their rendered height.

Usage:
    from schema_forger.schema.layout import layout_schema, refresh_layout

    graph = layout_schema(schema)              # full layout
    graph = refresh_layout(new_schema, graph)  # keep positions, rebuild edges
"""

from collections import deque
from collections.abc import Mapping

from pydantic import BaseModel, Field

from schema_forger.schema.models import Schema, Table


# ============================================================================
# Layout models
# ============================================================================


class LayoutOptions(BaseModel):
    """Node geometry and spacing, in canvas units."""

    node_width: float = 320
    node_base_height: float = 60  # Table header
    column_height: float = 45  # Per column row
    horizontal_gap: float = 100
    vertical_gap: float = 40

    def node_height(self, table: Table) -> float:
        return self.node_base_height + len(table.columns) * self.column_height


class Position(BaseModel):
    x: float
    y: float


class NodePlacement(BaseModel):
    """A table node.  ``id`` is the table name."""

    id: str
    position: Position
    width: float
    height: float
    layer: int


class GraphEdge(BaseModel):
    """A foreign-key edge from the referenced column to the referencing column."""

    id: str
    source: str
    source_handle: str
    target: str
    target_handle: str


class GraphLayout(BaseModel):
    """Positioned nodes plus edges for one snapshot."""

    nodes: list[NodePlacement] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    layers: list[list[str]] = Field(default_factory=list)

    def get_node(self, node_id: str) -> NodePlacement | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    @property
    def edge_ids(self) -> set[str]:
        return {edge.id for edge in self.edges}

    def connected_nodes(self, edge_id: str) -> set[str]:
        """Table ids at either end of *edge_id* (empty if unknown), for highlighting."""
        for edge in self.edges:
            if edge.id == edge_id:
                return {edge.source, edge.target}
        return set()


# ============================================================================
# Graph construction
# ============================================================================


def edge_id(table_name: str, column_name: str, target_table: str) -> str:
    """Stable edge identifier for a foreign-key column."""
    return f"e-{table_name}-{column_name}-{target_table}"


def _unique_tables(schema: Schema) -> dict[str, Table]:
    # First occurrence wins when names collide
    tables: dict[str, Table] = {}
    for table in schema.tables:
        tables.setdefault(table.name, table)
    return tables


def _dependency_graph(tables: Mapping[str, Table]) -> dict[str, tuple[str, ...]]:
    """Map each table to the tables that reference it (one entry per FK column)."""
    successors: dict[str, list[str]] = {name: [] for name in tables}
    for name, table in tables.items():
        for column in table.columns:
            if column.is_foreign_key and column.foreign_key_table in tables:
                successors[column.foreign_key_table].append(name)
    return {name: tuple(children) for name, children in successors.items()}


def compute_layers(schema: Schema) -> list[list[str]]:
    """Group table names into dependency layers.

    Every table appears in exactly one layer.  For the acyclic part of the
    graph a table's layer index is a valid topological level; tables caught
    in or behind a cycle are collected into one final layer in schema order.

    Examples:
        >>> from schema_forger.schema.models import Column
        >>> users = Table(name="users", columns=[Column(name="id", type="INTEGER")])
        >>> posts = Table(name="posts", columns=[
        ...     Column(name="user_id", type="INTEGER", is_foreign_key=True,
        ...            foreign_key_table="users", foreign_key_column="id")])
        >>> compute_layers(Schema(tables=[posts, users]))
        [['users'], ['posts']]
    """
    tables = _unique_tables(schema)
    successors = _dependency_graph(tables)

    in_degree = {name: 0 for name in tables}
    for children in successors.values():
        for child in children:
            in_degree[child] += 1

    queue = deque(name for name in tables if in_degree[name] == 0)
    layers: list[list[str]] = []

    while queue:
        layer: list[str] = []
        for _ in range(len(queue)):
            name = queue.popleft()
            layer.append(name)
            for child in successors[name]:
                in_degree[child] -= 1
                if in_degree[child] == 0:
                    queue.append(child)
        layers.append(layer)

    placed = {name for layer in layers for name in layer}
    remaining = [name for name in tables if name not in placed]
    if remaining:
        layers.append(remaining)

    return layers


def build_edges(schema: Schema) -> list[GraphEdge]:
    """One edge per foreign-key column whose target table exists.

    Edge ids depend only on (table, column, target table), so rebuilding an
    unchanged schema yields the same ids.
    """
    table_names = set(schema.table_names)
    edges: list[GraphEdge] = []

    for table in schema.tables:
        for column in table.columns:
            if not column.is_foreign_key or not column.foreign_key_column:
                continue
            if column.foreign_key_table not in table_names:
                continue
            edges.append(
                GraphEdge(
                    id=edge_id(table.name, column.name, column.foreign_key_table),
                    source=column.foreign_key_table,
                    source_handle=f"{column.foreign_key_table}__{column.foreign_key_column}",
                    target=table.name,
                    target_handle=table.handle_for(column.name),
                )
            )

    return edges


# ============================================================================
# Layout
# ============================================================================


def layout_schema(schema: Schema | None, options: LayoutOptions | None = None) -> GraphLayout:
    """Compute a full layout, positioning every table from scratch.

    Args:
        schema: Snapshot to lay out; ``None`` gives an empty layout.
        options: Geometry; defaults to ``LayoutOptions()``.

    Returns:
        ``GraphLayout`` with one node per table, one edge per valid foreign
        key, and the layer grouping used for placement.
    """
    if schema is None:
        return GraphLayout()

    options = options or LayoutOptions()
    tables = _unique_tables(schema)
    layers = compute_layers(schema)

    nodes: list[NodePlacement] = []
    x = 0.0
    for index, layer in enumerate(layers):
        y = 0.0
        for name in layer:
            table = tables[name]
            height = options.node_height(table)
            nodes.append(
                NodePlacement(
                    id=name,
                    position=Position(x=x, y=y),
                    width=options.node_width,
                    height=height,
                    layer=index,
                )
            )
            y += height + options.vertical_gap
        x += options.node_width + options.horizontal_gap

    return GraphLayout(nodes=nodes, edges=build_edges(schema), layers=layers)


def refresh_layout(
    schema: Schema | None,
    previous: GraphLayout | None,
    options: LayoutOptions | None = None,
) -> GraphLayout:
    """Rebuild nodes and edges but keep positions from *previous*.

    Used after ordinary edits so that manually moved nodes stay put.  Tables
    not present in *previous* get their freshly computed position.
    """
    layout = layout_schema(schema, options)
    if previous is None:
        return layout

    kept = {node.id: node.position for node in previous.nodes}
    nodes = [
        node.model_copy(update={"position": kept[node.id]}) if node.id in kept else node
        for node in layout.nodes
    ]
    return layout.model_copy(update={"nodes": nodes})


def move_node(layout: GraphLayout, node_id: str, x: float, y: float) -> GraphLayout:
    """Return *layout* with one node repositioned (a manual drag)."""
    nodes = [
        node.model_copy(update={"position": Position(x=x, y=y)}) if node.id == node_id else node
        for node in layout.nodes
    ]
    return layout.model_copy(update={"nodes": nodes})
