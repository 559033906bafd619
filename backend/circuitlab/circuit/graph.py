"""Circuit graph snapshot.

The graph is a view: it is rebuilt from component state whenever the engine
evaluates, never mutated in place. Nodes are terminals (plus one hub node per
junction), edges are wires plus the intrinsic edges active right now.
"""

from __future__ import annotations

from collections import defaultdict
from itertools import groupby
from typing import Iterable, Mapping

from .components import (
    HUB_KEY,
    NEG,
    POS,
    Component,
    Edge,
    EdgeKind,
    Junction,
    Load,
    Source,
    Switch,
    Wire,
)
from .schema import TerminalRef


class CircuitGraph:
    """Undirected multigraph over the terminals of present components."""

    def __init__(
        self,
        nodes: Iterable[TerminalRef],
        edges: Iterable[Edge],
        *,
        sources: Iterable[str] = (),
        loads: Iterable[str] = (),
        switches: Iterable[str] = (),
    ) -> None:
        self._nodes = frozenset(nodes)
        self.edges: tuple[Edge, ...] = tuple(
            e for e in edges if e.a in self._nodes and e.b in self._nodes
        )
        self.sources: tuple[str, ...] = tuple(sorted(sources))
        self.loads: tuple[str, ...] = tuple(sorted(loads))
        self.switches: tuple[str, ...] = tuple(sorted(switches))
        self._source_ids = frozenset(self.sources)

        adjacency: dict[TerminalRef, list[tuple[TerminalRef, Edge]]] = defaultdict(list)
        for edge in self.edges:
            adjacency[edge.a].append((edge.b, edge))
            adjacency[edge.b].append((edge.a, edge))
        # Stable neighbour order keeps the search independent of mutation order.
        self._adjacency = {
            node: sorted(pairs, key=lambda p: (p[0].sort_key, p[1].kind.value, p[1].owner))
            for node, pairs in adjacency.items()
        }

    def __contains__(self, node: object) -> bool:
        return node in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def nodes(self) -> frozenset[TerminalRef]:
        return self._nodes

    def neighbors(self, node: TerminalRef) -> list[tuple[TerminalRef, Edge]]:
        return self._adjacency.get(node, [])

    def is_source_terminal(self, node: TerminalRef) -> bool:
        return node.component_id in self._source_ids and node.key in (POS, NEG)

    def is_hub(self, node: TerminalRef) -> bool:
        return node.key == HUB_KEY


def series_links(sources: Iterable[Source]) -> list[Edge]:
    """Chain cells docked in the same battery box: slot i neg meets slot i+1 pos."""
    grouped = sorted(
        (s for s in sources if s.series_group_id is not None),
        key=lambda s: (s.series_group_id, s.series_position, s.id),
    )
    edges: list[Edge] = []
    for group_id, members in groupby(grouped, key=lambda s: s.series_group_id):
        chain = list(members)
        for upper, lower in zip(chain, chain[1:]):
            edges.append(
                Edge(
                    TerminalRef.of(upper.id, NEG),
                    TerminalRef.of(lower.id, POS),
                    EdgeKind.SERIES_LINK,
                    str(group_id),
                )
            )
    return edges


def build_graph(components: Mapping[str, Component], wires: Iterable[Wire]) -> CircuitGraph:
    """Assemble the current snapshot from component records and wires.

    Sources that are missing or reversed contribute no nodes, so every edge
    touching them (wires and box links alike) drops out of the snapshot.
    """
    nodes: list[TerminalRef] = []
    edges: list[Edge] = []
    sources: list[Source] = []
    present_sources: list[str] = []
    loads: list[str] = []
    switches: list[str] = []

    for comp in components.values():
        if isinstance(comp, Source):
            sources.append(comp)
            if not comp.present:
                continue
            present_sources.append(comp.id)
        elif isinstance(comp, Load):
            loads.append(comp.id)
        elif isinstance(comp, Switch):
            switches.append(comp.id)
        elif isinstance(comp, Junction):
            nodes.append(comp.hub)
        nodes.extend(TerminalRef.of(comp.id, key) for key in comp.terminal_keys)
        edges.extend(comp.intrinsic_edges())

    edges.extend(series_links(sources))
    edges.extend(wire.edge() for wire in wires)

    return CircuitGraph(
        nodes,
        edges,
        sources=present_sources,
        loads=loads,
        switches=switches,
    )


__all__ = ["CircuitGraph", "build_graph", "series_links"]
