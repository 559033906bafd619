"""Continuity analysis: which loads have a complete path, and how.

Pipeline (all pure functions of a CircuitGraph):

1. find_segments: breadth-first search over simple paths from every present
   source's + pole. Source terminals end a path, they never relay it. A path
   that ends on some source's - pole is a segment.
2. find_circuits: a segment A(+) -> B(-) is a directed link A -> B; current
   then crosses B internally and leaves from B(+). Directed cycles over
   distinct sources with terminal-disjoint segments are circuits.
3. evaluate_graph: loadless circuits are short circuits and disqualify their
   sources; the remaining circuits energize the loads they pass through and
   decide tier / switch control per load.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from functools import cached_property

from circuitlab.logging_utils import get_logger

from .components import NEG, POS
from .feedback import choose_banner
from .graph import CircuitGraph
from .schema import Evaluation, IntensityTier, LoadVerdict, TerminalRef

logger = get_logger("circuit.continuity")

DEFAULT_MAX_PATHS = 20_000


@dataclass(frozen=True)
class Segment:
    """Simple path from one source's + pole to a source's - pole."""

    start: str
    end: str
    path: tuple[TerminalRef, ...]
    loads: frozenset[str]
    switches: frozenset[str]

    @cached_property
    def terminals(self) -> frozenset[TerminalRef]:
        return frozenset(self.path)


@dataclass(frozen=True)
class Circuit:
    sources: tuple[str, ...]
    segments: tuple[Segment, ...]

    @cached_property
    def loads(self) -> frozenset[str]:
        return frozenset().union(*(seg.loads for seg in self.segments))

    @cached_property
    def switches(self) -> frozenset[str]:
        return frozenset().union(*(seg.switches for seg in self.segments))

    @property
    def is_short(self) -> bool:
        return not self.loads


def _classify_path(graph: CircuitGraph, path: tuple[TerminalRef, ...]) -> tuple[frozenset[str], frozenset[str]]:
    loads: set[str] = set()
    switches: set[str] = set()
    load_ids = set(graph.loads)
    switch_ids = set(graph.switches)
    for prev, node in zip(path, path[1:]):
        # Wires never join two terminals of one component, so consecutive
        # terminals of the same load/switch mean its intrinsic edge was used.
        if prev.component_id != node.component_id:
            continue
        if node.component_id in load_ids:
            loads.add(node.component_id)
        elif node.component_id in switch_ids:
            switches.add(node.component_id)
    return frozenset(loads), frozenset(switches)


def search_segments(graph: CircuitGraph, max_paths: int = DEFAULT_MAX_PATHS) -> tuple[list[Segment], bool]:
    """Enumerate every + to - segment, breadth-first from each present source.

    Returns the segments and whether the search stopped at max_paths.
    """
    segments: dict[tuple[TerminalRef, ...], Segment] = {}
    explored = 0

    for source_id in graph.sources:
        start = TerminalRef.of(source_id, POS)
        if start not in graph:
            continue
        queue: deque[tuple[TerminalRef, ...]] = deque([(start,)])
        while queue:
            path = queue.popleft()
            visited = set(path)
            for neighbor, _edge in graph.neighbors(path[-1]):
                if neighbor in visited:
                    continue
                if graph.is_source_terminal(neighbor):
                    if neighbor.key == NEG:
                        full = path + (neighbor,)
                        loads, switches = _classify_path(graph, full)
                        segments.setdefault(
                            full,
                            Segment(source_id, neighbor.component_id, full, loads, switches),
                        )
                    continue
                explored += 1
                if explored > max_paths:
                    logger.warning(
                        f"[continuity] path search truncated after {max_paths} partial paths "
                        f"({len(graph)} nodes, {len(graph.edges)} edges)"
                    )
                    return sorted(segments.values(), key=_segment_sort_key), True
                queue.append(path + (neighbor,))

    return sorted(segments.values(), key=_segment_sort_key), False


def find_segments(graph: CircuitGraph, max_paths: int = DEFAULT_MAX_PATHS) -> list[Segment]:
    return search_segments(graph, max_paths=max_paths)[0]


def _segment_sort_key(seg: Segment) -> tuple:
    return (seg.start, seg.end, len(seg.path), tuple(n.sort_key for n in seg.path))


def find_circuits(segments: list[Segment]) -> list[Circuit]:
    """Directed cycles over distinct sources, each rooted at its smallest source id."""
    by_start: dict[str, list[Segment]] = {}
    for seg in segments:
        by_start.setdefault(seg.start, []).append(seg)

    found: dict[frozenset[Segment], Circuit] = {}

    def extend(root: str, chain: list[str], used: list[Segment], taken: frozenset[TerminalRef]) -> None:
        for seg in by_start.get(chain[-1], []):
            if seg.terminals & taken:
                continue
            if seg.end == root:
                circuit_segments = tuple(used + [seg])
                found.setdefault(frozenset(circuit_segments), Circuit(tuple(chain), circuit_segments))
            elif seg.end > root and seg.end not in chain:
                extend(root, chain + [seg.end], used + [seg], taken | seg.terminals)

    for root in sorted(by_start):
        extend(root, [root], [], frozenset())

    return sorted(
        found.values(),
        key=lambda c: (c.sources, tuple(_segment_sort_key(s) for s in c.segments)),
    )


def _tier_for(circuits: list[Circuit]) -> IntensityTier:
    if not circuits:
        return IntensityTier.NONE
    source_sets = [frozenset(c.sources) for c in circuits]
    for i, first in enumerate(source_sets):
        for second in source_sets[i + 1:]:
            if not first & second:
                return IntensityTier.PARALLEL
    if any(len(c.sources) > 1 for c in circuits):
        return IntensityTier.SERIES
    return IntensityTier.SINGLE


def _verdict_for(load_id: str, circuits: list[Circuit]) -> LoadVerdict:
    if not circuits:
        return LoadVerdict(load_id=load_id)
    switches = frozenset().union(*(c.switches for c in circuits))
    sources = frozenset().union(*(c.sources for c in circuits))
    companions = frozenset().union(*(c.loads for c in circuits)) - {load_id}
    return LoadVerdict(
        load_id=load_id,
        energized=True,
        intensity_tier=_tier_for(circuits),
        controlled_by_switch=all(c.switches for c in circuits),
        switches=tuple(sorted(switches)),
        sources=tuple(sorted(sources)),
        series_with=tuple(sorted(companions)),
    )


def evaluate_graph(graph: CircuitGraph, max_paths: int = DEFAULT_MAX_PATHS) -> Evaluation:
    """Per-load verdicts plus scene-level flags. Never raises for a valid graph."""
    segments, truncated = search_segments(graph, max_paths=max_paths)
    circuits = find_circuits(segments)

    shorted: set[str] = set()
    for circuit in circuits:
        if circuit.is_short:
            shorted.update(circuit.sources)
    live = [c for c in circuits if not c.is_short and not shorted.intersection(c.sources)]

    verdicts = {
        load_id: _verdict_for(load_id, [c for c in live if load_id in c.loads])
        for load_id in graph.loads
    }
    any_success = any(v.energized for v in verdicts.values())
    short_detected = bool(shorted)

    logger.debug(
        f"[continuity] {len(circuits)} circuits ({len(live)} live), "
        f"lit={[k for k, v in verdicts.items() if v.energized]}, shorted={sorted(shorted)}"
    )

    return Evaluation(
        loads=verdicts,
        any_success=any_success,
        short_circuit_detected=short_detected,
        shorted_sources=tuple(sorted(shorted)),
        truncated=truncated,
        banner=choose_banner(verdicts.values(), short_detected, has_switches=bool(graph.switches)),
    )


__all__ = [
    "Segment",
    "Circuit",
    "search_segments",
    "find_segments",
    "find_circuits",
    "evaluate_graph",
    "DEFAULT_MAX_PATHS",
]
