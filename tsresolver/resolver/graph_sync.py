"""Keep the dependency index in step with the bundler's dependency graph.

The graph is a networkx directed graph whose nodes are absolute file paths.
Each edge (A, B) carries a ``module`` attribute: the reference string in A
that the bundler resolved to B. Target-only nodes (files the bundler
resolved to but never reported dependencies for) carry ``source=False``
and are not indexed.
"""
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Set

import networkx as nx

from .dependency_index import DependencyIndex, DependencyRecord


@dataclass
class SyncStats:
    added: int = 0
    updated: int = 0
    removed: int = 0
    unchanged: int = 0


def dependency_record(graph: nx.DiGraph, file_name: str) -> DependencyRecord:
    """Build the {module: target} record of one file from its outgoing edges."""
    record: DependencyRecord = {}
    for _, target, module_name in graph.out_edges(file_name, data='module'):
        if module_name:
            record[module_name] = target
    return record


def source_files(graph: nx.DiGraph) -> Set[str]:
    return {node for node, is_source in graph.nodes(data='source', default=True) if is_source}


def load_dependency_graph(path: str | Path) -> nx.MultiDiGraph:
    """Load a dependency map ``{file: {module: target}}`` into a graph.

    A MultiDiGraph keeps two references that resolve to the same target
    (e.g. './Foo' and './Foo.js') as separate edges.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the content isn't a JSON object of objects
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dependency map not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid dependency map {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Invalid dependency map {path}: expected a JSON object")

    graph = nx.MultiDiGraph()
    for file_name, dependencies in data.items():
        if not isinstance(dependencies, dict):
            raise ValueError(f"Invalid dependency map {path}: entry for {file_name} is not an object")
        graph.add_node(file_name, source=True)
        for module_name, target in dependencies.items():
            if target not in graph:
                graph.add_node(target, source=False)
            graph.add_edge(file_name, target, module=module_name)

    # A target listed later as a key is a source after all
    for file_name in data:
        graph.nodes[file_name]['source'] = True

    return graph


class GraphIndexSync:
    """Apply graph changes to a DependencyIndex through its CRUD surface only."""

    def __init__(self, index: DependencyIndex):
        self.index = index
        self._tracked: Set[str] = set()

    def sync(self, graph: nx.DiGraph) -> SyncStats:
        """Bring the index in line with graph.

        Files added by this sync that have since left the graph are removed;
        files someone else put in the index are only ever updated.
        """
        stats = SyncStats()
        current = source_files(graph)

        for file_name in current:
            record = dependency_record(graph, file_name)
            if self.index.add(file_name, record):
                stats.added += 1
                self._tracked.add(file_name)
            elif self.index.get(file_name) != record:
                self.index.update(file_name, record)
                stats.updated += 1
            else:
                stats.unchanged += 1

        for file_name in self._tracked - current:
            if self.index.remove(file_name):
                stats.removed += 1
        self._tracked &= current

        return stats

    def reset(self) -> None:
        """Drop everything from the index, e.g. on project reload."""
        self.index.clear()
        self._tracked.clear()


def index_from_graph(graph: nx.DiGraph) -> DependencyIndex:
    index = DependencyIndex()
    GraphIndexSync(index).sync(graph)
    return index


def graph_summary(graph: nx.DiGraph) -> Dict[str, int]:
    return {
        'files': len(source_files(graph)),
        'targets': graph.number_of_nodes(),
        'edges': graph.number_of_edges(),
    }
