"""Project dependency graph backed by networkx.DiGraph."""

from __future__ import annotations

import networkx as nx

from vcxsln.config import Project, Solution
from vcxsln.errors import DependencyCycleError


class DependencyGraph:
    """Wrapper around networkx.DiGraph with one node per project.

    Edges point from a project to the project it depends on. Dependencies on
    ids the solution does not declare become ``missing`` nodes.
    """

    def __init__(self) -> None:
        self.graph = nx.DiGraph()

    @classmethod
    def from_solution(cls, solution: Solution, include_references: bool = False) -> DependencyGraph:
        dg = cls()
        for project in solution.projects:
            dg.add_project(project)
        for project in solution.projects:
            for dep_id in project.dependencies:
                dg.add_dependency(project.id, dep_id, edge_type="SOLUTION")
            if include_references:
                for ref in project.project_references:
                    if ref.project_id:
                        dg.add_dependency(project.id, ref.project_id, edge_type="PROJECT_REFERENCE")
        return dg

    # --- Node addition ---

    def add_project(self, project: Project) -> None:
        self.graph.add_node(
            project.id,
            node_type="project",
            name=project.name,
            order=self.graph.number_of_nodes(),
        )

    def add_dependency(self, from_id: str, to_id: str, edge_type: str = "SOLUTION") -> None:
        if not self.graph.has_node(to_id):
            self.graph.add_node(to_id, node_type="missing", name=to_id, order=self.graph.number_of_nodes())
        # A solution dependency wins over a duplicate project reference
        if self.graph.has_edge(from_id, to_id):
            return
        self.graph.add_edge(from_id, to_id, edge_type=edge_type)

    # --- Queries ---

    def dependencies_of(self, project_id: str) -> list[str]:
        return [tgt for _, tgt in self.graph.out_edges(project_id)]

    def dependents_of(self, project_id: str) -> list[str]:
        return [src for src, _ in self.graph.in_edges(project_id)]

    def missing_references(self) -> list[str]:
        return [
            nid for nid, data in self.graph.nodes(data=True) if data.get("node_type") == "missing"
        ]

    def cycles(self) -> list[list[str]]:
        return [list(c) for c in nx.simple_cycles(self.graph)]

    def build_order(self) -> list[str]:
        """Return project ids with every dependency before its dependents.

        Ties are broken by declaration order in the solution. Missing
        projects are left out.
        """
        reversed_graph = self.graph.reverse(copy=False)
        try:
            ordered = list(nx.lexicographical_topological_sort(
                reversed_graph, key=lambda nid: self.graph.nodes[nid]["order"]
            ))
        except nx.NetworkXUnfeasible:
            cycle = [src for src, _ in nx.find_cycle(self.graph)]
            raise DependencyCycleError(cycle + cycle[:1]) from None

        return [nid for nid in ordered if self.graph.nodes[nid].get("node_type") == "project"]

    def project_count(self) -> int:
        return sum(1 for _, d in self.graph.nodes(data=True) if d.get("node_type") == "project")
