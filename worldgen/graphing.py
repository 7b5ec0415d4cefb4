# worldgen/graphing.py
"""Room connectivity: Delaunay candidates, spanning tree, main path, cycles."""
from __future__ import annotations

import itertools
from typing import Iterable, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np
import structlog
from scipy.spatial import ConvexHull, Delaunay, QhullError

from game_rng import GameRNG
from worldgen.errors import GenerationError
from worldgen.geometry import distance
from worldgen.map_area import MapArea, RoomGraph, Triangulation
from worldgen.room import Room, RoomId

log = structlog.get_logger()


def _degenerate_triangulation(rooms: Sequence[Room]) -> Triangulation:
    order = sorted(range(len(rooms)), key=lambda i: rooms[i].center)
    return Triangulation(
        triangles=[], hull=order, room_ids=[room.room_id for room in rooms]
    )


def triangulate(rooms: Iterable[Room]) -> Triangulation:
    """Delaunay triangulation over room centers, rooms taken in id order.

    With fewer than three rooms, or when every center lies on one line, there
    are no triangles and the hull is simply the rooms sorted by center.
    """
    ordered = sorted(rooms, key=lambda room: room.room_id)
    if len(ordered) < 3:
        return _degenerate_triangulation(ordered)

    points = np.array([room.center for room in ordered], dtype=np.float64)
    try:
        delaunay = Delaunay(points)
        hull = ConvexHull(points)
    except QhullError:
        log.debug("Room centers are degenerate, using sorted hull", rooms=len(ordered))
        return _degenerate_triangulation(ordered)

    triangles = [tuple(int(i) for i in simplex) for simplex in delaunay.simplices]
    return Triangulation(
        triangles=triangles,
        hull=[int(i) for i in hull.vertices],
        room_ids=[room.room_id for room in ordered],
    )


def _add_weighted_edge(graph: nx.Graph, room1: Room, room2: Room) -> None:
    graph.add_edge(room1.room_id, room2.room_id, weight=distance(room1, room2))


def build_candidate_graph(map_area: MapArea, triangulation: Triangulation) -> nx.Graph:
    rooms = map_area.rooms
    graph = nx.Graph()
    ids = triangulation.room_ids

    if not triangulation.triangles:
        for a, b in zip(triangulation.hull, triangulation.hull[1:]):
            _add_weighted_edge(graph, rooms[ids[a]], rooms[ids[b]])

    for a, b, c in triangulation.triangles:
        room1, room2, room3 = rooms[ids[a]], rooms[ids[b]], rooms[ids[c]]
        _add_weighted_edge(graph, room1, room2)
        _add_weighted_edge(graph, room2, room3)
        _add_weighted_edge(graph, room1, room3)

    for a, b in map_area.initial_connections:
        _add_weighted_edge(graph, rooms[a], rooms[b])

    return graph


def minimum_spanning_tree(graph: nx.Graph) -> nx.Graph:
    """Kruskal MST over the candidate weights.

    Equal weights are taken in the order ``graph.edges()`` walks the adjacency:
    nodes in insertion order, then each node's neighbours. That order is fixed
    for a given graph, so the tree is too.
    """
    return nx.minimum_spanning_tree(graph, weight="weight", algorithm="kruskal")


def farthest_leaf_pair(
    mst: nx.Graph, map_area: MapArea
) -> Optional[Tuple[RoomId, RoomId]]:
    """The two main rooms with one tree edge each that lie farthest apart."""
    leaves = [
        room
        for room in map_area.main_rooms()
        if room.room_id in mst and mst.degree(room.room_id) == 1
    ]
    best: Optional[Tuple[RoomId, RoomId]] = None
    best_distance = -1.0
    for room1, room2 in itertools.combinations(leaves, 2):
        d = distance(room1, room2)
        if d > best_distance:
            best = (room1.room_id, room2.room_id)
            best_distance = d
    return best


def _successors_by_weight(graph: nx.Graph, node: RoomId) -> List[RoomId]:
    neighbours = sorted(graph[node].items(), key=lambda item: item[1]["weight"])
    return [n for n, _ in neighbours]


def path_between(graph: nx.Graph, start: RoomId, goal: RoomId) -> List[RoomId]:
    """Depth first search, nearest neighbour first. Empty if unreachable."""
    if start not in graph or goal not in graph:
        return []
    path = [start]
    if start == goal:
        return path
    on_path = {start}
    stack = [iter(_successors_by_weight(graph, start))]
    while stack:
        for node in stack[-1]:
            if node in on_path:
                continue
            path.append(node)
            on_path.add(node)
            if node == goal:
                return path
            stack.append(iter(_successors_by_weight(graph, node)))
            break
        else:
            stack.pop()
            on_path.discard(path.pop())
    return []


def find_main_path(mst: nx.Graph, map_area: MapArea) -> List[RoomId]:
    pair = farthest_leaf_pair(mst, map_area)
    if pair is None:
        log.info("No main path, fewer than two leaf rooms")
        return []
    path = path_between(mst, *pair)
    if not path:
        log.info("No main path between leaf rooms", start=pair[0], end=pair[1])
    return path


def reassemble_graph(
    mst: nx.Graph,
    candidates: nx.Graph,
    triangulation: Triangulation,
    main_path: Sequence[RoomId],
    initial_connections: Sequence[Tuple[RoomId, RoomId]],
    percentage: float,
    rng: GameRNG,
) -> nx.Graph:
    """Put a random share of the unused candidate edges back on top of the MST."""
    percentage = min(max(percentage, 0.0), 1.0)
    output = mst.copy()
    pool = candidates.copy()

    pool.remove_edges_from(list(mst.edges()))
    pool.remove_edges_from(triangulation.hull_edges())
    pool.remove_nodes_from(main_path)
    pool.remove_edges_from(initial_connections)

    added = 0
    for a, b, data in pool.edges(data=True):
        if rng.get_float() < percentage:
            output.add_edge(a, b, **data)
            added += 1
    log.debug(
        "Graph reassembled",
        pool=pool.number_of_edges(),
        added=added,
        percentage=percentage,
    )
    return output


def build_room_graph(map_area: MapArea, settings, rng: GameRNG) -> RoomGraph:
    if map_area.triangulation is None:
        raise GenerationError("Cannot build room graph without a triangulation")

    candidates = build_candidate_graph(map_area, map_area.triangulation)
    mst = minimum_spanning_tree(candidates)
    main_path = find_main_path(mst, map_area)
    reassembled = reassemble_graph(
        mst,
        candidates,
        map_area.triangulation,
        main_path,
        map_area.initial_connections,
        settings.graph_reassembly_percentage,
        rng,
    )
    map_area.graph = RoomGraph(
        mst=mst, reassembled_graph=reassembled, main_path_rooms=main_path
    )
    log.debug(
        "Room graph built",
        candidate_edges=candidates.number_of_edges(),
        mst_edges=mst.number_of_edges(),
        graph_edges=reassembled.number_of_edges(),
        main_path=main_path,
    )
    return map_area.graph


def rebuild_graph_from_connections(map_area: MapArea) -> nx.Graph:
    """Replace the reassembled graph by one made only of realized connections."""
    if map_area.graph is None:
        raise GenerationError("Cannot rebuild room graph before it was built")
    if map_area.connections is None:
        raise GenerationError("Cannot rebuild room graph without connections")

    graph = nx.Graph()
    for connection in map_area.connections:
        _add_weighted_edge(
            graph,
            map_area.rooms[connection.room1_id],
            map_area.rooms[connection.room2_id],
        )
    map_area.graph.reassembled_graph = graph
    return graph


__all__ = [
    "triangulate",
    "build_candidate_graph",
    "minimum_spanning_tree",
    "find_main_path",
    "path_between",
    "reassemble_graph",
    "build_room_graph",
    "rebuild_graph_from_connections",
]
