"""Nearest-site lookup structures rebuilt once per relaxation iteration.

Every index answers ``nearest(point, hint)`` with the id of the closest site,
ties going to the lowest id. ``hint`` is the id returned by the previous
query; structures that can exploit spatial coherence start their search
there. ``nearest_many`` runs a batch of queries in order, chaining hints,
which is how the accumulator sweeps a raster.
"""

import math
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np
from scipy.spatial import Delaunay, QhullError, cKDTree


def _distinct_sites(sites: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Collapse coincident sites.

    Returns the distinct points, the lowest original id owning each of them,
    and for every original id the slot of its distinct point.
    """
    points, owner, slot = np.unique(sites, axis=0, return_index=True, return_inverse=True)
    return points, owner, slot.ravel()


def _chain_neighbors(points: np.ndarray) -> List[List[int]]:
    # Delaunay graph of collinear points: consecutive points along the line.
    m = points.shape[0]
    if m == 1:
        return [[]]
    centered = points - points.mean(axis=0)
    _, _, vt = np.linalg.svd(centered, full_matrices=False)
    order = np.argsort(centered @ vt[0], kind="stable").tolist()
    neighbors = [[] for _ in range(m)]
    for a, b in zip(order, order[1:]):
        neighbors[a].append(b)
        neighbors[b].append(a)
    return neighbors


def _delaunay_graph(points: np.ndarray) -> Tuple[List[List[int]], List[int], List[List[int]]]:
    """Walk graph over the distinct points.

    Returns per-node neighbour lists, the node each point is reached through,
    and the points each node stands for. Qhull leaves near-coincident points
    out of the triangulation; those are folded into the vertex they were
    merged with and only show up as extra members of that node.
    """
    m = points.shape[0]
    node_of = list(range(m))
    members = [[k] for k in range(m)]
    if m < 3:
        return _chain_neighbors(points), node_of, members
    try:
        tri = Delaunay(points)
    except QhullError:
        return _chain_neighbors(points), node_of, members

    indptr, indices = tri.vertex_neighbor_vertices
    neighbors = [indices[indptr[k] : indptr[k + 1]].tolist() for k in range(m)]
    for point, _, vertex in tri.coplanar.tolist():
        node_of[point] = vertex
        members[vertex].append(point)
        members[point] = []
    return neighbors, node_of, members


class DelaunaySiteIndex:
    """Greedy walk over the Delaunay graph of the sites.

    From the hinted site, repeatedly step to the neighbour closest to the
    query until no neighbour is strictly closer; on a Delaunay graph that site
    is a nearest one. The final site and its neighbours are then checked
    member by member, which picks up points Qhull merged into a vertex and
    applies the lowest-id rule to ties. Raster-ordered queries usually end
    within a step or two of their hint, so a sweep costs close to O(1) per
    query.
    """

    def __init__(self, sites: np.ndarray):
        sites = np.asarray(sites, dtype=np.float64).reshape(-1, 2)
        if sites.shape[0] == 0:
            raise ValueError("cannot index an empty site set")
        points, owner, slot = _distinct_sites(sites)
        self._size = sites.shape[0]
        self._xs = points[:, 0].tolist()
        self._ys = points[:, 1].tolist()
        self._owner = owner.tolist()
        self._slot = slot.tolist()
        self._neighbors, self._node_of, self._members = _delaunay_graph(points)

    @property
    def size(self) -> int:
        return self._size

    def nearest(self, point: Sequence[float], hint: int = 0) -> int:
        x, y = float(point[0]), float(point[1])
        xs, ys, neighbors = self._xs, self._ys, self._neighbors

        i = self._node_of[self._slot[hint] if 0 <= hint < self._size else 0]
        dx, dy = xs[i] - x, ys[i] - y
        best = dx * dx + dy * dy
        while True:
            step = -1
            for j in neighbors[i]:
                dx, dy = xs[j] - x, ys[j] - y
                d = dx * dx + dy * dy
                if d < best:
                    best, step = d, j
            if step < 0:
                break
            i = step
        return self._settle(i, x, y)

    def _closest_member(self, node: int, x: float, y: float) -> Tuple[float, int]:
        best, lowest = math.inf, self._size
        for m in self._members[node]:
            dx, dy = self._xs[m] - x, self._ys[m] - y
            d = dx * dx + dy * dy
            owner = self._owner[m]
            if d < best or (d == best and owner < lowest):
                best, lowest = d, owner
        return best, lowest

    def _settle(self, i: int, x: float, y: float) -> int:
        # Exact answer among the walk's final site and its ring, then a flood
        # over equidistant sites: they sit on an empty circle around the query
        # and are connected through Delaunay edges.
        neighbors = self._neighbors
        ring = [i] + neighbors[i]
        scored = [(node,) + self._closest_member(node, x, y) for node in ring]
        best, lowest = min((d, owner) for _, d, owner in scored)

        seen = set(ring)
        stack = [node for node, d, _ in scored if d == best]
        while stack:
            k = stack.pop()
            for j in neighbors[k]:
                if j in seen:
                    continue
                seen.add(j)
                d, owner = self._closest_member(j, x, y)
                if d == best:
                    lowest = min(lowest, owner)
                    stack.append(j)
        return lowest

    def nearest_many(self, points: np.ndarray, hint: int = 0) -> np.ndarray:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        labels = np.empty(points.shape[0], dtype=np.intp)
        nearest = self.nearest
        current = hint
        for k, p in enumerate(points.tolist()):
            current = nearest(p, current)
            labels[k] = current
        return labels


class KDTreeSiteIndex:
    """cKDTree over the distinct sites.

    Every query is cold: the hint is accepted for interface compatibility and
    ignored, so this index does not exploit raster coherence. In exchange the
    batch query is vectorised. Useful as a reference and for large, incoherent
    batches.
    """

    # a second candidate this close to the first triggers an exact tie check
    TIE_RTOL = 1e-9
    TIE_ATOL = 1e-12

    def __init__(self, sites: np.ndarray):
        sites = np.asarray(sites, dtype=np.float64).reshape(-1, 2)
        if sites.shape[0] == 0:
            raise ValueError("cannot index an empty site set")
        points, owner, _ = _distinct_sites(sites)
        self._size = sites.shape[0]
        self._owner = owner
        self._tree = cKDTree(points)

    @property
    def size(self) -> int:
        return self._size

    def nearest(self, point: Sequence[float], hint: int = 0) -> int:
        return int(self.nearest_many(np.asarray([point], dtype=np.float64))[0])

    def nearest_many(self, points: np.ndarray, hint: int = 0) -> np.ndarray:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        if points.shape[0] == 0:
            return np.empty(0, dtype=np.intp)
        if self._tree.n == 1:
            return np.full(points.shape[0], self._owner[0], dtype=np.intp)

        data = self._tree.data
        _, idx = self._tree.query(points, k=2)
        # squared distances recomputed exactly so equal distances compare equal
        d2 = ((data[idx] - points[:, None, :]) ** 2).sum(axis=2)
        labels = self._owner[idx[:, 0]].astype(np.intp)

        close = d2[:, 1] <= d2[:, 0] * (1.0 + self.TIE_RTOL) + self.TIE_ATOL
        for r in np.flatnonzero(close).tolist():
            q = points[r]
            radius = math.sqrt(d2[r].min()) * (1.0 + self.TIE_RTOL) + self.TIE_ATOL
            cand = np.asarray(self._tree.query_ball_point(q, radius), dtype=np.intp)
            cd2 = ((data[cand] - q) ** 2).sum(axis=1)
            labels[r] = self._owner[cand[cd2 == cd2.min()]].min()
        return labels


SiteIndexFactory = Callable[[np.ndarray], object]

# "delaunay" walks from the hint and suits raster sweeps; "kdtree" ignores
# hints and answers every query cold.
SITE_INDEXES: Dict[str, SiteIndexFactory] = {
    "delaunay": DelaunaySiteIndex,
    "kdtree": KDTreeSiteIndex,
}


def build_site_index(name: str, sites: np.ndarray):
    """Build the site index registered under ``name`` over ``sites``."""
    try:
        factory = SITE_INDEXES[name]
    except KeyError:
        raise ValueError(f"unknown site index {name!r}; choose from {sorted(SITE_INDEXES)}") from None
    return factory(sites)
