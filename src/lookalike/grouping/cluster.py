"""Connected-component clustering of a similarity graph."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple
from collections import defaultdict

from ..logging import get_logger

logger = get_logger(__name__)

Edge = Tuple[int, int, float]


@dataclass(frozen=True)
class Group:
    """A set of transitively similar images, members in input order."""
    group_id: str
    image_ids: List[str]
    canonical_id: str
    average_similarity: float


def cluster_groups(image_ids: Sequence[str], edges: Iterable[Edge]) -> List[Group]:
    """
    Group images into connected components of the similarity graph.

    Args:
        image_ids: Node ids; their order defines member and group order
        edges: ``(i, j, score)`` triples indexing into *image_ids*

    Returns:
        Groups of two or more images, ordered by their first member's position
    """
    n = len(image_ids)
    if n == 0:
        return []

    parent = list(range(n))

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(x: int, y: int) -> None:
        px, py = find(x), find(y)
        if px == py:
            return
        # The lowest index stays the root so component identity is stable
        if px < py:
            parent[py] = px
        else:
            parent[px] = py

    edge_list = list(edges)
    for i, j, score in edge_list:
        union(i, j)
        logger.debug(f"Linked {image_ids[i]} and {image_ids[j]} (score: {score:.4f})")

    scores: Dict[int, List[float]] = defaultdict(list)
    for i, _, score in edge_list:
        scores[find(i)].append(score)

    members: Dict[int, List[int]] = defaultdict(list)
    for index in range(n):
        members[find(index)].append(index)

    groups = []
    for root in sorted(members):
        cluster = members[root]
        if len(cluster) == 1:
            continue

        ids = [image_ids[index] for index in cluster]
        root_scores = scores[root]
        group = Group(
            group_id=f"group_{len(groups) + 1:03d}",
            image_ids=ids,
            canonical_id=ids[0],
            average_similarity=sum(root_scores) / len(root_scores),
        )
        groups.append(group)
        logger.info(f"Created group {group.group_id} with {len(ids)} images, canonical: {group.canonical_id}")

    return groups
