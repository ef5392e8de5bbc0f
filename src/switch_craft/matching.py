from __future__ import annotations
from difflib import SequenceMatcher
from typing import List, Optional, Sequence, Tuple
import logging

from .core import Project

THRESHOLD = 0.4
# Characters of offset that cost a full point of score.
LOCATION_DISTANCE = 100

logger = logging.getLogger(__name__)


def fuzzy_score(query: str, name: str) -> float:
    """Score ``name`` against ``query``: 0.0 is a perfect hit, 1.0 no match.

    The query is compared against every query-sized window of the name, so a
    substring scores as well as an exact match apart from a small penalty for
    how far into the name it starts.
    """
    q = query.lower()
    n = name.lower()
    if not q:
        return 0.0
    size = len(q)
    best = 1.0
    for start in range(max(1, len(n) - size + 1)):
        ratio = SequenceMatcher(None, q, n[start:start + size]).ratio()
        best = min(best, (1.0 - ratio) + start / LOCATION_DISTANCE)
        if best == 0.0:
            break
    return min(best, 1.0)


def fuzzy_search(
    projects: Sequence[Project], query: str, threshold: float = THRESHOLD
) -> List[Tuple[Project, float]]:
    """Projects whose name scores within ``threshold``, best first.

    Ties keep config order. An empty query returns every project unscored.
    """
    if not query:
        return [(p, 0.0) for p in projects]
    scored = [(p, fuzzy_score(query, p.name)) for p in projects]
    return sorted((pair for pair in scored if pair[1] <= threshold), key=lambda pair: pair[1])


def filter_projects(projects: Sequence[Project], query: str) -> List[Project]:
    return [p for p, _ in fuzzy_search(projects, query)]


def find_project(projects: Sequence[Project], name: str) -> Optional[Project]:
    wanted = name.strip().lower()
    if not wanted:
        return None
    for project in projects:
        if project.name.lower() == wanted:
            logger.debug(f"Exact match for {name!r}: {project.name}")
            return project

    results = fuzzy_search(projects, wanted)
    if results and results[0][1] <= THRESHOLD:
        project, score = results[0]
        logger.debug(f"Fuzzy match for {name!r}: {project.name} (score {score:.2f})")
        return project
    logger.debug(f"No project matched {name!r}")
    return None
