from __future__ import annotations

import numpy as np
import tqdm

from tileplane.utiles.adjacency import build_grid_adjacency, get_neighbors
from tileplane.WFC.shannonEntropy import weighted_shannon_entropy
from tileplane.WFC.TileHandler import TileHandler


class ContradictionError(RuntimeError):
    """a cell ran out of candidates during propagation"""

    def __init__(self, index: int):
        super().__init__(f"cell {index} has no remaining candidates")
        self.index = index


def init_candidates(num_elements: int, num_types: int) -> np.ndarray:
    """every cell starts with the full alphabet: (n_cells, n_types) bool"""
    return np.ones((num_elements, num_types), dtype=bool)


def fully_collapsed(candidates: np.ndarray) -> bool:
    return bool(np.all(np.count_nonzero(candidates, axis=-1) == 1))


def select_lowest_entropy(candidates: np.ndarray, weights: np.ndarray, rng: np.random.Generator) -> int:
    """
    flat index of the unresolved cell with the lowest weighted entropy.

    Each cell's entropy is lowered by a random jitter below 1e-3 so that ties
    are broken differently on every attempt. Resolved cells are never picked.
    """
    unresolved = np.count_nonzero(candidates, axis=-1) > 1
    if not unresolved.any():
        raise ValueError("every cell is already collapsed")
    entropy = np.asarray(weighted_shannon_entropy(candidates, weights), dtype=np.float64)
    entropy = entropy - rng.random(entropy.shape) / 1000
    return int(np.argmin(np.where(unresolved, entropy, np.inf)))


def collapse(candidates: np.ndarray, index: int, weights: np.ndarray, rng: np.random.Generator) -> int:
    """fix one cell to a single type chosen with probability proportional to its weight"""
    options = np.flatnonzero(candidates[index])
    option_weights = weights[options]

    remaining = float(np.sum(option_weights)) * rng.random()
    pick = options[0]
    for option, weight in zip(options, option_weights):
        remaining -= weight
        if remaining < 0:
            pick = option
            break

    candidates[index] = False
    candidates[index, pick] = True
    return int(pick)


def propagate(candidates: np.ndarray, index: int, adj_csr, tileHandler: TileHandler) -> int:
    """
    restore arc-consistency around a cell whose candidates changed.

    A neighbour keeps a candidate only if some candidate of the current cell
    allows it in that direction. Shrunk neighbours go back on the stack until
    nothing changes any more.

    :return: number of times a neighbour's candidate set shrank
    :raises ContradictionError: a neighbour would be left with no candidate
    """
    compatibility = tileHandler.compatibility
    stack = [index]
    shrunk = 0

    while stack:
        current = stack.pop()
        tiles = candidates[current]
        neighbors, neighbors_dirs = get_neighbors(adj_csr, current)

        for neighbor, dName in zip(neighbors, neighbors_dirs):
            d = tileHandler.get_index_by_direction(dName)
            allowed = np.any(compatibility[d][:, tiles], axis=-1)
            options = candidates[neighbor]
            keep = options & allowed
            if not keep.any():
                raise ContradictionError(int(neighbor))
            if np.count_nonzero(keep) < np.count_nonzero(options):
                candidates[neighbor] = keep
                stack.append(int(neighbor))
                shrunk += 1
    return shrunk


def waveFunctionCollapse(tileHandler: TileHandler, width: int, height: int, rng: np.random.Generator,
                         progress: bool = False) -> np.ndarray:
    """a WFC run on a width x height grid

    Args:
        tileHandler (TileHandler): alphabet, rules and weights
        width (int): number of columns
        height (int): number of rows
        rng (np.random.Generator): source of every random draw
        progress (bool, optional): show a tqdm bar of resolved tiles. Defaults to False.

    Returns:
        np.ndarray: (height, width) plane of tile symbols

    Raises:
        ContradictionError: the attempt reached a cell without candidates
    """
    adj = build_grid_adjacency(height=height, width=width)
    num_elements = adj['num_elements']
    weights = tileHandler.weights
    candidates = init_candidates(num_elements, tileHandler.typeNum)
    # the full alphabet may already break a rule, e.g. a type with no vertical neighbours
    for index in range(num_elements):
        propagate(candidates, index, adj, tileHandler)

    pbar = tqdm.tqdm(total=num_elements, desc="collapsing", unit="tiles", disable=not progress)
    try:
        while not fully_collapsed(candidates):
            collapse_idx = select_lowest_entropy(candidates, weights, rng)
            collapse(candidates, collapse_idx, weights, rng)
            propagate(candidates, collapse_idx, adj, tileHandler)

            pbar.n = int(np.count_nonzero(np.count_nonzero(candidates, axis=-1) == 1))
            pbar.refresh()
    finally:
        pbar.close()

    pattern = np.argmax(candidates, axis=-1).reshape(height, width)
    return tileHandler.pattern_to_names(pattern)


if __name__ == "__main__":
    from tileplane.WFC.patterns import COAST_PATTERN

    tileHandler = TileHandler.from_pattern(COAST_PATTERN)
    plane = waveFunctionCollapse(tileHandler, width=20, height=10, rng=np.random.default_rng(0), progress=True)
    print("\n".join("".join(row) for row in plane))
