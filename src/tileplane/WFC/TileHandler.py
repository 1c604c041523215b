from __future__ import annotations

from typing import List, Dict, Tuple, Sequence, Set

import numpy as np

from tileplane.utiles.adjacency import DIRECTION_PAIRS, build_grid_adjacency, get_neighbors


def normalize_pattern(pattern: Sequence[Sequence[str]]) -> List[List[str]]:
    """copy a pattern into a list of rows of one-character symbols.

    Rows may be strings ("LLCSS") or sequences of symbols. The pattern must be
    non-empty and rectangular.
    """
    rows = [list(row) for row in pattern]
    if not rows or not rows[0]:
        raise ValueError("example pattern must be non-empty")
    width = len(rows[0])
    for y, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"example pattern is not rectangular: row {y} has {len(row)} tiles, expected {width}")
        for tile in row:
            if not isinstance(tile, str) or len(tile) != 1:
                raise ValueError(f"tile symbols must be single characters, got {tile!r} in row {y}")
    return rows


class TileHandler:
    def __init__(self, *args, **kwargs):
        """holds the tile alphabet, the adjacency rules and the tile weights
        \n:param: typeList:List[str] -> tile symbols, in index order
        \n:param: direction:Tuple[Tuple[str,str]] -> pairs of opposite directions, default: up/down, left/right
        \n:param: weights:Sequence[int] -> occurrence count per type, default: 1 for every type
        """
        directionPair: Tuple[Tuple[str, str]] = kwargs.pop('direction', DIRECTION_PAIRS)
        self.typeList: List[str] = list(kwargs.pop('typeList', []))
        weights = kwargs.pop('weights', None)
        self.oppositeDirection: Dict[str, str] = {}

        directionList = []
        for pair in directionPair:
            self.oppositeDirection[pair[0]] = pair[1]
            self.oppositeDirection[pair[1]] = pair[0]
            directionList.append(pair[0])
            directionList.append(pair[1])

        self.directionList: List[str] = directionList
        self.typeNum = len(self.typeList)
        self.directionNum = len(self.directionList)

        self._name_to_index: Dict[str, int] = {name: idx for idx, name in enumerate(self.typeList)}
        self._index_to_name: Dict[int, str] = {idx: name for idx, name in enumerate(self.typeList)}

        self.dire_to_index: Dict[str, int] = {dire: idx for idx, dire in enumerate(self.directionList)}
        self._index_to_dire: Dict[int, str] = {idx: dire for idx, dire in enumerate(self.directionList)}

        # compatibility[d, i, j] == 1: type i may sit in direction d of type j
        self._compatibility = np.zeros((self.directionNum, self.typeNum, self.typeNum), dtype=bool)
        if weights is None:
            self._weights = np.ones(self.typeNum, dtype=np.int64)
        else:
            self._weights = np.asarray(weights, dtype=np.int64)
            if self._weights.shape != (self.typeNum,):
                raise ValueError(f"expected {self.typeNum} weights, got {self._weights.shape}")
            if np.any(self._weights < 1):
                raise ValueError("tile weights must be positive")

    @classmethod
    def from_pattern(cls, pattern: Sequence[Sequence[str]]) -> "TileHandler":
        """derive rules and weights from an example pattern in one pass.

        Every in-bounds (tile, neighbour tile, direction) triple observed in the
        pattern becomes an allowed rule; each tile counts once towards the
        weight of its type. The pattern itself is left untouched.
        """
        rows = normalize_pattern(pattern)
        height, width = len(rows), len(rows[0])
        flat = [tile for row in rows for tile in row]

        typeList = list(dict.fromkeys(flat))
        counts = {name: 0 for name in typeList}
        for tile in flat:
            counts[tile] += 1

        handler = cls(typeList=typeList, weights=[counts[name] for name in typeList])
        adj = build_grid_adjacency(height=height, width=width)
        for index, tile in enumerate(flat):
            neighbors, neighbors_dirs = get_neighbors(adj, index)
            for neighbor, dName in zip(neighbors, neighbors_dirs):
                handler.setConnectiability(fromTypeName=tile, toTypeName=flat[neighbor],
                                           direction=dName, value=True, dual=False)
        return handler

    def __repr__(self):
        weights = ', '.join(f"{name}: {w}" for name, w in zip(self.typeList, self._weights))
        compatibilities = ''
        for direction in self.directionList:
            compatibilities += f"{direction}:\n{self.compatibility[self.get_index_by_direction(direction)].astype(int)}\n"
        return (f'types: {self.typeList}\n'
                f'weights: {{{weights}}}\n\n'
                f'compatibility:\n'
                f'{compatibilities}')

    @property
    def compatibility(self) -> np.ndarray:
        return self._compatibility

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    def weight_of(self, name: str) -> int:
        return int(self._weights[self.get_index_by_name(name)])

    def get_name_by_index(self, index: int) -> str:
        try:
            return self._index_to_name[int(index)]
        except KeyError:
            raise ValueError(f"index '{index}' out of range (0-{self.typeNum-1})") from None

    def get_index_by_name(self, name: str) -> int:
        try:
            return self._name_to_index[name]
        except KeyError:
            raise ValueError(f"tile type '{name}' is not in the type list {self.typeList}") from None

    def get_opposite_direction_by_direction(self, direction: str) -> str:
        return self.oppositeDirection[direction]

    def get_index_by_direction(self, direction: str | List[str]) -> int | List[int]:
        """
        index of a direction name, or of every name in a list
        """
        if isinstance(direction, str):
            try:
                return self.dire_to_index[direction]
            except KeyError:
                raise ValueError(f"direction '{direction}' is not one of {self.directionList}") from None
        elif isinstance(direction, list):
            try:
                return [self.dire_to_index[d] for d in direction]
            except KeyError as e:
                raise ValueError(f"direction '{e.args[0]}' is not one of {self.directionList}") from None
        else:
            raise TypeError(f"direction must be str or list[str], got {type(direction)}")

    def setConnectiability(self, fromTypeName: str, toTypeName: str | List[str], direction: str | List[str] = 'isotropy', value=True, dual=True):
        """allow (or forbid) toTypeName to sit in `direction` of fromTypeName.

        Args:
            fromTypeName (str): tile the rule is read from
            toTypeName (str | List[str]): neighbour tile(s)
            direction (str | List[str], optional): 'isotropy' sets every direction. Defaults to 'isotropy'.
            value (bool, optional): True allows, False forbids. Defaults to True.
            dual (bool, optional): also set the mirrored rule, e.g. A has B on its left
                                   implies B has A on its right. Defaults to True.
        """
        j = self.get_index_by_name(fromTypeName)
        toTypeName = toTypeName if type(toTypeName) is list else [toTypeName]
        direction = self.directionList if direction == 'isotropy' else direction
        direction = direction if type(direction) is list else [direction]
        for toName in toTypeName:
            i = self.get_index_by_name(toName)
            for dName in direction:
                d = self.get_index_by_direction(dName)
                self._compatibility[d, i, j] = value
                if dual:
                    od = self.get_index_by_direction(self.oppositeDirection[dName])
                    self._compatibility[od, j, i] = value

    def is_allowed(self, fromTypeName: str, toTypeName: str, direction: str) -> bool:
        d = self.get_index_by_direction(direction)
        return bool(self._compatibility[d, self.get_index_by_name(toTypeName), self.get_index_by_name(fromTypeName)])

    def rules(self) -> Set[Tuple[str, str, str]]:
        """every allowed (tile, neighbour tile, direction) triple"""
        return {
            (self._index_to_name[int(j)], self._index_to_name[int(i)], self._index_to_dire[int(d)])
            for d, i, j in zip(*np.nonzero(self._compatibility))
        }

    def pattern_to_names(self, pattern) -> np.ndarray:
        name_array = np.array(self.typeList)
        return name_array[pattern]


if __name__ == '__main__':
    from tileplane.WFC.patterns import COAST_PATTERN
    tileHandler = TileHandler.from_pattern(COAST_PATTERN)
    print(tileHandler)
    print(sorted(tileHandler.rules()))
