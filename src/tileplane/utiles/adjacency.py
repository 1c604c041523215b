import numpy as np


# (row offset, col offset) -> direction name, 4-connectivity only
DIRECTION_OFFSETS = {
    "up": (-1, 0),
    "right": (0, 1),
    "down": (1, 0),
    "left": (0, -1),
}

DIRECTION_PAIRS = (("up", "down"), ("left", "right"))


def build_grid_adjacency(height, width):
    """
    Build a directed neighbour table for a regular grid in CSR form.

    Cells are indexed row-major (index = row * width + col). For every cell
    the in-bounds orthogonal neighbours are listed in up, right, down, left
    order together with the direction in which they lie.

    returns a dict with:
        row_ptr: (num_elements + 1,) offsets into col_idx / directions
        col_idx: flat neighbour indices
        directions: direction name of each neighbour, parallel to col_idx
        num_elements: height * width
        height, width: grid shape
    """
    if height < 1 or width < 1:
        raise ValueError(f"grid must be at least 1x1, got {height}x{width}")
    num_elements = height * width

    def idx(i, j):
        return i * width + j

    row_ptr = np.zeros(num_elements + 1, dtype=np.int32)
    col_idx = []
    directions = []

    for i in range(height):
        for j in range(width):
            current_idx = idx(i, j)
            neighbors = []
            neighbor_directions = []
            for dstr, (di, dj) in DIRECTION_OFFSETS.items():
                ni, nj = i + di, j + dj
                if 0 <= ni < height and 0 <= nj < width:
                    neighbors.append(idx(ni, nj))
                    neighbor_directions.append(dstr)

            col_idx.extend(neighbors)
            directions.extend(neighbor_directions)
            row_ptr[current_idx + 1] = row_ptr[current_idx] + len(neighbors)

    return {
        'row_ptr': row_ptr,
        'col_idx': np.array(col_idx, dtype=np.int32),
        'directions': directions,
        'num_elements': num_elements,
        'height': height,
        'width': width,
    }


def get_neighbors(csr, index):
    start = csr['row_ptr'][index]
    end = csr['row_ptr'][index + 1]
    neighbors = csr['col_idx'][start:end]
    neighbors_dirs = csr['directions'][start:end]
    return neighbors, neighbors_dirs


if __name__ == '__main__':
    adj = build_grid_adjacency(height=3, width=3)

    print("cells:", adj['num_elements'])
    print("row_ptr:", adj['row_ptr'])
    print("col_idx:", adj['col_idx'])
    for i in range(adj['num_elements']):
        neighbors, direction = get_neighbors(adj, i)
        print(f"cell {i} neighbours: {neighbors}, directions: {direction}")
