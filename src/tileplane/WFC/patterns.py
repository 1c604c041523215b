LAND = 'L'
COAST = 'C'
SEA = 'S'

# land on top, a coast line, open sea below
COAST_PATTERN = (
    "LLLLL",
    "LLLLL",
    "LCCCL",
    "CSSSC",
    "SSSSS",
    "SSSSS",
    "SSSSS",
)


def mirror_vertically(pattern):
    """rows in reverse order, as a new list; the input is not modified"""
    return [list(row) for row in reversed(list(pattern))]
