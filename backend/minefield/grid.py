from collections import namedtuple

GRID_SIZE = 10
MAX_BOMBS = 3

Coord = namedtuple('Coord', ['x', 'y'])


def is_valid(x, y) -> bool:
    return 0 <= x < GRID_SIZE and 0 <= y < GRID_SIZE


def parse_coord(payload):
    """Read a ``{"x": int, "y": int}`` payload into a Coord.

    Returns None when the payload is not a mapping or either axis is not a
    plain integer. Bounds are not checked here; see ``is_valid``.
    """
    if not isinstance(payload, dict):
        return None
    x, y = payload.get('x'), payload.get('y')
    for value in (x, y):
        if isinstance(value, bool) or not isinstance(value, int):
            return None
    return Coord(x, y)
