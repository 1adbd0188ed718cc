from typing import Dict, Iterable

from riddlescape.catalog import CATALOG, Puzzle
from riddlescape.errors import InvalidAccessCode, ValidationError


def normalize_code(code) -> str:
    if not isinstance(code, str):
        raise ValidationError('Access code is required.')
    normalized = code.strip().upper()
    if not normalized:
        raise ValidationError('Access code is required.')
    return normalized


class AccessCodeDirectory:
    """Static code -> route lookup.

    Codes are not consumed by a lookup, and a resolved route is only a
    navigation hint for the browser: nothing checks that the previous
    puzzle was actually solved.
    """

    def __init__(self, puzzles: Iterable[Puzzle]):
        self._routes: Dict[str, str] = {p.access_code.upper(): p.route for p in puzzles}

    def resolve(self, code) -> str:
        normalized = normalize_code(code)
        route = self._routes.get(normalized)
        if route is None:
            raise InvalidAccessCode()
        return route

    def __contains__(self, code) -> bool:
        try:
            self.resolve(code)
        except (InvalidAccessCode, ValidationError):
            return False
        return True

    def __len__(self) -> int:
        return len(self._routes)


directory = AccessCodeDirectory(CATALOG)
