from typing import Dict, Iterator, List

from gomoku.errors import UnknownRoom
from gomoku.models import BOARD_SIZE, Room


class RoomRegistry:
    """Fixed pool of rooms created once at startup, ids 1..room_count."""

    def __init__(self, room_count: int = 3, board_size: int = BOARD_SIZE):
        self.board_size = board_size
        self._rooms: Dict[int, Room] = {i: Room(i) for i in range(1, room_count + 1)}

    def __iter__(self) -> Iterator[Room]:
        return iter(self._rooms.values())

    def __len__(self) -> int:
        return len(self._rooms)

    def find_by_id(self, room_id) -> Room:
        # Only exact integers or digit strings; floats would silently truncate
        if isinstance(room_id, str) and room_id.isdecimal():
            room_id = int(room_id)
        if isinstance(room_id, bool) or not isinstance(room_id, int):
            raise UnknownRoom()
        room = self._rooms.get(room_id)
        if room is None:
            raise UnknownRoom()
        return room

    def snapshot(self) -> List[dict]:
        return [room.snapshot() for room in self._rooms.values()]
