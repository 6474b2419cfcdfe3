"""Error taxonomy for the room/session core.

Protocol violations are reported to the offending participant only and never
change state. Capacity violations are reported to the requester as
``roomFull``. Actions from participants without a room are ignored outright,
so they have no exception class.
"""


class GomokuError(Exception):
    code = 'error'
    message = 'Request rejected'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'code': self.code, 'message': self.message}


class ProtocolViolation(GomokuError):
    code = 'protocol_violation'


class GameNotInProgress(ProtocolViolation):
    code = 'game_not_in_progress'
    message = 'No game in progress'


class GameNotFinished(ProtocolViolation):
    code = 'game_not_finished'
    message = 'Rematch is only available once the game is over'


class NotSeated(ProtocolViolation):
    code = 'not_seated'
    message = 'You hold no seat in this game'


class OutOfTurn(ProtocolViolation):
    code = 'out_of_turn'
    message = 'It is not your turn'


class OutOfBounds(ProtocolViolation):
    code = 'out_of_bounds'
    message = 'Coordinates are outside the board'


class CellOccupied(ProtocolViolation):
    code = 'cell_occupied'
    message = 'That cell is already occupied'


class OpponentAbsent(ProtocolViolation):
    code = 'opponent_absent'
    message = 'Your opponent has left the room'


class AlreadySeated(ProtocolViolation):
    code = 'already_seated'
    message = 'Return to the lobby before joining another room'


class UnknownRoom(ProtocolViolation):
    code = 'unknown_room'
    message = 'No such room'


class UnknownEvent(ProtocolViolation):
    code = 'unknown_event'
    message = 'Unknown event'


class InvalidPayload(ProtocolViolation):
    code = 'invalid_payload'
    message = 'Malformed request'


class CapacityViolation(GomokuError):
    code = 'capacity_violation'
    reason = 'full'


class RoomFull(CapacityViolation):
    code = 'room_full'
    reason = 'full'
    message = 'Room is full'


class RoomLocked(CapacityViolation):
    code = 'room_locked'
    reason = 'locked'
    message = 'A match is already under way in this room'
