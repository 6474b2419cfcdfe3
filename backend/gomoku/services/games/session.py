"""Participant sessions: routes inbound actions to rooms and games.

``SessionManager.handle`` is the single entry point for inbound events. It
never talks to the transport; every call returns the notifications the
transport should deliver, in order.
"""
import logging
import random
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set

from gomoku.errors import (
    AlreadySeated,
    CapacityViolation,
    GameNotFinished,
    GameNotInProgress,
    InvalidPayload,
    OpponentAbsent,
    ProtocolViolation,
    UnknownEvent,
)
from gomoku.models import BLACK, WHITE, Game, Room
from .registry import RoomRegistry

logger = logging.getLogger(__name__)

GAME_OVER_REASONS = {Game.WON: 'five-in-a-row', Game.DRAWN: 'draw'}


@dataclass(frozen=True)
class Notification:
    """One outbound event. ``to=None`` addresses every connected participant."""
    to: Optional[str]
    event: str
    payload: Any = None


class SessionManager:
    def __init__(self, registry: RoomRegistry, randomize: bool = True,
                 rng: Optional[random.Random] = None):
        self.registry = registry
        self.randomize = randomize
        self.rng = rng or random.Random()
        self._sessions: Dict[str, int] = {}
        # Participants whose disconnect has been handled; a late join from them is dropped
        self._departed: Set[str] = set()
        # Lock order is always room lock first, then the session map lock
        self._lock = threading.RLock()
        self._room_locks = {room.id: threading.RLock() for room in registry}
        self._handlers: Dict[str, Callable[[str, Any], List[Notification]]] = {
            'joinRoom': self._join_room,
            'play': self._play,
            'rematchRequest': self._rematch_request,
            'exitGame': self._exit_game,
            'returnToLobby': self._return_to_lobby,
        }

    # ---- public entry points ----

    def connect(self, participant_id: str) -> List[Notification]:
        logger.info(f"[connect] sid={participant_id}")
        with self._lock:
            self._departed.discard(participant_id)
        return [Notification(participant_id, 'updateRooms', self.registry.snapshot())]

    def disconnect(self, participant_id: str) -> List[Notification]:
        logger.info(f"[disconnect] sid={participant_id}")
        with self._lock:
            self._departed.add(participant_id)
        return self._guarded(participant_id, 'disconnect',
                             lambda: self._leave(participant_id, 'disconnect'))

    def handle(self, participant_id: str, event: str, payload: Any = None) -> List[Notification]:
        handler = self._handlers.get(event)
        if handler is None:
            return self._guarded(participant_id, event, self._unknown_event(event))
        return self._guarded(participant_id, event, lambda: handler(participant_id, payload))

    def room_of(self, participant_id: str) -> Optional[Room]:
        with self._lock:
            room_id = self._sessions.get(participant_id)
        return self.registry.find_by_id(room_id) if room_id is not None else None

    def _guarded(self, participant_id: str, event: str,
                 action: Callable[[], List[Notification]]) -> List[Notification]:
        try:
            return action()
        except ProtocolViolation as exc:
            logger.info(f"[reject] sid={participant_id} event={event} code={exc.code}")
            return [Notification(participant_id, 'error', exc.to_dict())]
        except Exception:
            # A fault in one room's handling must not take down the others
            logger.exception(f"[fault] sid={participant_id} event={event}")
            return []

    @staticmethod
    def _unknown_event(event: str) -> Callable[[], List[Notification]]:
        def _raise():
            raise UnknownEvent(f"Unknown event: {event}")
        return _raise

    # ---- event handlers ----

    def _join_room(self, participant_id: str, payload: Any) -> List[Notification]:
        room = self.registry.find_by_id(self._room_id(payload))
        # Claim and seat under the room lock so a leave for this room can not interleave
        with self._room_locks[room.id]:
            with self._lock:
                if participant_id in self._departed:
                    return self._ignored(participant_id, 'joinRoom')
                if participant_id in self._sessions:
                    raise AlreadySeated()
                self._sessions[participant_id] = room.id
            try:
                seat = room.try_join(participant_id)
            except CapacityViolation as exc:
                with self._lock:
                    self._sessions.pop(participant_id, None)
                logger.info(f"[join-reject] room={room.id} sid={participant_id} reason={exc.reason}")
                return [Notification(participant_id, 'roomFull', {'roomId': room.id, 'reason': exc.reason})]
            logger.info(f"[join] room={room.id} sid={participant_id} seat={seat}")
            if room.is_ready:
                out = self._start_game(room)
            else:
                out = [Notification(participant_id, 'waitingOpponent', {'roomId': room.id})]
            out.append(self._rooms_update())
        return out

    def _play(self, participant_id: str, payload: Any) -> List[Notification]:
        room = self.room_of(participant_id)
        if room is None:
            return self._ignored(participant_id, 'play')
        x, y = self._coords(payload)
        with self._room_locks[room.id]:
            if not room.has(participant_id):
                return self._ignored(participant_id, 'play')
            game = room.game
            if game is None or game.is_finished:
                raise GameNotInProgress()
            if room.opponent_of(participant_id) is None:
                raise OpponentAbsent()
            result = game.apply_move(participant_id, x, y)
            recipients = list(room.seats)
        move = {'x': result.x, 'y': result.y, 'color': result.color, 'nextTurn': result.next_turn}
        out = [Notification(seat, 'move', move) for seat in recipients]
        if result.is_terminal:
            logger.info(f"[game-over] room={room.id} status={result.status} winner={result.winner}")
            over = {'winnerColor': result.winner, 'reason': GAME_OVER_REASONS[result.status]}
            out.extend(Notification(seat, 'gameOver', over) for seat in recipients)
        return out

    def _rematch_request(self, participant_id: str, payload: Any) -> List[Notification]:
        room = self.room_of(participant_id)
        if room is None:
            return self._ignored(participant_id, 'rematchRequest')
        with self._room_locks[room.id]:
            if not room.has(participant_id):
                return self._ignored(participant_id, 'rematchRequest')
            if room.game is None:
                raise GameNotFinished()
            opponent = room.opponent_of(participant_id)
            if opponent is None:
                raise OpponentAbsent()
            if room.game.vote_rematch(participant_id):
                logger.info(f"[rematch] room={room.id} both seats voted")
                return self._start_game(room)
        logger.info(f"[rematch-vote] room={room.id} sid={participant_id}")
        return [Notification(opponent, 'opponentRematchWaiting', {'roomId': room.id})]

    def _exit_game(self, participant_id: str, payload: Any) -> List[Notification]:
        room = self.room_of(participant_id)
        if room is None:
            return self._ignored(participant_id, 'exitGame')
        with self._room_locks[room.id]:
            others = room.exit(participant_id)
        logger.info(f"[exit] room={room.id} sid={participant_id}")
        return [Notification(other, 'opponentLeft', {'reason': 'exit'}) for other in others]

    def _return_to_lobby(self, participant_id: str, payload: Any) -> List[Notification]:
        return self._leave(participant_id, 'lobby')

    # ---- helpers ----

    def _leave(self, participant_id: str, reason: str) -> List[Notification]:
        room = self.room_of(participant_id)
        if room is None:
            return self._ignored(participant_id, reason)
        with self._room_locks[room.id]:
            with self._lock:
                if self._sessions.get(participant_id) != room.id:
                    return self._ignored(participant_id, reason)
                self._sessions.pop(participant_id)
            others = [seat for seat in room.seats if seat != participant_id]
            room.leave(participant_id)
            logger.info(f"[leave] room={room.id} sid={participant_id} reason={reason} state={room.state}")
            out = [Notification(other, 'opponentLeft', {'reason': reason}) for other in others]
            out.append(self._rooms_update())
        return out

    def _start_game(self, room: Room) -> List[Notification]:
        seat_a, seat_b = room.seats
        game = Game.start_new(seat_a, seat_b, randomize=self.randomize, rng=self.rng,
                              size=self.registry.board_size)
        room.game = game
        logger.info(f"[start] room={room.id} black={game.seat_of(BLACK)} white={game.seat_of(WHITE)}")
        out = []
        for seat in room.seats:
            color = game.color_of(seat)
            out.append(Notification(seat, 'startGame', {
                'roomId': room.id,
                'yourColor': color,
                'yourTurn': color == game.turn_color,
            }))
        return out

    def _rooms_update(self) -> Notification:
        return Notification(None, 'updateRooms', self.registry.snapshot())

    @staticmethod
    def _ignored(participant_id: str, event: str) -> List[Notification]:
        logger.debug(f"[ignore] sid={participant_id} event={event} not seated")
        return []

    @staticmethod
    def _room_id(payload: Any):
        if isinstance(payload, dict):
            payload = payload.get('roomId', payload.get('room_id'))
        if payload is None or isinstance(payload, bool):
            raise InvalidPayload('roomId is required')
        return payload

    @staticmethod
    def _coords(payload: Any):
        try:
            x, y = payload['x'], payload['y']
        except (KeyError, TypeError):
            raise InvalidPayload('x and y are required') from None
        for value in (x, y):
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidPayload('x and y must be integers')
        return x, y
