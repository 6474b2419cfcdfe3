import random
import threading

from gomoku.models import Room
from gomoku.services.games import RoomRegistry, SessionManager


def _assert_all_rooms_reset(manager, registry):
    for room in registry:
        assert room.seats == []
        assert not room.locked
        assert room.game is None
        assert room.state == Room.EMPTY
    assert manager._sessions == {}


def test_disconnect_during_join_does_not_strand_the_seat(manager, registry):
    room = registry.find_by_id(1)
    seating = threading.Event()
    release = threading.Event()
    real_try_join = room.try_join

    def _slow_try_join(participant):
        seating.set()
        assert release.wait(5)
        return real_try_join(participant)

    room.try_join = _slow_try_join
    joiner = threading.Thread(target=manager.handle, args=('a', 'joinRoom', {'roomId': 1}))
    joiner.start()
    assert seating.wait(5)

    leaver = threading.Thread(target=manager.disconnect, args=('a',))
    leaver.start()
    # The disconnect must wait for the join to finish seating
    leaver.join(0.1)
    assert leaver.is_alive()
    release.set()
    joiner.join(5)
    leaver.join(5)
    room.try_join = real_try_join

    assert room.seats == []
    assert manager.room_of('a') is None
    # The room is still usable: a full cycle leaves it empty and unlocked
    manager.handle('b', 'joinRoom', {'roomId': 1})
    manager.handle('c', 'joinRoom', {'roomId': 1})
    assert room.state == Room.PLAYING
    manager.handle('b', 'returnToLobby')
    manager.handle('c', 'returnToLobby')
    _assert_all_rooms_reset(manager, registry)


def test_concurrent_join_leave_disconnect_leaves_rooms_consistent():
    registry = RoomRegistry(room_count=3)
    manager = SessionManager(registry, randomize=True, rng=random.Random(3))
    participants = [f"p{i}" for i in range(12)]
    errors = []

    def _churn(participant, seed):
        rng = random.Random(seed)
        try:
            for _ in range(200):
                action = rng.random()
                if action < 0.5:
                    manager.handle(participant, 'joinRoom', {'roomId': rng.randint(1, 3)})
                elif action < 0.7:
                    manager.handle(participant, 'play', {'x': rng.randrange(15), 'y': rng.randrange(15)})
                else:
                    manager.handle(participant, 'returnToLobby')
                for room in registry:
                    seats = list(room.seats)
                    assert len(seats) <= 2
                    assert len(set(seats)) == len(seats)
            manager.disconnect(participant)
        except Exception as exc:  # surfaced in the main thread
            errors.append(exc)

    threads = [threading.Thread(target=_churn, args=(p, i)) for i, p in enumerate(participants)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(30)

    assert errors == []
    _assert_all_rooms_reset(manager, registry)
