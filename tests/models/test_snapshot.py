"""
Tests for snapshot models.
"""
from src.message_queue import Channel, MessageStatus, create_message
from src.models.snapshot import EngineSnapshot, WorkerState


class TestWorkerState:
    def test_idle_worker(self):
        state = WorkerState()

        assert state.active is False
        assert state.model_dump()["active"] is False

    def test_busy_worker(self):
        message = create_message(Channel.EMAIL, "POST /login", 0.0).with_status(MessageStatus.PROCESSING)

        state = WorkerState(current_message=message)

        assert state.active is True
        assert state.model_dump()["current_message"]["id"] == message.id


class TestEngineSnapshot:
    def test_message_ids_covers_queues_workers_and_dlq(self):
        queued = create_message(Channel.EMAIL, "POST /login", 0.0)
        in_flight = create_message(Channel.PUSH, "POST /friend-req", 0.0)
        dead = create_message(Channel.IN_APP, "POST /post", 0.0).with_status(MessageStatus.FAILED)

        snapshot = EngineSnapshot(
            clock=0.0,
            running=True,
            queues={Channel.EMAIL: [queued], Channel.PUSH: [], Channel.IN_APP: []},
            workers={
                Channel.EMAIL: WorkerState(),
                Channel.PUSH: WorkerState(current_message=in_flight),
                Channel.IN_APP: WorkerState(),
            },
            dlq=[dead],
        )

        assert sorted(snapshot.message_ids()) == sorted([queued.id, in_flight.id, dead.id])

    def test_json_round_trip_keeps_channel_keys(self):
        snapshot = EngineSnapshot(
            clock=1.5,
            running=False,
            queues={Channel.IN_APP: []},
            workers={Channel.IN_APP: WorkerState()},
        )

        data = snapshot.model_dump(mode="json")

        assert list(data["queues"]) == ["inApp"]
        assert EngineSnapshot.model_validate(data) == snapshot
