"""
tests/test_subscription.py
Snapshot feed: delivery, replay, unsubscribe and error routing.
"""

from unittest.mock import MagicMock

from inbox.subscription import SnapshotFeed


class TestSnapshotFeed:

    def test_publish_reaches_every_subscriber(self):
        feed = SnapshotFeed()
        a, b = MagicMock(), MagicMock()
        feed.subscribe(a)
        feed.subscribe(b)
        feed.publish(["t1"])
        a.assert_called_once_with(["t1"])
        b.assert_called_once_with(["t1"])

    def test_late_subscriber_gets_latest(self):
        feed = SnapshotFeed()
        feed.publish("first")
        feed.publish("second")
        late = MagicMock()
        feed.subscribe(late)
        late.assert_called_once_with("second")

    def test_no_replay_before_first_publish(self):
        feed = SnapshotFeed()
        cb = MagicMock()
        feed.subscribe(cb)
        cb.assert_not_called()

    def test_unsubscribe_is_idempotent(self):
        feed = SnapshotFeed()
        cb = MagicMock()
        unsubscribe = feed.subscribe(cb)
        unsubscribe()
        unsubscribe()
        feed.publish("x")
        cb.assert_not_called()
        assert feed.subscriber_count == 0

    def test_failing_callback_routed_to_its_on_error(self):
        feed = SnapshotFeed()
        boom = RuntimeError("render failed")
        bad_error = MagicMock()
        good = MagicMock()
        feed.subscribe(MagicMock(side_effect=boom), bad_error)
        feed.subscribe(good)
        feed.publish("snap")
        bad_error.assert_called_once_with(boom)
        good.assert_called_once_with("snap")

    def test_fail_reaches_error_handlers(self):
        feed = SnapshotFeed()
        on_error = MagicMock()
        feed.subscribe(MagicMock(), on_error)
        feed.subscribe(MagicMock())
        err = ConnectionError("stream closed")
        feed.fail(err)
        on_error.assert_called_once_with(err)

    def test_failing_error_handler_does_not_stop_publish(self):
        feed = SnapshotFeed()
        feed.subscribe(
            MagicMock(side_effect=RuntimeError("render failed")),
            MagicMock(side_effect=RuntimeError("handler failed too")),
        )
        good = MagicMock()
        feed.subscribe(good)
        feed.publish("snap")
        good.assert_called_once_with("snap")

    def test_failing_error_handler_does_not_stop_fail(self):
        feed = SnapshotFeed()
        feed.subscribe(MagicMock(), MagicMock(side_effect=RuntimeError("handler failed")))
        later = MagicMock()
        feed.subscribe(MagicMock(), later)
        err = ConnectionError("stream closed")
        feed.fail(err)
        later.assert_called_once_with(err)
