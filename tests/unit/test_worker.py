from unittest.mock import MagicMock, patch

from formconvert.worker.worker import Worker


def _make_worker() -> tuple[Worker, MagicMock, MagicMock]:
    """Create a Worker with mocked dependencies."""
    mock_repo = MagicMock()
    mock_runner = MagicMock()
    settings = MagicMock(poll_interval_seconds=1)
    worker = Worker(mock_repo, mock_runner, settings)
    return worker, mock_repo, mock_runner


class TestWorkerDispatch:
    def test_dispatches_conversion_to_runner(self) -> None:
        worker, _repo, mock_runner = _make_worker()

        with patch.object(
            worker, "_next_pending_id", side_effect=["c1", KeyboardInterrupt]
        ):
            worker.run()

        mock_runner.run.assert_called_once_with("c1")

    def test_stops_after_max_conversions(self) -> None:
        worker, mock_repo, mock_runner = _make_worker()
        mock_repo.find_next_pending_id.side_effect = ["c1", "c2", "c3"]

        worker.run(max_conversions=2)

        assert [c.args[0] for c in mock_runner.run.call_args_list] == ["c1", "c2"]


class TestWorkerSleep:
    def test_sleeps_when_nothing_pending(self) -> None:
        worker, _repo, _runner = _make_worker()

        with (
            patch.object(
                worker, "_next_pending_id", side_effect=[None, KeyboardInterrupt]
            ),
            patch("formconvert.worker.worker.time.sleep") as mock_sleep,
        ):
            worker.run()

        mock_sleep.assert_called_once_with(1)


class TestWorkerErrors:
    def test_database_error_is_retried(self) -> None:
        worker, mock_repo, mock_runner = _make_worker()
        mock_repo.find_next_pending_id.side_effect = [RuntimeError("db down"), "c1"]

        with patch("formconvert.worker.worker.time.sleep") as mock_sleep:
            worker.run(max_conversions=1)

        mock_sleep.assert_called_once_with(1)
        mock_runner.run.assert_called_once_with("c1")


class TestWorkerShutdown:
    def test_handles_keyboard_interrupt(self) -> None:
        worker, _repo, _runner = _make_worker()

        with patch.object(worker, "_next_pending_id", side_effect=KeyboardInterrupt):
            worker.run()  # Should not raise
