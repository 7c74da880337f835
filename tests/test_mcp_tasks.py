import pytest

from taskdeck.exceptions import LockError, NetworkError, PersistenceError
from taskdeck.models.postal import AddressLookup, RegionLookup
from taskdeck.models.tasks import DailyCount, TaskStats
from conftest import make_task, ms

SAMPLE = make_task("t1", due_date=ms(2024, 1, 31))


@pytest.fixture(autouse=True)
def mock_svc(mocker):
    return mocker.patch("taskdeck.mcp_server.tasks_service")


@pytest.fixture
def mock_postal(mocker):
    return mocker.patch("taskdeck.mcp_server.postal_service")


class TestTaskList:
    def test_returns_dict(self, mock_svc):
        mock_svc.list_tasks.return_value = [SAMPLE]
        from taskdeck.mcp_server import task_list
        result = task_list.fn()
        assert result["count"] == 1
        assert result["tasks"][0]["dueDate"] == ms(2024, 1, 31)
        assert "completedAt" not in result["tasks"][0]

    def test_lock_error_returns_dict_not_raises(self, mock_svc):
        mock_svc.list_tasks.side_effect = LockError("Failed to lock state")
        from taskdeck.mcp_server import task_list
        result = task_list.fn()
        assert result["error"] == "lock_error"


class TestTaskAdd:
    def test_builds_recurring_task(self, mock_svc):
        mock_svc.new_task.return_value = SAMPLE
        mock_svc.add_task.return_value = [SAMPLE]
        from taskdeck.mcp_server import task_add
        result = task_add.fn(text="Pay rent", due_date=ms(2024, 1, 31), recurrence_freq="monthly")
        assert result["count"] == 1
        _, kwargs = mock_svc.new_task.call_args
        assert kwargs["recurrence_rule"] == {"freq": "monthly", "interval": 1}
        assert kwargs["due_date"] == ms(2024, 1, 31)
        mock_svc.add_task.assert_called_once_with(SAMPLE)

    def test_invalid_priority(self, mock_svc):
        from taskdeck.services.tasks import new_task
        mock_svc.new_task.side_effect = new_task
        from taskdeck.mcp_server import task_add
        result = task_add.fn(text="x", priority="urgent")
        assert result["error"] == "invalid_task"
        mock_svc.add_task.assert_not_called()

    def test_write_failure(self, mock_svc):
        mock_svc.new_task.return_value = SAMPLE
        mock_svc.add_task.side_effect = PersistenceError("Failed to write")
        from taskdeck.mcp_server import task_add
        assert task_add.fn(text="x")["error"] == "persistence_error"


class TestTaskToggle:
    def test_forwards_id(self, mock_svc):
        mock_svc.toggle_task.return_value = [SAMPLE]
        from taskdeck.mcp_server import task_toggle
        task_toggle.fn(task_id="t1")
        mock_svc.toggle_task.assert_called_once_with("t1")


class TestTaskUpdate:
    def test_forwards_only_given_fields(self, mock_svc):
        mock_svc.patch_task.return_value = [make_task("t1", text="Renamed")]
        from taskdeck.mcp_server import task_update
        result = task_update.fn(task_id="t1", text="Renamed")
        assert result["tasks"][0]["text"] == "Renamed"
        mock_svc.patch_task.assert_called_once_with("t1", {"text": "Renamed"})
        mock_svc.update_task.assert_not_called()

    def test_unknown_id_returns_current_list(self, mock_svc, store):
        store.add_task(make_task("a"))
        mock_svc.patch_task.side_effect = store.patch_task
        from taskdeck.mcp_server import task_update
        result = task_update.fn(task_id="ghost", text="x")
        assert "error" not in result
        assert result["count"] == 1
        assert result["tasks"][0]["id"] == "a"

    def test_merge_keeps_fields_on_real_store(self, mock_svc, store):
        store.add_task(make_task("a", notes="keep me"))
        store.toggle_task("a")
        mock_svc.patch_task.side_effect = store.patch_task
        from taskdeck.mcp_server import task_update
        [task] = task_update.fn(task_id="a", priority="high")["tasks"]
        assert (task["notes"], task["priority"], task["completed"]) == ("keep me", "high", True)

    def test_invalid_priority(self, mock_svc, store):
        store.add_task(make_task("a"))
        mock_svc.patch_task.side_effect = store.patch_task
        from taskdeck.mcp_server import task_update
        assert task_update.fn(task_id="a", priority="urgent")["error"] == "invalid_task"
        assert store.list_tasks()[0].priority is None


class TestTaskDelete:
    def test_forwards_id(self, mock_svc):
        mock_svc.delete_task.return_value = []
        from taskdeck.mcp_server import task_delete
        assert task_delete.fn(task_id="t1") == {"tasks": [], "count": 0}


class TestTaskStats:
    def test_returns_dict(self, mock_svc):
        mock_svc.task_stats.return_value = TaskStats(
            total=1, completed=0, active=1, completion_rate=0,
            weekly_activity=[DailyCount(date="2024-02-01", count=0)],
        )
        from taskdeck.mcp_server import task_stats
        assert task_stats.fn()["total"] == 1


class TestPostal:
    def test_address(self, mock_postal):
        mock_postal.lookup_address.return_value = AddressLookup(zipcode="1000001", address="東京都千代田区千代田")
        from taskdeck.mcp_server import postal_lookup_address
        assert postal_lookup_address.fn(zipcode="1000001")["address"] == "東京都千代田区千代田"

    def test_network_error(self, mock_postal):
        mock_postal.lookup_address.side_effect = NetworkError("Network error: timed out")
        from taskdeck.mcp_server import postal_lookup_address
        assert postal_lookup_address.fn(zipcode="1000001")["error"] == "network_error"

    def test_region(self, mock_postal):
        mock_postal.lookup_region.return_value = RegionLookup(zipcode="1000001", region="東京都千代田区")
        from taskdeck.mcp_server import postal_lookup_region
        assert postal_lookup_region.fn(zipcode="1000001")["region"] == "東京都千代田区"
