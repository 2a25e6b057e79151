"""Service-level tests for TaskService with mocked models."""
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from tasktrack.middleware.error_middleware import Forbidden, InvalidArgument, NotFound, Unauthenticated
from tasktrack.services.task_service import TaskService

MANAGER = "mAnAgEr0000000000001"
OTHER = "mAnAgEr0000000000002"
TASK = "tAsK0000000000000001"
E1 = "eMpLoYeE000000000001"
E2 = "eMpLoYeE000000000002"


def stored_task(**overrides):
    task = {
        "id": TASK,
        "title": "Task",
        "details": "Details",
        "date": datetime(2024, 3, 15, tzinfo=timezone.utc),
        "assigned_to": [E1],
        "created_by": MANAGER,
    }
    task.update(overrides)
    return task


@pytest.fixture
def task_model():
    model = Mock()
    model.get_task.return_value = stored_task()
    model.update_task.return_value = True
    return model


@pytest.fixture
def user_model():
    return Mock()


@pytest.fixture
def service(task_model, user_model):
    return TaskService(task_model, user_model)


class TestCreate:

    def test_passes_parsed_date_and_deduped_ids(self, service, task_model, user_model):
        task_model.create_task.return_value = stored_task(assigned_to=[E1, E2])

        service.create_task(MANAGER, {
            "title": "T", "details": "D", "date": "2024-03-15T00:00:00Z", "employeeIds": [E1, E2, E1]
        })

        kwargs = task_model.create_task.call_args.kwargs
        assert kwargs["date"] == datetime(2024, 3, 15, tzinfo=timezone.utc)
        assert kwargs["assigned_to"] == [E1, E2]
        assert kwargs["created_by"] == MANAGER
        user_model.link_to_manager.assert_called_once_with([E1, E2], MANAGER)

    def test_no_employees_skips_linking(self, service, task_model, user_model):
        task_model.create_task.return_value = stored_task(assigned_to=[])

        service.create_task(MANAGER, {"title": "T", "details": "D", "date": "2024-03-15"})

        user_model.link_to_manager.assert_not_called()

    def test_link_failure_is_logged_not_raised(self, service, task_model, user_model, caplog):
        task_model.create_task.return_value = stored_task()
        user_model.link_to_manager.side_effect = RuntimeError("partition")

        task = service.create_task(MANAGER, {
            "title": "T", "details": "D", "date": "2024-03-15", "employeeIds": [E1]
        })

        assert task["id"] == TASK
        assert "Failed to link employees" in caplog.text

    def test_epoch_millis_date(self, service, task_model):
        task_model.create_task.return_value = stored_task()

        service.create_task(MANAGER, {"title": "T", "details": "D", "date": 1710460800000})

        assert task_model.create_task.call_args.kwargs["date"] == datetime(2024, 3, 15, tzinfo=timezone.utc)


class TestAssign:

    def test_missing_manager_is_unauthenticated(self, service, task_model):
        with pytest.raises(Unauthenticated):
            service.assign_task(TASK, None, [E1])
        task_model.get_task.assert_not_called()

    def test_only_new_ids_are_added(self, service, task_model):
        service.assign_task(TASK, MANAGER, [E1, E2, E2])
        task_model.add_assignees.assert_called_once_with(TASK, [E2])

    def test_nothing_new_means_no_write(self, service, task_model):
        task = service.assign_task(TASK, MANAGER, [E1])
        task_model.add_assignees.assert_not_called()
        assert task["assigned_to"] == [E1]

    def test_foreign_task(self, service):
        with pytest.raises(Forbidden):
            service.assign_task(TASK, OTHER, [E2])


class TestUpdate:

    session = {"id": MANAGER, "role": "Manager"}

    def test_no_changes_returns_task_without_write(self, service, task_model):
        task = service.update_task(TASK, MANAGER, self.session, {"title": "", "employeeIds": [E1]})

        assert task == stored_task()
        task_model.update_task.assert_not_called()

    def test_only_changed_fields_are_written(self, service, task_model):
        service.update_task(TASK, MANAGER, self.session, {
            "title": "New", "details": None, "employeeIds": [E2, E1, E2]
        })

        task_id, fields = task_model.update_task.call_args.args
        assert task_id == TASK
        assert fields == {"title": "New", "assigned_to": [E2, E1]}

    @pytest.mark.parametrize("payload", [{"title": 42}, {"details": ["x"]}, {"title": "New", "details": {"a": 1}}])
    def test_non_string_text_fields_rejected(self, service, task_model, payload):
        with pytest.raises(InvalidArgument):
            service.update_task(TASK, MANAGER, self.session, payload)
        task_model.update_task.assert_not_called()

    def test_falsy_date_is_ignored(self, service, task_model):
        service.update_task(TASK, MANAGER, self.session, {"title": "New", "date": ""})
        assert "date" not in task_model.update_task.call_args.args[1]

    def test_non_list_employee_ids_are_ignored(self, service, task_model):
        service.update_task(TASK, MANAGER, self.session, {"title": "New", "employeeIds": E2})
        assert "assigned_to" not in task_model.update_task.call_args.args[1]

    def test_vanished_task(self, service, task_model):
        task_model.update_task.return_value = False
        with pytest.raises(NotFound) as exc:
            service.update_task(TASK, MANAGER, self.session, {"title": "New"})
        assert exc.value.message == "Task not updated or not found"

    def test_identity_checked_before_task_lookup(self, service, task_model):
        with pytest.raises(Unauthenticated):
            service.update_task(TASK, OTHER, self.session, {"title": "New"})
        task_model.get_task.assert_not_called()


class TestDelete:

    def test_delete_own_task(self, service, task_model):
        service.delete_task(TASK, {"id": MANAGER, "role": "Manager"})
        task_model.delete_task.assert_called_once_with(TASK)

    def test_malformed_id_is_forbidden_without_lookup(self, service, task_model):
        with pytest.raises(Forbidden):
            service.delete_task("nope", {"id": MANAGER, "role": "Manager"})
        task_model.get_task.assert_not_called()
        task_model.delete_task.assert_not_called()


class TestList:

    def test_manager_query(self, service, task_model):
        task_model.find_in_range.return_value = [stored_task()]

        service.list_tasks(MANAGER, {"role": "Manager", "date": "2024-03-15"})

        task_model.find_in_range.assert_called_once_with(
            "created_by", "==", MANAGER,
            datetime(2024, 3, 1, tzinfo=timezone.utc),
            datetime(2024, 3, 31, 23, 59, 59, 999000, tzinfo=timezone.utc),
        )

    def test_employee_query(self, service, task_model):
        task_model.find_in_range.return_value = [stored_task()]

        service.list_tasks(E1, {"role": "Employee", "date": "2024-02-10"})

        field, op, value, start, end = task_model.find_in_range.call_args.args
        assert (field, op, value) == ("assigned_to", "array_contains", E1)
        assert end == datetime(2024, 2, 29, 23, 59, 59, 999000, tzinfo=timezone.utc)

    def test_empty_is_not_found(self, service, task_model):
        task_model.find_in_range.return_value = []
        with pytest.raises(NotFound) as exc:
            service.list_tasks(E1, {"role": "Employee", "date": "2024-02-10"})
        assert exc.value.message == "No tasks found for the specified month for the Employee"


class TestDetails:

    def test_empty_id(self, service):
        with pytest.raises(InvalidArgument) as exc:
            service.get_task_details("")
        assert exc.value.message == "Task ID is required"

    def test_names_resolved_in_assignment_order(self, service, task_model, user_model):
        task_model.get_task.return_value = stored_task(assigned_to=[E2, E1])
        user_model.get_names.return_value = {E1: "One", E2: "Two"}

        task = service.get_task_details(TASK)

        assert task["assigned_to"] == [{"id": E2, "name": "Two"}, {"id": E1, "name": "One"}]
