"""
Task operations and the ownership rules around them.

Only the manager recorded in ``created_by`` may assign, update or delete a
task. Creation links unassigned employees to the creating manager as a
separate, best-effort write.
"""
import logging
from typing import Dict, Any, List, Optional

from ..models.task_model import TaskModel
from ..models.user_model import UserModel
from ..middleware.error_middleware import Forbidden, InvalidArgument, NotFound, Unauthenticated
from ..utils.validators import Validators, Helpers, ROLE_MANAGER, ROLE_EMPLOYEE

logger = logging.getLogger(__name__)


class TaskService:

    def __init__(self, task_model: TaskModel, user_model: UserModel):
        self.task_model = task_model
        self.user_model = user_model

    def _get_task_or_404(self, task_id: str) -> Dict[str, Any]:
        task = self.task_model.get_task(task_id)
        if not task:
            raise NotFound("Task not found")
        return task

    def create_task(self, manager_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not Validators.validate_id(manager_id):
            raise InvalidArgument("Invalid manager ID")

        title = payload.get('title')
        details = payload.get('details')
        if not Validators.validate_required_string(title) or not Validators.validate_required_string(details):
            raise InvalidArgument("title and details are required")

        date = Helpers.parse_date(payload.get('date'))
        if date is None:
            raise InvalidArgument("Invalid date format")

        employee_ids = payload.get('employeeIds')
        if employee_ids is None:
            employee_ids = []
        if not Validators.validate_id_list(employee_ids):
            raise InvalidArgument("Invalid employee IDs")
        employee_ids = Helpers.dedupe(employee_ids)

        task = self.task_model.create_task(
            title=title,
            details=details,
            date=date,
            assigned_to=employee_ids,
            created_by=manager_id,
        )
        logger.info(f"Manager {manager_id} created task {task['id']}")

        if employee_ids:
            # Not transactional with the insert above; a failure leaves the
            # task in place with some employees still unlinked.
            try:
                linked = self.user_model.link_to_manager(employee_ids, manager_id)
                logger.info(f"Linked {linked} employee(s) to manager {manager_id}")
            except Exception:
                logger.exception(f"Failed to link employees of task {task['id']} to manager {manager_id}")

        return task

    def assign_task(self, task_id: str, manager_id: Optional[str], employee_ids: Any) -> Dict[str, Any]:
        if not manager_id:
            raise Unauthenticated("User not authenticated")

        if not Validators.validate_id(task_id):
            raise InvalidArgument("Invalid task ID")

        task = self._get_task_or_404(task_id)

        if task['created_by'] != manager_id:
            raise Forbidden("Not authorized to add employees to this task")

        if not Validators.validate_id_list(employee_ids):
            raise InvalidArgument("Invalid employee IDs")

        new_ids = [i for i in Helpers.dedupe(employee_ids) if i not in task['assigned_to']]
        if new_ids:
            self.task_model.add_assignees(task_id, new_ids)

        return self._get_task_or_404(task_id)

    def update_task(self, task_id: str, manager_id: str, current_user: Dict[str, str],
                    payload: Dict[str, Any]) -> Dict[str, Any]:
        if current_user.get('role') != ROLE_MANAGER:
            raise Unauthenticated("User not authenticated")

        authenticated_id = current_user.get('id')
        if not authenticated_id or authenticated_id != manager_id:
            raise Unauthenticated("User not authenticated or does not have permission")

        if not Validators.validate_id(task_id):
            raise InvalidArgument("Invalid task ID")

        task = self._get_task_or_404(task_id)

        if task['created_by'] != authenticated_id:
            raise Forbidden("Not authorized to update this task")

        fields = {}

        for key in ('title', 'details'):
            value = payload.get(key)
            if value is not None and not isinstance(value, str):
                raise InvalidArgument(f"{key} must be a string")
            # empty strings leave the stored value as it is
            if Validators.validate_required_string(value):
                fields[key] = value

        if payload.get('date'):
            date = Helpers.parse_date(payload['date'])
            if date is None:
                raise InvalidArgument("Invalid date format")
            fields['date'] = date

        employee_ids = payload.get('employeeIds')
        if isinstance(employee_ids, list):
            if not Validators.validate_id_list(employee_ids):
                raise InvalidArgument("Invalid employee IDs in employeeIds array")

            new_assigned = Helpers.dedupe(employee_ids)
            if set(new_assigned) != set(task['assigned_to']):
                fields['assigned_to'] = new_assigned

        if not fields:
            return task

        if not self.task_model.update_task(task_id, fields):
            raise NotFound("Task not updated or not found")

        return self._get_task_or_404(task_id)

    def delete_task(self, task_id: str, current_user: Dict[str, str]) -> None:
        if current_user.get('role') != ROLE_MANAGER:
            raise Unauthenticated("User not authenticated")

        manager_id = current_user['id']

        # Absent and foreign tasks answer the same way
        task = self.task_model.get_task(task_id) if Validators.validate_id(task_id) else None
        if not task or task['created_by'] != manager_id:
            raise Forbidden("Not authorized to delete this task")

        self.task_model.delete_task(task_id)
        logger.info(f"Manager {manager_id} deleted task {task_id}")

    def list_tasks(self, subject_id: str, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not Validators.validate_id(subject_id):
            raise InvalidArgument("Invalid ID")

        date = Helpers.parse_date(payload.get('date'))
        if date is None:
            raise InvalidArgument("Invalid date format")

        role = payload.get('role')
        if role == ROLE_MANAGER:
            field, op = 'created_by', '=='
        elif role == ROLE_EMPLOYEE:
            field, op = 'assigned_to', 'array_contains'
        else:
            raise InvalidArgument("Invalid role")

        start, end = Helpers.month_bounds(date)
        logger.debug(f"Listing tasks for {role} {subject_id} between {start.isoformat()} and {end.isoformat()}")

        tasks = self.task_model.find_in_range(field, op, subject_id, start, end)
        if not tasks:
            raise NotFound(f"No tasks found for the specified month for the {role}")
        return tasks

    def get_task_details(self, task_id: str) -> Dict[str, Any]:
        if not task_id:
            raise InvalidArgument("Task ID is required")
        if not Validators.validate_id(task_id):
            raise InvalidArgument("Invalid Task ID")

        task = self._get_task_or_404(task_id)

        names = self.user_model.get_names(task['assigned_to'])
        task['assigned_to'] = [
            {'id': user_id, 'name': names[user_id]}
            for user_id in task['assigned_to'] if user_id in names
        ]
        return task
