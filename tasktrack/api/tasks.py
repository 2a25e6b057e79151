from flask import request, jsonify
from firebase_admin import firestore
from . import tasks_bp
from ..middleware.auth_middleware import session_required
from ..middleware.error_middleware import api_errors
from ..models.task_model import TaskModel
from ..models.user_model import UserModel
from ..services.task_service import TaskService
from ..utils.validators import Helpers


def task_to_json(task):
    return {
        "id": task.get("id"),
        "title": task.get("title"),
        "details": task.get("details"),
        "date": Helpers.format_date(task.get("date")),
        "assignedTo": task.get("assigned_to", []),
        "createdBy": task.get("created_by"),
    }


def _task_service():
    db = firestore.client()
    return TaskService(TaskModel(db), UserModel(db))


def _body():
    return request.get_json(silent=True) or {}


@tasks_bp.post("/<manager_id>")
@api_errors("Error creating task")
def create_task(manager_id):
    task = _task_service().create_task(manager_id, _body())
    return jsonify({"message": "Task created successfully", "task": task_to_json(task)}), 201


@tasks_bp.post("/<task_id>/<manager_id>/employees")
@api_errors("Error adding employees to task")
def assign_task(task_id, manager_id):
    task = _task_service().assign_task(task_id, manager_id, _body().get("employeeIds"))
    return jsonify({"message": "Employees added to the task successfully", "task": task_to_json(task)}), 200


@tasks_bp.put("/<task_id>/<manager_id>")
@api_errors("Error updating task")
@session_required
def update_task(current_user, task_id, manager_id):
    task = _task_service().update_task(task_id, manager_id, current_user, _body())
    return jsonify({"message": "Task updated successfully", "task": task_to_json(task)}), 200


@tasks_bp.delete("/<task_id>")
@api_errors("Error deleting task")
@session_required
def delete_task(current_user, task_id):
    _task_service().delete_task(task_id, current_user)
    return jsonify({"message": "Task removed successfully"}), 200


@tasks_bp.post("/<manager_id>/tasks")
@api_errors("Error retrieving tasks")
def get_tasks(manager_id):
    """List a manager's or employee's tasks for the UTC month containing ``date``.

    Expected payload: {role: "Manager" | "Employee", date}
    """
    tasks = _task_service().list_tasks(manager_id, _body())
    return jsonify({
        "message": "Tasks retrieved successfully",
        "tasks": [task_to_json(t) for t in tasks]
    }), 200


@tasks_bp.get("/<task_id>")
@api_errors("Error retrieving task")
def get_task_details(task_id):
    # any caller holding a task id may read it
    task = _task_service().get_task_details(task_id)
    return jsonify({"message": "Task retrieved successfully", "task": task_to_json(task)}), 200
