from flask import Blueprint

# Core blueprints
users_bp = Blueprint("users", __name__, url_prefix="/api/users")
tasks_bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")

# Import modules so routes attach
from . import auth  # noqa - registration, login and logout
from . import users  # noqa
from . import tasks  # noqa

__all__ = [
    "users_bp",
    "tasks_bp",
]
