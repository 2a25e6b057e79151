from flask import jsonify
from . import users_bp
from .auth import _auth_service
from ..middleware.error_middleware import api_errors
from ..utils.validators import Helpers


@users_bp.get("/<manager_id>")
@api_errors("Internal Server Error")
def get_employees(manager_id):
    """Employees reporting to ``manager_id`` plus everyone not yet linked"""
    employees = _auth_service().list_employees(manager_id)
    return jsonify(Helpers.build_success_response(
        {"employees": employees},
        "Employees fetched successfully"
    )), 200
