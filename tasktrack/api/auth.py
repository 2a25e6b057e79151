"""
Account endpoints: registration, login and logout.

Login sets an HTTP-only cookie carrying the signed session token. The cookie
lives for 24 hours while the token inside it expires after one.
"""
from flask import current_app, request, jsonify
from firebase_admin import firestore
from . import users_bp
from ..middleware.auth_middleware import get_session_service, set_session_cookie, clear_session_cookie
from ..middleware.error_middleware import api_errors
from ..models.user_model import UserModel
from ..services.auth_service import AuthService
from ..utils.validators import Helpers


def _auth_service():
    return AuthService(
        UserModel(firestore.client()),
        get_session_service(),
        bcrypt_rounds=current_app.config['BCRYPT_ROUNDS'],
    )


@users_bp.post("/register")
@api_errors("Internal Server Error")
def register_user():
    """
    Register a new Employee account.
    Expected payload: {name, email, password}
    Returns: {success, message, data: {id, name, role}}
    """
    payload = request.get_json(silent=True) or {}
    user = _auth_service().register_user(payload)
    return jsonify(Helpers.build_success_response(user, "User registered successfully")), 201


@users_bp.post("/login")
@api_errors("Internal Server Error")
def login_user():
    """
    Login with email and password.
    Expected payload: {email, password}
    Returns: {success, message, data: {token, user: {name, id, role}}}
    """
    payload = request.get_json(silent=True) or {}
    result = _auth_service().login_user(payload)

    response = jsonify(Helpers.build_success_response(result, "Login successful"))
    set_session_cookie(response, result['token'])
    return response, 200


@users_bp.post("/logout")
def logout():
    response = jsonify({"success": True, "message": "Logged out successfully"})
    clear_session_cookie(response)
    return response, 200
