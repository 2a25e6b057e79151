import logging
from typing import Dict, Any, List

import bcrypt
from google.api_core.exceptions import AlreadyExists

from ..models.user_model import UserModel
from ..middleware.error_middleware import Conflict, InvalidArgument, InvalidCredentials, NotFound
from ..services.session_service import SessionService
from ..utils.validators import Validators, Helpers, ROLE_MANAGER, ROLE_EMPLOYEE

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes and newer releases reject longer input
MAX_PASSWORD_BYTES = 72


class AuthService:
    """Account registration, login and employee listing"""

    def __init__(self, user_model: UserModel, session_service: SessionService, bcrypt_rounds: int = 10):
        self.user_model = user_model
        self.session_service = session_service
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=self.bcrypt_rounds)).decode('utf-8')

    @staticmethod
    def check_password(password: str, password_hash: str) -> bool:
        if not password_hash or len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
        except ValueError:
            # stored value is not a bcrypt hash
            return False

    @staticmethod
    def effective_role(stored_role: Any) -> str:
        return ROLE_MANAGER if stored_role == ROLE_MANAGER else ROLE_EMPLOYEE

    def register_user(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Register a new Employee account"""
        name = payload.get('name')
        email = payload.get('email')
        password = payload.get('password')

        if not all(Validators.validate_required_string(v) for v in (name, email, password)):
            raise InvalidArgument("name, email and password are required")
        if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
            raise InvalidArgument(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        name = Helpers.sanitize_string(name)
        email = Helpers.sanitize_string(email)

        if self.user_model.get_user_by_email(email):
            raise Conflict("User already exists")

        try:
            user = self.user_model.create_user(name, email, self.hash_password(password))
        except AlreadyExists:
            # claimed by a concurrent registration after the lookup above
            raise Conflict("User already exists")
        logger.info(f"Registered user {user['id']}")

        return {'id': user['id'], 'name': user['name'], 'role': user['role']}

    def login_user(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Verify credentials and issue a session token.

        An unknown email and a wrong password fail identically.
        """
        email = payload.get('email')
        password = payload.get('password')
        if not isinstance(email, str) or not isinstance(password, str):
            raise InvalidCredentials()

        user = self.user_model.get_user_by_email(Helpers.sanitize_string(email))
        if not user or not self.check_password(password, user.get('password')):
            raise InvalidCredentials()

        role = self.effective_role(user.get('role'))
        token = self.session_service.sign(user['id'], role)

        return {
            'token': token,
            'user': {'name': user['name'], 'id': user['id'], 'role': role},
        }

    def list_employees(self, manager_id: str) -> List[Dict[str, Any]]:
        employees = self.user_model.get_employees(manager_id)
        if not employees:
            raise NotFound("No employees found for this manager")
        return employees

    def set_role(self, email: str, role: str) -> Dict[str, Any]:
        """Promote or demote an account; operator use only"""
        if not Validators.validate_role(role):
            raise InvalidArgument(f"Invalid role: {role}")
        user = self.user_model.set_role(email, role)
        if not user:
            raise NotFound(f"No user with email {email}")
        logger.info(f"Set role of user {user['id']} to {role}")
        return user
