import hashlib

from firebase_admin import firestore
from google.api_core.exceptions import FailedPrecondition
from google.cloud.firestore_v1.base_query import FieldFilter
from ..utils.validators import Helpers, ROLE_EMPLOYEE
from typing import Dict, Any, Optional, List, Iterable


class UserModel:
    """User data model for Firestore operations"""

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.collection = self.db.collection('users')
        # one document per registered email, keyed by its hash
        self.emails = self.db.collection('user_emails')

    @staticmethod
    def _to_user(doc, include_password: bool = False) -> Dict[str, Any]:
        data = doc.to_dict() or {}
        user = {
            'id': doc.id,
            'name': data.get('name'),
            'email': data.get('email'),
            'role': data.get('role') or ROLE_EMPLOYEE,
            'manager_id': data.get('manager_id'),
            'created_at': data.get('created_at'),
        }
        if include_password:
            user['password'] = data.get('password')
        return user

    @staticmethod
    def email_key(email: str) -> str:
        return hashlib.sha256(email.encode('utf-8')).hexdigest()

    def create_user(self, name: str, email: str, password_hash: str) -> Dict[str, Any]:
        """Create a new user with the default role and no manager link.

        The email is claimed in the same commit as the user document.
        Raises ``google.api_core.exceptions.AlreadyExists`` when it is taken.
        """
        user_doc = {
            'name': name,
            'email': email,
            'password': password_hash,
            'role': ROLE_EMPLOYEE,
            # stored explicitly so the unassigned pool can be queried
            'manager_id': None,
            'created_at': Helpers.now_iso(),
        }
        doc_ref = self.collection.document()

        batch = self.db.batch()
        batch.create(self.emails.document(self.email_key(email)), {'user_id': doc_ref.id})
        batch.set(doc_ref, user_doc)
        batch.commit()

        return {'id': doc_ref.id, **{k: v for k, v in user_doc.items() if k != 'password'}}

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get user by id, password excluded"""
        doc = self.collection.document(user_id).get()
        if not doc.exists:
            return None
        return self._to_user(doc)

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get user by email, including the password hash for verification"""
        query = self.collection.where(filter=FieldFilter('email', '==', email)).limit(1)
        for doc in query.stream():
            return self._to_user(doc, include_password=True)
        return None

    def get_employees(self, manager_id: str) -> List[Dict[str, Any]]:
        """Users reporting to ``manager_id`` plus the unassigned pool"""
        employees = {}
        for value in (manager_id, None):
            query = self.collection.where(filter=FieldFilter('manager_id', '==', value))
            for doc in query.stream():
                if doc.id != manager_id:
                    employees.setdefault(doc.id, {'id': doc.id, 'name': (doc.to_dict() or {}).get('name')})
        return list(employees.values())

    def get_names(self, user_ids: Iterable[str]) -> Dict[str, str]:
        """Map existing user ids to display names"""
        refs = [self.collection.document(user_id) for user_id in dict.fromkeys(user_ids)]
        if not refs:
            return {}
        return {
            doc.id: (doc.to_dict() or {}).get('name')
            for doc in self.db.get_all(refs) if doc.exists
        }

    def link_to_manager(self, user_ids: Iterable[str], manager_id: str) -> int:
        """Set ``manager_id`` on every listed user that has none yet.

        Each write is conditional on the user being unchanged since it was
        read, so an existing link is never overwritten and the first manager
        wins. Returns the number of users linked.
        """
        linked = 0
        for user_id in user_ids:
            doc_ref = self.collection.document(user_id)
            doc = doc_ref.get()
            if not doc.exists or (doc.to_dict() or {}).get('manager_id'):
                continue
            try:
                doc_ref.update(
                    {'manager_id': manager_id},
                    option=self.db.write_option(last_update_time=doc.update_time),
                )
            except FailedPrecondition:
                # changed since read; another manager got there first
                continue
            linked += 1
        return linked

    def set_role(self, email: str, role: str) -> Optional[Dict[str, Any]]:
        """Change the stored role of the user with ``email``"""
        user = self.get_user_by_email(email)
        if not user:
            return None
        self.collection.document(user['id']).update({'role': role})
        user['role'] = role
        user.pop('password', None)
        return user
