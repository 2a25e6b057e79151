from firebase_admin import firestore
from google.api_core.exceptions import NotFound as DocumentNotFound
from google.cloud.firestore_v1.base_query import FieldFilter
from ..utils.validators import Helpers
from typing import Dict, Any, Optional, List
from datetime import datetime


class TaskModel:
    """Task data model for Firestore operations"""

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.collection = self.db.collection('tasks')

    @staticmethod
    def _to_task(doc) -> Dict[str, Any]:
        data = doc.to_dict() or {}
        return {
            'id': doc.id,
            'title': data.get('title'),
            'details': data.get('details'),
            'date': data.get('date'),
            'assigned_to': list(data.get('assigned_to') or []),
            'created_by': data.get('created_by'),
        }

    def create_task(self, title: str, details: str, date: datetime,
                    assigned_to: List[str], created_by: str) -> Dict[str, Any]:
        """Create a new task"""
        now = Helpers.now_iso()
        task_doc = {
            'title': title,
            'details': details,
            'date': date,
            'assigned_to': assigned_to,
            'created_by': created_by,
            'created_at': now,
            'updated_at': now,
        }
        doc_ref = self.collection.document()
        doc_ref.set(task_doc)

        return {
            'id': doc_ref.id,
            'title': title,
            'details': details,
            'date': date,
            'assigned_to': list(assigned_to),
            'created_by': created_by,
        }

    def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        """Get task by id"""
        doc = self.collection.document(task_id).get()
        if not doc.exists:
            return None
        return self._to_task(doc)

    def add_assignees(self, task_id: str, user_ids: List[str]) -> None:
        """Union ``user_ids`` into the task's assignees"""
        self.collection.document(task_id).update({
            'assigned_to': firestore.ArrayUnion(user_ids),
            'updated_at': Helpers.now_iso(),
        })

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> bool:
        """Apply ``fields`` to the task. Returns False if the task is gone."""
        try:
            self.collection.document(task_id).update({**fields, 'updated_at': Helpers.now_iso()})
        except DocumentNotFound:
            return False
        return True

    def delete_task(self, task_id: str) -> None:
        self.collection.document(task_id).delete()

    def find_in_range(self, field: str, op: str, value: Any,
                      start: datetime, end: datetime) -> List[Dict[str, Any]]:
        """Tasks matching ``field op value`` whose date is within [start, end]"""
        query = (
            self.collection
            .where(filter=FieldFilter(field, op, value))
            .where(filter=FieldFilter('date', '>=', start))
            .where(filter=FieldFilter('date', '<=', end))
        )
        return [self._to_task(doc) for doc in query.stream()]
