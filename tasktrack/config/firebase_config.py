"""Firebase Admin initialisation for the users and tasks stores.

tasktrack only talks to Firestore. Production runs with a service account;
local development and CI point FIRESTORE_EMULATOR_HOST at an emulator and
need no credentials at all.
"""
import json
import logging
import os
from typing import Dict, Any, Optional

import firebase_admin
from firebase_admin import credentials

logger = logging.getLogger(__name__)

# checked in order; each may hold a path to a service account file
_CREDENTIAL_FILE_VARS = ('FIREBASE_CREDENTIALS_PATH', 'GOOGLE_APPLICATION_CREDENTIALS')


def _read_json_file(path: str) -> Optional[Dict[str, Any]]:
    if not path or not os.path.exists(path):
        return None
    with open(path, 'r') as f:
        return json.load(f)


def get_firebase_credentials() -> Dict[str, Any]:
    """Service account for the Firestore project backing tasktrack.

    FIREBASE_CREDENTIALS_JSON may carry the account inline (handy for
    container secrets) or a file path. Otherwise the file variables above are
    tried, then an account assembled from FIREBASE_PROJECT_ID,
    FIREBASE_PRIVATE_KEY and FIREBASE_CLIENT_EMAIL.

    Raises:
        ValueError: If no service account is configured
    """
    inline = os.getenv('FIREBASE_CREDENTIALS_JSON')
    if inline:
        try:
            return json.loads(inline)
        except json.JSONDecodeError:
            account = _read_json_file(inline)
            if account:
                return account

    for var in _CREDENTIAL_FILE_VARS:
        account = _read_json_file(os.getenv(var))
        if account:
            return account

    if os.getenv('FIREBASE_PROJECT_ID') and os.getenv('FIREBASE_PRIVATE_KEY'):
        return {
            "type": "service_account",
            "project_id": os.getenv('FIREBASE_PROJECT_ID'),
            "private_key_id": os.getenv('FIREBASE_PRIVATE_KEY_ID'),
            # .env files keep the PEM on one line with literal \n
            "private_key": os.getenv('FIREBASE_PRIVATE_KEY', '').replace('\\n', '\n'),
            "client_email": os.getenv('FIREBASE_CLIENT_EMAIL'),
            "client_id": os.getenv('FIREBASE_CLIENT_ID'),
            "token_uri": "https://oauth2.googleapis.com/token",
        }

    raise ValueError(
        "No Firestore service account configured for tasktrack. Set "
        "FIREBASE_CREDENTIALS_PATH (see .env.example), or FIRESTORE_EMULATOR_HOST "
        "to run against a local emulator"
    )


def init_firebase() -> bool:
    """Initialise the default Firebase app once. Returns True when ready."""
    if firebase_admin._apps:
        return True

    emulator = os.getenv("FIRESTORE_EMULATOR_HOST")
    if emulator:
        project_id = os.getenv("GCLOUD_PROJECT") or os.getenv("FIREBASE_PROJECT_ID") or "demo-tasktrack"
        os.environ.setdefault("GCLOUD_PROJECT", project_id)
        firebase_admin.initialize_app(options={'projectId': project_id})
        logger.info(f"Firebase initialized against Firestore emulator at {emulator} ({project_id})")
        return True

    try:
        cred = credentials.Certificate(get_firebase_credentials())
    except ValueError as e:
        logger.error(str(e))
        return False

    firebase_admin.initialize_app(cred)
    logger.info("Firebase initialized with service account credentials")
    return True
