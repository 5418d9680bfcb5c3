"""Firebase Admin SDK initialization."""

import json
import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials as fb_credentials

from grinfood.core.config import Settings

logger = logging.getLogger(__name__)

APP_NAME = "grinfood"


def initialize_firebase(settings: Settings) -> firebase_admin.App:
    """Initialize (or reuse) the named Firebase app.

    Credentials are taken, in order, from FIREBASE_SERVICE_JSON (raw
    service-account JSON), FIREBASE_CREDENTIALS_PATH, or the ambient
    application default credentials.
    """
    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        pass

    cred: Optional[fb_credentials.Base] = None
    if settings.firebase_service_json:
        try:
            service_account = json.loads(settings.firebase_service_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_JSON is not valid JSON") from e
        cred = fb_credentials.Certificate(service_account)
    elif settings.firebase_credentials_path:
        cred = fb_credentials.Certificate(settings.firebase_credentials_path)
    else:
        cred = fb_credentials.ApplicationDefault()

    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    app = firebase_admin.initialize_app(cred, options or None, name=APP_NAME)
    logger.info(f"Firebase Admin SDK initialized (project: {app.project_id or 'default'})")
    return app


def shutdown_firebase(app: firebase_admin.App) -> None:
    firebase_admin.delete_app(app)
    logger.info("Firebase Admin SDK shut down")
