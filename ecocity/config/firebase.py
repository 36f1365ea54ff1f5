"""
Firebase Firestore initialization.
Single-source-of-truth Firestore client for EcoCity Signals.
"""

from typing import Optional
import logging
import os

import firebase_admin
from firebase_admin import credentials, firestore, initialize_app

from ecocity.core.settings import settings

logger = logging.getLogger(__name__)

db: Optional[firestore.Client] = None


def initialize_firestore() -> firestore.Client:
    global db

    if db is not None:
        return db

    try:
        if not firebase_admin._apps:
            if settings.FIREBASE_CREDENTIALS_PATH:
                cred_path = settings.FIREBASE_CREDENTIALS_PATH
                if not os.path.exists(cred_path):
                    raise FileNotFoundError(
                        f"Firebase credentials file not found: {cred_path}\n"
                        f"Please check your .env file and ensure FIREBASE_CREDENTIALS_PATH is correct."
                    )
                initialize_app(credentials.Certificate(cred_path))
                logger.info("[FIRESTORE] Firebase Admin SDK initialized with service account")
            else:
                logger.info("[FIRESTORE] No credentials path set, using Application Default Credentials")
                initialize_app()

        db = firestore.client()
        logger.info(f"[FIRESTORE] Project: {settings.FIREBASE_PROJECT_ID or 'default'}")
        return db

    except FileNotFoundError as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - Credentials file not found.\n"
            f"{str(e)}\n"
            f"SOLUTION: Point FIREBASE_CREDENTIALS_PATH at a valid service account JSON file, "
            f"or set USE_MOCK_DB=true for local development."
        ) from e
    except Exception as e:
        raise RuntimeError(
            f"Firestore initialization FAILED. Error: {e}\n"
            f"Please check your Firebase credentials and configuration."
        ) from e


def get_db() -> firestore.Client:
    """
    Get the initialized Firestore client.

    Raises RuntimeError if Firestore cannot be initialized.
    """
    if db is None:
        initialize_firestore()
    return db
