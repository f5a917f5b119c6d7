"""
MongoDB connection for the admission portal.

`mongo` is initialized against the app by the factory; handlers use
`mongo.db.<collection>`.
"""
import logging

from flask_pymongo import PyMongo
from pymongo import ASCENDING

log = logging.getLogger(__name__)

mongo = PyMongo()


def init_db_connection(app, settings, database=None):
    """
    Bind `mongo` to the app with bounded round-trip timeouts.

    When `database` is given (tests), it replaces the live handle and no
    ping is made; otherwise the server is pinged once and failures propagate.
    """
    mongo.db = None
    mongo.init_app(
        app,
        uri=settings.mongodb_uri,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
        socketTimeoutMS=10000,
    )
    if database is not None:
        mongo.cx = database.client
        mongo.db = database
    else:
        # A database named in the URI wins over MONGODB_DB.
        if mongo.db is None:
            mongo.db = mongo.cx[settings.mongodb_db]
        mongo.cx.admin.command("ping")
        log.info("Connected to MongoDB database %s", mongo.db.name)

    ensure_indexes()
    return mongo


def ensure_indexes():
    mongo.db.students.create_index([("email", ASCENDING)], unique=True)
    mongo.db.students.create_index([("role", ASCENDING)])
    mongo.db.admissions.create_index([("studentId", ASCENDING)])
