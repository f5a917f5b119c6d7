from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

from .config import load_settings
from .db import init_db_connection
from .errors import ApiError
from .services.tokens import TOKEN_LIFETIME

jwt = JWTManager()


def create_app(settings=None, database=None):
    """
    Build the Flask app.

    `settings` defaults to load_settings(); `database` defaults to a live
    MongoDB connection from settings.mongodb_uri. Tests pass both.
    """
    if settings is None:
        settings = load_settings()

    app = Flask(__name__)
    app.logger.setLevel(settings.log_level)

    # --- Core config ---
    app.config["JWT_SECRET_KEY"] = settings.jwt_secret
    app.config["JWT_ALGORITHM"] = "HS256"
    app.config["JWT_IDENTITY_CLAIM"] = "user_id"
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = TOKEN_LIFETIME
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]
    app.config["ADMIN_SECRET"] = settings.admin_secret

    # --- CORS ---
    CORS(app, resources={r"/api/*": {"origins": list(settings.cors_origins)}})

    # --- Init extensions ---
    jwt.init_app(app)
    init_db_connection(app, settings, database=database)

    # --- JWT error responses (JSON, always 401) ---
    @jwt.unauthorized_loader
    def _missing_token(msg):
        return {"error": "Missing or malformed Authorization header"}, 401

    @jwt.invalid_token_loader
    def _invalid_token(msg):
        return {"error": "Invalid token"}, 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return {"error": "Token expired"}, 401

    # --- Error responses (JSON) ---
    @app.errorhandler(ApiError)
    def _api_error(exc):
        if exc.status_code >= 500:
            app.logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc.__cause__)
        return exc.to_dict(), exc.status_code

    @app.errorhandler(PyMongoError)
    def _db_error(exc):
        app.logger.exception("Database error")
        return {"error": "Internal server error"}, 500

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return {"error": exc.description}, exc.code

    # Register blueprints
    from .routes.students import bp as students_bp
    from .routes.courses import bp as courses_bp
    from .routes.admissions import bp as admissions_bp

    app.register_blueprint(students_bp, url_prefix="/api")
    app.register_blueprint(courses_bp, url_prefix="/api")
    app.register_blueprint(admissions_bp, url_prefix="/api")

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app
