import logging
import sys
from datetime import timedelta
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings
from database import connect
from errors import ApiError, BadRequest, ConfigError
from middleware import (
    FixedWindowRateLimiter,
    install_error_trap,
    install_rate_limit,
    install_security_headers,
)
from projects import ProjectStore
from schemas import CredentialsRequest, GenerateRequest
from security import TokenSigner, require_user
from templates import select_template
from users import UserStore

__version__ = "1.0.0"

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _auth_routes(users: UserStore) -> APIRouter:
    router = APIRouter(prefix="/auth")

    def _credentials(payload: CredentialsRequest):
        if not payload.email or not payload.password:
            raise BadRequest("Email and password required")
        return payload.email, payload.password

    @router.post("/register", status_code=201)
    def register(payload: CredentialsRequest):
        email, password = _credentials(payload)
        token = users.register(email, password)
        return {"message": "User registered", "token": token}

    @router.post("/login")
    def login(payload: CredentialsRequest):
        email, password = _credentials(payload)
        return {"token": users.login(email, password)}

    return router


def _project_routes(projects: ProjectStore, guarded: bool) -> APIRouter:
    router = APIRouter(dependencies=[Depends(require_user)] if guarded else [])

    @router.post("/generate")
    def generate(payload: GenerateRequest):
        idea = (payload.idea or "").strip()
        if not idea:
            raise BadRequest("Idea required")
        project = projects.create(select_template(idea))
        return {"projectId": project.id, "project": project.model_dump(mode="json")}

    @router.get("/project/{project_id}")
    def get_project(project_id: str):
        return projects.get_by_id(project_id).model_dump(mode="json")

    @router.post("/project/{project_id}/{model}")
    def add_record(project_id: str, model: str, record: Dict[str, Any] = Body(...)):
        records = projects.append_record(project_id, model, record)
        return {"message": "Record added", "records": records}

    @router.get("/project/{project_id}/{model}")
    def list_records(project_id: str, model: str):
        return projects.list_records(project_id, model)

    @router.put("/project/{project_id}/{model}/{index}")
    def update_record(project_id: str, model: str, index: str, patch: Dict[str, Any] = Body(...)):
        records = projects.update_record(project_id, model, index, patch)
        return {"message": "Record updated", "records": records}

    @router.delete("/project/{project_id}/{model}/{index}")
    def delete_record(project_id: str, model: str, index: str):
        records = projects.delete_record(project_id, model, index)
        return {"message": "Record deleted", "records": records}

    return router


def create_app(settings: Settings, db: Database) -> FastAPI:
    app = FastAPI(title="Project Scaffolder API", version=__version__)
    app.state.settings = settings
    app.state.db = db

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    # Registered innermost first: the last one installed wraps the others
    install_error_trap(app)
    if settings.rate_limit_max:
        install_rate_limit(
            app,
            FixedWindowRateLimiter(settings.rate_limit_max, settings.rate_limit_window_seconds),
        )
    install_security_headers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    projects = ProjectStore(db)
    if settings.auth_enabled:
        app.state.signer = TokenSigner(
            settings.token_secret, ttl=timedelta(days=settings.token_ttl_days)
        )
        users = UserStore(db, app.state.signer, bcrypt_rounds=settings.bcrypt_rounds)
        app.include_router(_auth_routes(users))
    app.include_router(_project_routes(projects, guarded=settings.auth_enabled))

    @app.get("/")
    def root():
        return {"name": "Project Scaffolder", "version": __version__}

    @app.get("/test")
    def test_database():
        response = {
            "backend": "Running",
            "database": "Not Available",
            "database_name": None,
            "connection_status": "Not Connected",
            "collections": [],
        }
        try:
            response["database_name"] = db.name
            collections = db.list_collection_names()
            response["collections"] = collections[:10]
            response["database"] = "Connected & Working"
            response["connection_status"] = "Connected"
        except PyMongoError as e:
            response["database"] = f"Error: {str(e)[:50]}"
        return response

    return app


def main():
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        logger.error("Startup error: %s", e)
        sys.exit(1)
    logging.getLogger().setLevel(settings.log_level)

    try:
        db = connect(settings)
    except PyMongoError as e:
        logger.error("Startup error: could not connect to MongoDB: %s", e)
        sys.exit(1)

    app = create_app(settings, db)

    import uvicorn
    logger.info("Server running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
