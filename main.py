import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Union

from fastapi import APIRouter, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import Settings, get_settings
from database import SchoolStore
from errors import SchoolDirectoryError, SchoolValidationError, StorageError
from filters import facet_values, filter_schools
from images import ImagePolicy
from logging_setup import configure_logging
from schemas import ErrorResponse, ImageUpload, SchoolCreated, SchoolListing, SchoolOut
from validation import validate_school

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _store(request: Request) -> SchoolStore:
    return request.app.state.store


def _images(request: Request) -> ImagePolicy:
    return request.app.state.images


def _present(request: Request, schools: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    policy = _images(request)
    return [{**school, "imageUrl": policy.resolve_url(school.get("image"))} for school in schools]


def _fetch(request: Request, search: Optional[str], city: Optional[str], state: Optional[str]):
    schools = _store(request).list()
    return schools, filter_schools(schools, search=search, city=city, state=state)


def read_upload(image: Union[UploadFile, str, None], limit: int) -> Optional[ImageUpload]:
    """
    Turn a multipart image part into an ImageUpload.

    A plain text part counts as no image. When the client already declared a
    size over `limit` the body is left unread; otherwise at most `limit + 1`
    bytes are read, enough for the validator to see an oversized file.
    """
    if image is None or isinstance(image, str):
        return None
    if image.size is not None and image.size > limit:
        return ImageUpload(filename=image.filename, content_type=image.content_type, declared_size=image.size)
    return ImageUpload(
        filename=image.filename,
        content_type=image.content_type,
        data=image.file.read(limit + 1),
    )


# -------------------- Error handling --------------------
async def handle_directory_error(request: Request, exc: SchoolDirectoryError):
    if isinstance(exc, SchoolValidationError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def handle_request_validation(request: Request, exc: RequestValidationError):
    error = exc.errors()[0]
    field = error["loc"][-1] if error.get("loc") else "request"
    message = f"Invalid {field}: {error['msg']}"
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"error": message})


async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# -------------------- Root & Health --------------------
@router.get("/")
def read_root():
    return {"message": "School directory backend is running"}


@router.get("/test")
def test_database(request: Request):
    """Report whether the database is configured and reachable."""
    settings = _settings(request)
    response = {
        "backend": "Running",
        "database": "Not Available",
        "database_name": settings.mongodb_db,
        "image_storage": settings.image_storage,
        "collections": [],
    }
    try:
        response["collections"] = _store(request).ping()[:10]
        response["database"] = "Connected & Working"
    except StorageError as e:
        response["database"] = f"Error: {e.message}"
    return response


# -------------------- Schools --------------------
@router.get("/collection", response_model=List[SchoolOut], responses={500: {"model": ErrorResponse}})
def list_schools(
    request: Request,
    search: Optional[str] = Query(None, description="Substring of name, address or city"),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
):
    _, schools = _fetch(request, search, city, state)
    return _present(request, schools)


@router.get("/collection/browse", response_model=SchoolListing, responses={500: {"model": ErrorResponse}})
def browse_schools(
    request: Request,
    search: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
):
    everything, schools = _fetch(request, search, city, state)
    cities, states = facet_values(everything)
    return {
        "schools": _present(request, schools),
        "total": len(everything),
        "cities": cities,
        "states": states,
    }


@router.get(
    "/collection/{school_id}",
    response_model=SchoolOut,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_school(request: Request, school_id: str):
    school = _store(request).get(school_id)
    if school is None:
        return JSONResponse(status_code=404, content={"error": "School not found"})
    return _present(request, [school])[0]


@router.post("/collection", status_code=201, response_model=SchoolCreated, responses=ERROR_RESPONSES)
def add_school(
    request: Request,
    name: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    state: Optional[str] = Form(None),
    contact: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    email_id: Optional[str] = Form(None, description="Older form name for email"),
    image: Union[UploadFile, str, None] = File(None),
):
    limit = _settings(request).max_image_bytes
    upload = read_upload(image, limit)

    policy = _images(request)
    school = validate_school(
        {
            "name": name,
            "address": address,
            "city": city,
            "state": state,
            "contact": contact,
            "email": email or email_id,
        },
        image=upload,
        image_required=policy.image_required,
        max_image_bytes=limit,
    )

    reference = policy.store(upload)
    school_id = _store(request).insert(school, image=reference)
    return SchoolCreated(message="School added successfully", id=school_id)


def create_app(settings: Optional[Settings] = None, store: Optional[SchoolStore] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(title="School Directory")
    app.state.settings = settings
    app.state.store = store or SchoolStore(settings)
    app.state.images = ImagePolicy.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SchoolDirectoryError, handle_directory_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    if settings.image_storage == "file":
        app.mount(
            settings.image_url_prefix,
            StaticFiles(directory=settings.image_dir, check_dir=False),
            name="school-images",
        )
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
