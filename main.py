import logging

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import Response
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import PlainTextResponse

from env_loader import get_host, get_log_level, get_port, get_todos_file, load_env_from_dotenv
from todos import PersistError, Todo, TodoNotFound, TodoPatch, TodoStore, decode_payload

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]

CORS_HEADERS = {
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
}

router = APIRouter()


def get_store(request: Request) -> TodoStore:
    return request.app.state.store


async def todo_payload(request: Request) -> TodoPatch:
    """
    Decode a JSON request body into a TodoPatch.
    Content type must be exactly application/json (415), and the body must decode (400).
    """
    ct = request.headers.get("content-type", "")
    if ct != "application/json":
        raise StarletteHTTPException(
            status_code=415,
            detail=f"need content-type 'application/json', but got '{ct}'",
        )
    body = await request.body()
    try:
        return decode_payload(body)
    except ValidationError as e:
        raise StarletteHTTPException(status_code=400, detail=str(e))


@router.get("/todos")
def list_todos(store: TodoStore = Depends(get_store)) -> list[Todo]:
    return store.list()


@router.post("/todos")
def create_todo(payload: TodoPatch = Depends(todo_payload), store: TodoStore = Depends(get_store)) -> Todo:
    """Create a todo from {"title": ...}; id, date and isDone are set server-side."""
    return store.create(payload.title)


@router.patch("/todos/{todo_id}")
def update_todo(
    todo_id: str,
    payload: TodoPatch = Depends(todo_payload),
    store: TodoStore = Depends(get_store),
) -> Todo:
    """
    isDone is always overwritten (omitted means false).
    An empty or missing title leaves the current title unchanged.
    """
    return store.update(todo_id, payload)


@router.delete("/todos/{todo_id}")
def delete_todo(todo_id: str, store: TodoStore = Depends(get_store)) -> Todo:
    return store.delete(todo_id)


@router.api_route("/todos", methods=["PATCH", "DELETE"])
@router.api_route("/todos/{rest:path}", methods=["PATCH", "DELETE"])
async def missing_todo_id() -> Response:
    # PATCH and DELETE need exactly one segment after /todos
    return Response(status_code=404)


@router.api_route("/{path:path}", methods=ALL_METHODS)
async def method_not_allowed() -> PlainTextResponse:
    return PlainTextResponse("method not allowed", status_code=405)


def create_app(store: TodoStore) -> FastAPI:
    """Build the web app around an already loaded store."""
    app = FastAPI(title="Todo Service")
    app.state.store = store

    @app.middleware("http")
    async def cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(TodoNotFound)
    async def todo_not_found_handler(request: Request, exc: TodoNotFound) -> Response:
        return Response(status_code=404)

    @app.exception_handler(PersistError)
    async def persist_error_handler(request: Request, exc: PersistError) -> PlainTextResponse:
        return PlainTextResponse(str(exc), status_code=500)

    app.include_router(router)
    return app


def main() -> None:
    load_env_from_dotenv(".env.local")
    load_env_from_dotenv(".env")
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Startup aborts if the data file is missing or unreadable
    store = TodoStore.load(get_todos_file())
    app = create_app(store)
    logger.info("Serving %d todos from %s on port %d", len(store.list()), store.path, get_port())
    uvicorn.run(app, host=get_host(), port=get_port())


if __name__ == "__main__":
    main()
