"""
Typed remote-procedure layer over HTTP.

Every procedure lives under ``{api_prefix}/rpc/{name}``. Queries may be
called with GET (JSON in the ``input`` query parameter) or POST; mutations
only with POST. Responses use a ``{"result": {"data": ...}}`` envelope and
failures a ``{"error": {"code": ..., "message": ...}}`` envelope.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from anonfeed import handlers
from anonfeed.db import DbClient
from anonfeed.dependencies import get_db_client
from anonfeed.errors import PostNotFoundError, StorageError
from anonfeed.schemas import (
    CreateCommentInput,
    CreatePostInput,
    GetCommentsInput,
    GetPostInput,
    ToggleLikeInput,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ProcedureKind = Literal["query", "mutation"]


@dataclass(frozen=True)
class Procedure:
    name: str
    kind: ProcedureKind
    resolver: Callable[[DbClient, Optional[BaseModel]], Any]
    input_model: Optional[type[BaseModel]] = None

    def parse_input(self, raw_input: Any) -> Optional[BaseModel]:
        if self.input_model is None:
            return None
        return self.input_model.model_validate(
            {} if raw_input is None else raw_input
        )


class RpcException(Exception):
    """A rejected call, rendered as an error envelope."""

    def __init__(
        self, code: str, message: str, status_code: int, issues: Optional[list] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.issues = issues

    def to_response(self) -> JSONResponse:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.issues is not None:
            error["issues"] = self.issues
        return JSONResponse(status_code=self.status_code, content={"error": error})


PROCEDURES: dict[str, Procedure] = {
    procedure.name: procedure
    for procedure in (
        Procedure("healthcheck", "query", lambda db, _: handlers.healthcheck()),
        Procedure("createPost", "mutation", handlers.create_post, CreatePostInput),
        Procedure("getPosts", "query", lambda db, _: handlers.get_posts(db)),
        Procedure("getPost", "query", handlers.get_post, GetPostInput),
        Procedure("toggleLike", "mutation", handlers.toggle_like, ToggleLikeInput),
        Procedure(
            "createComment", "mutation", handlers.create_comment, CreateCommentInput
        ),
        Procedure("getComments", "query", handlers.get_comments, GetCommentsInput),
    )
}


def _lookup(name: str) -> Procedure:
    procedure = PROCEDURES.get(name)
    if procedure is None:
        raise RpcException("NOT_FOUND", f"No procedure named '{name}'", 404)
    return procedure


def _decode_json(raw: str | bytes | None) -> Any:
    if raw is None or (isinstance(raw, (str, bytes)) and not raw.strip()):
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise RpcException("BAD_REQUEST", f"Malformed JSON input: {exc}", 400)


def _invoke(procedure: Procedure, raw_input: Any, db: DbClient) -> JSONResponse:
    try:
        payload = procedure.parse_input(raw_input)
        output = procedure.resolver(db, payload)
    except ValidationError as exc:
        logger.warning("Rejected %s: invalid input", procedure.name)
        raise RpcException(
            "BAD_REQUEST",
            f"Invalid input for {procedure.name}",
            400,
            issues=jsonable_encoder(
                exc.errors(include_url=False, include_context=False)
            ),
        )
    except PostNotFoundError as exc:
        logger.warning("Rejected %s: %s", procedure.name, exc)
        raise RpcException("NOT_FOUND", str(exc), 404)
    except StorageError:
        logger.exception("Storage failure in %s", procedure.name)
        raise RpcException("INTERNAL_SERVER_ERROR", "Storage failure", 500)
    except Exception:
        logger.exception("Unhandled failure in %s", procedure.name)
        raise RpcException("INTERNAL_SERVER_ERROR", "Internal server error", 500)
    return JSONResponse(content={"result": {"data": jsonable_encoder(output)}})


@router.get("/rpc")
def list_procedures():
    return {
        "procedures": [
            {"name": procedure.name, "kind": procedure.kind}
            for procedure in PROCEDURES.values()
        ]
    }


@router.get("/rpc/{name}")
def call_query(
    name: str,
    input: str | None = Query(None, description="JSON-encoded procedure input"),
    db: DbClient = Depends(get_db_client),
):
    try:
        procedure = _lookup(name)
        if procedure.kind != "query":
            raise RpcException(
                "METHOD_NOT_SUPPORTED", f"{name} is a mutation; use POST", 405
            )
        return _invoke(procedure, _decode_json(input), db)
    except RpcException as exc:
        return exc.to_response()


@router.post("/rpc/{name}")
async def call_procedure(
    name: str,
    request: Request,
    db: DbClient = Depends(get_db_client),
):
    try:
        procedure = _lookup(name)
        raw_input = _decode_json(await request.body())
        return await run_in_threadpool(_invoke, procedure, raw_input, db)
    except RpcException as exc:
        return exc.to_response()
