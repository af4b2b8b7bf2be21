"""HTTP mapping for marketplace errors.

Protean's own handlers cover validation and lookup failures; the handlers
here cover the checkout and authorization taxonomy.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import AuthorizationError, CommitError, InvalidTransitionError, PartialCommitError


async def _authorization_error(request: Request, exc: AuthorizationError):
    return JSONResponse(status_code=403, content={"error": exc.message})


async def _not_found(request: Request, exc: ObjectNotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def _invalid_transition(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=409, content={"error": exc.messages})


async def _commit_error(request: Request, exc: CommitError):
    return JSONResponse(status_code=503, content={"error": "Failed to place order. Please try again."})


async def _partial_commit(request: Request, exc: PartialCommitError):
    return JSONResponse(
        status_code=202,
        content={
            "order_id": exc.order_id,
            "checkout_id": exc.checkout_id,
            "stage": exc.stage,
            "message": exc.message,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(AuthorizationError, _authorization_error)
    app.add_exception_handler(InvalidTransitionError, _invalid_transition)
    app.add_exception_handler(CommitError, _commit_error)
    app.add_exception_handler(PartialCommitError, _partial_commit)
