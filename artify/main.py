from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
import uvicorn

from artify.core.dependencies import SAFE_METHODS, get_request_context
from artify.core.errors import ArtifyError, NotFound, RedirectRequired
from artify.core.logging import logger
from artify.models.schemas import RequestContext
from artify.routers import admin as admin_router
from artify.routers import api as api_router
from artify.routers import auth as auth_router
from artify.routers import catalog as catalog_router
from artify.routers import customer as customer_router
from artify.routers import editor as editor_router
from artify.services.authorization import home_path

app = FastAPI(title="Artify API")

app.include_router(auth_router.router)
app.include_router(catalog_router.router)
app.include_router(admin_router.router)
app.include_router(customer_router.router)
app.include_router(editor_router.router)
app.include_router(api_router.router)


@app.exception_handler(RedirectRequired)
async def redirect_handler(request: Request, exc: RedirectRequired):
    return RedirectResponse(url=exc.location, status_code=303)


@app.exception_handler(ArtifyError)
async def artify_error_handler(request: Request, exc: ArtifyError):
    if isinstance(exc, NotFound) and exc.redirect_to and request.method in SAFE_METHODS:
        return RedirectResponse(url=exc.redirect_to, status_code=303)
    body = {"detail": exc.message}
    if exc.field_errors:
        body["field_errors"] = exc.field_errors
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    field_errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field_errors.setdefault(".".join(loc) or "body", error.get("msg", "Invalid value"))
    return JSONResponse(status_code=400, content={"detail": "Invalid input", "field_errors": field_errors})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Something went wrong. Please try again later."})


@app.get("/")
async def root(ctx: RequestContext = Depends(get_request_context)):
    if not ctx.is_anonymous:
        return RedirectResponse(url=home_path(ctx.role), status_code=303)
    return {"message": "Welcome to Artify, the marketplace for creative work"}


@app.get("/login")
@app.get("/register")
async def sign_in_page(ctx: RequestContext = Depends(get_request_context)):
    """Signed-in visitors are sent to their area; the forms themselves post to /auth."""
    if not ctx.is_anonymous:
        return RedirectResponse(url=home_path(ctx.role), status_code=303)
    return {"login": "/auth/login", "register": "/auth/register"}


def main():
    """Run the FastAPI application."""
    uvicorn.run(
        "artify.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )


if __name__ == "__main__":
    main()
