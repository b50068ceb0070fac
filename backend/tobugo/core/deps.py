"""
FastAPI dependencies for the shared collaborators
"""

from fastapi import HTTPException, Request

from tobugo.core.errors import GenerationError


def get_services(request: Request):
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return services


def get_storage(request: Request):
    return get_services(request).storage


def generation_http_error(error: GenerationError) -> HTTPException:
    """Map a generation failure to the HTTP error the client sees."""
    print(f"[api] {type(error).__name__}: {error}")
    return HTTPException(status_code=error.status_code, detail=error.user_message)
