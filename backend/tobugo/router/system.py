from fastapi import APIRouter

from tobugo.core.config import APP_NAME, APP_VERSION
from tobugo.models.common import APIResponse

router = APIRouter(tags=["System"])


@router.get("/", response_model=APIResponse)
def root():
    return APIResponse(
        code=0, msg="ok", data={"msg": f"{APP_NAME} {APP_VERSION}. Start planning at /chat."}
    )


@router.get("/health", response_model=APIResponse)
def health_check():
    return APIResponse(code=0, msg="ok", data={"status": "healthy", "service": "tobugo-server"})
