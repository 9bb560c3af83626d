from fastapi import APIRouter

router = APIRouter()

APP_NAME = "stockkeeper-api"
APP_VERSION = "0.1.0"


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/version")
def version():
    return {"app": APP_NAME, "version": APP_VERSION}
