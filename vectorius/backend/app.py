from __future__ import annotations

"""FastAPI backend for the Vectorius tutoring chat.

Run with:
    uvicorn vectorius.backend.app:app --reload --port 8000

Env vars required for chat:
    AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_API_KEY, AZURE_OPENAI_DEPLOYMENT

Env vars required for attachments:
    SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY
"""

from typing import Optional

from fastapi import Depends, FastAPI, File, Header, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from vectorius.config import ATTACHMENT_URL_TTL_SECONDS, ChatSettings
from vectorius.llm.chat_service import ChatService
from vectorius.memory import crud
from vectorius.storage.attachments import AttachmentStorage, default_attachment_storage
from vectorius.storage.supabase_client import get_user_id
from vectorius.utils.error_handler import (
    AttachmentRejectedError,
    ChatError,
    StorageError,
)

# App setup
# -----------------------------------------------------------------------------

app = FastAPI(title="Vectorius Chat", version="0.1.0")

# ---------------------------------------------------------------------------
# Pydantic Schemas
# ---------------------------------------------------------------------------


class ChatResponse(BaseModel):
    reply: str
    role: str = "assistant"
    modeUsed: str


class ChatStatus(BaseModel):
    enabled: bool


class UploadResponse(BaseModel):
    attachmentId: str
    fileName: str
    mimeType: str


class AttachmentUrl(BaseModel):
    url: str


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_chat_settings() -> ChatSettings:
    # Read at call time so configuration changes apply without a restart.
    return ChatSettings.from_env()


def get_chat_service(settings: ChatSettings = Depends(get_chat_settings)) -> ChatService:
    return ChatService(settings)


def get_attachment_storage() -> Optional[AttachmentStorage]:
    return default_attachment_storage()


def get_current_user_id(
    authorization: str | None = Header(default=None),
    storage: Optional[AttachmentStorage] = Depends(get_attachment_storage),
) -> Optional[str]:
    """Return the Supabase user id for the ``Authorization: Bearer`` token.

    ``None`` also when storage is unconfigured; routes check storage first so
    that case reports a configuration error, not a 401.
    """
    if not authorization or storage is None:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return get_user_id(storage.client, token.strip())


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/api/chat", response_model=ChatStatus)
def chat_status(service: ChatService = Depends(get_chat_service)):
    try:
        return ChatStatus(enabled=service.is_enabled())
    except Exception as e:
        logger.warning("Could not determine chat status: {}", e)
        return ChatStatus(enabled=False)


@app.post("/api/chat", response_model=ChatResponse)
async def chat(request: Request, service: ChatService = Depends(get_chat_service)):
    try:
        try:
            payload = await request.json()
        except ValueError:
            # Unparseable bodies fail question validation.
            payload = None
        result = await run_in_threadpool(service.handle, payload)
    except ChatError as e:
        logger.warning("Chat request failed with {}: {}", e.status_code, e)
        return _error(e.status_code, str(e))
    except Exception as e:
        logger.exception("Unexpected chat failure")
        return _error(500, str(e) or "Unexpected server error")

    return ChatResponse(**result)


@app.post("/api/chat/upload", response_model=UploadResponse)
async def upload_attachment(
    file: UploadFile | None = File(default=None),
    user_id: Optional[str] = Depends(get_current_user_id),
    storage: Optional[AttachmentStorage] = Depends(get_attachment_storage),
):
    if storage is None:
        return _error(500, "Attachment storage is not configured")
    if not user_id:
        return _error(401, "Unauthorized")
    if file is None:
        return _error(400, "No file provided")

    data = await file.read()
    try:
        attachment = await run_in_threadpool(
            storage.store_attachment,
            user_id,
            file.filename or "upload",
            file.content_type,
            data,
        )
    except AttachmentRejectedError as e:
        return _error(e.status_code, str(e))
    except StorageError as e:
        logger.error("Storage upload error: {}", e)
        return _error(500, "Failed to upload file")
    except Exception as e:
        logger.error("Insert error: {}", e)
        return _error(500, "Failed to record attachment")

    return UploadResponse(
        attachmentId=attachment["id"],
        fileName=attachment["file_name"],
        mimeType=attachment["mime_type"],
    )


@app.get("/api/chat/attachment/{attachment_id}", response_model=AttachmentUrl)
def attachment_url(
    attachment_id: str,
    user_id: Optional[str] = Depends(get_current_user_id),
    storage: Optional[AttachmentStorage] = Depends(get_attachment_storage),
):
    if storage is None:
        return _error(500, "Attachment storage is not configured")
    if not user_id:
        return _error(401, "Unauthorized")

    attachment = crud.get_attachment(attachment_id)
    if not attachment or attachment["deleted_at"] is not None:
        return _error(404, "Not found")
    if attachment["uploader_user_id"] != user_id:
        return _error(403, "Forbidden")

    try:
        url = storage.create_signed_url(attachment["storage_path"], ATTACHMENT_URL_TTL_SECONDS)
    except StorageError as e:
        logger.error("Signing failed for attachment {}: {}", attachment_id, e)
        return _error(500, "Failed to generate URL")

    return AttachmentUrl(url=url)
