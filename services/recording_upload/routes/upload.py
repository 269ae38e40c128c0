"""Recording upload endpoint."""

import logging
from typing import Annotated

from doctorcare_common import (
    ConsentRequiredError,
    KeyServiceError,
    PersistenceError,
    QueueError,
    StorageError,
)
from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile

from recording_upload.auth import AuthenticatedUser, get_current_user
from recording_upload.dependencies import get_upload_handler
from recording_upload.domain import UploadRequest
from recording_upload.handlers import RecordingUploadHandler
from recording_upload.response_models import UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recordings", tags=["recordings"])

CurrentUserDep = Annotated[AuthenticatedUser, Depends(get_current_user)]
UploadHandlerDep = Annotated[RecordingUploadHandler, Depends(get_upload_handler)]


@router.post("/upload", response_model=UploadResponse)
def upload_recording(
    user: CurrentUserDep,
    handler: UploadHandlerDep,
    audio: UploadFile,
    appointment_id: str = Form(..., alias="appointmentId", min_length=1),
    consent: str | None = Form(None),
    length: float = Form(0.0, ge=0),
) -> UploadResponse:
    """
    Uploads consultation audio.

    Encrypts the audio, stores it in object storage, records the recording
    and queues it for transcription.
    """
    request = UploadRequest(
        audio=audio.file.read(),
        consent=consent,
        appointment_id=appointment_id,
        created_by=user.id,
        length_seconds=length,
        file_name=audio.filename or "",
    )

    try:
        result = handler.upload(request)
    except ConsentRequiredError:
        raise HTTPException(
            status_code=400, detail="Consent required before recording"
        )
    except KeyServiceError:
        raise HTTPException(status_code=500, detail="Encryption key unavailable")
    except StorageError:
        raise HTTPException(status_code=500, detail="File upload failed")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Recording could not be saved")
    except QueueError:
        raise HTTPException(
            status_code=500, detail="Recording saved but could not be queued"
        )

    return UploadResponse(recording_id=result.recording_id, message=result.message)
