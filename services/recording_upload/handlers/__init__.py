from .upload_handler import RecordingUploadHandler

__all__ = ["RecordingUploadHandler"]
