"""Domain layer exports."""

from .models import UploadRequest, UploadResult

__all__ = ["UploadRequest", "UploadResult"]
