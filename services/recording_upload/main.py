"""FastAPI application entry point."""

import ddtrace.auto  # noqa: F401
from doctorcare_common import setup_logging

from recording_upload.app import create_app

setup_logging()

app = create_app()
