"""
Prescription Worker.

Consumes transcription jobs: unwraps the data key with KMS, decrypts the
recording, transcribes it with AssemblyAI, drafts a prescription with Gemini
and stores the result.
"""

import ddtrace.auto  # noqa: F401
from doctorcare_common import setup_logging

from prescription_worker.dependencies import get_worker


def main():
    """Starts the worker."""
    setup_logging()
    worker = get_worker()
    worker.start()


if __name__ == "__main__":
    main()
