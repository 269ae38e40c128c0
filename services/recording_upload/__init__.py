"""Recording upload service: encrypts consultation audio and queues transcription."""
