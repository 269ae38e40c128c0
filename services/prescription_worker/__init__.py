"""Prescription worker: turns encrypted consultation recordings into draft prescriptions."""
