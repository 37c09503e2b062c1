"""HTTP receiver for callback-mode transcription deliveries.

WHY: Callback-mode requests return only a request id; the transcript is
POSTed later to a URL the integrator owns. This package is that listener.

HOW: app.py is the FastAPI application, models.py its Pydantic schemas,
store.py the in-memory record of submissions and their outcomes.
"""
