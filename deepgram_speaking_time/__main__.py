"""Package entry point for ``python -m deepgram_speaking_time``.

Starts the callback receiver with uvicorn on port 8000.
"""

from deepgram_speaking_time.server.app import run_api

if __name__ == "__main__":
    run_api()
