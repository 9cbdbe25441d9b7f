"""ASGI entrypoint for the SpeechKarma API.

    uvicorn main:app --reload --app-dir apps/api

Settings are read when the module is imported, so the environment (or a
.env file) must be in place first.
"""

from speechkarma.app import add_request_id_middleware, create_app

app = create_app()
add_request_id_middleware(app)  # last, so it wraps auth failures too

__all__ = ["app"]
