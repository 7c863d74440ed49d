"""
picasort.api

HTTP service (FastAPI) exposing liveness and readiness endpoints.
"""

# --- Module Notes -----------------------------------------------------------
# Build the app through `picasort.api.app.create_app`; routers stay import-only.
