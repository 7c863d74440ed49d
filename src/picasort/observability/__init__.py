"""
picasort.observability

Logging setup shared by the provisioning CLI and the API.
"""

# --- Module Notes -----------------------------------------------------------
# Call `configure_logging` once per process before the first log line.
