"""
picasort.media

Helpers for working with image files independent of where they are stored:
content fingerprints and EXIF metadata.
"""

from picasort.media.fingerprint import file_fingerprint
from picasort.media.metadata import GPSCoord, GPSData, ImageMetadata, MetadataError, read_metadata

__all__ = [
    "GPSCoord",
    "GPSData",
    "ImageMetadata",
    "MetadataError",
    "file_fingerprint",
    "read_metadata",
]

# --- Module Notes -----------------------------------------------------------
# Nothing here touches the database; the catalog tables that store these values
# live with the provisioned schema.
