"""
picasort.media.metadata

EXIF metadata extraction for image files (Pillow).

Responsibilities:
- Read the basic descriptors of an image: size, resolution, orientation, dates,
  description and copyright.
- Read the GPS block: latitude/longitude references and DMS coordinates, plus the
  GPS date and time stamps.

Tags that are absent yield `None`; tags that are present but cannot be parsed raise
`MetadataError`. Files Pillow cannot open raise its own `OSError` subclasses.
"""

from __future__ import annotations

import enum
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from pathlib import Path
from typing import Any

from PIL import ExifTags, Image

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"
EXIF_DATE_FORMAT = "%Y:%m:%d"


class MetadataError(ValueError):
    def __init__(self, tag: str, value: Any) -> None:
        super().__init__(f"invalid EXIF value for {tag}: {value!r}")
        self.tag = tag
        self.value = value


class Orientation(enum.IntEnum):
    # EXIF tag 0x0112; values describe how to transform the stored pixels for display.
    normal = 1
    flipped_horizontally = 2
    rotated_180 = 3
    flipped_vertically = 4
    transposed = 5
    rotated_90_cw = 6
    transversed = 7
    rotated_90_ccw = 8
    unknown = 9

    @classmethod
    def from_code(cls, code: int) -> Orientation:
        try:
            return cls(code)
        except ValueError:
            return cls.unknown


@dataclass(frozen=True, slots=True)
class GPSCoord:
    deg: int
    min: int
    sec: float

    def to_decimal(self, ref: str | None = None) -> float:
        value = self.deg + self.min / 60 + self.sec / 3600
        # South and West are negative in decimal degrees.
        return -value if ref in ("S", "W") else value


@dataclass(frozen=True, slots=True)
class GPSData:
    latitude_ref: str | None = None
    latitude: GPSCoord | None = None
    longitude_ref: str | None = None
    longitude: GPSCoord | None = None
    time: time | None = None
    date: date | None = None

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def lat_lon(self) -> tuple[float, float] | None:
        if not self.has_position:
            return None
        return (
            self.latitude.to_decimal(self.latitude_ref),
            self.longitude.to_decimal(self.longitude_ref),
        )


@dataclass(frozen=True, slots=True)
class Basics:
    width: int
    height: int
    description: str | None = None
    resolution_x: int | None = None
    resolution_y: int | None = None
    resolution_unit: int | None = None
    orientation: Orientation | None = None
    creation_date: datetime | None = None
    original_date: datetime | None = None
    modification_date: datetime | None = None
    copyright: str | None = None


@dataclass(frozen=True, slots=True)
class ImageMetadata:
    path: str
    basics: Basics
    gps: GPSData


def read_metadata(path: str | Path) -> ImageMetadata:
    with Image.open(path) as img:
        exif = img.getexif()
        basics = _basics(img.size, exif, exif.get_ifd(ExifTags.IFD.Exif))
        gps = _gps(exif.get_ifd(ExifTags.IFD.GPSInfo))
    return ImageMetadata(path=str(path), basics=basics, gps=gps)


def read_gps(path: str | Path) -> GPSData:
    with Image.open(path) as img:
        return _gps(img.getexif().get_ifd(ExifTags.IFD.GPSInfo))


def _basics(
    size: tuple[int, int], ifd0: Mapping[int, Any], exif_ifd: Mapping[int, Any]
) -> Basics:
    tags = ExifTags.Base
    # Pixel dimensions come from the decoded image; EXIF sizes are often stale after edits.
    width, height = size
    orientation = _int(ifd0, tags.Orientation, "Orientation")
    return Basics(
        width=width,
        height=height,
        description=_text(ifd0, tags.ImageDescription),
        resolution_x=_int(ifd0, tags.XResolution, "XResolution"),
        resolution_y=_int(ifd0, tags.YResolution, "YResolution"),
        resolution_unit=_int(ifd0, tags.ResolutionUnit, "ResolutionUnit"),
        orientation=Orientation.from_code(orientation) if orientation is not None else None,
        creation_date=_datetime(exif_ifd, tags.DateTimeDigitized, "DateTimeDigitized"),
        original_date=_datetime(exif_ifd, tags.DateTimeOriginal, "DateTimeOriginal"),
        modification_date=_datetime(ifd0, tags.DateTime, "DateTime"),
        copyright=_text(ifd0, tags.Copyright),
    )


def _gps(ifd: Mapping[int, Any]) -> GPSData:
    tags = ExifTags.GPS
    return GPSData(
        latitude_ref=_text(ifd, tags.GPSLatitudeRef),
        latitude=_coord(ifd, tags.GPSLatitude, "GPSLatitude"),
        longitude_ref=_text(ifd, tags.GPSLongitudeRef),
        longitude=_coord(ifd, tags.GPSLongitude, "GPSLongitude"),
        time=_gps_time(ifd),
        date=_gps_date(ifd),
    )


def _text(ifd: Mapping[int, Any], tag: int) -> str | None:
    value = ifd.get(tag)
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    value = str(value).replace("\x00", "").strip()
    return value or None


def _int(ifd: Mapping[int, Any], tag: int, name: str) -> int | None:
    value = ifd.get(tag)
    if value is None:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError, ZeroDivisionError) as exc:
        raise MetadataError(name, value) from exc


def _triple(ifd: Mapping[int, Any], tag: int, name: str) -> tuple[float, float, float] | None:
    value = ifd.get(tag)
    if value is None:
        return None
    if not isinstance(value, Sequence) or len(value) != 3:
        raise MetadataError(name, value)
    try:
        parts = tuple(float(part) for part in value)
    except (TypeError, ValueError, ZeroDivisionError) as exc:
        raise MetadataError(name, value) from exc
    # IFDRational with a zero denominator reads as NaN.
    if not all(math.isfinite(part) for part in parts):
        raise MetadataError(name, value)
    return parts  # type: ignore[return-value]


def _coord(ifd: Mapping[int, Any], tag: int, name: str) -> GPSCoord | None:
    parts = _triple(ifd, tag, name)
    if parts is None:
        return None
    deg, minutes, sec = parts
    return GPSCoord(deg=int(deg), min=int(minutes), sec=round(sec, 6))


def _gps_time(ifd: Mapping[int, Any]) -> time | None:
    parts = _triple(ifd, ExifTags.GPS.GPSTimeStamp, "GPSTimeStamp")
    if parts is None:
        return None
    hour, minute, sec = parts
    try:
        return time(int(hour), int(minute), int(sec))
    except ValueError as exc:
        raise MetadataError("GPSTimeStamp", parts) from exc


def _gps_date(ifd: Mapping[int, Any]) -> date | None:
    raw = _text(ifd, ExifTags.GPS.GPSDateStamp)
    if raw is None:
        return None
    try:
        return datetime.strptime(raw, EXIF_DATE_FORMAT).date()
    except ValueError as exc:
        raise MetadataError("GPSDateStamp", raw) from exc


def _datetime(ifd: Mapping[int, Any], tag: int, name: str) -> datetime | None:
    raw = _text(ifd, tag)
    if raw is None:
        return None
    try:
        # EXIF timestamps carry no zone; they are stored as UTC.
        return datetime.strptime(raw, EXIF_DATETIME_FORMAT).replace(tzinfo=UTC)
    except ValueError as exc:
        raise MetadataError(name, raw) from exc


# --- Module Notes -----------------------------------------------------------
# Decimal coordinates from `GPSData.lat_lon()` are what the postgis geography
# columns of the future catalog will store.
