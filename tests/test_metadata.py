"""
tests.test_metadata

EXIF basics and GPS extraction from images written with Pillow.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time

import pytest
from PIL import ExifTags, Image
from PIL.TiffImagePlugin import IFDRational

from picasort.media.metadata import (
    GPSCoord,
    GPSData,
    MetadataError,
    Orientation,
    read_gps,
    read_metadata,
)


def _dms(deg: int, minutes: int, sec_hundredths: int) -> tuple[IFDRational, ...]:
    return (IFDRational(deg, 1), IFDRational(minutes, 1), IFDRational(sec_hundredths, 100))


@pytest.fixture
def gps_jpeg(tmp_path):
    img = Image.new("RGB", (64, 48), "white")
    exif = img.getexif()
    exif[ExifTags.Base.Orientation] = 6
    exif[ExifTags.Base.ImageDescription] = "Fourviere"
    exif[ExifTags.Base.Copyright] = "Lemur-Catta.org"
    exif[ExifTags.Base.DateTime] = "2024:10:28 20:35:03"
    exif[ExifTags.IFD.Exif] = {ExifTags.Base.DateTimeOriginal: "2024:10:28 20:35:03"}
    exif[ExifTags.IFD.GPSInfo] = {
        ExifTags.GPS.GPSLatitudeRef: "N",
        ExifTags.GPS.GPSLatitude: _dms(45, 45, 3705),
        ExifTags.GPS.GPSLongitudeRef: "E",
        ExifTags.GPS.GPSLongitude: _dms(4, 51, 2096),
        ExifTags.GPS.GPSTimeStamp: _dms(18, 35, 300),
        ExifTags.GPS.GPSDateStamp: "2024:10:28",
    }
    path = tmp_path / "text_icon_gps.jpg"
    img.save(path, exif=exif)
    return path


@pytest.fixture
def plain_png(tmp_path):
    path = tmp_path / "text_car_animal_no-gps.png"
    Image.new("RGB", (32, 24), "black").save(path)
    return path


def test_gps_coordinates_are_read(gps_jpeg) -> None:
    gps = read_gps(gps_jpeg)

    assert gps.latitude_ref == "N"
    assert gps.latitude == GPSCoord(deg=45, min=45, sec=37.05)
    assert gps.longitude_ref == "E"
    assert gps.longitude == GPSCoord(deg=4, min=51, sec=20.96)
    assert gps.time == time(18, 35, 3)
    assert gps.date == date(2024, 10, 28)

    lat, lon = gps.lat_lon()
    assert lat == pytest.approx(45.760292, abs=1e-6)
    assert lon == pytest.approx(4.855822, abs=1e-6)


def test_image_without_gps_has_empty_fields(plain_png) -> None:
    gps = read_gps(plain_png)

    assert gps == GPSData()
    assert gps.has_position is False
    assert gps.lat_lon() is None


def test_basics_are_read(gps_jpeg) -> None:
    basics = read_metadata(gps_jpeg).basics

    assert (basics.width, basics.height) == (64, 48)
    assert basics.orientation is Orientation.rotated_90_cw
    assert basics.description == "Fourviere"
    assert basics.copyright == "Lemur-Catta.org"
    assert basics.original_date == datetime(2024, 10, 28, 20, 35, 3, tzinfo=UTC)
    assert basics.modification_date == datetime(2024, 10, 28, 20, 35, 3, tzinfo=UTC)
    assert basics.creation_date is None


def test_basics_of_image_without_exif(plain_png) -> None:
    meta = read_metadata(plain_png)

    assert meta.path == str(plain_png)
    assert (meta.basics.width, meta.basics.height) == (32, 24)
    assert meta.basics.orientation is None
    assert meta.basics.original_date is None


def test_southern_and_western_coordinates_are_negative() -> None:
    gps = GPSData(
        latitude_ref="S",
        latitude=GPSCoord(deg=33, min=51, sec=54.0),
        longitude_ref="W",
        longitude=GPSCoord(deg=70, min=40, sec=12.0),
    )

    lat, lon = gps.lat_lon()
    assert lat == pytest.approx(-33.865)
    assert lon == pytest.approx(-70.67)


def test_unknown_orientation_code() -> None:
    assert Orientation.from_code(42) is Orientation.unknown


def test_malformed_gps_date_raises(tmp_path) -> None:
    img = Image.new("RGB", (8, 8))
    exif = img.getexif()
    exif[ExifTags.IFD.GPSInfo] = {ExifTags.GPS.GPSDateStamp: "28/10/2024"}
    path = tmp_path / "bad.jpg"
    img.save(path, exif=exif)

    with pytest.raises(MetadataError) as info:
        read_metadata(path)

    assert info.value.tag == "GPSDateStamp"


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        read_metadata(tmp_path / "text_icon_gps_nofile.jpg")
