import re
from datetime import datetime, timedelta, timezone

import pytest

from domain.common.exceptions import InvalidFileNameException
from domain.stored_file import (
    DEFAULT_ALLOWED_EXTENSIONS,
    StoredFile,
    file_extension,
    generate_storage_name,
    is_allowed_extension,
    validate_storage_name,
)

UUID_NAME = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}\.png$")


@pytest.mark.parametrize("name", ["cat.png", "CAT.PNG", "a.b.JpEg", "x.webp", "y.gif", "z.jpg"])
def test_allowed_extensions_case_insensitive(name):
    assert is_allowed_extension(name, DEFAULT_ALLOWED_EXTENSIONS)


@pytest.mark.parametrize("name", ["virus.exe", "logo.svg", "noext", ".png", "png", "archive.png.zip", ""])
def test_rejected_extensions(name):
    assert not is_allowed_extension(name, DEFAULT_ALLOWED_EXTENSIONS)


def test_svg_allowed_only_when_configured():
    assert is_allowed_extension("logo.SVG", DEFAULT_ALLOWED_EXTENSIONS + (".svg",))


def test_extension_uses_last_path_segment():
    assert file_extension("C:\\Users\\me\\photo.JPG") == ".jpg"
    assert file_extension("dir.png/file") == ""


def test_generated_name_is_uuid_plus_lowercased_extension():
    name = generate_storage_name("Holiday Photo.PNG")
    assert UUID_NAME.match(name)


def test_generated_names_do_not_repeat():
    names = {generate_storage_name("a.png") for _ in range(500)}
    assert len(names) == 500


@pytest.mark.parametrize(
    "name",
    ["", "   ", ".", "..", "../secret.png", "a/b.png", "..\\x.png", "bad\x00.png", "x" * 256 + ".png"],
)
def test_validate_storage_name_rejects(name):
    with pytest.raises(InvalidFileNameException):
        validate_storage_name(name)


def test_validate_storage_name_accepts_plain_names():
    assert validate_storage_name("abc.png") == "abc.png"
    assert validate_storage_name("..png") == "..png"


def test_stored_file_sort_key_newest_first_then_name():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    files = [
        StoredFile(name="b.png", size=1, modified_at=now),
        StoredFile(name="old.png", size=1, modified_at=now - timedelta(days=1)),
        StoredFile(name="a.png", size=1, modified_at=now),
        StoredFile(name="new.png", size=1, modified_at=now + timedelta(seconds=1)),
    ]
    assert [f.name for f in sorted(files, key=StoredFile.sort_key)] == ["new.png", "a.png", "b.png", "old.png"]


def test_stored_file_normalizes_naive_timestamps_to_utc():
    stored = StoredFile(name="a.png", size=1, modified_at=datetime(2024, 1, 1, 12, 0))
    assert stored.modified_at.tzinfo == timezone.utc
    assert stored.with_url("http://x/files/a.png").url == "http://x/files/a.png"
