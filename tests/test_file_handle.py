import os

import pytest

from hwsensors.file_handle import FileHandle, FileOpenError


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "value"
    path.write_text("1234\n")
    return path


def test_open_and_read(data_file):
    with FileHandle(data_file) as handle:
        assert handle.fileno() >= 0
        assert os.read(handle.fileno(), 64) == b"1234\n"


def test_write_through_handle(data_file):
    with FileHandle(data_file, os.O_WRONLY | os.O_TRUNC) as handle:
        os.write(handle.fileno(), b"77\n")
    assert data_file.read_text() == "77\n"


def test_missing_file_raises(tmp_path):
    missing = tmp_path / "absent"
    with pytest.raises(FileOpenError) as info:
        FileHandle(missing)
    assert "failed to open" in str(info.value)
    assert str(missing) in str(info.value)


def test_close_releases_descriptor(data_file):
    handle = FileHandle(data_file)
    fd = handle.fileno()
    handle.close()
    assert handle.fileno() == -1
    with pytest.raises(OSError):
        os.fstat(fd)
    handle.close()
    assert handle.fileno() == -1


def test_context_manager_closes(data_file):
    with FileHandle(data_file) as handle:
        fd = handle.fileno()
    assert handle.fileno() == -1
    with pytest.raises(OSError):
        os.fstat(fd)


def test_wraps_existing_descriptor(data_file):
    fd = os.open(data_file, os.O_RDONLY)
    handle = FileHandle(fd)
    assert handle.fileno() == fd
    handle.close()
    with pytest.raises(OSError):
        os.fstat(fd)


def test_detach_transfers_ownership(data_file):
    handle = FileHandle(data_file)
    fd = handle.detach()
    assert handle.fileno() == -1
    handle.close()
    other = FileHandle(fd)
    assert os.read(other.fileno(), 4) == b"1234"
    other.close()