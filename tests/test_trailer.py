"""Tests for standalone writes and the append trailer protocol."""

import base64
import gzip
import hashlib
import io
import os
import struct

import pytest

from blockmap import trailer
from blockmap.config import CompressionFormat
from blockmap.digests import FileDigest
from blockmap.exceptions import BlockMapError, BlockMapIOError, SerializationError
from blockmap.trailer import TrailerState, TrailerWriter, encode_trailer_length
from conftest import read_trailer

SERIALIZED = b'{"version":"2","files":[{"name":"file","offset":0,"checksums":[],"sizes":[]}]}'


def sha512_b64(data: bytes) -> str:
    return base64.b64encode(hashlib.sha512(data).digest()).decode('ascii')


class TestEncodeTrailerLength:

    def test_big_endian(self):
        assert encode_trailer_length(0x01020304) == b"\x01\x02\x03\x04"

    def test_bounds(self):
        assert encode_trailer_length(0) == b"\x00\x00\x00\x00"
        assert encode_trailer_length(2 ** 32 - 1) == b"\xff\xff\xff\xff"
        with pytest.raises(SerializationError):
            encode_trailer_length(2 ** 32)


class TestStandaloneWrite:

    def test_write_to_path(self, tmp_path):
        out = tmp_path / "map.gz"
        writer = TrailerWriter(CompressionFormat.GZIP)

        size = writer.write_standalone(SERIALIZED, path=out)

        assert gzip.decompress(out.read_bytes()) == SERIALIZED
        assert size == out.stat().st_size == writer.archive_size
        assert writer.state is TrailerState.DONE

    def test_write_to_stdout_stream(self):
        stream = io.BytesIO()
        TrailerWriter(CompressionFormat.GZIP).write_standalone(SERIALIZED, stdout=stream)

        assert gzip.decompress(stream.getvalue()) == SERIALIZED

    def test_write_to_process_stdout(self, capsysbinary):
        TrailerWriter(CompressionFormat.GZIP).write_standalone(SERIALIZED)

        assert gzip.decompress(capsysbinary.readouterr().out) == SERIALIZED

    def test_unwritable_path(self, tmp_path):
        writer = TrailerWriter(CompressionFormat.GZIP)

        with pytest.raises(BlockMapIOError) as excinfo:
            writer.write_standalone(SERIALIZED, path=tmp_path / "missing" / "map.gz")
        assert isinstance(excinfo.value.__cause__, OSError)
        assert writer.state is TrailerState.FAILED


class TestAppend:

    def test_append_layout_and_digest(self, tmp_path):
        path = tmp_path / "input.bin"
        original = b"original content" * 100
        path.write_bytes(original)
        digest = FileDigest()
        digest.update(original)

        size = TrailerWriter(CompressionFormat.GZIP).append(SERIALIZED, path, digest)

        final = path.read_bytes()
        assert len(final) == len(original) + size + 4
        assert final[-4:] == struct.pack(">I", size)
        prefix, serialized, length = read_trailer(path)
        assert prefix == original
        assert serialized == SERIALIZED
        assert length == size
        assert digest.finalize() == sha512_b64(final)

    def test_append_deflate(self, tmp_path):
        path = tmp_path / "input.bin"
        path.write_bytes(b"abc")

        TrailerWriter(CompressionFormat.DEFLATE).append(SERIALIZED, path, FileDigest())

        prefix, serialized, _ = read_trailer(path, deflate=True)
        assert prefix == b"abc"
        assert serialized == SERIALIZED

    def test_append_does_not_create_missing_file(self, tmp_path):
        path = tmp_path / "gone.bin"
        writer = TrailerWriter(CompressionFormat.GZIP)

        with pytest.raises(BlockMapIOError):
            writer.append(SERIALIZED, path, FileDigest())
        assert not path.exists()
        assert writer.state is TrailerState.FAILED

    def test_descriptor_closed_when_write_fails(self, tmp_path, monkeypatch):
        path = tmp_path / "input.bin"
        path.write_bytes(b"abc")
        opened = []
        real_open = os.open

        def recording_open(file, flags, *args, **kwargs):
            fd = real_open(file, flags, *args, **kwargs)
            opened.append((fd, flags))
            return fd

        def failing_copy(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(trailer.os, "open", recording_open)
        monkeypatch.setattr(trailer.shutil, "copyfileobj", failing_copy)

        with pytest.raises(BlockMapIOError):
            TrailerWriter(CompressionFormat.GZIP).append(SERIALIZED, path, FileDigest())

        [(fd, flags)] = opened
        assert not flags & os.O_CREAT
        with pytest.raises(OSError):
            os.fstat(fd)
        assert path.read_bytes() == b"abc"

    def test_oversized_payload_leaves_file_untouched(self, tmp_path, monkeypatch):
        monkeypatch.setattr(trailer, "SIZE_FIELD_MAX", 8)
        path = tmp_path / "input.bin"
        path.write_bytes(b"unchanged")
        digest = FileDigest()
        writer = TrailerWriter(CompressionFormat.GZIP)

        with pytest.raises(SerializationError):
            writer.append(SERIALIZED, path, digest)

        assert path.read_bytes() == b"unchanged"
        assert digest.bytes_hashed == 0
        assert writer.state is TrailerState.FAILED


class TestStateMachine:

    def test_starts_idle(self):
        assert TrailerWriter(CompressionFormat.GZIP).state is TrailerState.IDLE

    def test_writer_is_single_use(self, tmp_path):
        writer = TrailerWriter(CompressionFormat.GZIP)
        writer.write_standalone(SERIALIZED, stdout=io.BytesIO())

        with pytest.raises(BlockMapError, match="cannot move from done"):
            writer.write_standalone(SERIALIZED, stdout=io.BytesIO())

    def test_failed_is_terminal(self, tmp_path):
        writer = TrailerWriter(CompressionFormat.GZIP)
        with pytest.raises(BlockMapIOError):
            writer.write_standalone(SERIALIZED, path=tmp_path / "no" / "dir")

        with pytest.raises(BlockMapError, match="cannot move from failed"):
            writer.write_standalone(SERIALIZED, stdout=io.BytesIO())

    def test_compression_failure_moves_to_failed(self):
        writer = TrailerWriter("zstd")

        with pytest.raises(BlockMapError):
            writer.write_standalone(SERIALIZED, stdout=io.BytesIO())
        assert writer.state is TrailerState.FAILED
