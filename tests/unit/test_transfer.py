from __future__ import annotations

import io

import pytest

from common.errors import TransferError
from common.transfer import FileChannel, MemoryChannel, StreamChannel, TransferChannel


def test_memory_channel_holds_last_text():
    ch = MemoryChannel()
    assert ch.read_text() == ""
    ch.write_text("one")
    ch.write_text("two")
    assert ch.read_text() == "two"


def test_file_channel_roundtrip(tmp_path):
    ch = FileChannel(tmp_path / "sub" / "clip.json")
    ch.write_text('{"data": {}}')
    assert ch.read_text() == '{"data": {}}'


def test_file_channel_missing_file_reads_empty(tmp_path):
    assert FileChannel(tmp_path / "nope.json").read_text() == ""


def test_file_channel_unreadable_path_raises(tmp_path):
    with pytest.raises(TransferError):
        FileChannel(tmp_path).read_text()


def test_stream_channel_writes_and_reads():
    out = io.StringIO()
    ch = StreamChannel(stdin=io.StringIO("payload"), stdout=out)

    ch.write_text("hello")
    assert out.getvalue() == "hello\n"
    assert ch.read_text() == "payload"


def test_stream_channel_closed_stream_raises():
    out = io.StringIO()
    out.close()
    with pytest.raises(TransferError):
        StreamChannel(stdout=out).write_text("x")


@pytest.mark.parametrize("cls", [MemoryChannel, StreamChannel])
def test_channels_satisfy_protocol(cls):
    assert isinstance(cls(), TransferChannel)
