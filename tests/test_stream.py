import io
import json

import pytest

from yadoma.stream import StreamWriter, stream_decoder, stream_reader


class ErrorReader:
    def __init__(self, error):
        self.error = error

    def read(self, size=-1):
        raise self.error


class TrickleReader:
    def __init__(self, data, step):
        self.data = data
        self.step = step
        self.pos = 0

    def read(self, size=-1):
        chunk = self.data[self.pos:self.pos + self.step]
        self.pos += len(chunk)
        return chunk


def _failing_send(_):
    raise RuntimeError("send error")


# --- StreamWriter -----------------------------------------------------------

def test_stream_writer_successful_write():
    sent = []
    writer = StreamWriter(sent.append)
    assert writer.write(b"hello world") == 11
    assert sent == [b"hello world"]


def test_stream_writer_send_error():
    writer = StreamWriter(_failing_send)
    with pytest.raises(RuntimeError, match="send error"):
        writer.write(b"test data")


def test_stream_writer_empty_data():
    sent = []
    assert StreamWriter(sent.append).write(b"") == 0
    assert sent == [b""]


# --- stream_reader ----------------------------------------------------------

def test_stream_reader_successful_reading():
    received = []
    stream_reader(io.BytesIO(b"hello world test data"), received.append)
    assert b"".join(received) == b"hello world test data"


def test_stream_reader_empty_reader():
    received = []
    stream_reader(io.BytesIO(b""), received.append)
    assert received == []


def test_stream_reader_send_error():
    with pytest.raises(RuntimeError):
        stream_reader(io.BytesIO(b"test data"), _failing_send)


def test_stream_reader_large_data_is_chunked():
    data = b"a" * 2048
    received = []
    stream_reader(io.BytesIO(data), received.append)
    assert b"".join(received) == data
    assert all(len(chunk) <= 1024 for chunk in received)
    assert len(received) == 2


def test_stream_reader_custom_chunk_size():
    received = []
    stream_reader(io.BytesIO(b"abcdefg"), received.append, chunk_size=3)
    assert received == [b"abc", b"def", b"g"]


def test_stream_reader_reader_error():
    with pytest.raises(OSError, match="read error"):
        stream_reader(ErrorReader(OSError("read error")), lambda _: None)


# --- stream_decoder ---------------------------------------------------------

def test_stream_decoder_concatenated_objects():
    received = []
    stream_decoder(io.BytesIO(b'{"name":"test1","value":1}{"name":"test2","value":2}'), received.append)
    assert received == [{"name": "test1", "value": 1}, {"name": "test2", "value": 2}]


def test_stream_decoder_single_object():
    received = []
    stream_decoder(io.BytesIO(b'{"name":"single","value":42}'), received.append)
    assert received == [{"name": "single", "value": 42}]


def test_stream_decoder_empty_input():
    received = []
    stream_decoder(io.BytesIO(b""), received.append)
    assert received == []


def test_stream_decoder_invalid_json():
    with pytest.raises(json.JSONDecodeError):
        stream_decoder(io.BytesIO(b'{"name":"test","invalid":}'), lambda _: None)


def test_stream_decoder_send_error():
    with pytest.raises(RuntimeError):
        stream_decoder(io.BytesIO(b'{"name":"test","value":1}'), _failing_send)


def test_stream_decoder_objects_with_newlines():
    received = []
    stream_decoder(
        io.BytesIO(b'{"name":"test1","value":1}\n{"name":"test2","value":2}\n'),
        received.append,
    )
    assert [item["name"] for item in received] == ["test1", "test2"]


@pytest.mark.parametrize(
    "data, expected",
    [
        (b'"hello""world"', ["hello", "world"]),
        (b"12345", [12345]),
        (b"[1,2,3][4,5,6]", [[1, 2, 3], [4, 5, 6]]),
    ],
)
def test_stream_decoder_different_types(data, expected):
    received = []
    stream_decoder(io.BytesIO(data), received.append)
    assert received == expected


def test_stream_decoder_values_split_across_reads():
    received = []
    stream_decoder(TrickleReader(b'12345 678 {"name":"x"}', 2), received.append)
    assert received == [12345, 678, {"name": "x"}]


def test_stream_decoder_accepts_text_reader():
    received = []
    stream_decoder(io.StringIO('{"name":"test1","value":1}'), received.append)
    assert received == [{"name": "test1", "value": 1}]


def test_stream_decoder_truncated_input():
    with pytest.raises(json.JSONDecodeError):
        stream_decoder(io.BytesIO(b'{"name":"test1"'), lambda _: None)


def test_stream_decoder_reader_error():
    with pytest.raises(OSError, match="read error"):
        stream_decoder(ErrorReader(OSError("read error")), lambda _: None)