import string

import pytest
from hypothesis import given
from hypothesis import strategies as st

from httpwire.hpack import HpackDecoder, HpackEncoder, decode_integer, encode_integer
from httpwire.messages import ErrorCode, Header, HttpError


def _pairs(headers):
    return [(h.name, h.value) for h in headers]


# --- integer coding --------------------------------------------------------


@pytest.mark.parametrize(
    "value, prefix, first, expected",
    [
        (10, 5, 0x00, b"\x0a"),
        (1337, 5, 0x00, b"\x1f\x9a\x0a"),
        (42, 8, 0x00, b"\x2a"),
        (2, 7, 0x80, b"\x82"),
        (31, 5, 0x00, b"\x1f\x00"),
    ],
)
def test_encode_integer_values(value, prefix, first, expected):
    assert encode_integer(value, prefix, first) == expected


def test_decode_integer_multi_byte():
    assert decode_integer(b"\x1f\x9a\x0a", 0, 5) == (1337, 3)


def test_decode_integer_from_offset():
    assert decode_integer(b"\xff\x0a", 1, 5) == (10, 2)


def test_decode_integer_past_end_needs_more_data():
    with pytest.raises(HttpError) as info:
        decode_integer(b"\x01", 1, 5)
    assert info.value.code is ErrorCode.NEED_MORE_DATA


def test_decode_integer_unterminated_needs_more_data():
    with pytest.raises(HttpError) as info:
        decode_integer(b"\x1f\x80", 0, 5)
    assert info.value.code is ErrorCode.NEED_MORE_DATA


@given(st.integers(min_value=0, max_value=2**28), st.integers(min_value=1, max_value=8))
def test_integer_round_trip(value, prefix):
    encoded = encode_integer(value, prefix, 0)
    assert decode_integer(encoded, 0, prefix) == (value, len(encoded))


# --- encoder ---------------------------------------------------------------


def test_encode_fully_indexed_static_header():
    assert HpackEncoder().encode_headers([Header(":method", "GET")]) == b"\x82"


def test_encode_literal_with_new_name_then_indexed():
    encoder = HpackEncoder()
    first = encoder.encode_headers([Header("custom-key", "custom-header")])
    assert first == b"\x40\x8acustom-key\x8dcustom-header"
    assert encoder.dynamic_table == [("custom-key", "custom-header")]
    assert encoder.dynamic_table_used == 55
    assert encoder.encode_headers([Header("custom-key", "custom-header")]) == b"\xbe"


def test_encode_literal_with_static_name():
    encoder = HpackEncoder()
    assert encoder.encode_headers([Header(":path", "/api")]) == b"\x44\x84/api"
    assert encoder.dynamic_table == [(":path", "/api")]


def test_encode_sensitive_header_is_never_indexed():
    encoder = HpackEncoder()
    block = encoder.encode_headers([Header("authorization", "Bearer token", sensitive=True)])
    assert block == b"\x1f\x08\x8cBearer token"
    assert encoder.dynamic_table == []


def test_encoder_evicts_oldest_entries():
    encoder = HpackEncoder()
    encoder.set_dynamic_table_size(60)
    encoder.encode_headers([Header("x-a", "1"), Header("x-b", "2")])
    assert encoder.dynamic_table == [("x-b", "2")]
    assert encoder.dynamic_table_used == 36
    assert encoder.encode_headers([Header("x-a", "1")]) == b"\x40\x83x-a\x811"


def test_encoder_skips_entry_larger_than_table():
    encoder = HpackEncoder()
    encoder.set_dynamic_table_size(40)
    encoder.encode_headers([Header("x-long", "0123456789")])
    assert encoder.dynamic_table == []
    assert encoder.dynamic_table_used == 0


def test_shrinking_table_evicts():
    encoder = HpackEncoder()
    encoder.encode_headers([Header("x-a", "1"), Header("x-b", "2")])
    assert len(encoder.dynamic_table) == 2
    encoder.set_dynamic_table_size(36)
    assert encoder.dynamic_table == [("x-b", "2")]
    assert encoder.dynamic_table_size == 36


def test_clear_dynamic_table():
    encoder = HpackEncoder()
    encoder.encode_headers([Header("x-a", "1")])
    encoder.clear_dynamic_table()
    assert encoder.dynamic_table == []
    assert encoder.dynamic_table_used == 0


# --- decoder ---------------------------------------------------------------


def test_decode_indexed_static_header():
    assert _pairs(HpackDecoder().decode_headers(b"\x82\x87")) == [
        (":method", "GET"),
        (":scheme", "https"),
    ]


def test_decode_literal_without_indexing():
    decoder = HpackDecoder()
    headers = decoder.decode_headers(b"\x04\x0c/sample/path")
    assert headers == [Header(":path", "/sample/path")]
    assert decoder.dynamic_table == []


def test_decode_never_indexed_marks_sensitive():
    decoder = HpackDecoder()
    headers = decoder.decode_headers(b"\x10\x06x-note\x06hidden")
    assert headers == [Header("x-note", "hidden", sensitive=True)]
    assert decoder.dynamic_table == []


def test_decode_with_indexing_then_reference():
    decoder = HpackDecoder()
    decoder.decode_headers(b"\x40\x8acustom-key\x8dcustom-header")
    assert decoder.dynamic_table == [("custom-key", "custom-header")]
    assert decoder.decode_headers(b"\xbe") == [Header("custom-key", "custom-header")]


def test_decode_table_size_update():
    decoder = HpackDecoder()
    decoder.decode_headers(b"\x3f\xe1\x1f")
    assert decoder.dynamic_table_size == 4096
    decoder.decode_headers(b"\x40\x83x-a\x811")
    assert decoder.decode_headers(b"\x20") == []
    assert decoder.dynamic_table == []
    assert decoder.dynamic_table_size == 0


@pytest.mark.parametrize(
    "block, code",
    [
        (b"\x80", ErrorCode.PROTOCOL_ERROR),
        (b"\xbe", ErrorCode.PROTOCOL_ERROR),
        (b"\xff" * 6, ErrorCode.PROTOCOL_ERROR),
        (b"\x40\x85abc", ErrorCode.NEED_MORE_DATA),
        (b"\x7f", ErrorCode.NEED_MORE_DATA),
        (b"\x40", ErrorCode.NEED_MORE_DATA),
        (b"\x44", ErrorCode.NEED_MORE_DATA),
    ],
)
def test_decode_errors(block, code):
    with pytest.raises(HttpError) as info:
        HpackDecoder().decode_headers(block)
    assert info.value.code is code


def test_decoder_clear_dynamic_table():
    decoder = HpackDecoder()
    decoder.decode_headers(b"\x40\x83x-a\x811")
    decoder.clear_dynamic_table()
    with pytest.raises(HttpError) as info:
        decoder.decode_headers(b"\xbe")
    assert info.value.code is ErrorCode.PROTOCOL_ERROR


# --- round trips -----------------------------------------------------------


@pytest.mark.parametrize("n", [0, 7, 999])
def test_stress_header_set_round_trip(n):
    headers = [
        Header(":method", "GET"),
        Header(":scheme", "https"),
        Header(":path", f"/api/hpack/{n}"),
        Header(":authority", "api.example.com"),
        Header("user-agent", "StressTestClient/1.0"),
    ]
    encoder = HpackEncoder()
    decoder = HpackDecoder()
    for _ in range(3):
        block = encoder.encode_headers(headers)
        assert _pairs(decoder.decode_headers(block)) == _pairs(headers)
    assert decoder.dynamic_table == encoder.dynamic_table


def test_round_trip_utf8_values():
    headers = [Header("x-name", "测试 🎉"), Header("host", "测试.example.com")]
    block = HpackEncoder().encode_headers(headers)
    assert _pairs(HpackDecoder().decode_headers(block)) == _pairs(headers)


_TEXT = st.text(alphabet=string.ascii_letters + string.digits + "-_/ :;=é中🎉", max_size=40)
_HEADER = st.builds(Header, name=_TEXT, value=_TEXT, sensitive=st.booleans())


@given(st.lists(st.lists(_HEADER, max_size=8), max_size=4))
def test_encoder_decoder_stay_in_sync(blocks):
    encoder = HpackEncoder()
    decoder = HpackDecoder()
    for headers in blocks:
        decoded = decoder.decode_headers(encoder.encode_headers(headers))
        assert _pairs(decoded) == _pairs(headers)
        assert decoder.dynamic_table == encoder.dynamic_table
        assert decoder.dynamic_table_used <= decoder.dynamic_table_size