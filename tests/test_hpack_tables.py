import pytest

from httpwire.hpack_tables import (
    EOS_SYMBOL,
    HuffmanEntry,
    huffman_code,
    static_entry,
)


def test_first_static_entries():
    assert static_entry(1) == (":authority", "")
    assert static_entry(2) == (":method", "GET")
    assert static_entry(3) == (":method", "POST")


def test_last_static_entry():
    assert static_entry(61) == ("www-authenticate", "")


def test_static_entry_with_value():
    assert static_entry(16) == ("accept-encoding", "gzip, deflate")


@pytest.mark.parametrize("index", [0, -1, 62, 100])
def test_static_entry_out_of_range(index):
    with pytest.raises(IndexError):
        static_entry(index)


def test_static_names_are_lowercase():
    names = [static_entry(i)[0] for i in range(1, 62)]
    assert all(name == name.lower() for name in names)


def test_static_entries_are_unique_pairs():
    pairs = [static_entry(i) for i in range(1, 62)]
    assert len(set(pairs)) == len(pairs)


def test_huffman_code_for_digit_zero():
    assert huffman_code(ord("0")) == HuffmanEntry(0x0, 5)


def test_huffman_code_for_end_of_string():
    assert huffman_code(EOS_SYMBOL) == HuffmanEntry(0x3fffffff, 30)


@pytest.mark.parametrize("symbol", [-1, 257, 1000])
def test_huffman_code_out_of_range(symbol):
    with pytest.raises(IndexError):
        huffman_code(symbol)


def test_huffman_codes_fit_their_bit_length():
    entries = [huffman_code(s) for s in range(EOS_SYMBOL + 1)]
    assert all(5 <= e.bits <= 30 for e in entries)
    assert all(e.code < (1 << e.bits) for e in entries)


def test_huffman_codes_are_prefix_free():
    entries = [huffman_code(s) for s in range(EOS_SYMBOL + 1)]
    for i, a in enumerate(entries):
        for j, b in enumerate(entries):
            if i == j or a.bits > b.bits:
                continue
            assert (b.code >> (b.bits - a.bits)) != a.code, (i, j)