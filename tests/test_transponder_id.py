import pytest

from planetracker.models import InvalidTransponderId, TransponderId


@pytest.mark.parametrize("text", ["000000", "ABCDEF", "4CA2D6", "FFFFFF", "00A1b2"])
def test_hex_round_trip(text):
    parsed = TransponderId.from_hex(text)

    assert parsed.hex == text.upper()
    assert TransponderId.from_hex(parsed.hex) == parsed
    assert str(parsed) == text.upper()


@pytest.mark.parametrize("text", ["", "ABCDE", "ABCDEF0", "ABCDEG", "0x1234", "+12345", " 12345", "12_345"])
def test_invalid_hex_is_rejected(text):
    with pytest.raises(InvalidTransponderId):
        TransponderId.from_hex(text)


def test_identity_is_by_value():
    assert TransponderId.from_hex("abcdef") == TransponderId(0xABCDEF)
    assert len({TransponderId(1), TransponderId.from_hex("000001")}) == 1


def test_out_of_range_value_is_rejected():
    with pytest.raises(InvalidTransponderId):
        TransponderId(0x1000000)
