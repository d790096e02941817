import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from _fakes import UA_GUEST, UA_STAFF, FrozenClock  # noqa: E402
from config import LinkScheme, Settings  # noqa: E402
from api.app.security.table_link import LinkAuthenticator, order_link  # noqa: E402


@pytest.fixture
def auth(clock) -> LinkAuthenticator:
    return LinkAuthenticator(clock=clock)


def test_token_is_deterministic_and_short(auth):
    token = auth.generate_table_hash("A1", UA_STAFF)
    assert token == auth.generate_table_hash("A1", UA_STAFF)
    assert len(token) == 12
    assert token.isalnum()


@pytest.mark.parametrize("table_no", ["A1", "B12", "Terrace 3", "窗邊", "VeryLongTableName-42"])
def test_token_validates_same_device_same_day(auth, table_no):
    token = auth.generate_table_hash(table_no, UA_STAFF)
    assert auth.validate_hash(table_no, token, UA_STAFF) is True


def test_other_table_is_rejected(auth):
    token = auth.generate_table_hash("A1", UA_STAFF)
    assert auth.validate_hash("A2", token, UA_STAFF) is False
    assert auth.validate_hash("A10", token, UA_STAFF) is False


def test_next_day_is_rejected(auth, clock):
    token = auth.generate_table_hash("A1", UA_STAFF)
    clock.advance(days=1)
    assert auth.validate_hash("A1", token, UA_STAFF) is False


def test_token_survives_within_the_day(auth, clock):
    token = auth.generate_table_hash("A1", UA_STAFF)
    clock.advance(hours=11)
    assert auth.validate_hash("A1", token, UA_STAFF) is True


def test_device_scheme_rejects_other_device(auth):
    token = auth.generate_table_hash("A1", UA_STAFF)
    assert auth.validate_hash("A1", token, UA_GUEST) is False


@pytest.mark.parametrize("token", [None, "", "short", "x" * 13, "ÄÄÄÄÄÄÄÄÄÄÄÄ", 123])
def test_malformed_tokens_are_invalid(auth, token):
    assert auth.validate_hash("A1", token, UA_STAFF) is False


def test_signed_scheme_validates_across_devices():
    clock = FrozenClock()
    auth = LinkAuthenticator(LinkScheme.SIGNED, secret="s3cret", clock=clock)
    token = auth.generate_table_hash("A1", UA_STAFF)
    assert auth.validate_hash("A1", token, UA_GUEST) is True
    assert LinkAuthenticator(LinkScheme.SIGNED, secret="other", clock=clock).validate_hash(
        "A1", token
    ) is False
    clock.advance(days=1)
    assert auth.validate_hash("A1", token) is False


def test_signed_scheme_requires_secret():
    with pytest.raises(ValueError):
        LinkAuthenticator.from_settings(Settings(link_scheme="signed", link_secret=None))


def test_order_link_format():
    link = order_link("https://shop.example.com/", "S1", "A 1", "tok123")
    assert link == "https://shop.example.com/order/S1/A%201/tok123"
