import json

import pytest

from pos_mirror import envelope as env
from pos_mirror.errors import EnvelopeError


def test_parse_keeps_payload_fields():
    e = env.parse_envelope('{"type": "qr_payment", "amount": 100000, "transactionUuid": "abc"}')
    assert e.type == env.QR_PAYMENT
    assert e.get("amount") == 100000
    assert e.to_dict() == {"type": "qr_payment", "amount": 100000, "transactionUuid": "abc"}


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "not json",
        "[]",
        "42",
        '{"typ": "ping"}',
        '{"type": 7}',
        '{"type": "CART_UPDATE"}',
        '{"type": "definitely_unknown"}',
    ],
)
def test_parse_rejects_bad_input(raw):
    with pytest.raises(EnvelopeError):
        env.parse_envelope(raw)


def test_parse_accepts_bytes():
    assert env.parse_envelope(b'{"type": "ping"}').type == env.PING


def test_make_envelope_rejects_unknown_tag():
    with pytest.raises(EnvelopeError):
        env.make_envelope("cart_updated")


def test_to_json_roundtrips_through_parse():
    e = env.make_envelope(env.QR_PAYMENT_CANCELLED, transactionUuid="abc")
    assert json.loads(e.to_json()) == {"type": "qr_payment_cancelled", "transactionUuid": "abc"}
    assert env.parse_envelope(e.to_json()) == e


def test_control_and_fanout_tags_do_not_overlap():
    assert not env.CONTROL_TAGS & env.FANOUT_TAGS
    assert env.CART_UPDATE in env.FANOUT_TAGS
    assert env.CUSTOMER_DISPLAY_CONNECTED in env.CONTROL_TAGS
