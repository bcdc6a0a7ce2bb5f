import pytest

from archlens.layers import LAYERS, UNKNOWN, classify, layer_sort_key


@pytest.mark.parametrize("cid, expected", [
    ("com.acme.web.OrderController", "controller"),
    ("com.acme.OrderServiceImplementation", "service"),
    ("com.acme.billing.InvoiceRepo", "repository"),
    ("com.acme.domain.InvoiceEntity", "model"),
    ("com.acme.api.InvoiceDTO", "dto"),
    ("com.acme.WebConfig", "config"),
    ("com.acme.InvoiceNotFoundException", "exception"),
    ("com.acme.StatusEnumeration", "enumeration"),
    ("com.acme.util.Strings", UNKNOWN),
])
def test_name_rules(cid, expected):
    assert classify(cid) == expected


def test_first_rule_wins():
    # Matches both "controller" and "service"; controller is checked first.
    assert classify("com.acme.ServiceController") == "controller"
    assert classify("com.acme.model.UserRepository") == "repository"


def test_explicit_layer_returned_verbatim():
    assert classify("com.acme.OrderController", "service") == "service"
    assert classify("com.acme.Thing", "integration") == "integration"
    assert classify("com.acme.OrderController", "") == "controller"


def test_total_and_idempotent():
    for cid in ["", "x", "ServiceRepo", "ÄÖÜ", "a.b.c"]:
        layer = classify(cid)
        assert isinstance(layer, str) and layer
        assert classify(cid) == layer


def test_sort_key_puts_known_layers_first():
    layers = ["zeta", "unknown", "controller", "alpha", "dto"]
    ordered = sorted(layers, key=layer_sort_key)
    assert ordered == ["controller", "dto", "unknown", "alpha", "zeta"]
    assert ordered[0] in LAYERS
