from archlens.hulls import NEUTRAL_BORDER, cluster_color
from archlens.legend import (
    NONE_LISTED,
    NOT_AVAILABLE,
    cluster_legend,
    component_detail,
    format_detail,
    layer_legend,
    tooltip_text,
)
from archlens.membership import ProposalStore
from archlens.model import Component, ComponentAttributes, Proposal


def test_layer_legend_sorted_and_deduplicated():
    entries = layer_legend(["service", "custom", "controller", "service"])
    assert [e.label for e in entries] == ["controller", "service", "custom"]
    assert all(e.kind == "fill" for e in entries)


def test_cluster_legend_has_unclustered_swatch():
    store = ProposalStore([Proposal(1, "Billing"), Proposal(2, "Ledger")])
    entries = cluster_legend(store)
    assert [e.label for e in entries] == ["Billing", "Ledger", "unclustered"]
    assert entries[0].color == cluster_color(1)
    assert entries[-1].color == NEUTRAL_BORDER


def test_tooltip_lines():
    assert tooltip_text("A", "Billing", "service", 10) == "ID: A\nCluster: Billing\nLayer: service\nLOC: 10"


def test_detail_placeholders():
    comp = Component("com.x.OrderService", loc=12)
    detail = component_detail(comp, ProposalStore())
    header = dict(detail.header)
    assert header["Layer"] == "service"
    assert header["Current cluster"] == "unclustered"
    assert header["EJB type"] == NOT_AVAILABLE
    rows = {k: v for s in detail.sections for k, v in s.rows}
    assert rows["Database tables"] == NONE_LISTED
    assert rows["Extends"] == NONE_LISTED
    assert rows["CBO (coupling between objects)"] == NOT_AVAILABLE


def test_detail_values_and_text():
    attrs = ComponentAttributes(tables_used=("orders", "lines"), cbo=4.0, lcom=0.25,
                                ejb_type="Stateless", sensitive_data=True)
    comp = Component("com.x.OrderBean", layer="service", loc=200, attrs=attrs)
    store = ProposalStore([Proposal(5, "Orders", components=("com.x.OrderBean",))])
    detail = component_detail(comp, store)
    assert detail.cluster_id == 5
    text = format_detail(detail)
    assert "Database tables: orders, lines" in text
    assert "CBO (coupling between objects): 4" in text
    assert "LCOM (lack of cohesion in methods): 0.25" in text
    assert "Sensitive data: Yes" in text
