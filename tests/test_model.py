import json

import pytest

from archlens.errors import AnalysisFormatError
from archlens.model import load_architecture, load_components, save_architecture


def test_loc_defaults_to_one():
    data = load_components({"components": [
        {"id": "A"}, {"id": "B", "loc": None}, {"id": "C", "loc": 0}, {"id": "D", "loc": 42},
    ]})
    assert [c.loc for c in data.components] == [1, 1, 1, 42]


def test_attributes_parsed():
    data = load_components({"components": [{
        "id": "com.x.Repo", "layer": "repository", "interface": True,
        "tables_used": ["orders"], "cbo": 3, "implements": "Serializable",
    }]})
    c = data.components[0]
    assert c.layer == "repository"
    assert c.attrs.is_interface
    assert c.attrs.tables_used == ("orders",)
    assert c.attrs.implements == ("Serializable",)
    assert c.attrs.cbo == 3.0


def test_dangling_edges_are_kept_for_filtering():
    data = load_components({"components": [{"id": "A"}], "edges": [{"from": "A", "to": "Z"}]})
    assert len(data.edges) == 1


@pytest.mark.parametrize("doc", [
    {"components": [{"id": "A"}, {"id": "A"}]},
    {"components": [{"loc": 3}]},
    {"components": [{"id": "A", "loc": -1}]},
    {"components": [{"id": "A", "loc": "big"}]},
    {"components": {"id": "A"}},
    {"components": [], "edges": [{"from": "A"}]},
    {"components": ["com.x.Foo"]},
    {"components": [{"id": "A"}], "edges": ["A->B"]},
    {"components": [{"id": "A", "tables_used": 7}]},
])
def test_malformed_components(doc):
    with pytest.raises(AnalysisFormatError):
        load_components(doc)


@pytest.mark.parametrize("doc", [
    {"proposals": ["Billing"]},
    {"proposals": [{"id": 1, "metrics": {"size": "big"}}]},
    {"proposals": [{"id": 1, "metrics": {"cohesion_avg": "high"}}]},
    {"proposals": [{"id": 1, "metrics": [3, 0.5]}]},
    {"project_metadata": {"total_loc": "lots"}},
    {"project_metadata": ["x"]},
    {"project_metadata": {"package_dependencies": {"com.x": 4}}},
    {"project_metadata": {"package_dependencies": {"com.x": {"components_count": "few"}}}},
    {"support_libraries": [{"id": "x"}]},
    {"support_libraries": [{"id": 0, "clusters": ["one"]}]},
    {"support_libraries": ["commons"]},
])
def test_malformed_architecture(doc):
    with pytest.raises(AnalysisFormatError):
        load_architecture(doc)


def test_invalid_json_file(tmp_path):
    p = tmp_path / "components.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(AnalysisFormatError):
        load_components(p)


def test_non_utf8_file(tmp_path):
    p = tmp_path / "architecture.json"
    p.write_bytes(b'{"summary": "\xff"}')
    with pytest.raises(AnalysisFormatError):
        load_architecture(p)


def test_numeric_strings_are_accepted():
    arch = load_architecture({
        "proposals": [{"id": "3", "metrics": {"size": "4", "cohesion_avg": "0.5"}}],
        "support_libraries": [{"name": "commons", "clusters": ["3"]}],
    })
    assert arch.proposals[0].metrics.size == 4
    assert arch.proposals[0].metrics.cohesion_avg == 0.5
    assert arch.support_libraries[0].id == 0
    assert arch.support_libraries[0].clusters == (3,)


def test_duplicate_proposal_ids():
    with pytest.raises(AnalysisFormatError):
        load_architecture({"proposals": [{"id": 1, "name": "a"}, {"id": 1, "name": "b"}]})


def test_architecture_export_uses_edited_proposals(tmp_path, billing_architecture):
    from archlens.membership import ProposalStore
    from archlens.model import Component

    store = ProposalStore(billing_architecture.proposals)
    store.reassign(Component("B"), 2)
    out = tmp_path / "architecture_updated.json"
    save_architecture(billing_architecture, out, store.proposals)

    doc = json.loads(out.read_text(encoding="utf-8"))
    assert [p["components"] for p in doc["proposals"]] == [["A"], ["B"]]
    again = load_architecture(out)
    assert again.proposals[1].components == ("B",)
    assert again.proposals[0].name == "Billing"


def test_metadata_round_trip(tmp_path):
    arch = load_architecture({
        "project_metadata": {
            "total_components": 2, "total_loc": 15, "shared_domain": "com.acme",
            "package_dependencies": {"com.acme.billing": {
                "components_count": 2, "total_dependencies_out": 1,
                "depends_on_packages": ["com.acme.core"],
            }},
        },
        "summary": "two components",
        "proposals": [],
    })
    out = tmp_path / "a.json"
    save_architecture(arch, out)
    assert load_architecture(out) == arch
