from archlens.model import load_architecture
from archlens.narrative import load_narrative
from archlens.summary import build_package_tree, proposal_lines, summarize


def test_summary_derived_without_metadata(shop_components, shop_architecture):
    s = summarize(shop_components, shop_architecture)
    assert s.total_components == 14
    assert s.total_loc == 3 * (120 + 300 + 80 + 40) + 1 + 15
    assert s.proposals == 3
    assert s.shared_domain == "N/A"


def test_summary_prefers_metadata(shop_components):
    arch = load_architecture({
        "project_metadata": {"total_components": 99, "total_loc": 1234,
                             "shared_domain": "com.shop", "components_with_secrets": 2},
        "proposals": [{"id": 1, "name": "P", "metrics": {"tables": ["a", "b"], "sensitive": True}},
                      {"id": 2, "name": "Q", "metrics": {"tables": ["b"]}}],
        "support_libraries": [{"id": 0, "name": "common"}],
    })
    s = summarize(shop_components, arch)
    assert (s.total_components, s.total_loc, s.shared_domain) == (99, 1234, "com.shop")
    assert s.db_tables == 2
    assert s.sensitive_proposals == 1
    assert s.support_libraries == 1


def test_package_tree():
    arch = load_architecture({"project_metadata": {"package_dependencies": {
        "com.acme.billing": {"components_count": 3},
        "com.acme.billing.api": {"components_count": 1},
        "com.acme.core": {"components_count": 5},
    }}})
    root = build_package_tree(arch.project_metadata.package_dependencies)
    walked = [(d, n.full_name) for d, n in root.walk()]
    assert walked == [
        (0, "root"),
        (1, "com"),
        (2, "com.acme"),
        (3, "com.acme.billing"),
        (4, "com.acme.billing.api"),
        (3, "com.acme.core"),
    ]
    acme = root.children["com"].children["acme"]
    assert acme.details is None
    assert acme.children["core"].details.components_count == 5


def test_proposal_lines(shop_architecture):
    lines = proposal_lines(shop_architecture.proposals[0])
    assert lines[0] == "Orders (ID: 10)"
    assert "components: 4" in lines[1]


def test_narrative_is_verbatim(tmp_path):
    p = tmp_path / "report.md"
    p.write_text("# Report\n\n* keep *this* as is\n", encoding="utf-8")
    doc = load_narrative(p)
    assert doc.title == "report"
    assert doc.text == "# Report\n\n* keep *this* as is\n"
    assert not doc.empty
