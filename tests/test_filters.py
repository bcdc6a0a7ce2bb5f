from archlens.filters import FilterEngine
from archlens.model import Component, Edge


def _engine():
    f = FilterEngine()
    f.set_known(["service", "repository", "controller"], [1, 2])
    return f


def test_defaults_select_everything():
    f = _engine()
    assert f.selected_layers == {"service", "repository", "controller"}
    assert f.selected_clusters == {1, 2}
    assert f.known_layers == ["controller", "service", "repository"]


def test_unclustered_ignores_cluster_filter():
    f = _engine()
    f.select_no_clusters()
    assert f.is_visible("service", None)
    assert not f.is_visible("service", 1)
    f.toggle_layer("service")
    assert not f.is_visible("service", None)


def test_toggle_round_trip():
    f = _engine()
    f.toggle_cluster(2)
    assert f.selected_clusters == {1}
    f.toggle_cluster(2)
    assert f.selected_clusters == {1, 2}


def test_set_known_keeps_edits_when_unchanged():
    f = _engine()
    f.toggle_layer("controller")
    assert f.set_known(["repository", "service", "controller"], [2, 1]) is False
    assert "controller" not in f.selected_layers


def test_set_known_resets_on_new_values():
    f = _engine()
    f.select_no_layers()
    f.toggle_cluster(1)
    assert f.set_known(["service", "dto"], [1, 2]) is True
    assert f.selected_layers == {"service", "dto"}
    # Cluster set did not change, so that edit survives.
    assert f.selected_clusters == {2}


def test_visible_edges_need_both_endpoints():
    edges = [Edge("A", "B"), Edge("B", "C"), Edge("A", "ghost")]
    assert FilterEngine.visible_edges(edges, ["A", "B"]) == [Edge("A", "B")]


def test_visible_components_carry_layer_and_cluster():
    f = _engine()
    comps = [Component("x.FooService"), Component("x.FooRepository"), Component("x.FooController")]
    owner = {"x.FooService": 1, "x.FooRepository": 2}
    f.toggle_cluster(2)
    out = f.visible_components(comps, owner.get)
    assert [(c.id, layer, cid) for c, layer, cid in out] == [
        ("x.FooService", "service", 1),
        ("x.FooController", "controller", None),
    ]


def test_summary_counts():
    f = _engine()
    f.toggle_layer("service")
    assert f.summary() == {"layers": "2 of 3", "clusters": "2 of 2"}
