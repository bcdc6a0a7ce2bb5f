import os

import pytest

from archlens.config import SimulationConfig
from archlens.membership import ProposalStore
from archlens.model import load_architecture, load_components
from archlens.scene import GraphScene


@pytest.fixture
def billing_components():
    return load_components({
        "components": [
            {"id": "A", "layer": "service", "loc": 10},
            {"id": "B", "layer": "repository", "loc": 5},
        ],
        "edges": [{"from": "A", "to": "B"}],
    })


@pytest.fixture
def billing_architecture():
    return load_architecture({
        "proposals": [
            {"id": 1, "name": "Billing", "components": ["A", "B"]},
            {"id": 2, "name": "Ledger", "components": []},
        ],
    })


@pytest.fixture
def billing_scene(billing_components, billing_architecture):
    store = ProposalStore(billing_architecture.proposals)
    return GraphScene(billing_components, store, SimulationConfig(seed=0))


@pytest.fixture
def shop_components():
    """A small layered app: three clusters plus two unclustered helpers."""
    comps = []
    edges = []
    for mod in ("order", "cart", "user"):
        base = f"com.shop.{mod}"
        comps += [
            {"id": f"{base}.{mod.title()}Controller", "loc": 120},
            {"id": f"{base}.{mod.title()}Service", "loc": 300},
            {"id": f"{base}.{mod.title()}Repository", "loc": 80},
            {"id": f"{base}.{mod.title()}Entity", "loc": 40},
        ]
        edges += [
            {"from": f"{base}.{mod.title()}Controller", "to": f"{base}.{mod.title()}Service"},
            {"from": f"{base}.{mod.title()}Service", "to": f"{base}.{mod.title()}Repository"},
            {"from": f"{base}.{mod.title()}Repository", "to": f"{base}.{mod.title()}Entity"},
        ]
    comps += [{"id": "com.shop.util.Strings"}, {"id": "com.shop.AppConfig", "loc": 15}]
    edges += [
        {"from": "com.shop.order.OrderService", "to": "com.shop.cart.CartService"},
        {"from": "com.shop.order.OrderService", "to": "com.shop.util.Strings"},
        {"from": "com.shop.user.UserService", "to": "com.shop.util.Strings"},
        {"from": "com.shop.order.OrderService", "to": "com.shop.missing.Gone"},
    ]
    return load_components({"components": comps, "edges": edges})


@pytest.fixture
def shop_architecture():
    def members(mod):
        base = f"com.shop.{mod}.{mod.title()}"
        return [base + s for s in ("Controller", "Service", "Repository", "Entity")]

    return load_architecture({
        "proposals": [
            {"id": 10, "name": "Orders", "components": members("order")},
            {"id": 20, "name": "Carts", "components": members("cart")},
            {"id": 30, "name": "Users", "components": members("user")},
        ],
    })


@pytest.fixture
def shop_scene(shop_components, shop_architecture):
    store = ProposalStore(shop_architecture.proposals)
    return GraphScene(shop_components, store, SimulationConfig(seed=1))


@pytest.fixture(scope="session")
def qapp():
    """Offscreen QApplication shared by the widget tests."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    QtWidgets = pytest.importorskip("PyQt6.QtWidgets")
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
