import asyncio
import os
import tempfile
from decimal import Decimal
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

_DB_DIR = tempfile.mkdtemp(prefix="pos-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/pos.db"
os.environ.setdefault("ORDER_CODE_STRATEGY", "sequence")
os.environ.setdefault("LOW_STOCK_THRESHOLD", "10")


async def _reset_schema():
    from db.database import create_db_and_tables, drop_db_and_tables

    await drop_db_and_tables()
    await create_db_and_tables()


@pytest.fixture(scope="session")
def app():
    """
    Import the FastAPI app once per test session (after DATABASE_URL points at sqlite).
    """
    from main import app as pos_app

    return pos_app


@pytest.fixture()
def client(app):
    """
    TestClient on a freshly created schema.

    Used as a context manager so the lifespan runs and WebSocket sessions share
    the same event loop as HTTP calls.
    """
    asyncio.run(_reset_schema())
    with TestClient(app) as c:
        yield c


def run(coro):
    """Run a coroutine against the test database outside of a request."""
    return asyncio.run(coro)


def add_inventory(client: TestClient, name: str, stock, unit: Optional[str] = None) -> Dict:
    res = client.post("/inventory/items", json={"name": name, "stock": stock, "unit": unit})
    assert res.status_code == 201, res.text
    return res.json()


def add_menu_item(
    client: TestClient,
    name: str,
    price,
    category: str = "ramen",
    ingredients: Optional[List[Dict]] = None,
) -> Dict:
    res = client.post(
        "/menu",
        json={"name": name, "price": price, "category": category, "ingredients": ingredients or []},
    )
    assert res.status_code == 201, res.text
    return res.json()["data"]


def stock_of(client: TestClient, name: str) -> Decimal:
    res = client.get("/inventory/items", params={"q": name})
    assert res.status_code == 200, res.text
    for it in res.json():
        if it["name"] == name:
            return Decimal(str(it["stock"]))
    raise AssertionError(f"{name} not in inventory")


@pytest.fixture()
def ramen(client):
    """
    Tonkotsu Ramen (250) = 2 Noodles + 1 Broth, plus an 'Extra Chashu' add-on (80) = 1 Chashu.

    Inventory: Noodles 10, Broth 5, Chashu 0.
    """
    add_inventory(client, "Noodles", 10, "portion")
    add_inventory(client, "Broth", 5, "ladle")
    add_inventory(client, "Chashu", 0, "slice")
    tonkotsu = add_menu_item(
        client,
        "Tonkotsu Ramen",
        250,
        ingredients=[
            {"inventoryItem": "Noodles", "quantity": 2},
            {"inventoryItem": "Broth", "quantity": 1},
        ],
    )
    chashu = add_menu_item(
        client,
        "Extra Chashu",
        80,
        category="add-ons",
        ingredients=[{"inventoryItem": "Chashu", "quantity": 1}],
    )
    return {"tonkotsu": tonkotsu, "chashu": chashu}


def sale_payload(menu_item_id: str, **overrides) -> Dict:
    body = {
        "menuItem": menu_item_id,
        "quantity": 1,
        "paymentMethod": "cash",
        "serviceType": "dine-in",
        "addOns": [],
        "removedIngredients": [],
    }
    body.update(overrides)
    return body
