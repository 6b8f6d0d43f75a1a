import uuid

from conftest import add_inventory, add_menu_item


def test_create_menu_item_requires_known_ingredients(client):
    add_inventory(client, "Noodles", 10)
    res = client.post(
        "/menu",
        json={
            "name": "Miso Ramen",
            "price": 240,
            "category": "ramen",
            "ingredients": [{"name": "Noodles", "quantity": 2}, {"name": "Miso Paste", "quantity": 1}],
        },
    )
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["message"] == "Some ingredients are not found in inventory"
    assert body["missingIngredients"] == ["Miso Paste"]


def test_create_menu_item_rejects_non_positive_quantity(client):
    add_inventory(client, "Noodles", 10)
    res = client.post(
        "/menu",
        json={"name": "Air", "price": 1, "category": "ramen", "ingredients": [{"name": "Noodles", "quantity": 0}]},
    )
    assert res.status_code == 400
    assert res.json()["invalidIngredients"] == ["Noodles: quantity must be greater than 0"]


def test_menu_crud(client, ramen):
    tonkotsu_id = ramen["tonkotsu"]["id"]
    assert ramen["tonkotsu"]["ingredients"] == [
        {"inventoryItem": "Noodles", "quantity": 2},
        {"inventoryItem": "Broth", "quantity": 1},
    ]

    res = client.get(f"/menu/{tonkotsu_id}")
    assert res.status_code == 200
    assert res.json()["data"]["name"] == "Tonkotsu Ramen"

    res = client.put(f"/menu/{tonkotsu_id}", json={"price": 260, "ingredients": [{"name": "Noodles", "quantity": 1}]})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["price"] == 260
    assert data["ingredients"] == [{"inventoryItem": "Noodles", "quantity": 1}]

    listing = client.get("/menu").json()
    assert listing["success"] is True
    assert listing["count"] == 2

    res = client.delete(f"/menu/{tonkotsu_id}")
    assert res.status_code == 200
    assert res.json()["message"] == "Menu item deleted successfully"

    res = client.get(f"/menu/{tonkotsu_id}")
    assert res.status_code == 404
    assert res.json() == {"success": False, "message": "Menu item not found"}
    assert client.get(f"/menu/{uuid.uuid4()}").status_code == 404


def test_add_ons_and_category_listing(client, ramen):
    add_ons = client.get("/menu/add-ons").json()
    assert [m["name"] for m in add_ons["data"]] == ["Extra Chashu"]

    ramen_list = client.get("/menu/category/ramen").json()
    assert [m["name"] for m in ramen_list["data"]] == ["Tonkotsu Ramen"]
    assert client.get("/menu/category/desserts").json()["count"] == 0


def test_menu_with_stock_flags_each_ingredient(client, ramen):
    add_inventory(client, "Menma", 4)
    add_menu_item(
        client,
        "Menma Topping",
        30,
        category="add-ons",
        ingredients=[{"name": "Menma", "quantity": 1}],
    )

    res = client.get("/menu/with-stock")
    assert res.status_code == 200
    body = res.json()
    assert body["lowStockThreshold"] == 10
    items = {m["name"]: m for m in body["data"]}

    tonkotsu = items["Tonkotsu Ramen"]
    stock = {s["inventoryItem"]: s for s in tonkotsu["ingredientsWithStock"]}
    # Noodles=10 sits exactly on the threshold.
    assert stock["Noodles"]["status"] == "low stock"
    assert stock["Broth"]["status"] == "low stock"
    assert stock["Broth"]["currentStock"] == 5
    assert stock["Broth"]["requiredQuantity"] == 1
    assert tonkotsu["canBeOrdered"] is True
    assert tonkotsu["hasLowStock"] is True

    chashu = items["Extra Chashu"]
    assert chashu["ingredientsWithStock"][0]["status"] == "out of stock"
    assert chashu["canBeOrdered"] is False
    assert chashu["hasOutOfStock"] is True


def test_with_stock_uses_stored_threshold(client, ramen):
    res = client.put("/inventory/settings/low-stock-threshold", json={"value": 3})
    assert res.status_code == 200

    body = client.get("/menu/with-stock").json()
    assert body["lowStockThreshold"] == 3
    tonkotsu = next(m for m in body["data"] if m["name"] == "Tonkotsu Ramen")
    assert {s["status"] for s in tonkotsu["ingredientsWithStock"]} == {"in stock"}
    assert tonkotsu["hasLowStock"] is False


def test_recipe_rejects_duplicate_ingredient(client):
    add_inventory(client, "Noodles", 10)
    res = client.post(
        "/menu",
        json={
            "name": "Double Noodle",
            "price": 200,
            "category": "ramen",
            "ingredients": [{"name": "Noodles", "quantity": 1}, {"inventoryItem": "Noodles", "quantity": 1}],
        },
    )
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["message"] == "Duplicate ingredients in recipe"
    assert body["duplicateIngredients"] == ["Noodles"]
    assert client.get("/menu").json()["count"] == 0


def test_update_rejects_duplicate_ingredient(client, ramen):
    res = client.put(
        f"/menu/{ramen['tonkotsu']['id']}",
        json={"ingredients": [{"name": "Broth", "quantity": 1}, {"name": "Broth", "quantity": 2}]},
    )
    assert res.status_code == 400
    assert res.json()["duplicateIngredients"] == ["Broth"]
    data = client.get(f"/menu/{ramen['tonkotsu']['id']}").json()["data"]
    assert [i["inventoryItem"] for i in data["ingredients"]] == ["Noodles", "Broth"]


def test_malformed_menu_id_is_404(client):
    for method in ("get", "delete"):
        res = getattr(client, method)("/menu/not-a-uuid")
        assert res.status_code == 404
        assert res.json() == {"success": False, "message": "Menu item not found"}
    res = client.put("/menu/not-a-uuid", json={"price": 10})
    assert res.status_code == 404
