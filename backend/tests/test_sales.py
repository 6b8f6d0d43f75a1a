import uuid
from decimal import Decimal

from conftest import add_inventory, add_menu_item, sale_payload, stock_of


def test_checkout_with_fully_removed_ingredient(client, ramen):
    body = sale_payload(
        ramen["tonkotsu"]["id"],
        quantity=2,
        removedIngredients=[{"inventoryItem": "Broth", "name": "Broth", "quantity": 1}],
    )
    res = client.post("/sales", json=body)
    assert res.status_code == 201, res.text
    sale = res.json()

    assert sale["totalAmount"] == 500
    assert sale["status"] == "pending"
    assert sale["orderCode"] == "0001"
    assert stock_of(client, "Noodles") == Decimal("6")
    assert stock_of(client, "Broth") == Decimal("5")


def test_insufficient_add_on_stock_rolls_back_main_item(client, ramen):
    body = sale_payload(ramen["tonkotsu"]["id"], addOns=[{"menuItem": ramen["chashu"]["id"], "quantity": 1}])
    res = client.post("/sales", json=body)
    assert res.status_code == 400
    assert res.json()["message"] == "Insufficient stock for Chashu. Available: 0, Required: 1"

    assert stock_of(client, "Noodles") == Decimal("10")
    assert stock_of(client, "Broth") == Decimal("5")
    assert client.get("/sales").json() == []


def test_all_or_nothing_across_two_ingredients(client):
    add_inventory(client, "Wrapper", 50)
    add_inventory(client, "Pork", 1)
    gyoza = add_menu_item(
        client,
        "Gyoza",
        120,
        category="sides",
        ingredients=[{"inventoryItem": "Wrapper", "quantity": 5}, {"inventoryItem": "Pork", "quantity": 2}],
    )
    res = client.post("/sales", json=sale_payload(gyoza["id"]))
    assert res.status_code == 400
    assert "Insufficient stock for Pork" in res.json()["message"]
    assert stock_of(client, "Wrapper") == Decimal("50")
    assert stock_of(client, "Pork") == Decimal("1")


def test_stock_equal_to_demand_is_deducted_to_zero(client):
    add_inventory(client, "Rice", 3)
    bowl = add_menu_item(client, "Rice Bowl", 90, category="rice", ingredients=[{"inventoryItem": "Rice", "quantity": 1}])
    res = client.post("/sales", json=sale_payload(bowl["id"], quantity=3))
    assert res.status_code == 201, res.text
    assert stock_of(client, "Rice") == Decimal("0")

    res = client.post("/sales", json=sale_payload(bowl["id"]))
    assert res.status_code == 400
    assert res.json()["message"] == "Insufficient stock for Rice. Available: 0, Required: 1"


def test_removing_more_than_recipe_is_rejected(client, ramen):
    body = sale_payload(
        ramen["tonkotsu"]["id"],
        removedIngredients=[{"inventoryItem": "Broth", "quantity": 2}],
    )
    res = client.post("/sales", json=body)
    assert res.status_code == 400
    assert res.json()["message"] == "Cannot remove more Broth than what's in the menu item"
    assert stock_of(client, "Noodles") == Decimal("10")
    assert stock_of(client, "Broth") == Decimal("5")


def test_removing_unknown_ingredient_is_rejected(client, ramen):
    body = sale_payload(ramen["tonkotsu"]["id"], removedIngredients=[{"inventoryItem": "Chashu", "quantity": 1}])
    res = client.post("/sales", json=body)
    assert res.status_code == 400
    assert res.json()["message"] == "Ingredient Chashu is not part of this menu item"


def test_round_trip_by_order_code(client, ramen):
    add_inventory(client, "Egg", 6)
    egg = add_menu_item(
        client, "Ajitama", 40, category="add-ons", ingredients=[{"inventoryItem": "Egg", "quantity": 1}]
    )
    body = sale_payload(
        ramen["tonkotsu"]["id"],
        quantity=1,
        paymentMethod="gcash",
        serviceType="takeout",
        addOns=[{"menuItem": egg["id"], "quantity": 2}],
        removedIngredients=[{"inventoryItem": "Noodles", "name": "Noodles", "quantity": 1}],
    )
    created = client.post("/sales", json=body)
    assert created.status_code == 201, created.text
    code = created.json()["orderCode"]

    fetched = client.get(f"/sales/by-order-code/{code}")
    assert fetched.status_code == 200
    sale = fetched.json()
    assert sale["menuItem"] == ramen["tonkotsu"]["id"]
    assert sale["menuItemName"] == "Tonkotsu Ramen"
    assert sale["quantity"] == 1
    assert sale["paymentMethod"] == "gcash"
    assert sale["serviceType"] == "takeout"
    assert sale["addOns"] == [{"menuItem": egg["id"], "name": "Ajitama", "quantity": 2, "price": 40}]
    assert sale["removedIngredients"] == [{"inventoryItem": "Noodles", "name": "Noodles", "quantity": 1}]
    assert sale["totalAmount"] == 330

    assert stock_of(client, "Noodles") == Decimal("9")
    assert stock_of(client, "Broth") == Decimal("4")
    assert stock_of(client, "Egg") == Decimal("4")


def test_deductions_are_logged_with_order_code(client, ramen):
    sale = client.post("/sales", json=sale_payload(ramen["tonkotsu"]["id"])).json()
    res = client.get("/inventory/movements", params={"source_ref": sale["orderCode"]})
    assert res.status_code == 200
    moves = {m["inventoryItemName"]: m for m in res.json()}
    assert set(moves) == {"Noodles", "Broth"}
    assert moves["Noodles"]["change"] == -2
    assert moves["Noodles"]["balanceAfter"] == 8
    assert moves["Broth"]["sourceType"] == "sale"


def test_field_validation_messages(client, ramen):
    menu_id = ramen["tonkotsu"]["id"]
    cases = [
        ({"menuItem": ""}, "Menu item is required"),
        ({"quantity": 0}, "Valid quantity is required (minimum 1)"),
        ({"paymentMethod": "visa"}, "Valid payment method is required (cash, paymaya, gcash)"),
        ({"serviceType": "delivery"}, "Valid service type is required (pickup, dine-in, takeout)"),
        ({"menuItem": str(uuid.uuid4())}, None),
    ]
    for override, message in cases:
        res = client.post("/sales", json=sale_payload(menu_id, **override))
        assert res.status_code == 400, override
        if message:
            assert res.json()["message"] == message
        else:
            assert res.json()["message"].startswith("Menu item with ID")


def test_add_on_must_be_in_add_ons_category(client, ramen):
    add_inventory(client, "Gyoza Wrapper", 20)
    gyoza = add_menu_item(
        client, "Gyoza", 120, category="sides", ingredients=[{"inventoryItem": "Gyoza Wrapper", "quantity": 5}]
    )
    body = sale_payload(ramen["tonkotsu"]["id"], addOns=[{"menuItem": gyoza["id"], "quantity": 1}])
    res = client.post("/sales", json=body)
    assert res.status_code == 400
    assert res.json()["message"] == "Menu item Gyoza is not an add-on"
    assert stock_of(client, "Noodles") == Decimal("10")


def test_new_sale_alias(client, ramen):
    res = client.post("/sales/new-sale", json=sale_payload(ramen["tonkotsu"]["id"], serviceType="pickup"))
    assert res.status_code == 201
    assert res.json()["serviceType"] == "pickup"


def test_test_order_quotes_without_deducting(client, ramen):
    body = sale_payload(ramen["tonkotsu"]["id"], quantity=2, addOns=[{"menuItem": ramen["chashu"]["id"]}])
    res = client.post("/sales/test-order", json=body)
    assert res.status_code == 200, res.text
    quote = res.json()

    assert quote["totalAmount"] == 580
    assert quote["canFulfil"] is False
    by_name = {d["ingredientName"]: d for d in quote["demand"]}
    assert by_name["Noodles"]["required"] == 4
    assert by_name["Noodles"]["sufficient"] is True
    assert by_name["Chashu"]["sufficient"] is False
    assert stock_of(client, "Noodles") == Decimal("10")
    assert client.get("/sales").json() == []


def test_update_and_delete_sale(client, ramen):
    sale = client.post("/sales", json=sale_payload(ramen["tonkotsu"]["id"])).json()

    res = client.put(f"/sales/{sale['id']}", json={"status": "ready", "paymentMethod": "paymaya"})
    assert res.status_code == 200
    assert res.json()["status"] == "ready"
    assert res.json()["paymentMethod"] == "paymaya"

    assert client.put(f"/sales/{sale['id']}", json={"serviceType": "delivery"}).status_code == 400

    res = client.delete(f"/sales/{sale['id']}")
    assert res.json() == {"message": "Sale deleted"}
    # Deleting a sale does not give its ingredients back.
    assert stock_of(client, "Noodles") == Decimal("8")

    res = client.get(f"/sales/{sale['id']}")
    assert res.status_code == 404
    assert res.json() == {"message": "Sale not found"}


def test_unknown_order_code_is_404(client):
    res = client.get("/sales/by-order-code/9999")
    assert res.status_code == 404


def test_sales_summary_and_product_sales(client, ramen):
    add_inventory(client, "Rice", 10)
    bowl = add_menu_item(client, "Rice Bowl", 90, category="rice", ingredients=[{"inventoryItem": "Rice", "quantity": 1}])

    client.post("/sales", json=sale_payload(ramen["tonkotsu"]["id"], quantity=2))
    client.post("/sales", json=sale_payload(bowl["id"], serviceType="takeout", paymentMethod="gcash"))
    client.post("/sales", json=sale_payload(bowl["id"], quantity=2))

    summary = client.get("/sales/sales-summary", params={"period": "week"}).json()
    assert summary["count"] == 3
    assert summary["totalRevenue"] == 500 + 90 + 180
    assert summary["byServiceType"] == {"dine-in": 2, "takeout": 1}
    assert summary["byPaymentMethod"] == {"cash": 680, "gcash": 90}
    assert len(summary["sales"]) == 3

    assert client.get("/sales/sales-summary", params={"period": "year"}).status_code == 400

    rows = client.get("/sales/product-sales", params={"limit": 10}).json()
    assert [(r["name"], r["totalQuantity"]) for r in rows] == [("Rice Bowl", 3), ("Tonkotsu Ramen", 2)]
    assert rows[0]["totalRevenue"] == 270


def test_carts_sharing_ingredients_in_opposite_order(client, ramen):
    add_inventory(client, "Egg", 10)
    egg = add_menu_item(client, "Ajitama", 40, category="add-ons", ingredients=[{"inventoryItem": "Egg", "quantity": 1}])
    egg_bowl = add_menu_item(client, "Egg Bowl", 150, category="rice", ingredients=[{"inventoryItem": "Egg", "quantity": 2}])
    extra_noodles = add_menu_item(
        client, "Extra Noodles", 50, category="add-ons", ingredients=[{"inventoryItem": "Noodles", "quantity": 1}]
    )

    a = client.post("/sales", json=sale_payload(ramen["tonkotsu"]["id"], addOns=[{"menuItem": egg["id"]}]))
    b = client.post("/sales", json=sale_payload(egg_bowl["id"], addOns=[{"menuItem": extra_noodles["id"]}]))
    assert a.status_code == 201, a.text
    assert b.status_code == 201, b.text
    assert stock_of(client, "Noodles") == Decimal("7")
    assert stock_of(client, "Egg") == Decimal("7")


def test_null_add_ons_and_removals_are_empty(client, ramen):
    body = sale_payload(ramen["tonkotsu"]["id"], addOns=None, removedIngredients=None)
    res = client.post("/sales", json=body)
    assert res.status_code == 201, res.text
    assert res.json()["addOns"] == []
    assert res.json()["removedIngredients"] == []
    assert res.json()["totalAmount"] == 250


def test_boolean_quantity_is_rejected(client, ramen):
    res = client.post("/sales", json=sale_payload(ramen["tonkotsu"]["id"], quantity=True))
    assert res.status_code == 400
    assert "Valid quantity is required (minimum 1)" in res.json()["message"]

    body = sale_payload(ramen["tonkotsu"]["id"], addOns=[{"menuItem": ramen["chashu"]["id"], "quantity": True}])
    assert client.post("/sales", json=body).status_code == 400

    assert client.get("/sales").json() == []
    assert stock_of(client, "Noodles") == Decimal("10")


def test_malformed_sale_id_is_404(client):
    for method in ("get", "delete"):
        res = getattr(client, method)("/sales/not-a-uuid")
        assert res.status_code == 404
        assert res.json() == {"message": "Sale not found"}
    res = client.put("/sales/not-a-uuid", json={"status": "ready"})
    assert res.status_code == 404
