"""Tests for Product API endpoints."""


def _create_category(client, name="Snacks"):
    response = client.post("/api/v1/categories/", json={"name": name, "description": None})
    assert response.status_code == 201
    return response.json()["id"]


def _product_payload(category_id, **overrides):
    payload = {
        "name": "Test Product",
        "description": None,
        "barcode": None,
        "category_id": category_id,
        "purchase_price": 60.00,
        "selling_price": 99.99,
        "stock_quantity": 10,
        "min_stock": 2,
        "image_url": None,
    }
    payload.update(overrides)
    return payload


def test_create_product(client):
    """Test creating a new product."""
    category_id = _create_category(client)
    response = client.post("/api/v1/products/", json=_product_payload(category_id))

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Test Product"
    assert data["selling_price"] == 99.99
    assert isinstance(data["selling_price"], float)
    assert data["stock_quantity"] == 10
    assert data["is_active"] is True
    assert "id" in data
    assert "created_at" in data


def test_create_product_invalid_price(client):
    """Test creating product with invalid price fails."""
    category_id = _create_category(client)
    response = client.post(
        "/api/v1/products/",
        json=_product_payload(category_id, selling_price=-10.00)
    )

    assert response.status_code == 422  # Validation error


def test_create_product_invalid_stock(client):
    """Test creating product with negative stock fails."""
    category_id = _create_category(client)
    response = client.post(
        "/api/v1/products/",
        json=_product_payload(category_id, stock_quantity=-5)
    )

    assert response.status_code == 422


def test_create_product_unknown_category(client):
    response = client.post("/api/v1/products/", json=_product_payload(9999))

    assert response.status_code == 404
    assert "Category with id 9999 not found" in response.json()["detail"]


def test_create_product_duplicate_barcode(client):
    category_id = _create_category(client)
    client.post("/api/v1/products/", json=_product_payload(category_id, barcode="8991234"))

    response = client.post(
        "/api/v1/products/",
        json=_product_payload(category_id, name="Other", barcode="8991234")
    )

    assert response.status_code == 409


def test_get_product(client):
    """Test getting a product by ID."""
    category_id = _create_category(client)
    create_response = client.post("/api/v1/products/", json=_product_payload(category_id))
    product_id = create_response.json()["id"]

    response = client.get(f"/api/v1/products/{product_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == product_id
    assert data["name"] == "Test Product"


def test_get_product_not_found(client):
    """Test getting non-existent product returns 404."""
    response = client.get("/api/v1/products/9999")

    assert response.status_code == 404


def test_get_product_by_barcode(client):
    category_id = _create_category(client)
    client.post("/api/v1/products/", json=_product_payload(category_id, barcode="ABC-1"))

    response = client.get("/api/v1/products/barcode/ABC-1")

    assert response.status_code == 200
    assert response.json()["barcode"] == "ABC-1"
    assert client.get("/api/v1/products/barcode/NOPE").status_code == 404


def test_list_products(client):
    """Test listing products with pagination."""
    category_id = _create_category(client)
    for i in range(15):
        client.post(
            "/api/v1/products/",
            json=_product_payload(category_id, name=f"Product {i}", selling_price=10.00 + i)
        )

    response = client.get("/api/v1/products/?page=1&limit=10")

    assert response.status_code == 200
    data = response.json()
    assert len(data["products"]) == 10
    assert data["total"] == 15
    assert data["total_pages"] == 2


def test_search_products(client):
    """Test searching products by name or barcode."""
    category_id = _create_category(client)
    client.post("/api/v1/products/", json=_product_payload(category_id, name="Apple iPhone"))
    client.post("/api/v1/products/", json=_product_payload(category_id, name="Samsung Galaxy", barcode="APL-77"))
    client.post("/api/v1/products/", json=_product_payload(category_id, name="Apple MacBook"))

    response = client.get("/api/v1/products/?query=apple")

    assert response.status_code == 200
    data = response.json()
    # "APL-77" barcode does not contain "apple"
    assert data["total"] == 2
    assert all("Apple" in item["name"] for item in data["products"])


def test_filter_products_by_category(client):
    food = _create_category(client, "Food")
    drinks = _create_category(client, "Drinks")
    client.post("/api/v1/products/", json=_product_payload(food, name="Bread"))
    client.post("/api/v1/products/", json=_product_payload(drinks, name="Tea"))

    response = client.get(f"/api/v1/products/?category_id={drinks}")

    assert response.json()["total"] == 1
    assert response.json()["products"][0]["name"] == "Tea"


def test_update_product(client):
    """Test updating a product."""
    category_id = _create_category(client)
    create_response = client.post(
        "/api/v1/products/",
        json=_product_payload(category_id, name="Original Name", selling_price=50.00)
    )
    product_id = create_response.json()["id"]

    response = client.put(
        f"/api/v1/products/{product_id}",
        json={"name": "Updated Name", "selling_price": 75.00}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Updated Name"
    assert data["selling_price"] == 75.00
    assert data["stock_quantity"] == 10  # Stock should remain unchanged


def test_update_product_not_found(client):
    response = client.put("/api/v1/products/9999", json={"name": "Ghost"})

    assert response.status_code == 404


def test_delete_product_is_soft(client):
    """Deleted products vanish from the catalog but are not removed."""
    category_id = _create_category(client)
    create_response = client.post("/api/v1/products/", json=_product_payload(category_id))
    product_id = create_response.json()["id"]

    response = client.delete(f"/api/v1/products/{product_id}")
    assert response.status_code == 204

    assert client.get(f"/api/v1/products/{product_id}").status_code == 404
    assert client.get("/api/v1/products/").json()["total"] == 0

    # Reactivation through update proves the row still exists
    restored = client.put(f"/api/v1/products/{product_id}", json={"is_active": True})
    assert restored.status_code == 200
    assert restored.json()["is_active"] is True


def test_low_stock_products(client):
    category_id = _create_category(client)
    client.post("/api/v1/products/", json=_product_payload(category_id, name="Plenty", stock_quantity=50, min_stock=5))
    client.post("/api/v1/products/", json=_product_payload(category_id, name="At minimum", stock_quantity=5, min_stock=5))
    client.post("/api/v1/products/", json=_product_payload(category_id, name="Empty", stock_quantity=0, min_stock=1))

    response = client.get("/api/v1/products/low-stock")

    assert response.status_code == 200
    names = [p["name"] for p in response.json()]
    assert names == ["Empty", "At minimum"]


def test_get_product_cached_falls_back_to_database(client, redis_mock):
    category_id = _create_category(client)
    product_id = client.post("/api/v1/products/", json=_product_payload(category_id)).json()["id"]

    response = client.get(f"/api/v1/products/{product_id}/cached")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == product_id
    assert data["selling_price"] == 99.99
    assert redis_mock.setex.called


def test_get_product_cached_serves_cache_hit(client, redis_mock):
    redis_mock.get.return_value = '{"id": 42, "name": "From cache", "selling_price": 1.5}'

    response = client.get("/api/v1/products/42/cached")

    assert response.status_code == 200
    assert response.json()["name"] == "From cache"
    redis_mock.get.assert_called_with("pos:product:42")


def test_search_products_treats_wildcards_literally(client):
    category_id = _create_category(client)
    client.post("/api/v1/products/", json=_product_payload(category_id, name="Apple iPhone"))
    client.post("/api/v1/products/", json=_product_payload(category_id, name="100% Juice"))

    percent = client.get("/api/v1/products/?query=%25").json()
    underscore = client.get("/api/v1/products/?query=_").json()

    assert [p["name"] for p in percent["products"]] == ["100% Juice"]
    assert underscore["total"] == 0


def test_update_product_rejects_null_for_required_fields(client):
    category_id = _create_category(client)
    product_id = client.post("/api/v1/products/", json=_product_payload(category_id)).json()["id"]

    for field in ("name", "selling_price", "stock_quantity", "category_id", "is_active"):
        response = client.put(f"/api/v1/products/{product_id}", json={field: None})
        assert response.status_code == 422, field

    # Nullable fields can still be cleared
    cleared = client.put(f"/api/v1/products/{product_id}", json={"description": None})
    assert cleared.status_code == 200
    assert client.get(f"/api/v1/products/{product_id}").json()["name"] == "Test Product"


def test_product_reports_low_stock_flag(client):
    category_id = _create_category(client)
    plenty = client.post(
        "/api/v1/products/", json=_product_payload(category_id, stock_quantity=50, min_stock=5)
    ).json()
    at_minimum = client.post(
        "/api/v1/products/", json=_product_payload(category_id, stock_quantity=5, min_stock=5)
    ).json()

    assert plenty["is_low_stock"] is False
    assert at_minimum["is_low_stock"] is True
    assert all(p["is_low_stock"] for p in client.get("/api/v1/products/low-stock").json())
