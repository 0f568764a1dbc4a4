"""Tests for Product API endpoints."""
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from inventory.exceptions import ConflictError, NotFoundError
from inventory.services.product_service import ProductService


def test_create_product(client):
    """Test creating a new product."""
    response = client.post(
        "/api/products",
        json={
            "name": "Test Product",
            "description": "A thing",
            "price": 99.99,
            "stock": 10,
            "productCode": "TP-1",
            "status": "Active"
        }
    )

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert isinstance(data["productId"], int)


def test_create_product_stores_wire_fields(client, create_product):
    """Test the stored row is returned with wire field names."""
    product_id = create_product(
        productCode="SKU-9", brand="Acme", orderName="PO-1", storeAvailability="Main"
    )

    data = client.get(f"/api/products/{product_id}").json()

    assert data["productCode"] == "SKU-9"
    assert data["brand"] == "Acme"
    assert data["orderName"] == "PO-1"
    assert data["storeAvailability"] == "Main"
    assert data["status"] == "Active"
    assert data["lastUpdate"]


def test_create_product_missing_name(client):
    """Test creating product without a name fails."""
    response = client.post("/api/products", json={"price": 10.00, "stock": 1})

    assert response.status_code == 400
    assert response.json()["error"] == "Name is required"


def test_create_product_blank_name(client):
    response = client.post("/api/products", json={"name": "   ", "price": 10.00})

    assert response.status_code == 400
    assert response.json()["error"] == "Name is required"


def test_create_product_invalid_price(client):
    """Test creating product with invalid price fails."""
    response = client.post(
        "/api/products",
        json={
            "name": "Test Product",
            "price": -10.00,  # Invalid: negative price
            "stock": 10
        }
    )

    assert response.status_code == 400
    assert "error" in response.json()


def test_create_product_non_numeric_price(client):
    response = client.post("/api/products", json={"name": "Test Product", "price": "abc"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid price value"


def test_create_product_numeric_strings(client):
    """Test numbers sent as strings are accepted."""
    response = client.post(
        "/api/products",
        json={"name": "Stringly", "price": "12.50", "stock": "4"}
    )
    assert response.status_code == 201

    data = client.get(f"/api/products/{response.json()['productId']}").json()
    assert data["price"] == 12.5
    assert data["stock"] == 4


def test_create_product_defaults(client):
    """Test price and stock default to zero and status to Active."""
    response = client.post("/api/products", json={"name": "Bare"})
    product_id = response.json()["productId"]

    data = client.get(f"/api/products/{product_id}").json()
    assert data["price"] == 0
    assert data["stock"] == 0
    assert data["status"] == "Active"


def test_create_product_invalid_stock(client):
    """Test creating product with negative stock fails."""
    response = client.post(
        "/api/products",
        json={
            "name": "Test Product",
            "price": 99.99,
            "stock": -5  # Invalid: negative stock
        }
    )

    assert response.status_code == 400


def test_create_product_fractional_stock(client):
    response = client.post("/api/products", json={"name": "Test Product", "stock": 2.5})

    assert response.status_code == 400


def test_get_product(client, create_product):
    """Test getting a product by ID."""
    product_id = create_product(name="Test Product", price=50.00, stock=5)

    response = client.get(f"/api/products/{product_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == product_id
    assert data["name"] == "Test Product"


def test_get_product_not_found(client):
    """Test getting non-existent product returns 404."""
    response = client.get("/api/products/9999")

    assert response.status_code == 404
    assert response.json() == {"error": "Product not found"}


def test_list_products_newest_first(client, create_product):
    """Test products are listed most recently updated first."""
    ids = [create_product(name=f"Product {i}") for i in range(3)]

    response = client.get("/api/products")

    assert response.status_code == 200
    data = response.json()
    assert isinstance(data, list)
    assert [p["id"] for p in data] == list(reversed(ids))


def test_search_products(client, create_product):
    """Test searching products by name."""
    create_product(name="Apple iPhone", price=999.00)
    create_product(name="Samsung Galaxy", price=899.00)
    create_product(name="Apple MacBook", price=1999.00)

    response = client.get("/api/products?search=apple")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 2
    assert all("Apple" in item["name"] for item in data)


def test_update_product(client, create_product):
    """Test updating a product."""
    product_id = create_product(name="Original Name", price=50.00, stock=10)

    response = client.put(
        f"/api/products/{product_id}",
        json={"name": "Updated Name", "price": 75.00}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "productId": product_id}

    data = client.get(f"/api/products/{product_id}").json()
    assert data["name"] == "Updated Name"
    assert data["price"] == 75.00
    assert data["stock"] == 10  # Stock should remain unchanged


def test_update_product_partial_without_name(client, create_product):
    """Test a patch without name keeps the stored name."""
    product_id = create_product(name="Keeps Name", stock=10)

    response = client.put(f"/api/products/{product_id}", json={"stock": 2})

    assert response.status_code == 200
    data = client.get(f"/api/products/{product_id}").json()
    assert data["name"] == "Keeps Name"
    assert data["stock"] == 2


def test_update_product_blank_name(client, create_product):
    product_id = create_product()

    response = client.put(f"/api/products/{product_id}", json={"name": ""})

    assert response.status_code == 400


def test_update_product_invalid_price(client, create_product):
    product_id = create_product()

    response = client.put(f"/api/products/{product_id}", json={"name": "X", "price": -1})

    assert response.status_code == 400


def test_update_product_not_found(client):
    response = client.put("/api/products/9999", json={"name": "Ghost"})

    assert response.status_code == 404


def test_update_image_removes_previous_upload(client, storage, create_product):
    """Test changing the image deletes the file behind the old one exactly once."""
    stored = storage.save(b"old", "old.png", "image/png")
    product_id = create_product(image=stored.url)

    with patch.object(storage, "delete", wraps=storage.delete) as delete_spy:
        response = client.put(
            f"/api/products/{product_id}",
            json={"image": "/uploads/images/new.png"}
        )

    assert response.status_code == 200
    delete_spy.assert_called_once_with(stored.filename)
    assert not (storage.root / "images" / stored.filename).exists()


def test_update_same_image_keeps_upload(client, storage, create_product):
    """Test resubmitting the same image deletes nothing."""
    stored = storage.save(b"old", "old.png", "image/png")
    product_id = create_product(image=stored.url)

    with patch.object(storage, "delete", wraps=storage.delete) as delete_spy:
        response = client.put(
            f"/api/products/{product_id}",
            json={"name": "Renamed", "image": stored.url}
        )

    assert response.status_code == 200
    delete_spy.assert_not_called()
    assert (storage.root / "images" / stored.filename).exists()


def test_update_same_image_as_absolute_url_keeps_upload(client, storage, create_product):
    """Test the stored path sent back as an absolute URL on this host deletes nothing."""
    stored = storage.save(b"old", "old.png", "image/png")
    product_id = create_product(image=stored.url)

    with patch.object(storage, "delete", wraps=storage.delete) as delete_spy:
        response = client.put(
            f"/api/products/{product_id}",
            json={"image": f"http://testserver{stored.url}"}
        )

    assert response.status_code == 200
    delete_spy.assert_not_called()
    assert (storage.root / "images" / stored.filename).exists()


def test_update_external_uploads_url_keeps_local_files(client, storage, create_product):
    stored = storage.save(b"old", "old.png", "image/png")
    product_id = create_product(image=f"https://cdn.example.com{stored.url}")

    with patch.object(storage, "delete", wraps=storage.delete) as delete_spy:
        client.put(f"/api/products/{product_id}", json={"image": ""})

    delete_spy.assert_not_called()
    assert (storage.root / "images" / stored.filename).exists()


def test_update_image_prefers_file_name_column(client, storage, create_product):
    product_id = create_product(image="https://cdn.example.com/a.png", file_name="a_1-ff.png")

    with patch.object(storage, "delete", wraps=storage.delete) as delete_spy:
        client.put(f"/api/products/{product_id}", json={"image": ""})

    delete_spy.assert_called_once_with("a_1-ff.png")


def test_delete_product(client, storage, create_product):
    """Test deleting a product."""
    stored = storage.save(b"img", "shoe.jpg", "image/jpeg")
    product_id = create_product(name="To Delete", image=stored.url)

    response = client.delete(f"/api/products/{product_id}")
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "productId": product_id,
        "message": "Product deleted successfully"
    }
    assert not (storage.root / "images" / stored.filename).exists()

    # Verify it's deleted
    get_response = client.get(f"/api/products/{product_id}")
    assert get_response.status_code == 404


def test_delete_product_twice(client, create_product):
    """Test the second delete reports not found."""
    product_id = create_product()

    assert client.delete(f"/api/products/{product_id}").status_code == 200
    response = client.delete(f"/api/products/{product_id}")

    assert response.status_code == 404
    assert response.json()["error"] == "Product not found"


def test_delete_product_invalid_id(client):
    response = client.delete("/api/products/abc")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid product ID"


def test_delete_product_survives_file_removal_failure(client, storage, create_product):
    """Test a failing file removal doesn't fail the delete."""
    product_id = create_product(image="/uploads/images/missing.png")

    with patch.object(storage, "delete", return_value=False):
        response = client.delete(f"/api/products/{product_id}")

    assert response.status_code == 200


def test_delete_referenced_product_conflict():
    """Test an integrity violation becomes a ConflictError."""
    db = MagicMock()
    db.query.return_value.filter.return_value.first.return_value = MagicMock(
        file_name=None, image=None
    )
    db.execute.side_effect = IntegrityError("DELETE", {}, Exception("FOREIGN KEY constraint failed"))
    storage = MagicMock()

    with pytest.raises(ConflictError) as exc_info:
        ProductService(db, storage).delete(1)

    assert exc_info.value.status_code == 400
    assert "referenced by other records" in exc_info.value.message
    db.rollback.assert_called_once()
    storage.delete.assert_not_called()


def test_delete_zero_rows_is_not_found():
    """Test a row vanishing between lookup and delete is reported as 404."""
    db = MagicMock()
    db.query.return_value.filter.return_value.first.return_value = MagicMock(
        file_name="x.png", image=None
    )
    db.execute.return_value.rowcount = 0
    storage = MagicMock()

    with pytest.raises(NotFoundError):
        ProductService(db, storage).delete(1)

    storage.delete.assert_not_called()
