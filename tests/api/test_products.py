from models import Category
from tests.conftest import make_product


async def test_list_products(customer_client, phone, cable):
    """Test the catalog with the caller's identity."""
    response = await customer_client.get("/api/products")

    assert response.status_code == 200
    body = response.json()
    assert body["user"] == {"name": "customer", "role": "CUSTOMER"}
    assert [product["name"] for product in body["products"]] == ["Phone", "Cable"]
    assert body["products"][0]["images"] == ["https://img.test/phone.png"]
    assert body["products"][0]["category"] == "Electronics"


async def test_list_products_by_category(customer_client, session, phone):
    """Test filtering by category name."""
    books = Category(name="Books")
    session.add(books)
    session.commit()
    make_product(session, "Novel", "12.00", books)

    response = await customer_client.get("/api/products", params={"category": "Books"})

    assert [product["name"] for product in response.json()["products"]] == ["Novel"]


async def test_list_products_unknown_category(customer_client, phone):
    """Test an unknown category yields nothing."""
    response = await customer_client.get("/api/products", params={"category": "Garden"})

    assert response.json()["products"] == []


async def test_get_product(customer_client, phone):
    """Test a single product."""
    response = await customer_client.get(f"/api/products/{phone.id}")

    assert response.status_code == 200
    product = response.json()["product"]
    assert product["product_id"] == phone.id
    assert product["price"] == 199.99
    assert product["stock"] == 10


async def test_get_unknown_product(customer_client):
    """Test a product id that does not exist."""
    response = await customer_client.get("/api/products/999")

    assert response.status_code == 404


async def test_categories(customer_client, category):
    """Test the category listing."""
    response = await customer_client.get("/api/products/categories")

    assert response.status_code == 200
    assert response.json() == [{"categoryId": category.id, "name": "Electronics"}]


async def test_catalog_requires_login(client, phone):
    """Test anonymous callers are turned away."""
    response = await client.get("/api/products")

    assert response.status_code == 401
