from models import User
from services.auth_service import AuthService
from services.token_service import TokenService
from tests.conftest import client_with_cookie


async def test_health_is_public(client):
    """Test the health check needs no session."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "Healthy"}


async def test_missing_cookie(client):
    """Test a protected API path without a session cookie."""
    response = await client.get("/api/cart/items")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized: Invalid or missing token"}


async def test_garbage_token(client):
    """Test a cookie that is not a token at all."""
    async with client_with_cookie("not-a-jwt") as ac:
        response = await ac.get("/api/cart/items")

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized: Invalid or missing token"


async def test_unstored_token_is_rejected(client, customer):
    """Test a correctly signed token that was never handed out."""
    token, _ = TokenService.create_token(customer.username)

    async with client_with_cookie(token) as ac:
        response = await ac.get("/api/users/me")

    assert response.status_code == 401


async def test_token_of_missing_user(client, customer, session):
    """Test a stored token whose username no longer resolves."""
    token = TokenService.issue(customer, session)
    customer.username = "renamed"
    session.commit()

    async with client_with_cookie(token) as ac:
        response = await ac.get("/api/users/me")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized: User not found"}


async def test_customer_on_admin_path(customer_client):
    """Test customers are kept out of /admin/."""
    response = await customer_client.get("/admin/business/overall")

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden: Admin access required"}


async def test_admin_on_api_path(admin_client):
    """Test admins may use the customer API."""
    response = await admin_client.get("/api/users/me")

    assert response.status_code == 200
    assert response.json()["role"] == "ADMIN"


async def test_public_login_passes_without_cookie(client, customer):
    """Test the login endpoint is reachable anonymously."""
    response = await client.post("/api/auth/login", json={
        "username": "customer",
        "password": "TestPassword123"
    })

    assert response.status_code == 200


async def test_unprotected_path_is_forwarded(client):
    """Test paths outside every protected prefix reach routing untouched."""
    response = await client.get("/does-not-exist")

    assert response.status_code == 404


async def test_options_preflight(client):
    """Test an OPTIONS request to a protected path is answered by the gate."""
    response = await client.options("/api/cart/items")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"
    assert "DELETE" in response.headers["access-control-allow-methods"]


async def test_options_preflight_echoes_allowed_origin(client):
    """Test the preflight answer names the caller's origin when it is allowed."""
    response = await client.options("/admin/products/add", headers={"Origin": "http://localhost:5173"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


async def test_gate_failure_is_a_500(client, customer, session, monkeypatch):
    """Test an unexpected error while resolving the user never reaches the handler."""
    token = TokenService.issue(customer, session)

    def broken_lookup(db, username) -> User:
        raise RuntimeError("database went away")

    monkeypatch.setattr(AuthService, "get_user_by_username", staticmethod(broken_lookup))

    async with client_with_cookie(token) as ac:
        response = await ac.get("/api/users/me")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


async def test_request_id_header(client):
    """Test every response carries a request id."""
    response = await client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["x-request-id"] == "abc-123"
