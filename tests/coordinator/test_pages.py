from fastapi.testclient import TestClient

from coordinator.config import CoordinatorSettings
from coordinator.main import app, create_app

client = TestClient(app)


def test_root_without_display_redirects_to_admin():
    response = client.get("/", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/admin"


def test_root_with_display_serves_display_page():
    response = client.get("/", params={"display": "display2", "camera": 1})
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "display.js" in response.text


def test_admin_and_setup_pages():
    admin = client.get("/admin")
    assert admin.status_code == 200
    assert "admin.js" in admin.text

    setup = client.get("/setup")
    assert setup.status_code == 200
    assert "Display setup" in setup.text


def test_static_assets_are_served():
    response = client.get("/static/channel.js")
    assert response.status_code == 200
    assert "openChannel" in response.text


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "service" in data


def test_missing_page_is_404(tmp_path):
    local = TestClient(create_app(CoordinatorSettings(static_dir=tmp_path)))
    assert local.get("/setup").status_code == 404
    assert local.get("/", params={"display": "display1"}).status_code == 404
