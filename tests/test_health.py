def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_home_page_requires_login(client):
    r = client.get("/", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/login"


def test_home_page(auth_client):
    r = auth_client.get("/?day=2024-03-15")
    assert r.status_code == 200
    assert "Consistency Tracker" in r.text
    assert "Consistency Score" in r.text


def test_home_page_bad_day(auth_client):
    r = auth_client.get("/?day=yesterday")
    assert r.status_code == 400


def test_login_page(client):
    r = client.get("/login")
    assert r.status_code == 200
    assert "Log in" in r.text
