DAY = "2024-03-15"


def form_register(client, email="page@example.com", password="hunter22", confirm=None):
    return client.post(
        "/register",
        data={"email": email, "password": password, "confirm_password": confirm or password},
        follow_redirects=False,
    )


def test_register_form_logs_in(client):
    r = form_register(client)
    assert r.status_code == 303
    assert r.headers["location"] == "/"
    assert client.get("/api/auth/me").json()["user"]["email"] == "page@example.com"


def test_register_form_errors(client):
    r = form_register(client, confirm="different")
    assert r.status_code == 400
    assert "Passwords do not match" in r.text

    r = form_register(client, password="abc")
    assert r.status_code == 400
    assert "at least 6 characters" in r.text

    form_register(client)
    client.post("/logout")
    r = form_register(client)
    assert r.status_code == 400
    assert "Email already registered" in r.text


def test_login_form(client):
    form_register(client)
    client.post("/logout")

    r = client.post("/login", data={"email": "page@example.com", "password": "nope-nope"}, follow_redirects=False)
    assert r.status_code == 401
    assert "Invalid credentials" in r.text

    r = client.post("/login", data={"email": "PAGE@example.com", "password": "hunter22"}, follow_redirects=False)
    assert r.status_code == 303


def test_forms_require_login(client):
    r = client.post("/task", data={"title": "x", "day": DAY}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/login"


def test_task_and_block_forms(auth_client):
    r = auth_client.post("/task", data={"title": "Stretch", "category": "health", "day": DAY}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == f"/?day={DAY}"

    task = auth_client.get(f"/api/tasks?date={DAY}").json()[0]
    auth_client.post("/task/toggle", data={"task_id": task["id"], "day": DAY})
    auth_client.post("/task/priority", data={"task_id": task["id"], "priority": 1, "day": DAY})

    task = auth_client.get(f"/api/tasks?date={DAY}").json()[0]
    assert task["is_completed"] is True
    assert task["priority"] == 1

    auth_client.post(
        "/block",
        data={"label": "Walk", "start_time": "07:00", "end_time": "08:00", "category": "health", "day": DAY},
    )
    block = auth_client.get(f"/api/time-blocks?date={DAY}").json()[0]
    auth_client.post("/block/toggle", data={"block_id": block["id"], "day": DAY})

    logs = auth_client.get("/api/daily-logs").json()
    assert logs[0]["consistency_score"] == 100
    assert (logs[0]["tasks_completed"], logs[0]["blocks_completed"]) == (1, 1)

    page = auth_client.get(f"/?day={DAY}")
    assert "Stretch" in page.text
    assert "Walk" in page.text


def test_block_form_rejects_bad_range(auth_client):
    r = auth_client.post(
        "/block",
        data={"label": "Oops", "start_time": "10:00", "end_time": "09:00", "day": DAY},
        follow_redirects=False,
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "end_time must be after start_time"


def test_task_form_rejects_unknown_category(auth_client):
    r = auth_client.post("/task", data={"title": "x", "category": "chores", "day": DAY}, follow_redirects=False)
    assert r.status_code == 400


def test_exports_redirect_anonymous_to_login(client):
    for path in ("/export", "/export/weekly"):
        r = client.get(path, follow_redirects=False)
        assert r.status_code == 303, path
        assert r.headers["location"] == "/login"


def test_heatmap_shows_month_labels(auth_client):
    page = auth_client.get(f"/?day={DAY}")
    assert page.status_code == 200
    assert 'class="heatmap-months"' in page.text
    assert ">Mar</span>" in page.text
    assert ">Apr</span>" in page.text
