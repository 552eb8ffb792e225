from .conftest import place_bid, post_project, sign_contract


def test_client_posts_project(client):
    project = post_project(client)
    assert project["status"] == "OPEN"
    assert project["clientId"] == client.user["id"]
    assert project["skills"] == ["html", "css"]
    assert project["bidCount"] == 0


def test_freelancer_cannot_post_project(freelancer):
    response = freelancer.post(
        "/api/projects",
        json={
            "title": "Build a landing page",
            "description": "Responsive landing page with a signup form",
            "budget": 100,
            "category": "Web",
        },
    )
    assert response.status_code == 403


def test_project_requires_positive_budget(client):
    response = client.post(
        "/api/projects",
        json={
            "title": "Build a landing page",
            "description": "Responsive landing page with a signup form",
            "budget": 0,
            "category": "Web",
        },
    )
    assert response.status_code == 400


def test_open_projects_are_public(client, anonymous):
    project = post_project(client)
    response = anonymous.get("/api/projects/open")
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [project["id"]]


def test_project_bids_visible_to_owner_and_bidder_only(client, freelancer, outsider, anonymous):
    project = post_project(client)
    place_bid(freelancer, project["id"])

    assert len(client.get(f"/api/projects/{project['id']}").json()["bids"]) == 1
    assert len(freelancer.get(f"/api/projects/{project['id']}").json()["bids"]) == 1
    assert outsider.get(f"/api/projects/{project['id']}").json()["bids"] == []

    public = anonymous.get(f"/api/projects/{project['id']}")
    assert public.status_code == 200
    assert public.json()["bids"] == []
    assert public.json()["bidCount"] == 1


def test_get_missing_project_is_not_found(anonymous):
    response = anonymous.get("/api/projects/999")
    assert response.status_code == 404
    assert response.json() == {"error": "Project not found"}


def test_my_projects_lists_owned_and_bid_on(client, freelancer, outsider):
    project = post_project(client)
    place_bid(freelancer, project["id"])

    assert [p["id"] for p in client.get("/api/projects").json()] == [project["id"]]
    assert [p["id"] for p in freelancer.get("/api/projects").json()] == [project["id"]]
    assert outsider.get("/api/projects").json() == []


def test_owner_updates_project(client):
    project = post_project(client)
    response = client.put(f"/api/projects/{project['id']}", json={"budget": 2000, "status": "CANCELLED"})
    assert response.status_code == 200
    assert response.json()["budget"] == 2000
    assert response.json()["status"] == "CANCELLED"


def test_owner_cannot_set_contract_driven_status(client):
    project = post_project(client)
    response = client.put(f"/api/projects/{project['id']}", json={"status": "COMPLETED"})
    assert response.status_code == 400


def test_only_owner_updates_or_deletes(client, outsider):
    project = post_project(client)
    assert outsider.put(f"/api/projects/{project['id']}", json={"budget": 1}).status_code == 403
    assert outsider.delete(f"/api/projects/{project['id']}").status_code == 403


def test_delete_project_with_approval_contract(client, freelancer):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])
    sign_contract(client, bid["id"])

    response = client.delete(f"/api/projects/{project['id']}")
    assert response.status_code == 200
    assert client.get(f"/api/projects/{project['id']}").status_code == 404
    assert client.get("/api/contracts").json()["contracts"] == []


def test_delete_project_with_active_contract_conflicts(client, freelancer):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])
    contract = sign_contract(client, bid["id"])
    client.put(f"/api/contracts/{contract['id']}/stage", json={"stage": "PAYMENT"})

    response = client.delete(f"/api/projects/{project['id']}")
    assert response.status_code == 409
