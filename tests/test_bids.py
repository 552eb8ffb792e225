from .conftest import place_bid, post_project


def test_freelancer_bids_on_open_project(client, freelancer):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"], amount=1100)

    assert bid["status"] == "PENDING"
    assert bid["amount"] == 1100
    assert bid["project"]["id"] == project["id"]

    notifications = client.get("/api/notifications").json()
    assert [n["type"] for n in notifications] == ["BID_RECEIVED"]
    assert notifications[0]["amount"] == 1100


def test_client_cannot_bid(client):
    project = post_project(client)
    response = client.post(
        "/api/bids",
        json={"projectId": project["id"], "amount": 10, "deliveryTime": 1, "coverLetter": "Hi"},
    )
    assert response.status_code == 403


def test_bid_missing_fields(client, freelancer):
    project = post_project(client)
    response = freelancer.post("/api/bids", json={"projectId": project["id"], "amount": 100})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_bid_on_unknown_project(freelancer):
    response = freelancer.post(
        "/api/bids",
        json={"projectId": 404, "amount": 10, "deliveryTime": 1, "coverLetter": "Hello"},
    )
    assert response.status_code == 404


def test_bid_on_closed_project_conflicts(client, freelancer):
    project = post_project(client)
    client.put(f"/api/projects/{project['id']}", json={"status": "CANCELLED"})

    response = freelancer.post(
        "/api/bids",
        json={"projectId": project["id"], "amount": 10, "deliveryTime": 1, "coverLetter": "Hello"},
    )
    assert response.status_code == 409
    assert response.json() == {"error": "Project is not open for bids"}
    assert freelancer.get("/api/freelancer/bids").json()["bids"] == []


def test_client_bid_listing_filters_and_sorts(client, freelancer, outsider):
    first = post_project(client)
    second = post_project(client, title="Design a company logo")
    place_bid(freelancer, first["id"], amount=900)
    place_bid(outsider, first["id"], amount=700)
    place_bid(freelancer, second["id"], amount=300)

    response = client.get("/api/client/bids", params={"sortBy": "amount", "sortOrder": "asc"})
    assert [b["amount"] for b in response.json()["bids"]] == [300, 700, 900]

    response = client.get("/api/client/bids", params={"projectId": first["id"]})
    assert {b["amount"] for b in response.json()["bids"]} == {700, 900}


def test_client_bid_listing_rejects_unknown_sort(client):
    response = client.get("/api/client/bids", params={"sortBy": "password"})
    assert response.status_code == 400


def test_owner_rejects_bid_and_freelancer_is_notified(client, freelancer):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])

    response = client.patch("/api/client/bids", json={"id": bid["id"], "status": "REJECTED"})
    assert response.status_code == 200
    assert response.json()["bid"]["status"] == "REJECTED"

    notifications = freelancer.get("/api/notifications").json()
    assert notifications[0]["type"] == "BID_UPDATED"


def test_only_project_owner_updates_bid_status(client, freelancer):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])
    response = freelancer.patch("/api/client/bids", json={"id": bid["id"], "status": "ACCEPTED"})
    assert response.status_code == 403


def test_freelancer_sees_own_bids(client, freelancer, outsider):
    project = post_project(client)
    mine = place_bid(freelancer, project["id"])
    place_bid(outsider, project["id"])

    bids = freelancer.get("/api/freelancer/bids").json()["bids"]
    assert [b["id"] for b in bids] == [mine["id"]]
