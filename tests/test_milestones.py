from workwave.models import Payment

from .conftest import set_milestone_status


def test_freelancer_walks_milestone_forward(freelancer, contract):
    milestone_id = contract["milestones"][0]["id"]

    response = set_milestone_status(freelancer, milestone_id, "IN_PROGRESS")
    assert response.status_code == 200
    assert response.json()["milestone"]["status"] == "IN_PROGRESS"

    response = set_milestone_status(freelancer, milestone_id, "COMPLETED")
    assert response.json()["milestone"]["status"] == "COMPLETED"


def test_client_cannot_start_work(client, contract):
    response = set_milestone_status(client, contract["milestones"][0]["id"], "IN_PROGRESS")
    assert response.status_code == 403


def test_milestone_cannot_skip_a_step(freelancer, contract):
    response = set_milestone_status(freelancer, contract["milestones"][0]["id"], "COMPLETED")
    assert response.status_code == 409


def test_paid_and_unknown_statuses_cannot_be_set(freelancer, contract):
    milestone_id = contract["milestones"][0]["id"]
    assert set_milestone_status(freelancer, milestone_id, "PAID").status_code == 400
    assert set_milestone_status(freelancer, milestone_id, "DONE").status_code == 400


def test_completion_notifies_client(client, freelancer, contract):
    milestone_id = contract["milestones"][0]["id"]
    set_milestone_status(freelancer, milestone_id, "IN_PROGRESS")
    set_milestone_status(freelancer, milestone_id, "COMPLETED")

    types = [n["type"] for n in client.get("/api/notifications").json()]
    assert types[0] == "MILESTONE_COMPLETED"
    assert "MILESTONE_UPDATED" in types


def test_payment_request_opens_pending_payment(client, freelancer, contract, db):
    milestone = contract["milestones"][0]
    for status in ("IN_PROGRESS", "COMPLETED", "PAYMENT_REQUESTED"):
        assert set_milestone_status(freelancer, milestone["id"], status).status_code == 200

    detail = client.get(f"/api/milestones/{milestone['id']}").json()
    assert detail["status"] == "PAYMENT_REQUESTED"
    assert len(detail["payments"]) == 1
    payment = detail["payments"][0]
    assert payment["status"] == "PENDING"
    assert payment["amount"] == 400
    assert payment["clientId"] == client.user["id"]
    assert payment["freelancerId"] == freelancer.user["id"]

    notification = client.get("/api/notifications").json()[0]
    assert notification["type"] == "PAYMENT_REQUESTED"
    assert notification["referenceId"] == payment["id"]
    assert db.query(Payment).count() == 1


def test_either_party_cancels(client, contract):
    milestone_id = contract["milestones"][0]["id"]
    response = set_milestone_status(client, milestone_id, "CANCELLED")
    assert response.status_code == 200
    assert response.json()["milestone"]["status"] == "CANCELLED"
    assert set_milestone_status(client, milestone_id, "CANCELLED").status_code == 409


def test_client_edits_pending_milestone(client, freelancer, contract):
    milestone_id = contract["milestones"][0]["id"]
    response = client.put(
        f"/api/milestones/{milestone_id}", json={"title": "Wireframes", "amount": 450}
    )
    assert response.status_code == 200
    assert response.json()["milestone"]["title"] == "Wireframes"
    assert response.json()["milestone"]["amount"] == 450

    assert freelancer.put(f"/api/milestones/{milestone_id}", json={"title": "Mine"}).status_code == 403

    set_milestone_status(freelancer, milestone_id, "IN_PROGRESS")
    assert client.put(f"/api/milestones/{milestone_id}", json={"amount": 1}).status_code == 409


def test_milestone_hidden_from_outsiders(outsider, contract):
    milestone_id = contract["milestones"][0]["id"]
    assert outsider.get(f"/api/milestones/{milestone_id}").status_code == 403
    assert outsider.get("/api/milestones/999").status_code == 404


def test_progress_log_newest_first(client, freelancer, contract):
    milestone_id = contract["milestones"][0]["id"]
    url = f"/api/milestones/{milestone_id}/progress"

    response = freelancer.post(url, json={"progressUpdate": "Started sketches"})
    assert response.status_code == 200
    response = freelancer.post(url, json={"progressUpdate": "Work underway", "status": "IN_PROGRESS"})
    assert response.json()["status"] == "IN_PROGRESS"

    updates = client.get(url).json()["progressUpdates"]
    assert [u["description"] for u in updates] == ["Work underway", "Started sketches"]
    assert [u["status"] for u in updates] == ["IN_PROGRESS", "PENDING"]
    assert updates[0]["user"]["id"] == freelancer.user["id"]


def test_progress_status_follows_transition_rules(freelancer, contract):
    url = f"/api/milestones/{contract['milestones'][0]['id']}/progress"
    response = freelancer.post(url, json={"progressUpdate": "All done", "status": "COMPLETED"})
    assert response.status_code == 409


def test_request_payment_opens_checkout(client, freelancer, contract, provider, db):
    milestone = contract["milestones"][1]

    response = client.post(f"/api/milestones/{milestone['id']}/request-payment")
    assert response.status_code == 200
    assert response.json() == {
        "url": "https://checkout.stripe.test/cs_test_1",
        "redirectUrl": "/client/dashboard",
    }

    call = provider.calls_named("checkout")[0]
    assert call["amount_minor"] == 60000
    assert call["currency"] == "usd"
    assert call["metadata"]["milestoneId"] == str(milestone["id"])
    assert call["success_url"].endswith("/client/dashboard?success=true")

    payment = db.query(Payment).one()
    assert payment.checkout_session_id == "cs_test_1"
    assert payment.amount == 600

    # A second request reuses the open payment
    client.post(f"/api/milestones/{milestone['id']}/request-payment")
    assert db.query(Payment).count() == 1


def test_only_client_requests_payment(freelancer, contract):
    response = freelancer.post(f"/api/milestones/{contract['milestones'][0]['id']}/request-payment")
    assert response.status_code == 403


def test_provider_failure_leaves_no_payment(client, contract, provider, db):
    provider.fail = True
    response = client.post(f"/api/milestones/{contract['milestones'][0]['id']}/request-payment")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert db.query(Payment).count() == 0


def pay_up_front(client, milestone_id, db):
    """Client pays through checkout before the work is delivered; provider confirms"""
    assert client.post(f"/api/milestones/{milestone_id}/request-payment").status_code == 200
    payment = db.query(Payment).filter(Payment.milestone_id == milestone_id).one()
    payment.status = "COMPLETED"
    db.commit()


def test_paid_milestone_is_not_billed_again(client, freelancer, contract, db):
    milestone_id = contract["milestones"][0]["id"]
    pay_up_front(client, milestone_id, db)

    set_milestone_status(freelancer, milestone_id, "IN_PROGRESS")
    set_milestone_status(freelancer, milestone_id, "COMPLETED")

    response = set_milestone_status(freelancer, milestone_id, "PAYMENT_REQUESTED")
    assert response.status_code == 409
    assert response.json() == {"error": "Milestone has already been paid"}
    assert client.get(f"/api/milestones/{milestone_id}").json()["status"] == "COMPLETED"
    assert db.query(Payment).filter(Payment.milestone_id == milestone_id).count() == 1

    requests = [
        n for n in client.get("/api/notifications").json() if n["type"] == "PAYMENT_REQUESTED"
    ]
    assert requests == []


def test_paid_milestone_has_no_second_checkout(client, contract, provider, db):
    milestone_id = contract["milestones"][0]["id"]
    pay_up_front(client, milestone_id, db)

    response = client.post(f"/api/milestones/{milestone_id}/request-payment")
    assert response.status_code == 409
    assert len(provider.calls_named("checkout")) == 1
