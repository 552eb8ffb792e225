from concurrent.futures import ThreadPoolExecutor

import pytest

from workwave.auth import Actor
from workwave.database import SessionLocal
from workwave.domain.contracts.service import ContractService
from workwave.models import Contract, Project, User

from .conftest import login_as, place_bid, post_project, set_milestone_status, sign_contract


def finish_milestones(freelancer, contract):
    for milestone in contract["milestones"]:
        assert set_milestone_status(freelancer, milestone["id"], "IN_PROGRESS").status_code == 200
        assert set_milestone_status(freelancer, milestone["id"], "COMPLETED").status_code == 200


def test_create_contract_from_bid(client, freelancer, contract):
    assert contract["stage"] == "APPROVAL"
    assert contract["termsAccepted"] is False
    assert contract["amount"] == 1000
    assert contract["freelancerId"] == freelancer.user["id"]
    assert [m["status"] for m in contract["milestones"]] == ["PENDING", "PENDING"]
    assert [m["amount"] for m in contract["milestones"]] == [400, 600]

    project = client.get(f"/api/projects/{contract['projectId']}").json()
    assert project["status"] == "IN_PROGRESS"
    assert project["bids"][0]["status"] == "ACCEPTED"

    notifications = freelancer.get("/api/notifications").json()
    assert notifications[0]["type"] == "CONTRACT_CREATED"


def test_create_contract_keeps_other_bids_pending(client, freelancer, outsider):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])
    other = place_bid(outsider, project["id"])
    sign_contract(client, bid["id"])

    bids = {b["id"]: b["status"] for b in client.get("/api/client/bids").json()["bids"]}
    assert bids == {bid["id"]: "ACCEPTED", other["id"]: "PENDING"}


def test_milestone_sum_must_match_contract_amount(client, freelancer):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])

    response = client.post(
        "/api/contracts",
        json={
            "bidId": bid["id"],
            "terms": "Deliver the work described in the project",
            "amount": 1000,
            "milestones": [{"title": "Only half", "amount": 500}],
        },
    )
    assert response.status_code == 400
    assert client.get("/api/contracts").json()["contracts"] == []
    assert client.get(f"/api/projects/{project['id']}").json()["status"] == "OPEN"


def test_milestone_sum_tolerates_a_cent(client, freelancer):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])
    contract = sign_contract(
        client,
        bid["id"],
        milestones=[{"title": "One", "amount": 0.1}, {"title": "Two", "amount": 0.2}],
        amount=0.3,
    )
    assert len(contract["milestones"]) == 2


def test_contract_needs_a_milestone(client, freelancer):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])
    response = client.post(
        "/api/contracts",
        json={"bidId": bid["id"], "terms": "Deliver the work", "amount": 10, "milestones": []},
    )
    assert response.status_code == 400


def test_one_contract_per_bid(client, contract):
    response = client.post(
        "/api/contracts",
        json={
            "bidId": contract["bidId"],
            "terms": "Deliver the work described in the project",
            "amount": 10,
            "milestones": [{"title": "Again", "amount": 10}],
        },
    )
    assert response.status_code == 409


def test_only_project_owner_creates_contract(client, freelancer):
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])
    other_client = login_as("Other Client", "other@example.com", "CLIENT")
    response = other_client.post(
        "/api/contracts",
        json={
            "bidId": bid["id"],
            "terms": "Deliver the work described in the project",
            "amount": 10,
            "milestones": [{"title": "Mine", "amount": 10}],
        },
    )
    assert response.status_code == 403
    assert freelancer.post(
        "/api/contracts",
        json={
            "bidId": bid["id"],
            "terms": "Deliver the work described in the project",
            "amount": 10,
            "milestones": [{"title": "Mine", "amount": 10}],
        },
    ).status_code == 403


def test_contract_visible_to_parties_only(client, freelancer, outsider, contract):
    assert client.get(f"/api/contracts/{contract['id']}").status_code == 200
    assert freelancer.get(f"/api/contracts/{contract['id']}").status_code == 200
    assert client.get(f"/api/contracts/{contract['id']}").json()["stage"] == "APPROVAL"
    assert client.get("/api/contracts/999").status_code == 404


def test_list_contracts_filters_by_stage(client, freelancer, contract):
    assert len(freelancer.get("/api/contracts").json()["contracts"]) == 1
    assert client.get("/api/contracts", params={"stage": "REVIEW"}).json()["contracts"] == []
    listed = client.get("/api/contracts", params={"projectId": contract["projectId"]}).json()
    assert [c["id"] for c in listed["contracts"]] == [contract["id"]]


def test_client_contracts_dashboard(client, freelancer, contract):
    response = client.get("/api/client/contracts")
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [contract["id"]]
    assert len(response.json()[0]["milestones"]) == 2
    assert freelancer.get("/api/client/contracts").status_code == 403


def test_update_terms_until_accepted(client, freelancer, contract):
    url = f"/api/contracts/{contract['id']}"
    response = client.put(url, json={"terms": "Updated terms for the work"})
    assert response.status_code == 200
    assert response.json()["terms"] == "Updated terms for the work"
    assert freelancer.put(url, json={"terms": "Freelancer rewrites terms"}).status_code == 403

    assert freelancer.put(f"{url}/accept").json()["termsAccepted"] is True
    assert client.put(url, json={"terms": "Too late to change these"}).status_code == 409


def test_advance_stage_sets_start_date(client, contract):
    response = client.put(f"/api/contracts/{contract['id']}/stage", json={"stage": "PAYMENT"})
    assert response.status_code == 200
    assert response.json()["stage"] == "PAYMENT"
    assert response.json()["startDate"] is not None


@pytest.mark.parametrize("stage", [None, "", "FINISHED", "CANCELLED"])
def test_advance_stage_rejects_unknown_stage(client, contract, stage):
    response = client.put(f"/api/contracts/{contract['id']}/stage", json={"stage": stage})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid contract stage"}
    assert client.get(f"/api/contracts/{contract['id']}").json()["stage"] == "APPROVAL"


def test_outsider_cannot_advance_stage(client, outsider, contract):
    response = outsider.put(f"/api/contracts/{contract['id']}/stage", json={"stage": "REVIEW"})
    assert response.status_code == 403
    assert client.get(f"/api/contracts/{contract['id']}").json()["stage"] == "APPROVAL"


def test_outsider_cannot_accept_terms(client, outsider, contract):
    response = outsider.put(f"/api/contracts/{contract['id']}/accept")
    assert response.status_code == 403
    assert client.get(f"/api/contracts/{contract['id']}").json()["termsAccepted"] is False


def test_complete_requires_all_milestones_completed(client, freelancer, contract):
    milestone = contract["milestones"][0]
    set_milestone_status(freelancer, milestone["id"], "IN_PROGRESS")
    set_milestone_status(freelancer, milestone["id"], "COMPLETED")

    response = client.post(f"/api/contracts/{contract['id']}/complete")
    assert response.status_code == 409
    assert response.json() == {
        "error": "All milestones must be completed before ending the contract"
    }
    assert client.get(f"/api/contracts/{contract['id']}").json()["stage"] == "APPROVAL"
    assert client.get(f"/api/projects/{contract['projectId']}").json()["status"] == "IN_PROGRESS"


def test_complete_closes_contract_and_project(client, freelancer, contract):
    finish_milestones(freelancer, contract)

    response = freelancer.post(f"/api/contracts/{contract['id']}/complete")
    assert response.status_code == 200
    assert response.json()["stage"] == "COMPLETED"
    assert response.json()["endDate"] is not None
    assert client.get(f"/api/projects/{contract['projectId']}").json()["status"] == "COMPLETED"

    for party in (client, freelancer):
        types = [n["type"] for n in party.get("/api/notifications").json()]
        assert "CONTRACT_COMPLETED" in types


def test_completed_contract_cannot_be_completed_again(client, freelancer, contract):
    finish_milestones(freelancer, contract)
    assert client.post(f"/api/contracts/{contract['id']}/complete").status_code == 200

    response = freelancer.post(f"/api/contracts/{contract['id']}/complete")
    assert response.status_code == 409
    assert response.json() == {"error": "Contract is already completed"}

    types = [n["type"] for n in freelancer.get("/api/notifications").json()]
    assert types.count("CONTRACT_COMPLETED") == 1


def test_refunded_contract_cannot_be_completed(client, freelancer, contract):
    finish_milestones(freelancer, contract)
    assert client.post(f"/api/contracts/{contract['id']}/payment").status_code == 200
    assert client.post(f"/api/contracts/{contract['id']}/refund").status_code == 200

    response = client.post(f"/api/contracts/{contract['id']}/complete")
    assert response.status_code == 409
    assert response.json() == {"error": "Contract is already cancelled"}
    assert client.get(f"/api/projects/{contract['projectId']}").json()["status"] == "IN_PROGRESS"


def test_stage_completed_goes_through_milestone_check(client, freelancer, contract):
    response = client.put(f"/api/contracts/{contract['id']}/stage", json={"stage": "COMPLETED"})
    assert response.status_code == 409

    finish_milestones(freelancer, contract)
    response = client.put(f"/api/contracts/{contract['id']}/stage", json={"stage": "COMPLETED"})
    assert response.status_code == 200
    assert client.get(f"/api/projects/{contract['projectId']}").json()["status"] == "COMPLETED"


def test_failed_completion_rolls_back_contract_and_project(client, freelancer, contract, monkeypatch):
    finish_milestones(freelancer, contract)

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.id == client.user["id"]).first()
        service = ContractService(db)

        def broken_commit():
            raise RuntimeError("database went away")

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(RuntimeError):
            service.complete(contract["id"], Actor.from_user(user))
    finally:
        db.close()

    check = SessionLocal()
    try:
        assert check.get(Contract, contract["id"]).stage == "APPROVAL"
        assert check.get(Contract, contract["id"]).end_date is None
        assert check.get(Project, contract["projectId"]).status == "IN_PROGRESS"
    finally:
        check.close()


def test_concurrent_stage_changes_leave_one_of_the_requested_stages(client, contract):
    requested = ["PAYMENT", "REVIEW"]

    def advance(stage):
        db = SessionLocal()
        try:
            user = db.query(User).filter(User.id == client.user["id"]).first()
            return ContractService(db).advance_stage(contract["id"], Actor.from_user(user), stage).stage
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(advance, requested))

    assert sorted(results) == sorted(requested)
    final = client.get(f"/api/contracts/{contract['id']}").json()["stage"]
    assert final in requested
