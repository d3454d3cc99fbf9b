import uuid
from conftest import create_group, join


def get_group(client, group_id):
    groups = client.get("/api/groups").json()
    return next(g for g in groups if g["id"] == group_id)


def test_create_group(client, vendor):
    group = create_group(client, vendor["id"])
    assert group["creatorId"] == vendor["id"]
    assert group["joinedQuantity"] == 0
    assert group["status"] == "Open"
    assert group["totalQuantity"] == 100
    assert group["minJoinQuantity"] == 5


def test_only_vendors_create_groups(client, supplier):
    response = client.post("/api/groups", json={
        "product": "Tomato", "price": 20, "totalQuantity": 50, "minJoinQuantity": 5,
        "pickupPoint": "APMC Yard", "userId": supplier["id"], "userRole": "supplier",
    })
    assert response.status_code == 403
    assert response.json()["message"] == "Only vendors can create groups."


def test_create_group_validates_quantities(client, vendor):
    base = {
        "product": "Tomato", "price": 20, "totalQuantity": 50, "minJoinQuantity": 5,
        "pickupPoint": "APMC Yard", "userId": vendor["id"], "userRole": "vendor",
    }
    assert client.post("/api/groups", json={**base, "price": 0}).status_code == 400
    assert client.post("/api/groups", json={**base, "totalQuantity": 0}).status_code == 400
    assert client.post("/api/groups", json={**base, "minJoinQuantity": 60}).status_code == 400
    assert client.post("/api/groups", json={**base, "pickupPoint": ""}).status_code == 400


def test_list_groups_and_my_groups(client, vendor):
    first = create_group(client, vendor["id"], product="Onion")
    second = create_group(client, "vendor-2", product="Potato")

    all_ids = {g["id"] for g in client.get("/api/groups").json()}
    assert all_ids == {first["id"], second["id"]}

    mine = client.get(f"/api/groups/my/{vendor['id']}").json()
    assert [g["product"] for g in mine] == ["Onion"]


def test_join_capacity_scenario(client, vendor):
    group = create_group(client, vendor["id"], totalQuantity=100, minJoinQuantity=5)
    assert join(client, group["id"], "vendor-0", 90).status_code == 200

    over = join(client, group["id"], "vendor-2", 15)
    assert over.status_code == 400
    assert "exceed" in over.json()["message"]
    assert get_group(client, group["id"])["joinedQuantity"] == 90

    ok = join(client, group["id"], "vendor-2", 10)
    assert ok.status_code == 200
    assert ok.json() == {"message": "Join request submitted successfully.", "product": "Onion"}
    assert get_group(client, group["id"])["joinedQuantity"] == 100


def test_join_below_minimum_leaves_group_untouched(client, vendor):
    group = create_group(client, vendor["id"], minJoinQuantity=5)

    response = join(client, group["id"], "vendor-2", 4)
    assert response.status_code == 400
    assert response.json()["message"] == "Quantity must be at least 5 kg."
    assert get_group(client, group["id"])["joinedQuantity"] == 0


def test_creator_cannot_join_own_group(client, vendor):
    group = create_group(client, vendor["id"])
    response = join(client, group["id"], vendor["id"], 10)
    assert response.status_code == 400
    assert response.json()["message"] == "You cannot join a group you created."


def test_second_active_join_is_rejected(client, vendor):
    group = create_group(client, vendor["id"])
    assert join(client, group["id"], "vendor-2", 10).status_code == 200

    again = join(client, group["id"], "vendor-2", 10)
    assert again.status_code == 400
    assert again.json()["message"] == "You already have an active join request for this group."
    assert get_group(client, group["id"])["joinedQuantity"] == 10


def test_suppliers_cannot_join(client, vendor, supplier):
    group = create_group(client, vendor["id"])
    response = join(client, group["id"], supplier["id"], 10, role="supplier")
    assert response.status_code == 403
    assert response.json()["message"] == "Only vendors can join groups."


def test_join_unknown_group(client):
    response = join(client, str(uuid.uuid4()), "vendor-2", 10)
    assert response.status_code == 404


def test_join_malformed_group_id(client):
    response = join(client, "not-a-group", "vendor-2", 10)
    assert response.status_code == 400


def test_join_without_quantity(client, vendor):
    group = create_group(client, vendor["id"])
    response = client.post(
        f"/api/join-requests/{group['id']}/join",
        json={"userId": "vendor-2", "userRole": "vendor"},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Quantity is required."


def test_full_group_stays_open(client, vendor):
    group = create_group(client, vendor["id"], totalQuantity=10, minJoinQuantity=5)
    assert join(client, group["id"], "vendor-2", 10).status_code == 200

    full = get_group(client, group["id"])
    assert full["joinedQuantity"] == 10
    assert full["status"] == "Open"


def test_role_is_checked_before_group_fields(client, supplier):
    response = client.post("/api/groups", json={
        "product": "", "price": 0, "totalQuantity": 5, "minJoinQuantity": 50,
        "userId": supplier["id"], "userRole": "supplier",
    })
    assert response.status_code == 403
    assert response.json()["message"] == "Only vendors can create groups."


def test_invalid_group_field_names_the_field(client, vendor):
    response = client.post("/api/groups", json={
        "product": "Tomato", "price": -3, "totalQuantity": 50, "minJoinQuantity": 5,
        "pickupPoint": "APMC Yard", "userId": vendor["id"], "userRole": "vendor",
    })
    assert response.status_code == 400
    assert response.json()["message"].startswith("price:")


def test_missing_group_field(client, vendor):
    response = client.post("/api/groups", json={
        "product": "Tomato", "price": 20, "totalQuantity": 50, "minJoinQuantity": 5,
        "userId": vendor["id"], "userRole": "vendor",
    })
    assert response.status_code == 400
    assert response.json()["message"].startswith("pickupPoint:")
