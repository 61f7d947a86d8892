"""
HTTP surface: routing, actor header, error rendering and the main flows
"""

ADMIN = {"X-Admin-User": "Admin Teste"}
API = "/api/v1"


async def _user(client, cpf="111", name="Maria Silva"):
    response = await client.post(f"{API}/users", json={"full_name": name, "cpf": cpf}, headers=ADMIN)
    assert response.status_code == 201, response.text
    return response.json()


async def _device(client, tag="PAT-1"):
    response = await client.post(f"{API}/devices", json={"asset_tag": tag}, headers=ADMIN)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_system_info(client):
    await _device(client)
    response = await client.get(f"{API}/system/info")

    body = response.json()
    assert body["app_name"] == "IT Asset 360"
    assert body["devices"] == {"Disponível": 1}


async def test_writes_require_actor_header(client):
    response = await client.post(f"{API}/devices", json={"asset_tag": "PAT-1"})
    assert response.status_code == 422
    assert (await client.get(f"{API}/devices")).json() == []


async def test_checkout_checkin_flow(client):
    user = await _user(client)
    device = await _device(client)

    response = await client.post(
        f"{API}/operations/checkout",
        json={"asset_kind": "Device", "asset_id": device["id"], "user_id": user["id"]},
        headers=ADMIN,
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["status"] == "Em Uso"
    assert body["term"]["type"] == "ENTREGA"
    assert body["term"]["asset_details"].startswith("[TAG: PAT-1 |")

    response = await client.post(
        f"{API}/operations/checkin",
        json={"asset_kind": "Device", "asset_id": device["id"], "inactivate_user": True},
        headers=ADMIN,
    )
    assert response.status_code == 200, response.text
    assert response.json()["user_active"] is False

    history = (await client.get(f"{API}/history/{device['id']}")).json()
    assert [entry["action"] for entry in history] == ["Devolução", "Entrega", "Criação"]

    user_body = (await client.get(f"{API}/users/{user['id']}")).json()
    assert [term["type"] for term in user_body["terms"]] == ["ENTREGA", "DEVOLUCAO"]
    assert user_body["active"] is False


async def test_precondition_errors_render_code_and_status(client):
    device = await _device(client)

    response = await client.post(
        f"{API}/operations/checkin",
        json={"asset_kind": "Device", "asset_id": device["id"]},
        headers=ADMIN,
    )
    assert response.status_code == 409
    assert response.json()["error"] == "AssetNotInUse"

    response = await client.post(
        f"{API}/devices/{device['id']}/restore", json={"reason": "x"}, headers=ADMIN
    )
    assert response.status_code == 409
    assert response.json()["error"] == "NotRetired"

    response = await client.get(f"{API}/devices/nao-existe")
    assert response.status_code == 404
    assert response.json()["error"] == "EntityNotFound"


async def test_duplicate_cpf_is_422(client):
    await _user(client, cpf="999")
    response = await client.post(
        f"{API}/users", json={"full_name": "Outro", "cpf": "999"}, headers=ADMIN
    )
    assert response.status_code == 422
    assert response.json()["error"] == "DuplicateValue"


async def test_device_lifecycle_endpoints(client):
    device = await _device(client)
    sim = (await client.post(f"{API}/sims", json={"phone_number": "11 9"}, headers=ADMIN)).json()

    response = await client.post(
        f"{API}/devices/{device['id']}/linked-sim", json={"sim_id": sim["id"]}, headers=ADMIN
    )
    assert response.json()["linked_sim_id"] == sim["id"]

    response = await client.post(f"{API}/devices/{device['id']}/maintenance", headers=ADMIN)
    assert response.json()["status"] == "Manutenção"

    response = await client.post(
        f"{API}/devices/{device['id']}/retire", json={"reason": "Sem conserto"}, headers=ADMIN
    )
    body = response.json()
    assert body["status"] == "Descartado"
    assert body["linked_sim_id"] is None


async def test_log_detail_and_diff(client):
    user = await _user(client)
    await client.put(f"{API}/users/{user['id']}", json={"email": "maria@x.com"}, headers=ADMIN)

    logs = (await client.get(f"{API}/logs")).json()
    update_log = logs[0]
    assert update_log["action"] == "Atualização"
    assert "previous_data" not in update_log

    detail = (await client.get(f"{API}/logs/{update_log['id']}")).json()
    assert detail["new_data"]["email"] == "maria@x.com"

    diff = (await client.get(f"{API}/logs/{update_log['id']}/diff")).json()
    assert diff["changes"] == [
        {
            "field": "E-mail",
            "raw_key": "email",
            "old": None,
            "new": "maria@x.com",
            "old_display": "(vazio)",
            "new_display": "maria@x.com",
        }
    ]


async def test_clear_and_restore_logs(client):
    sim = (await client.post(f"{API}/sims", json={"phone_number": "11 7"}, headers=ADMIN)).json()
    response = await client.delete(f"{API}/sims/{sim['id']}", headers=ADMIN)
    assert response.status_code == 204

    delete_log = (await client.get(f"{API}/history/{sim['id']}")).json()[0]
    response = await client.post(f"{API}/logs/{delete_log['id']}/restore", headers=ADMIN)
    assert response.status_code == 200, response.text
    assert response.json()["record"]["phoneNumber"] == "11 7"

    response = await client.delete(f"{API}/logs", headers=ADMIN)
    assert response.json() == {"removed": 3}
    assert len((await client.get(f"{API}/logs")).json()) == 1


async def test_catalog_routes(client):
    response = await client.post(f"{API}/catalog/sectors", json={"name": "Vendas"}, headers=ADMIN)
    assert response.status_code == 201
    sector = response.json()

    listing = (await client.get(f"{API}/catalog/sectors")).json()
    assert [entry["name"] for entry in listing] == ["Vendas"]

    response = await client.delete(f"{API}/catalog/sectors/{sector['id']}", headers=ADMIN)
    assert response.status_code == 204
    assert (await client.get(f"{API}/catalog/galaxies")).status_code == 404


async def test_term_routes(client):
    user = await _user(client)
    device = await _device(client)
    checkout = (await client.post(
        f"{API}/operations/checkout",
        json={"asset_kind": "Device", "asset_id": device["id"], "user_id": user["id"]},
        headers=ADMIN,
    )).json()
    term_id = checkout["term"]["id"]

    assert (await client.get(f"{API}/terms/{term_id}/file")).status_code == 404

    response = await client.put(
        f"{API}/terms/{term_id}/file", json={"file_url": "https://files/t.pdf"}, headers=ADMIN
    )
    assert response.json()["has_file"] is True

    response = await client.get(f"{API}/terms/{term_id}/file")
    assert response.json()["file_url"] == "https://files/t.pdf"
