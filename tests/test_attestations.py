import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from src.attestations.models import Attestation, AttestationStance
from src.attestations.schemas import FailureReason
from src.attestations.service import _classify_integrity_error
from tests.helpers import ADMIN_HEADERS, create_config, create_table, attest, observers, juries


def item(version, submitter_id, role="OBSERVER", stance="SUPPORT"):
    return {"version_id": str(version.id), "submitter_id": submitter_id, "role": role, "stance": stance}


async def count_attestations(session_factory) -> int:
    async with session_factory() as db:
        return await db.scalar(select(func.count(Attestation.id)))


@pytest.mark.asyncio
async def test_bulk_create_during_voting(async_client: AsyncClient, db_session, session_factory):
    await create_config(db_session, voting_ended=False)
    v1, v2 = await create_table(db_session, "1001")

    response = await async_client.post("/v1/attestations", json={"attestations": [
        item(v1, "obs-1"),
        item(v2, "obs-1"),
        item(v1, "jury-1", role="JURY", stance="REJECT"),
    ]})
    assert response.status_code == 201
    data = response.json()
    assert data["summary"] == {"total": 3, "successful": 3, "failed": 0}
    assert data["errors"] == []
    assert {a["role"] for a in data["created"]} == {"OBSERVER", "JURY"}
    assert await count_attestations(session_factory) == 3


@pytest.mark.asyncio
async def test_duplicate_submitter_version_is_rejected_individually(async_client: AsyncClient, db_session, session_factory):
    await create_config(db_session, voting_ended=False)
    v1, _ = await create_table(db_session, "1001")

    response = await async_client.post("/v1/attestations", json={"attestations": [
        item(v1, "obs-1"),
        item(v1, "obs-1", stance="REJECT"),
    ]})
    assert response.status_code == 201
    data = response.json()
    assert data["summary"] == {"total": 2, "successful": 1, "failed": 1}
    assert data["errors"][0]["index"] == 1
    assert data["errors"][0]["reason"] == "DUPLICATE_ATTESTATION"
    assert await count_attestations(session_factory) == 1


@pytest.mark.asyncio
async def test_duplicate_across_batches(async_client: AsyncClient, db_session, session_factory):
    await create_config(db_session, voting_ended=False)
    v1, _ = await create_table(db_session, "1001")
    await attest(db_session, v1, observers("t", 1))

    response = await async_client.post("/v1/attestations", json={"attestations": [item(v1, "t-obs-0")]})
    assert response.json()["errors"][0]["reason"] == "DUPLICATE_ATTESTATION"
    assert await count_attestations(session_factory) == 1


@pytest.mark.asyncio
async def test_invalid_items_do_not_abort_the_batch(async_client: AsyncClient, db_session, session_factory):
    await create_config(db_session, voting_ended=False)
    v1, v2 = await create_table(db_session, "1001")

    response = await async_client.post("/v1/attestations", json={"attestations": [
        item(v1, "obs-1", role="ADMIN"),
        {"version_id": str(uuid.uuid4()), "submitter_id": "obs-2", "role": "OBSERVER", "stance": "SUPPORT"},
        item(v2, "obs-3", stance="MAYBE"),
        "not an object",
        item(v2, "obs-4"),
    ]})
    assert response.status_code == 201
    data = response.json()
    assert data["summary"] == {"total": 5, "successful": 1, "failed": 4}
    reasons = {e["index"]: e["reason"] for e in data["errors"]}
    assert reasons == {
        0: "INVALID_ITEM",
        1: "VERSION_NOT_FOUND",
        2: "INVALID_ITEM",
        3: "INVALID_ITEM",
    }
    assert data["created"][0]["submitter_id"] == "obs-4"
    assert await count_attestations(session_factory) == 1


@pytest.mark.asyncio
async def test_submission_closed_outside_voting_window(async_client: AsyncClient, db_session):
    await create_config(db_session, voting_ended=True)
    v1, _ = await create_table(db_session, "1001")

    response = await async_client.post("/v1/attestations", json={"attestations": [item(v1, "obs-1")]})
    assert response.status_code == 403
    assert response.json()["detail"] == "Outside voting hours"


@pytest.mark.asyncio
async def test_submission_requires_active_config(async_client: AsyncClient, db_session):
    v1, _ = await create_table(db_session, "1001")
    response = await async_client.post("/v1/attestations", json={"attestations": [item(v1, "obs-1")]})
    assert response.status_code == 403
    assert response.json()["detail"] == "No active election configuration"


@pytest.mark.asyncio
async def test_override_reopens_submission(async_client: AsyncClient, db_session):
    await create_config(db_session, voting_ended=True, allow_override=True)
    v1, _ = await create_table(db_session, "1001")

    response = await async_client.post("/v1/attestations", json={"attestations": [item(v1, "obs-1")]})
    assert response.status_code == 201
    assert response.json()["summary"]["successful"] == 1


@pytest.mark.asyncio
async def test_list_and_filter_attestations(async_client: AsyncClient, db_session):
    v1, v2 = await create_table(db_session, "1001")
    await attest(db_session, v1, observers("a", 3))
    await attest(db_session, v1, juries("a", 1), stance=AttestationStance.REJECT)
    await attest(db_session, v2, observers("b", 2))

    response = await async_client.get("/v1/attestations", params={"version_id": str(v1.id), "limit": 2})
    data = response.json()
    assert data["total"] == 4
    assert data["total_pages"] == 2
    assert len(data["data"]) == 2

    response = await async_client.get("/v1/attestations", params={"role": "JURY"})
    assert response.json()["total"] == 1

    response = await async_client.get("/v1/attestations", params={"stance": "SUPPORT"})
    assert response.json()["total"] == 5

    response = await async_client.get(f"/v1/attestations/version/{v2.id}")
    assert len(response.json()) == 2


@pytest.mark.asyncio
async def test_version_stats(async_client: AsyncClient, db_session):
    v1, _ = await create_table(db_session, "1001")
    await attest(db_session, v1, observers("a", 3))
    await attest(db_session, v1, juries("a", 1), stance=AttestationStance.REJECT)

    response = await async_client.get(f"/v1/attestations/version/{v1.id}/stats")
    assert response.json() == {
        "version_id": str(v1.id),
        "total_attestations": 4,
        "support_count": 3,
        "reject_count": 1,
        "support_percentage": 75.0,
    }


@pytest.mark.asyncio
async def test_most_supported_version_prefers_newer_on_ties(async_client: AsyncClient, db_session):
    v1, v2, v3 = await create_table(db_session, "1001", versions=3)
    await attest(db_session, v1, observers("a", 2))
    await attest(db_session, v2, observers("b", 2))
    await attest(db_session, v3, observers("c", 5), stance=AttestationStance.REJECT)

    response = await async_client.get("/v1/attestations/most-supported/1001")
    data = response.json()
    assert data["version_id"] == str(v2.id)
    assert data["version"] == 2
    assert data["support_count"] == 2

    response = await async_client.get("/v1/attestations/most-supported/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_removal(async_client: AsyncClient, db_session, session_factory):
    v1, _ = await create_table(db_session, "1001")
    await attest(db_session, v1, observers("a", 1))
    attestation_id = (await async_client.get(f"/v1/attestations/version/{v1.id}")).json()[0]["id"]

    response = await async_client.delete(f"/v1/attestations/{attestation_id}")
    assert response.status_code == 403

    response = await async_client.delete(f"/v1/attestations/{attestation_id}", headers=ADMIN_HEADERS)
    assert response.status_code == 204
    assert await count_attestations(session_factory) == 0

    response = await async_client.delete(f"/v1/attestations/{attestation_id}", headers=ADMIN_HEADERS)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_lowercase_role_and_stance_are_accepted(async_client: AsyncClient, db_session):
    await create_config(db_session, voting_ended=False)
    v1, _ = await create_table(db_session, "1001")

    response = await async_client.post("/v1/attestations", json={"attestations": [
        item(v1, "obs-1", role="observer", stance="support"),
        item(v1, "jury-1", role="jury", stance="reject"),
    ]})
    data = response.json()
    assert data["summary"] == {"total": 2, "successful": 2, "failed": 0}
    assert [(a["role"], a["stance"]) for a in data["created"]] == [("OBSERVER", "SUPPORT"), ("JURY", "REJECT")]


@pytest.mark.parametrize("message, expected", [
    ("UNIQUE constraint failed: attestations.submitter_id, attestations.version_id",
     FailureReason.DUPLICATE_ATTESTATION),
    ('duplicate key value violates unique constraint "uq_attestations_submitter_version"',
     FailureReason.DUPLICATE_ATTESTATION),
    ('insert or update on table "attestations" violates foreign key constraint '
     '"attestations_version_id_fkey"', FailureReason.VERSION_NOT_FOUND),
    ("FOREIGN KEY constraint failed", FailureReason.VERSION_NOT_FOUND),
])
def test_integrity_errors_map_to_reason_codes(message, expected):
    error = IntegrityError("INSERT INTO attestations", {}, Exception(message))
    reason, _ = _classify_integrity_error(error)
    assert reason == expected


@pytest.mark.asyncio
async def test_list_attestations_by_submitter(async_client: AsyncClient, db_session):
    v1, v2 = await create_table(db_session, "1001")
    await attest(db_session, v1, observers("a", 1))
    await attest(db_session, v2, observers("a", 1), stance=AttestationStance.REJECT)
    await attest(db_session, v2, observers("b", 2))

    response = await async_client.get("/v1/attestations/submitter/a-obs-0")
    data = response.json()
    assert data["total"] == 2
    assert {a["version_id"] for a in data["data"]} == {str(v1.id), str(v2.id)}
    assert all(a["submitter_id"] == "a-obs-0" for a in data["data"])

    response = await async_client.get("/v1/attestations/submitter/a-obs-0", params={"stance": "REJECT"})
    data = response.json()
    assert data["total"] == 1
    assert data["data"][0]["version_id"] == str(v2.id)

    response = await async_client.get("/v1/attestations/submitter/a-obs-0", params={"role": "JURY"})
    assert response.json()["total"] == 0

    response = await async_client.get("/v1/attestations/submitter/a-obs-0", params={"limit": 1, "page": 2})
    data = response.json()
    assert len(data["data"]) == 1
    assert data["total_pages"] == 2

    response = await async_client.get("/v1/attestations/submitter/nobody")
    assert response.json()["total"] == 0
