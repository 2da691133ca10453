import pytest
from sqlalchemy import func, select

from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError, StorageError
from app.models.contract import Contract, ContractParty, ContractVersion, PartyRole, VersionStatus
from app.repositories.contract_party_repo import ContractPartyRepository
from app.schemas.contract_schema import ContractUploadRequest
from app.services.contract_service import ContractService, sha256_hex

from conftest import PDF_BYTES


async def count_rows(session, model):
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def upload(service, uploader, participants=(), title="Office Lease", data=PDF_BYTES):
    request = ContractUploadRequest(
        title=title,
        description="12 month lease",
        participant_ids=[p.identifier for p in participants],
    )
    return await service.upload_contract(request, uploader, data, "lease.pdf", "application/pdf")


async def test_upload_creates_contract_version_and_parties(db_session, storage, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    carol = await make_user("Carol")
    service = ContractService(db_session, storage)

    contract = await upload(service, alice, [bob, carol])

    version = await db_session.get(ContractVersion, contract.current_version_id)
    assert version.version_number == 1
    assert version.status == VersionStatus.PENDING_SIGNATURE
    assert version.file_hash == sha256_hex(PDF_BYTES)
    assert version.bucket_name == "test-bucket"
    assert storage.objects[version.file_path] == PDF_BYTES

    party_repo = ContractPartyRepository(db_session)
    assert await party_repo.count_parties(contract.id) == 3
    initiator = await party_repo.get_party(contract.id, alice.id)
    assert initiator.role == PartyRole.INITIATOR
    assert (await party_repo.get_party(contract.id, bob.id)).role == PartyRole.COUNTERPARTY


async def test_upload_ignores_uploader_and_duplicate_participants(db_session, storage, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    service = ContractService(db_session, storage)

    contract = await upload(service, alice, [bob, alice, bob])

    assert await ContractPartyRepository(db_session).count_parties(contract.id) == 2


async def test_upload_with_unknown_participant_writes_nothing(db_session, storage, make_user):
    alice = await make_user("Alice")
    service = ContractService(db_session, storage)
    request = ContractUploadRequest(title="Lease", participant_ids=["no-such-user"])

    with pytest.raises(BadRequestError):
        await service.upload_contract(request, alice, PDF_BYTES, "lease.pdf")

    assert await count_rows(db_session, Contract) == 0
    assert await count_rows(db_session, ContractVersion) == 0
    assert await count_rows(db_session, ContractParty) == 0
    assert storage.objects == {}


async def test_upload_rolls_back_when_storage_fails(db_session, storage, make_user):
    alice = await make_user("Alice")
    storage.fail_uploads = True
    service = ContractService(db_session, storage)

    with pytest.raises(StorageError):
        await upload(service, alice)

    assert await count_rows(db_session, Contract) == 0
    assert await count_rows(db_session, ContractParty) == 0


@pytest.mark.parametrize("data, filename", [(b"", "lease.pdf"), (PDF_BYTES, None)])
async def test_upload_rejects_missing_file(db_session, storage, make_user, data, filename):
    alice = await make_user("Alice")
    service = ContractService(db_session, storage)
    request = ContractUploadRequest(title="Lease")

    with pytest.raises(BadRequestError):
        await service.upload_contract(request, alice, data, filename)


async def test_get_my_contracts_returns_contracts_for_every_party(db_session, storage, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    service = ContractService(db_session, storage)
    first = await upload(service, alice, [bob], title="Office Lease")
    second = await upload(service, bob, title="Car Loan")

    bob_contracts = await service.get_my_contracts(bob)
    alice_contracts = await service.get_my_contracts(alice)

    assert {c.id for c in bob_contracts} == {first.id, second.id}
    assert [c.id for c in alice_contracts] == [first.id]
    assert alice_contracts[0].current_version.version_number == 1


async def test_get_my_contracts_title_search_is_case_insensitive(db_session, storage, make_user):
    alice = await make_user("Alice")
    service = ContractService(db_session, storage)
    lease = await upload(service, alice, title="Office Lease")
    await upload(service, alice, title="Car Loan")

    result = await service.get_my_contracts(alice, "LEASE")

    assert [c.id for c in result] == [lease.id]


@pytest.mark.parametrize("blank", ["", "   "])
async def test_get_my_contracts_blank_search_matches_no_search(db_session, storage, make_user, blank):
    alice = await make_user("Alice")
    service = ContractService(db_session, storage)
    await upload(service, alice, title="Office Lease")
    await upload(service, alice, title="Car Loan")

    unfiltered = await service.get_my_contracts(alice, None)
    blank_filtered = await service.get_my_contracts(alice, blank)

    assert [c.id for c in blank_filtered] == [c.id for c in unfiltered]
    assert len(unfiltered) == 2


async def test_get_my_contracts_search_treats_wildcards_literally(db_session, storage, make_user):
    alice = await make_user("Alice")
    service = ContractService(db_session, storage)
    await upload(service, alice, title="Office Lease")

    assert await service.get_my_contracts(alice, "%") == []


async def test_get_my_contracts_for_uninvolved_user_is_empty(db_session, storage, make_user):
    alice = await make_user("Alice")
    dave = await make_user("Dave")
    service = ContractService(db_session, storage)
    await upload(service, alice)

    assert await service.get_my_contracts(dave) == []


async def test_deleted_contract_is_hidden(db_session, storage, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    service = ContractService(db_session, storage)
    contract = await upload(service, alice, [bob])

    await service.delete_contract(contract.id, alice)

    assert await service.get_my_contracts(bob) == []
    with pytest.raises(NotFoundError):
        await service.get_contract_details(contract.id, alice)


async def test_only_creator_can_delete(db_session, storage, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    service = ContractService(db_session, storage)
    contract = await upload(service, alice, [bob])

    with pytest.raises(ForbiddenError):
        await service.delete_contract(contract.id, bob)


async def test_contract_details_require_access(db_session, storage, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    dave = await make_user("Dave")
    service = ContractService(db_session, storage)
    contract = await upload(service, alice, [bob])

    details = await service.get_contract_details(contract.id, bob)
    assert [v.version_number for v in details.versions] == [1]
    assert {p.user.identifier for p in details.parties} == {alice.identifier, bob.identifier}

    with pytest.raises(ForbiddenError):
        await service.get_contract_details(contract.id, dave)
    with pytest.raises(NotFoundError):
        await service.get_contract_details(contract.id + 100, alice)
