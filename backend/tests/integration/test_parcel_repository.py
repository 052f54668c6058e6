"""Integration tests for SQLAlchemyParcelRepository against SQLite."""

import random
from dataclasses import replace

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.application.services import ParcelService
from tracker.domain.entities import Parcel, ParcelStatus, rfc3339_now
from tracker.domain.exceptions import NotFoundError, PersistenceError
from tracker.infrastructure.database.repositories import SQLAlchemyParcelRepository


def make_parcel(client: int = 1000) -> Parcel:
    return Parcel(
        client=client,
        status=ParcelStatus.REGISTERED,
        address="test",
        created_at=rfc3339_now(),
    )


@pytest.fixture
def repo(session: AsyncSession) -> SQLAlchemyParcelRepository:
    return SQLAlchemyParcelRepository(session)


@pytest.mark.asyncio
async def test_add_then_get_round_trip(repo: SQLAlchemyParcelRepository):
    parcel = make_parcel()

    number = await repo.add(parcel)
    assert number > 0

    stored = await repo.get(number)
    assert stored == replace(parcel, number=number)


@pytest.mark.asyncio
async def test_add_ignores_caller_supplied_number(repo: SQLAlchemyParcelRepository):
    first = await repo.add(make_parcel())
    parcel = replace(make_parcel(), number=first)

    second = await repo.add(parcel)
    assert second != first


@pytest.mark.asyncio
async def test_get_unknown_number_raises_not_found(repo: SQLAlchemyParcelRepository):
    number = await repo.add(make_parcel())
    with pytest.raises(NotFoundError) as exc_info:
        await repo.get(number + 1000)
    assert exc_info.value.entity_id == number + 1000


@pytest.mark.asyncio
async def test_delete_registered_parcel(repo: SQLAlchemyParcelRepository):
    number = await repo.add(make_parcel())

    assert await repo.delete(number) is True

    with pytest.raises(NotFoundError):
        await repo.get(number)


@pytest.mark.asyncio
async def test_delete_is_noop_once_sent(repo: SQLAlchemyParcelRepository):
    parcel = make_parcel()
    number = await repo.add(parcel)
    await repo.set_status(number, ParcelStatus.SENT)
    before = await repo.get(number)

    assert await repo.delete(number) is False

    after = await repo.get(number)
    assert after == before
    assert after.status is ParcelStatus.SENT


@pytest.mark.asyncio
async def test_set_address_on_registered_parcel(repo: SQLAlchemyParcelRepository):
    number = await repo.add(make_parcel())

    assert await repo.set_address(number, "new test address") is True
    assert (await repo.get(number)).address == "new test address"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [ParcelStatus.SENT, ParcelStatus.DELIVERED])
async def test_set_address_is_noop_after_registration(
    repo: SQLAlchemyParcelRepository, status: ParcelStatus
):
    number = await repo.add(make_parcel())
    await repo.set_status(number, status)

    assert await repo.set_address(number, "new") is False
    assert (await repo.get(number)).address == "test"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", list(ParcelStatus))
async def test_set_status_is_visible_on_get(
    repo: SQLAlchemyParcelRepository, status: ParcelStatus
):
    number = await repo.add(make_parcel())

    await repo.set_status(number, status)
    assert (await repo.get(number)).status is status


@pytest.mark.asyncio
async def test_set_status_allows_any_transition(repo: SQLAlchemyParcelRepository):
    number = await repo.add(make_parcel())
    await repo.set_status(number, ParcelStatus.DELIVERED)

    assert await repo.set_status(number, ParcelStatus.REGISTERED) is True
    assert (await repo.get(number)).status is ParcelStatus.REGISTERED
    # back in registered, so the guarded operations apply again
    assert await repo.set_address(number, "again") is True


@pytest.mark.asyncio
async def test_mutations_on_unknown_number_are_silent(repo: SQLAlchemyParcelRepository):
    assert await repo.set_status(424242, ParcelStatus.SENT) is False
    assert await repo.set_address(424242, "nowhere") is False
    assert await repo.delete(424242) is False


@pytest.mark.asyncio
async def test_get_by_client_returns_only_that_clients_parcels(
    repo: SQLAlchemyParcelRepository,
):
    client = random.randint(1, 10_000_000)
    expected: dict[int, Parcel] = {}

    for i in range(3):
        await repo.add(make_parcel(client=client + 1))
        parcel = replace(make_parcel(client=client), address=f"address {i}")
        number = await repo.add(parcel)
        expected[number] = replace(parcel, number=number)
    await repo.add(make_parcel(client=client - 1))

    stored = await repo.get_by_client(client)

    assert len(stored) == len(expected)
    assert {p.number: p for p in stored} == expected
    assert [p.number for p in stored] == sorted(expected)


@pytest.mark.asyncio
async def test_get_by_client_without_parcels_is_empty(repo: SQLAlchemyParcelRepository):
    assert await repo.get_by_client(31337) == []


@pytest.mark.asyncio
async def test_changes_survive_across_sessions(session_factory):
    async with session_factory() as session:
        number = await SQLAlchemyParcelRepository(session).add(make_parcel())
        await session.commit()

    async with session_factory() as session:
        await SQLAlchemyParcelRepository(session).set_status(number, ParcelStatus.SENT)
        await session.commit()

    async with session_factory() as session:
        repo = SQLAlchemyParcelRepository(session)
        assert await repo.set_address(number, "late change") is False
        assert await repo.delete(number) is False
        await session.commit()

    async with session_factory() as session:
        parcel = await SQLAlchemyParcelRepository(session).get(number)
    assert parcel.status is ParcelStatus.SENT
    assert parcel.address == "test"


@pytest.mark.asyncio
async def test_concrete_scenario(repo: SQLAlchemyParcelRepository):
    parcel = Parcel(
        client=1000,
        status=ParcelStatus.REGISTERED,
        address="test",
        created_at="2024-01-01T00:00:00Z",
    )

    number = await repo.add(parcel)
    assert number > 0
    assert await repo.get(number) == replace(parcel, number=number)

    await repo.set_address(number, "new test address")
    assert (await repo.get(number)).address == "new test address"

    await repo.set_status(number, ParcelStatus.SENT)
    assert (await repo.get(number)).status is ParcelStatus.SENT

    await repo.delete(number)
    final = await repo.get(number)
    assert final.status is ParcelStatus.SENT
    assert final.address == "new test address"
    assert final.created_at == "2024-01-01T00:00:00Z"


@pytest.mark.asyncio
async def test_advance_status_only_from_expected_status(repo: SQLAlchemyParcelRepository):
    number = await repo.add(make_parcel())

    assert await repo.advance_status(number, ParcelStatus.REGISTERED, ParcelStatus.SENT) is True
    assert await repo.advance_status(number, ParcelStatus.REGISTERED, ParcelStatus.SENT) is False
    assert (await repo.get(number)).status is ParcelStatus.SENT
    assert await repo.advance_status(424242, ParcelStatus.SENT, ParcelStatus.DELIVERED) is False


class DeliveredMeanwhileRepository(SQLAlchemyParcelRepository):
    """Delivers the parcel from "another caller" as soon as it has been read once."""

    delivered = False

    async def get(self, number: int) -> Parcel:
        parcel = await super().get(number)
        if not self.delivered:
            self.delivered = True
            await self.set_status(number, ParcelStatus.DELIVERED)
        return parcel


@pytest.mark.asyncio
async def test_next_status_keeps_a_concurrent_delivery(session: AsyncSession):
    repository = DeliveredMeanwhileRepository(session)
    number = await repository.add(make_parcel())

    result = await ParcelService(repository).next_status(number)

    assert result.status is ParcelStatus.DELIVERED
    assert (await repository.get(number)).status is ParcelStatus.DELIVERED


@pytest.mark.asyncio
async def test_unknown_stored_status_is_a_persistence_error(
    session: AsyncSession, repo: SQLAlchemyParcelRepository
):
    await session.execute(
        text(
            "INSERT INTO parcel (number, client, status, address, created_at) "
            "VALUES (5, 5, 'lost', 'nowhere', '2024-01-01T00:00:00Z')"
        )
    )

    with pytest.raises(PersistenceError) as by_client:
        await repo.get_by_client(5)
    with pytest.raises(PersistenceError) as by_number:
        await repo.get(5)

    assert by_client.value.operation == "get_by_client"
    assert by_number.value.operation == "get"
    assert isinstance(by_number.value.cause, ValueError)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "operation, call",
    [
        ("add", lambda r: r.add(make_parcel())),
        ("get", lambda r: r.get(1)),
        ("get_by_client", lambda r: r.get_by_client(1000)),
        ("set_status", lambda r: r.set_status(1, ParcelStatus.SENT)),
        ("advance_status", lambda r: r.advance_status(1, ParcelStatus.REGISTERED, ParcelStatus.SENT)),
        ("set_address", lambda r: r.set_address(1, "x")),
        ("delete", lambda r: r.delete(1)),
    ],
)
async def test_storage_failures_are_wrapped(bare_engine, operation, call):
    async with AsyncSession(bare_engine) as session:
        with pytest.raises(PersistenceError) as exc_info:
            await call(SQLAlchemyParcelRepository(session))

    error = exc_info.value
    assert error.operation == operation
    assert isinstance(error.cause, OperationalError)
    assert error.__cause__ is error.cause
