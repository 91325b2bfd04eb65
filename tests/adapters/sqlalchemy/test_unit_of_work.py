from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text
from sqlalchemy.pool import NullPool

from propsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    build_engine,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from propsync.domain.model import Contact, Destination
from propsync.domain.ports import RowWriteError, StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    asyncio.run(shutdown())
    yield
    asyncio.run(shutdown())


def test_sqlalchemy_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_requires_force_for_reconfiguration(tmp_path: Path) -> None:
    engine_a = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'a.db'}", poolclass=NullPool)
    engine_b = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'b.db'}", poolclass=NullPool)

    async def scenario() -> None:
        await startup(engine=engine_a, force=True)
        with pytest.raises(StartupError):
            await startup(engine=engine_b)
        await startup(engine=engine_b, force=True)

    asyncio.run(scenario())

    assert configured_engine() is engine_b


def test_uncommitted_work_is_rolled_back(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    async def scenario() -> list[Destination]:
        async with sqlite_unit_of_work() as uow:
            await uow.repositories.destinations.add(Destination(name="Ibiza", country="Spain"))
        async with sqlite_unit_of_work() as uow:
            return await uow.repositories.destinations.list_all()

    assert asyncio.run(scenario()) == []


def test_constraint_violation_only_rolls_back_the_row_scope(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    destination = Destination(name="Ibiza", country="Spain")

    async def scenario() -> tuple[str, list[str]]:
        async with sqlite_unit_of_work() as uow:
            repositories = uow.repositories
            async with uow.row_scope():
                await repositories.destinations.add(destination)
                await repositories.contacts.add(
                    Contact(first_name="Ada", last_name="Lovelace", email="ada@example.com")
                )

            with pytest.raises(RowWriteError, match="UNIQUE"):
                async with uow.row_scope():
                    destination.country = "Atlantis"
                    await repositories.destinations.save(destination)
                    await repositories.contacts.add(
                        Contact(first_name="Ada", last_name="Byron", email="ada@example.com")
                    )

            async with uow.row_scope():
                await repositories.contacts.add(
                    Contact(first_name="Grace", last_name="Hopper", email="grace@example.com")
                )
            country = destination.country
            await uow.commit()

        async with sqlite_unit_of_work() as uow:
            contacts = await uow.repositories.contacts.list_all()
        return country, sorted(contact.last_name for contact in contacts)

    country, last_names = asyncio.run(scenario())

    assert country == "Spain"
    assert last_names == ["Hopper", "Lovelace"]


def test_row_scopes_are_serialized(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    events: list[str] = []

    async def row(uow: SqlAlchemyUnitOfWork, name: str) -> None:
        async with uow.row_scope():
            events.append(f"enter {name}")
            await uow.repositories.destinations.add(Destination(name=name))
            await asyncio.sleep(0)
            events.append(f"exit {name}")

    async def scenario() -> int:
        async with sqlite_unit_of_work() as uow:
            await asyncio.gather(*(row(uow, name) for name in ("Ibiza", "Palma", "Nice")))
            await uow.commit()
        async with sqlite_unit_of_work() as uow:
            return len(await uow.repositories.destinations.list_all())

    assert asyncio.run(scenario()) == 3
    assert events == [
        "enter Ibiza",
        "exit Ibiza",
        "enter Palma",
        "exit Palma",
        "enter Nice",
        "exit Nice",
    ]


def test_operational_errors_surface_as_store_unavailable(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    async def scenario() -> None:
        async with sqlite_unit_of_work() as uow, uow.row_scope():
            await uow.session.execute(text("SELECT * FROM no_such_table"))

    with pytest.raises(StoreUnavailableError, match="no_such_table"):
        asyncio.run(scenario())
