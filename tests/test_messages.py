"""Tests for the message ledger: sending, inbox/outbox views and read state."""
import asyncio

import pytest
from sqlalchemy import select, func

from messagely.core.database import Message
from messagely.core.dto import MessageReadDTO
from messagely.core.exceptions import (
    AlreadyReadError, ForbiddenError, InvalidArgumentError, NotFoundError
)


async def _message_count(db_manager) -> int:
    async with db_manager.session() as session:
        result = await session.execute(select(func.count()).select_from(Message))
        return result.scalar_one()


@pytest.mark.asyncio
async def test_alice_messages_bob(ledger, alice_and_bob, clock):
    sent = await ledger.send("alice", "bob", "hi")

    assert sent.id == 1
    assert sent.sent_at == clock.now
    assert sent.read_at is None

    inbox = await ledger.messages_to("bob")
    assert len(inbox) == 1
    assert inbox[0].from_user.username == "alice"
    assert inbox[0].from_user.first_name == "Alice"
    assert inbox[0].body == "hi"
    assert inbox[0].read_at is None

    clock.advance(minutes=2)
    read = await ledger.mark_read(1, "bob")
    assert read.read_at == clock.now

    inbox = await ledger.messages_to("bob")
    assert inbox[0].read_at is not None
    assert inbox[0].read_at >= inbox[0].sent_at


@pytest.mark.asyncio
async def test_outbox_joined_with_recipient(ledger, alice_and_bob):
    await ledger.send("alice", "bob", "hi")

    outbox = await ledger.messages_from("alice")

    assert len(outbox) == 1
    assert outbox[0].to_user.username == "bob"
    assert outbox[0].to_user.phone == "+15550002"
    assert "password" not in outbox[0].to_user.model_dump()


@pytest.mark.asyncio
async def test_outbox_keeps_send_order(ledger, alice_and_bob, clock):
    for body in ("m1", "m2", "m3"):
        await ledger.send("alice", "bob", body)
        clock.advance(seconds=1)

    assert [m.body for m in await ledger.messages_from("alice")] == ["m1", "m2", "m3"]
    assert [m.body for m in await ledger.messages_to("bob")] == ["m1", "m2", "m3"]


@pytest.mark.asyncio
async def test_same_timestamp_ordered_by_id(ledger, alice_and_bob):
    # clock is not advanced: all three share sent_at
    ids = [(await ledger.send("alice", "bob", body)).id for body in ("m1", "m2", "m3")]

    assert [m.id for m in await ledger.messages_from("alice")] == sorted(ids)


@pytest.mark.asyncio
async def test_empty_inbox_is_not_an_error(ledger, alice_and_bob):
    assert await ledger.messages_from("alice") == []
    assert await ledger.messages_to("alice") == []


@pytest.mark.asyncio
async def test_views_for_unknown_user(ledger):
    with pytest.raises(NotFoundError):
        await ledger.messages_from("ghost")
    with pytest.raises(NotFoundError):
        await ledger.messages_to("ghost")


@pytest.mark.asyncio
@pytest.mark.parametrize("sender,recipient", [("ghost", "bob"), ("alice", "ghost")])
async def test_send_requires_both_participants(ledger, db_manager, alice_and_bob, sender, recipient):
    with pytest.raises(NotFoundError):
        await ledger.send(sender, recipient, "hello?")

    assert await _message_count(db_manager) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["", "   "])
async def test_send_rejects_empty_body(ledger, db_manager, alice_and_bob, body):
    with pytest.raises(InvalidArgumentError):
        await ledger.send("alice", "bob", body)

    assert await _message_count(db_manager) == 0


@pytest.mark.asyncio
async def test_mark_read_twice_is_an_error(ledger, alice_and_bob, clock):
    msg = await ledger.send("alice", "bob", "hi")
    first = await ledger.mark_read(msg.id, "bob")

    clock.advance(minutes=10)
    with pytest.raises(AlreadyReadError):
        await ledger.mark_read(msg.id, "bob")

    inbox = await ledger.messages_to("bob")
    assert inbox[0].read_at == first.read_at


@pytest.mark.asyncio
async def test_only_recipient_can_mark_read(ledger, credentials, alice_and_bob):
    await credentials.register("carol", "secretC", "Carol", "Clark", "3")
    msg = await ledger.send("alice", "bob", "hi")

    for intruder in ("alice", "carol"):
        with pytest.raises(ForbiddenError):
            await ledger.mark_read(msg.id, intruder)

    assert (await ledger.messages_to("bob"))[0].read_at is None


@pytest.mark.asyncio
async def test_mark_read_missing_message(ledger, alice_and_bob):
    with pytest.raises(NotFoundError):
        await ledger.mark_read(999, "bob")


@pytest.mark.asyncio
async def test_get_message_for_participants(ledger, credentials, alice_and_bob):
    await credentials.register("carol", "secretC", "Carol", "Clark", "3")
    msg = await ledger.send("alice", "bob", "hi")

    for viewer in ("alice", "bob"):
        detail = await ledger.get(msg.id, viewer)
        assert detail.from_user.username == "alice"
        assert detail.to_user.username == "bob"
        assert detail.body == "hi"

    with pytest.raises(ForbiddenError):
        await ledger.get(msg.id, "carol")
    with pytest.raises(NotFoundError):
        await ledger.get(999, "alice")


@pytest.mark.asyncio
async def test_concurrent_sends_get_distinct_ids(ledger, alice_and_bob):
    sent = await asyncio.gather(*(ledger.send("alice", "bob", f"m{i}") for i in range(8)))

    assert len({m.id for m in sent}) == 8
    assert len(await ledger.messages_to("bob")) == 8


@pytest.mark.asyncio
async def test_concurrent_mark_read_has_one_winner(ledger, alice_and_bob):
    msg = await ledger.send("alice", "bob", "hi")

    results = await asyncio.gather(
        ledger.mark_read(msg.id, "bob"),
        ledger.mark_read(msg.id, "bob"),
        return_exceptions=True
    )

    wins = [r for r in results if isinstance(r, MessageReadDTO)]
    losses = [r for r in results if isinstance(r, AlreadyReadError)]
    assert len(wins) == 1
    assert len(losses) == 1
    assert (await ledger.messages_to("bob"))[0].read_at == wins[0].read_at


@pytest.mark.asyncio
@pytest.mark.parametrize("message_id", [0, -1, 2 ** 63, 2 ** 64, 10 ** 20])
async def test_out_of_range_id_is_not_found(ledger, alice_and_bob, message_id):
    await ledger.send("alice", "bob", "hi")

    with pytest.raises(NotFoundError):
        await ledger.mark_read(message_id, "bob")
    with pytest.raises(NotFoundError):
        await ledger.get(message_id, "alice")
