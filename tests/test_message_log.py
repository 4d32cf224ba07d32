"""Test suite for the message log."""

from datetime import datetime

import pytest

from presence_chat.domain.errors import Forbidden, NotFound, ValidationError
from presence_chat.domain.models import Message, MessageKind


def chat(sender, to, text, kind=MessageKind.MESSAGE):
    return Message(sender=sender, to=to, text=text, kind=kind)


@pytest.mark.asyncio
async def test_append_assigns_increasing_ids(message_log):
    """Test ids and timestamps are assigned on append."""
    first = await message_log.append(chat("Alice", "Todos", "one"))
    second = await message_log.append(chat("Alice", "Todos", "two"))
    assert first.id < second.id
    assert first.created_at is not None
    assert first.time == first.created_at.astimezone().strftime("%H:%M:%S")


@pytest.mark.asyncio
async def test_ids_not_reused_after_delete(message_log):
    """Test deleting the newest message does not recycle its id."""
    first = await message_log.append(chat("Alice", "Todos", "one"))
    await message_log.delete(first.id, "Alice")
    second = await message_log.append(chat("Alice", "Todos", "two"))
    assert second.id > first.id


@pytest.mark.asyncio
async def test_find_missing(message_log):
    """Test finding an unknown id."""
    with pytest.raises(NotFound):
        await message_log.find(42)


@pytest.mark.asyncio
async def test_private_messages_visible_only_to_parties(message_log):
    """Test private messages are filtered per reader."""
    await message_log.append(chat("Alice", "Bob", "psst", MessageKind.PRIVATE_MESSAGE))
    await message_log.append(chat("Alice", "Todos", "hello all"))
    await message_log.append_status("Carol", "joined the room...")

    for reader in ("Alice", "Bob"):
        texts = [m.text for m in await message_log.list_visible_to(reader)]
        assert "psst" in texts

    carol = await message_log.list_visible_to("Carol")
    assert [m.text for m in carol] == ["joined the room...", "hello all"]
    assert all(m.kind != MessageKind.PRIVATE_MESSAGE for m in carol)

    anonymous = await message_log.list_visible_to(None)
    assert len(anonymous) == 2


@pytest.mark.asyncio
async def test_limit_returns_most_recent_newest_first(message_log):
    """Test the limit bounds the most recent window."""
    for i in range(10):
        await message_log.append(chat("Alice", "Todos", f"m{i}"))
    messages = await message_log.list_visible_to("Bob", 3)
    assert [m.text for m in messages] == ["m9", "m8", "m7"]


@pytest.mark.asyncio
async def test_limit_counts_only_visible_messages(message_log):
    """Test hidden messages do not eat into the limit."""
    await message_log.append(chat("Alice", "Todos", "public"))
    for i in range(5):
        await message_log.append(chat("Alice", "Bob", f"secret{i}", MessageKind.PRIVATE_MESSAGE))
    messages = await message_log.list_visible_to("Carol", 2)
    assert [m.text for m in messages] == ["public"]


@pytest.mark.asyncio
async def test_default_limit(message_log):
    """Test that 100 is the default window."""
    for i in range(120):
        await message_log.append(chat("Alice", "Todos", f"m{i}"))
    messages = await message_log.list_visible_to("Alice")
    assert len(messages) == 100
    assert messages[0].text == "m119"


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [0, -1, "abc", "2.5", True, "1_000", "+5", "٣", "-0"])
async def test_invalid_limit_rejected(message_log, limit):
    """Test that bad limits are errors, not clamped."""
    with pytest.raises(ValidationError):
        await message_log.list_visible_to("Alice", limit)


@pytest.mark.asyncio
async def test_update_by_author(message_log, clock):
    """Test the author can rewrite recipient and text."""
    message = await message_log.append(chat("Alice", "Todos", "hi"))
    clock.advance(30)
    updated = await message_log.update(message.id, "Alice", "Bob", "hi Bob")
    assert updated.to == "Bob"
    assert updated.text == "hi Bob"
    assert updated.sender == "Alice"
    assert updated.kind == MessageKind.MESSAGE
    assert updated.created_at > message.created_at
    assert (await message_log.find(message.id)).text == "hi Bob"


@pytest.mark.asyncio
async def test_update_by_non_author_forbidden(message_log):
    """Test that nobody else can edit a message."""
    message = await message_log.append(chat("Alice", "Todos", "hi"))
    with pytest.raises(Forbidden):
        await message_log.update(message.id, "Bob", "Todos", "hacked")
    assert (await message_log.find(message.id)).text == "hi"


@pytest.mark.asyncio
async def test_update_cannot_change_kind(message_log):
    """Test that the message type is immutable."""
    message = await message_log.append(chat("Alice", "Todos", "hi"))
    with pytest.raises(ValidationError):
        await message_log.update(
            message.id, "Alice", "Bob", "hi", kind=MessageKind.PRIVATE_MESSAGE
        )


@pytest.mark.asyncio
async def test_update_missing(message_log):
    """Test editing an unknown id."""
    with pytest.raises(NotFound):
        await message_log.update(7, "Alice", "Todos", "x")


@pytest.mark.asyncio
async def test_status_messages_cannot_be_touched(message_log):
    """Test that system notices are not editable, even by their subject."""
    status = await message_log.append_status("Alice", "joined the room...")
    with pytest.raises(Forbidden):
        await message_log.update(status.id, "Alice", "Todos", "x")
    with pytest.raises(Forbidden):
        await message_log.delete(status.id, "Alice")


@pytest.mark.asyncio
async def test_delete(message_log):
    """Test delete authorization and effect."""
    message = await message_log.append(chat("Alice", "Todos", "hi"))
    with pytest.raises(Forbidden):
        await message_log.delete(message.id, "Bob")
    await message_log.delete(message.id, "Alice")
    with pytest.raises(NotFound):
        await message_log.find(message.id)
    with pytest.raises(NotFound):
        await message_log.delete(message.id, "Alice")


@pytest.mark.asyncio
async def test_time_is_server_local(message_log, clock):
    """Test the display time follows the server's local zone."""
    message = await message_log.append(chat("Alice", "Todos", "hi"))
    expected = datetime.fromtimestamp(clock.now()).strftime("%H:%M:%S")
    assert message.time == expected


@pytest.mark.asyncio
async def test_plain_digit_limit_accepted(message_log):
    """Test padded decimal strings still parse."""
    for i in range(3):
        await message_log.append(chat("Alice", "Todos", f"m{i}"))
    assert len(await message_log.list_visible_to("Alice", " 02 ")) == 2
