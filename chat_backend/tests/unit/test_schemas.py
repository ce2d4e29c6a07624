# chat_backend/tests/unit/test_schemas.py
import pytest
from pydantic import ValidationError

from chat_backend.domain.entities import MAX_FILE_SIZE, MAX_MESSAGE_LENGTH, MessageType
from chat_backend.infrastructure import schemas


def test_message_create_accepts_camel_case():
    message = schemas.MessageCreate.model_validate({"chatId": 1, "content": "hi"})
    assert message.chat_id == 1
    assert message.message_type == MessageType.TEXT


@pytest.mark.parametrize("content", [None, "", "   "])
def test_text_message_requires_content(content):
    with pytest.raises(ValidationError):
        schemas.MessageCreate(chat_id=1, content=content)


def test_text_message_length_limit():
    schemas.MessageCreate(chat_id=1, content="x" * MAX_MESSAGE_LENGTH)
    with pytest.raises(ValidationError):
        schemas.MessageCreate(chat_id=1, content="x" * (MAX_MESSAGE_LENGTH + 1))


def test_text_message_rejects_file_fields():
    with pytest.raises(ValidationError):
        schemas.MessageCreate(
            chat_id=1, content="hi", file_url="https://files.example.com/a.png"
        )


@pytest.mark.parametrize("message_type", ["file", "image"])
def test_file_message_requires_file_fields(message_type):
    with pytest.raises(ValidationError):
        schemas.MessageCreate(chat_id=1, message_type=message_type, file_name="a.png")

    message = schemas.MessageCreate(
        chat_id=1,
        message_type=message_type,
        file_url="https://files.example.com/a.png",
        file_name="a.png",
        file_size=2048,
    )
    assert message.content is None


def test_file_size_limit():
    with pytest.raises(ValidationError):
        schemas.MessageCreate(
            chat_id=1,
            message_type="file",
            file_url="https://files.example.com/a.bin",
            file_name="a.bin",
            file_size=MAX_FILE_SIZE + 1,
        )


def test_unknown_message_type():
    with pytest.raises(ValidationError):
        schemas.MessageCreate(chat_id=1, message_type="video", content="hi")


@pytest.mark.parametrize("username", ["ab", "has space", "émile", "x" * 31])
def test_user_create_rejects_bad_usernames(username):
    with pytest.raises(ValidationError):
        schemas.UserCreate(
            username=username,
            email="someone@example.com",
            display_name="Someone",
            password="password123",
        )


def test_user_create_rejects_short_password():
    with pytest.raises(ValidationError):
        schemas.UserCreate(
            username="someone",
            email="someone@example.com",
            display_name="Someone",
            password="12345",
        )


def test_chat_create_requires_participants():
    with pytest.raises(ValidationError):
        schemas.ChatCreate(participant_ids=[])


def test_pagination_build():
    assert schemas.Pagination.build(1, 20, 0).pages == 0
    assert schemas.Pagination.build(2, 20, 41).pages == 3


def test_serialization_uses_camel_case():
    payload = schemas.MessageRefPayload(message_id=3).model_dump(by_alias=True)
    assert payload == {"messageId": 3, "chatId": None}
