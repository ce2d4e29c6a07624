# chat_backend/tests/unit/test_unit_of_work.py

from unittest.mock import AsyncMock, Mock

import pytest

from chat_backend.infrastructure import models
from chat_backend.infrastructure.data_mappers import MessageMapper, UserMapper
from chat_backend.infrastructure.uow import UnitOfWork, UoWModel


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.add = Mock()
    return session


@pytest.fixture
def user_mapper(mock_session):
    mapper = UserMapper(mock_session)
    mapper.insert = AsyncMock()
    mapper.update = AsyncMock()
    mapper.delete = AsyncMock()
    return mapper


@pytest.fixture
def uow(user_mapper):
    uow = UnitOfWork()
    uow.register_mapper(models.User, user_mapper)
    return uow


def make_user(username="testuser"):
    return models.User(
        username=username, email=f"{username}@example.com", display_name="Test"
    )


def test_register_new_returns_tracking_proxy(uow):
    user = make_user()
    uow_model = uow.register_new(user)

    assert id(user) in uow.new
    assert isinstance(uow_model, UoWModel)
    assert uow_model.username == "testuser"


def test_writes_to_new_model_are_not_dirty(uow):
    user = make_user()
    uow_model = uow.register_new(user)

    uow_model.display_name = "Changed"

    assert uow.dirty == {}
    assert user.display_name == "Changed"


def test_writes_to_loaded_model_register_dirty(uow):
    user = make_user()
    uow_model = UoWModel(user, uow)

    uow_model.avatar = "https://example.com/a.png"

    assert id(user) in uow.dirty


def test_deleting_new_model_forgets_it(uow):
    user = make_user()
    uow.register_new(user)

    uow.register_deleted(user)

    assert uow.new == {}
    assert uow.deleted == {}


def test_deleting_dirty_model_moves_it_to_deleted(uow):
    user = make_user()
    UoWModel(user, uow).display_name = "Dirty"

    uow.register_deleted(user)

    assert uow.dirty == {}
    assert id(user) in uow.deleted


def test_deleted_model_is_not_marked_dirty_again(uow):
    user = make_user()
    uow.register_deleted(user)

    uow.register_dirty(user)

    assert uow.dirty == {}


async def test_commit_flushes_through_mappers_and_clears(uow, user_mapper):
    new_user, dirty_user, gone_user = make_user("a_1"), make_user("b_2"), make_user("c_3")
    uow.register_new(new_user)
    uow.register_dirty(dirty_user)
    uow.register_deleted(gone_user)

    await uow.commit()

    user_mapper.insert.assert_awaited_once_with(new_user)
    user_mapper.update.assert_awaited_once_with(dirty_user)
    user_mapper.delete.assert_awaited_once_with(gone_user)
    assert not uow.new and not uow.dirty and not uow.deleted


async def test_commit_without_mapper_raises(uow):
    uow.register_new(models.Chat(is_group_chat=False))

    with pytest.raises(LookupError):
        await uow.commit()


async def test_session_mapper_insert_adds_and_flushes(mock_session):
    mapper = MessageMapper(mock_session)
    message = models.Message(chat_id=1, sender_id=1, content="hi")

    await mapper.insert(message)

    mock_session.add.assert_called_once_with(message)
    mock_session.flush.assert_awaited_once()
