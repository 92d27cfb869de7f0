import pytest
from sqlalchemy.exc import IntegrityError

from userapi.models import User as ORMUser


def test_create_and_get(user_repo):
    created = user_repo.create_user(name="Kim", email="kim@test.com")

    assert created.id is not None
    fetched = user_repo.get_by_id(created.id)
    assert fetched.name == "Kim"
    assert fetched.email == "kim@test.com"


def test_duplicate_email_violates_constraint(user_repo, in_memory_session):
    user_repo.create_user(name="Kim", email="kim@test.com")

    with pytest.raises(IntegrityError):
        user_repo.create_user(name="Other", email="kim@test.com")

    # session is usable again after the rollback
    assert user_repo.count() == 1


def test_get_all_in_id_order(in_memory_session, user_repo):
    in_memory_session.add_all([
        ORMUser(name="A", email="a@test.com"),
        ORMUser(name="B", email="b@test.com"),
        ORMUser(name="C", email="c@test.com"),
    ])
    in_memory_session.commit()

    assert [u.name for u in user_repo.get_all()] == ["A", "B", "C"]


def test_get_by_email_is_case_sensitive(user_repo):
    user_repo.create_user(name="Kim", email="kim@test.com")

    assert user_repo.get_by_email("kim@test.com") is not None
    assert user_repo.get_by_email("KIM@test.com") is None


def test_search_by_name_ignores_case(user_repo):
    user_repo.create_user(name="Anna", email="anna@test.com")
    user_repo.create_user(name="Bob", email="bob@test.com")
    user_repo.create_user(name="Joanne", email="jo@test.com")

    assert [u.name for u in user_repo.search_by_name("AN")] == ["Anna", "Joanne"]
    assert len(user_repo.search_by_name("")) == 3
    assert user_repo.search_by_name("zzz") == []


def test_search_by_name_treats_wildcards_literally(user_repo):
    user_repo.create_user(name="Anna", email="anna@test.com")
    user_repo.create_user(name="100% Kim", email="kim@test.com")

    assert [u.name for u in user_repo.search_by_name("%")] == ["100% Kim"]
    assert user_repo.search_by_name("_") == []


def test_get_by_email_and_name_requires_both(user_repo):
    user_repo.create_user(name="Kim", email="kim@test.com")

    assert user_repo.get_by_email_and_name("kim@test.com", "Kim") is not None
    assert user_repo.get_by_email_and_name("kim@test.com", "Lee") is None
    assert user_repo.get_by_email_and_name("lee@test.com", "Kim") is None


def test_update_and_delete_missing(user_repo):
    assert user_repo.update(999, name="X") is None
    assert user_repo.delete(999) is False


def test_out_of_range_id_is_absent(user_repo):
    assert user_repo.get_by_id(2 ** 70) is None
    assert user_repo.update(2 ** 70, name="X") is None
    assert user_repo.delete(-(2 ** 70)) is False


def test_update_keeps_id(user_repo):
    created = user_repo.create_user(name="Kim", email="kim@test.com")
    updated = user_repo.update(created.id, id=42, name="Kim Lee", email="kimlee@test.com")

    assert updated.id == created.id
    assert updated.name == "Kim Lee"
