import pytest


def test_hash_verifies_original_password(password_service):
    password_hash = password_service.hash("chess-master-1")

    assert password_hash != "chess-master-1"
    assert password_service.verify("chess-master-1", password_hash) is True


def test_hash_rejects_other_password(password_service):
    password_hash = password_service.hash("chess-master-1")

    assert password_service.verify("chess-master-2", password_hash) is False


def test_hash_is_salted(password_service):
    """Same input yields different hashes, both of which verify"""
    first = password_service.hash("same-password")
    second = password_service.hash("same-password")

    assert first != second
    assert password_service.verify("same-password", first)
    assert password_service.verify("same-password", second)


@pytest.mark.parametrize("bad_hash", [None, "", "not-a-bcrypt-hash"])
def test_verify_against_missing_or_malformed_hash(password_service, bad_hash):
    assert password_service.verify("whatever", bad_hash) is False


def test_unicode_password(password_service):
    password_hash = password_service.hash("អុកចត្រង្គ")

    assert password_service.verify("អុកចត្រង្គ", password_hash)
