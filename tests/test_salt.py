import pytest
from ansible.errors import AnsibleActionFail

from htpasswd_utils.salt import InvalidSaltError, validate_salt


@pytest.mark.parametrize("salt", [None, ""])
def test_no_salt_is_accepted(salt):
    assert validate_salt(salt) == ""


@pytest.mark.parametrize("salt", ["12341234", "saltySal", "./aZ09yY"])
def test_valid_salt(salt):
    assert validate_salt(salt) == salt


def test_wrong_length():
    with pytest.raises(InvalidSaltError) as exc:
        validate_salt("1234")
    assert exc.value.reason == "length"
    assert "Salt must be exactly 8 characters, got 4." in exc.value.message


def test_invalid_character():
    with pytest.raises(InvalidSaltError) as exc:
        validate_salt("1234$678")
    assert exc.value.reasons == ["character"]
    assert "invalid character '$'" in exc.value.message


def test_both_problems_reported():
    with pytest.raises(InvalidSaltError) as exc:
        validate_salt("ab_")
    assert exc.value.reasons == ["length", "character"]


def test_is_an_action_failure():
    assert issubclass(InvalidSaltError, AnsibleActionFail)
