import pytest

from budspair.core.errors import PrivilegeError
from budspair.core.privilege import ensure_privileged


def test_root_passes() -> None:
    ensure_privileged(lambda: 0)


def test_regular_user_rejected() -> None:
    with pytest.raises(PrivilegeError, match="sudo"):
        ensure_privileged(lambda: 1000)
