"""Admin list kept in a contract dictionary, with a caller check."""

from __future__ import annotations

from .keys import Key
from .runtime import ContractContext, Dict, Revert, user_error

_ADMINS_DICT = "admins"
_NOT_ADMIN = 20


class AdminControl(ContractContext):
    """Contract mix-in that keeps a set of admin keys."""

    def init(self) -> None:
        Dict.init(self, _ADMINS_DICT)

    def _admins(self) -> Dict:
        return Dict.instance(self, _ADMINS_DICT)

    def add_admin(self, address: Key) -> None:
        self.assert_caller_is_admin()
        self.add_admin_without_checked(address)

    def disable_admin(self, address: Key) -> None:
        self.assert_caller_is_admin()
        self._admins().remove_by_key(address)

    def add_admin_without_checked(self, address: Key) -> None:
        self._admins().set_by_key(address, True)

    def is_admin(self, address: Key) -> bool:
        return self._admins().get_by_key(address) is not None

    def assert_caller_is_admin(self) -> None:
        if not self.is_admin(self.get_caller()):
            raise Revert(user_error(_NOT_ADMIN))