import pytest

from flashswap.keys import Key
from flashswap.runtime import (
    UNEXPECTED_KEY_VARIANT,
    CallFrame,
    ContractContext,
    Dict,
    Revert,
    Runtime,
    URef,
    user_error,
)

OWNER = Key.account(bytes([1]) * 32)
OTHER = Key.account(bytes([2]) * 32)
PKG_A = bytes([10]) * 32
HASH_A = bytes([11]) * 32
PKG_B = bytes([12]) * 32
HASH_B = bytes([13]) * 32


class Probe(ContractContext):
    def whoami(self):
        return self.get_caller()

    def me(self):
        return self.self_addr()

    def remember(self, name, value):
        self.set_key(name, value)

    def recall(self, name):
        return self.get_key(name)

    def forward(self, target, entry_point):
        return self.runtime.call_contract(target, entry_point, {})

    def remember_then_fail(self, name, value):
        self.set_key(name, value)
        raise Revert(user_error(3))


@pytest.fixture
def runtime():
    rt = Runtime()
    rt.install(PKG_A, HASH_A, Probe(rt))
    rt.install(PKG_B, HASH_B, Probe(rt))
    return rt


def test_uref_round_trip(runtime):
    uref = runtime.new_uref(5)
    assert runtime.read(uref) == 5
    runtime.write(uref, 7)
    assert runtime.read(uref) == 7


def test_urefs_are_distinct(runtime):
    first, second = runtime.new_uref("a"), runtime.new_uref("b")
    assert first != second
    assert runtime.read(first) == "a"


def test_unknown_uref_reverts(runtime):
    with pytest.raises(Revert):
        runtime.read(URef(bytes(32)))
    with pytest.raises(Revert):
        runtime.write(URef(bytes(32)), 1)


def test_session_pushes_and_pops_frame(runtime):
    with runtime.session(OWNER):
        assert runtime.call_stack() == (CallFrame(account_hash=OWNER.data),)
    assert runtime.call_stack() == ()


def test_caller_of_direct_call_is_session_account(runtime):
    with runtime.session(OWNER):
        assert runtime.call_contract(Key.hash(HASH_A), "whoami", {}) == OWNER


def test_self_addr_is_package_hash(runtime):
    with runtime.session(OWNER):
        assert runtime.call_contract(Key.hash(HASH_A), "me") == Key.hash(PKG_A)


def test_nested_caller_is_calling_package(runtime):
    with runtime.session(OWNER):
        caller = runtime.call_contract(
            Key.hash(HASH_A), "forward", {"target": Key.hash(HASH_B), "entry_point": "whoami"}
        )
    assert caller == Key.hash(PKG_A)


def test_named_keys_persist_and_are_per_contract(runtime):
    with runtime.session(OWNER):
        runtime.call_contract(HASH_A, "remember", {"name": "x", "value": 4})
    with runtime.session(OTHER):
        assert runtime.call_contract(HASH_A, "recall", {"name": "x"}) == 4
        assert runtime.call_contract(HASH_B, "recall", {"name": "x"}) is None


def test_failed_session_rolls_back(runtime):
    with pytest.raises(Revert) as err:
        with runtime.session(OWNER):
            runtime.call_contract(HASH_A, "remember_then_fail", {"name": "x", "value": 1})
    assert err.value.code == user_error(3)
    assert runtime.call_stack() == ()
    with runtime.session(OWNER):
        assert runtime.call_contract(HASH_A, "recall", {"name": "x"}) is None


def test_calling_account_key_reverts(runtime):
    with runtime.session(OWNER), pytest.raises(Revert) as err:
        runtime.call_contract(OWNER, "whoami")
    assert err.value.code == UNEXPECTED_KEY_VARIANT


@pytest.mark.parametrize("entry_point", ["missing", "_private", "runtime"])
def test_unknown_entry_point_reverts(runtime, entry_point):
    with runtime.session(OWNER), pytest.raises(Revert):
        runtime.call_contract(HASH_A, entry_point)


def test_unknown_contract_reverts(runtime):
    with runtime.session(OWNER), pytest.raises(Revert):
        runtime.call_contract(bytes([99]) * 32, "whoami")


def test_duplicate_install_rejected(runtime):
    with pytest.raises(ValueError):
        runtime.install(PKG_A, HASH_A, Probe(runtime))


def test_user_error_offsets():
    assert user_error(0) == 65536
    assert user_error(20) - user_error(0) == 20
    with pytest.raises(ValueError):
        user_error(-1)


def test_call_frame_to_key():
    stored_session = CallFrame(account_hash=OWNER.data, contract_package_hash=PKG_A)
    assert stored_session.to_key() == OWNER
    assert CallFrame(contract_package_hash=PKG_A, contract_hash=HASH_A).to_key() == Key.hash(PKG_A)
    with pytest.raises(ValueError):
        CallFrame().to_key()


def test_get_caller_needs_two_frames(runtime):
    with runtime.session(OWNER):
        ctx = ContractContext(runtime)
        assert ctx.self_addr() == OWNER
        with pytest.raises(Revert):
            ctx.get_caller()


def test_session_named_keys(runtime):
    with runtime.session(OWNER):
        ctx = ContractContext(runtime)
        ctx.set_key("x", 1)
        ctx.set_key("x", 2)
        assert ctx.get_key("x") == 2
        assert "x" in runtime.named_keys()


def test_get_key_on_non_uref_reverts(runtime):
    with runtime.session(OWNER):
        runtime.named_keys()["pkg"] = Key.hash(PKG_A)
        ctx = ContractContext(runtime)
        with pytest.raises(Revert):
            ctx.get_key("pkg")
        with pytest.raises(Revert):
            ctx.set_key("pkg", 1)


def test_dict_set_get_remove(runtime):
    with runtime.session(OWNER):
        ctx = ContractContext(runtime)
        balances = Dict.init(ctx, "balances")
        assert balances.get("a") is None
        balances.set("a", 10)
        assert balances.get("a") == 10
        assert Dict.instance(ctx, "balances").get("a") == 10
        balances.remove("a")
        assert balances.get("a") is None


def test_dict_by_key(runtime):
    with runtime.session(OWNER):
        balances = Dict.init(ContractContext(runtime), "balances")
        balances.set_by_key(OWNER, 3)
        assert balances.get_by_key(OWNER) == 3
        assert balances.get(OWNER.data.hex()) == 3
        balances.remove_by_key(OWNER)
        assert balances.get_by_key(OWNER) is None


def test_dict_by_keys_is_ordered(runtime):
    with runtime.session(OWNER):
        allowances = Dict.init(ContractContext(runtime), "allowances")
        allowances.set_by_keys(OWNER, OTHER, 8)
        assert allowances.get_by_keys(OWNER, OTHER) == 8
        assert allowances.get_by_keys(OTHER, OWNER) is None
        allowances.remove_by_keys(OWNER, OTHER)
        assert allowances.get_by_keys(OWNER, OTHER) is None


def test_dict_instance_missing_and_duplicate_init(runtime):
    with runtime.session(OWNER):
        ctx = ContractContext(runtime)
        with pytest.raises(Revert):
            Dict.instance(ctx, "absent")
        Dict.init(ctx, "once")
        with pytest.raises(Revert):
            Dict.init(ctx, "once")