import pytest

from slipway.actions import Action, LifecyclePhase, require_valid
from slipway.core.exceptions import BadClusterStateError, UnsupportedActionError

pytestmark = [pytest.mark.unit]

VOCABULARY = [
    "am-suicide", "build", "create", "destroy", "echo", "emergency-force-kill", "exists",
    "flex", "freeze", "getconf", "help", "kill-container", "list", "migrate", "monitor",
    "preflight", "reconfigure", "reimage", "status", "thaw", "usage", "version",
]


class TestActionParse:
    @pytest.mark.parametrize("name", VOCABULARY)
    def test_every_name_resolves(self, name):
        assert Action.parse(name).value == name

    def test_vocabulary_is_closed(self):
        assert sorted(a.value for a in Action) == sorted(VOCABULARY)

    def test_case_and_whitespace_insensitive(self):
        assert Action.parse(" FLEX ") is Action.FLEX

    def test_unknown_action(self):
        with pytest.raises(UnsupportedActionError) as exc_info:
            Action.parse("explode")
        assert exc_info.value.name == "explode"
        assert "explode" in str(exc_info.value)

    def test_every_action_is_described(self):
        for action in Action:
            assert action.description
            assert action.valid_phases


class TestPhaseRules:
    def test_flex_only_when_live(self):
        assert Action.FLEX.is_valid_in(LifecyclePhase.LIVE)
        assert not Action.FLEX.is_valid_in(LifecyclePhase.FROZEN)
        assert not Action.FLEX.is_valid_in(LifecyclePhase.NOT_CREATED)

    def test_thaw_only_when_frozen(self):
        assert Action.THAW.valid_phases == {LifecyclePhase.FROZEN}

    def test_create_before_existence(self):
        assert Action.CREATE.is_valid_in(LifecyclePhase.NOT_CREATED)
        assert Action.CREATE.is_valid_in(LifecyclePhase.DESTROYED)
        assert not Action.CREATE.is_valid_in(LifecyclePhase.LIVE)

    def test_informational_actions_valid_everywhere(self):
        for action in (Action.HELP, Action.VERSION, Action.LIST, Action.EXISTS):
            assert action.valid_phases == set(LifecyclePhase)


class TestRequireValid:
    def test_returns_resolved_action(self):
        assert require_valid("status", LifecyclePhase.LIVE) is Action.STATUS

    def test_accepts_action_members(self):
        assert require_valid(Action.DESTROY, LifecyclePhase.FROZEN) is Action.DESTROY

    def test_wrong_phase(self):
        with pytest.raises(BadClusterStateError, match="'flex'.*'frozen'.*live"):
            require_valid("flex", LifecyclePhase.FROZEN)

    def test_unknown_name(self):
        with pytest.raises(UnsupportedActionError):
            require_valid("explode", LifecyclePhase.LIVE)
