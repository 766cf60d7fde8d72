from custom_rolls.constants import WEAPON_TYPES
from custom_rolls.forms.rolls_form import (
    RollsForm, can_use_equal_dice, lower_bound_visible, set_property, to_form_data,
)
from custom_rolls.rolls import default_rolls_settings


def test_set_property_builds_nested_dicts():
    target = {}
    set_property(target, "rolls.attack.die", "2d10")
    set_property(target, "rolls.weaponTypes.siege.rollMode", "gmroll")
    assert target == {"rolls": {"attack": {"die": "2d10"}, "weaponTypes": {"siege": {"rollMode": "gmroll"}}}}


def test_to_form_data_flattens_settings():
    assert to_form_data({"attack": {"die": "2d10"}, "weaponTypes": {"siege": {"die": "1d20"}}}) == {
        "rolls.attack.die": "2d10",
        "rolls.weaponTypes.siege.die": "1d20",
    }


def test_field_helpers():
    assert can_use_equal_dice(" 2d10 ")
    assert not can_use_equal_dice("1d20")
    assert not can_use_equal_dice(None)
    assert lower_bound_visible("window")
    assert not lower_bound_visible("equalDice")


def test_prepare_context_defaults(config_manager):
    context = RollsForm(config_manager, 1).prepare_context()
    rolls = context["rolls"]

    assert rolls["attack"]["die"] == "1d20"
    assert rolls["attack"]["criticalRule"] == "normal"
    assert rolls["attack"]["criticalLowerBound"] == 19
    assert set(rolls["weaponTypes"]) == set(WEAPON_TYPES)
    assert rolls["weaponTypes"]["siege"]["label"] == WEAPON_TYPES["siege"]
    assert list(context["selects"]["criticalLowerBound"]["choices"]) == list(range(1, 20))
    assert set(context["selects"]["criticalRule"]["choices"]) == {"normal", "equalDice", "window"}
    assert "selfroll" in context["selects"]["rollMode"]["choices"]


def test_prepare_context_reads_stored_settings(config_manager):
    config_manager.set_rolls(1, {
        "attack": {"die": "2d10", "criticalRule": "window", "criticalLowerBound": "40"},
        "weaponTypes": {"simpleM": {"die": "3d6", "rollMode": "gmroll"}},
    })
    rolls = RollsForm(config_manager, 1).prepare_context()["rolls"]

    assert rolls["attack"]["criticalLowerBound"] == 19
    assert rolls["attack"]["equalDiceAvailable"]
    assert rolls["attack"]["lowerBoundVisible"]
    assert rolls["weaponTypes"]["simpleM"]["die"] == "3d6"
    assert rolls["weaponTypes"]["simpleM"]["rollMode"] == "gmroll"
    assert not rolls["weaponTypes"]["simpleM"]["equalDiceAvailable"]


def test_submit_expands_and_normalizes(config_manager):
    form = RollsForm(config_manager, 1)
    rolls = form.submit({
        "rolls.attack.die": " 2d10 ",
        "rolls.attack.rollMode": "gmroll",
        "rolls.attack.criticalRule": "equalDice",
        "rolls.attack.criticalLowerBound": "0",
        "rolls.skill.die": "",
        "rolls.weaponTypes.simpleM.die": "1d20",
        "rolls.weaponTypes.simpleM.criticalRule": "equalDice",
        "rolls.weaponTypes.simpleM.rollMode": "sideways",
        "other": "ignored",
    })

    assert rolls["attack"] == {
        "die": "2d10", "rollMode": "gmroll", "criticalRule": "equalDice", "criticalLowerBound": 1,
    }
    assert rolls["skill"]["die"] == "1d20"
    assert rolls["weaponTypes"]["simpleM"]["criticalRule"] == "normal"
    assert rolls["weaponTypes"]["simpleM"]["rollMode"] == "default"
    assert "other" not in rolls
    assert config_manager.get_guild_config(1).rolls == rolls


def test_submit_current_settings_keeps_them(config_manager):
    config_manager.set_rolls(1, {"attack": {"die": "2d10", "criticalRule": "window", "criticalLowerBound": 16}})
    form = RollsForm(config_manager, 1)
    form.submit(to_form_data(form.current_settings()))

    rolls = config_manager.get_rolls(1)
    assert rolls.attack.die == "2d10"
    assert rolls.attack.critical_rule == "window"
    assert rolls.attack.critical_lower_bound == 16
    assert rolls.weapon_types["natural"].die == "1d20"


def test_reset_restores_defaults(config_manager):
    config_manager.set_rolls(1, {"attack": {"die": "2d10"}})
    form = RollsForm(config_manager, 1)
    form.reset()
    assert config_manager.get_guild_config(1).rolls == default_rolls_settings()
