from custom_rolls.dice.d20_roll import D20Roll, get_advantage_mode
from custom_rolls.dice.d20_die import D20Die
from custom_rolls.models.types import AdvantageMode, DieResult, RollConfig, RollOptions


def configured(parts=None, **options):
    roll = D20Roll.from_config(RollConfig(parts=parts or [], options=RollOptions(**options)))
    roll.configure_modifiers()
    return roll


def test_from_config_uses_default_die():
    roll = D20Roll.from_config(RollConfig(parts=["5"]), target=15)
    assert roll.formula == "1d20 + 5"
    assert isinstance(roll.d20, D20Die)
    assert roll.options.target == 15


def test_from_config_uses_custom_die():
    roll = D20Roll.from_config(RollConfig(options=RollOptions(custom_die="2d10")))
    assert roll.formula == "2d10"
    assert (roll.d20.number, roll.d20.faces) == (2, 10)


def test_get_advantage_mode():
    assert get_advantage_mode(RollOptions()) == AdvantageMode.NORMAL
    assert get_advantage_mode(RollOptions(advantage=True)) == AdvantageMode.ADVANTAGE
    assert get_advantage_mode(RollOptions(disadvantage=True)) == AdvantageMode.DISADVANTAGE
    assert get_advantage_mode(RollOptions(advantage=True, advantage_mode=0)) == AdvantageMode.NORMAL


def test_advantage_on_d20(roller):
    roll = configured(parts=["5"], advantage=True)
    assert roll.formula == "2d20kh1 + 5"
    roll.evaluate(roller([5, 17]))
    assert roll.total == 22
    assert not roll.is_critical


def test_disadvantage_on_d20():
    roll = configured(disadvantage=True)
    assert roll.formula == "2d20kl1"


def test_elven_accuracy_rolls_three_dice():
    roll = configured(advantage=True, elven_accuracy=True)
    assert roll.formula == "3d20kh1"


def test_advantage_on_custom_die_multiplies_base():
    roll = configured(custom_die="3d6", advantage=True)
    assert roll.formula == "6d6kh3"


def test_2d10_advantage_becomes_plus_1d6(roller):
    roll = configured(custom_die="2d10", critical_success=20, critical_failure=2, advantage=True)
    assert roll.formula == "2d10 + 1d6"
    assert roll.house_rule_applied
    assert roll.options.advantage_mode == AdvantageMode.NORMAL
    assert roll.options.advantage is False
    assert roll.d20.options.advantage_mode == AdvantageMode.NORMAL

    roll.evaluate(roller([4, 7, 5]))
    assert roll.total == 16


def test_2d10_disadvantage_becomes_minus_1d6(roller):
    roll = configured(custom_die="2d10", disadvantage=True)
    assert roll.formula == "2d10 - 1d6"
    roll.evaluate(roller([3, 9, 5]))
    assert roll.total == 7


def test_2d10_house_rule_applied_once():
    roll = configured(custom_die="2d10", advantage=True)
    roll.configure_modifiers()
    roll.apply_2d10_advantage_house_rule()
    assert roll.formula == "2d10 + 1d6"
    assert len(roll.terms) == 3


def test_2d10_without_advantage_is_untouched():
    roll = configured(custom_die="2d10")
    assert roll.formula == "2d10"
    assert not roll.house_rule_applied


def test_default_critical_and_fumble(roller):
    roll = configured()
    roll.evaluate(roller([20]))
    assert roll.is_critical
    assert not roll.is_fumble

    roll = configured()
    roll.evaluate(roller([1]))
    assert roll.is_fumble


def test_custom_die_thresholds(roller):
    roll = configured(custom_die="2d10", critical_success=20, critical_failure=2)
    roll.evaluate(roller([10, 10]))
    assert roll.is_critical

    roll = configured(custom_die="2d10", critical_success=20, critical_failure=2)
    roll.evaluate(roller([1, 1]))
    assert roll.is_fumble
    assert not roll.is_critical


def test_equal_dice_critical(roller):
    roll = configured(custom_die="2d10", critical_success=20, critical_rule="equalDice")
    roll.evaluate(roller([7, 7]))
    assert roll.is_critical

    roll = configured(custom_die="2d10", critical_success=20, critical_rule="equalDice")
    roll.evaluate(roller([10, 9]))
    assert not roll.is_critical


def test_window_critical_on_2d10(roller):
    roll = configured(custom_die="2d10", critical_rule="window", critical_lower_bound=17)
    roll.evaluate(roller([9, 8]))
    assert roll.is_critical

    roll = configured(custom_die="2d10", critical_rule="window", critical_lower_bound=17)
    roll.evaluate(roller([8, 8]))
    assert not roll.is_critical


def test_equal_dice_with_house_rule_bonus_die(roller):
    roll = configured(custom_die="2d10", critical_rule="equalDice", advantage=True)
    roll.evaluate(roller([5, 5, 6]))
    assert roll.is_critical
    assert roll.total == 16


def test_unevaluated_roll_is_not_critical():
    roll = configured()
    assert not roll.is_critical
    assert roll.total is None


def test_valid_d20_roll():
    assert D20Roll("1d20").valid_d20_roll
    assert not D20Roll("1d12").valid_d20_roll
    assert D20Roll("3d6", options=RollOptions(custom_die="3d6")).valid_d20_roll


def test_is_success_against_target():
    roll = D20Roll("1d20 + 2", options=RollOptions(target=12))
    roll.d20.results = [DieResult(result=10)]
    assert roll.is_success is True
    roll.d20.results = [DieResult(result=9)]
    assert roll.is_success is False
