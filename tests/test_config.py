import json

from custom_rolls.utils.config import ConfigManager, GuildConfig
from custom_rolls.utils.permissions import is_gm


def test_missing_config_file_is_created(tmp_path):
    path = tmp_path / "config.json"
    ConfigManager(config_path=str(path))
    assert json.loads(path.read_text(encoding="utf-8")) == {"guilds": {}}


def test_rolls_are_persisted(tmp_path):
    path = str(tmp_path / "config.json")
    manager = ConfigManager(config_path=path)
    manager.set_rolls(42, {"attack": {"die": "2d10", "criticalRule": "window", "criticalLowerBound": 17}})

    reloaded = ConfigManager(config_path=path)
    rolls = reloaded.get_rolls(42)
    assert rolls.attack.die == "2d10"
    assert rolls.attack.critical_rule == "window"
    assert rolls.attack.critical_lower_bound == 17


def test_missing_fields_are_defaulted(config_manager):
    config_manager.set_rolls(1, {"attack": {"die": "2d10"}, "weaponTypes": {"siege": {"die": "3d6"}}})
    rolls = config_manager.get_rolls(1)

    assert rolls.attack.roll_mode == "default"
    assert rolls.attack.critical_rule == "normal"
    assert rolls.attack.critical_lower_bound == 19
    assert rolls.get("ability").die == "1d20"
    assert rolls.get("ability").critical_rule is None
    assert rolls.weapon_types["siege"].critical_rule == "normal"


def test_unknown_guild_gets_defaults(config_manager):
    rolls = config_manager.get_rolls(999)
    assert all(settings.die == "1d20" for settings in rolls.categories.values())
    assert rolls.weapon_types == {}


def test_corrupt_config_file_is_not_overwritten(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{bad json", encoding="utf-8")
    manager = ConfigManager(config_path=str(path))
    assert manager.guild_configs == {}
    assert path.read_text(encoding="utf-8") == "{bad json"


def test_config_file_with_wrong_top_level_shape_uses_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[]", encoding="utf-8")
    manager = ConfigManager(config_path=str(path))
    assert manager.guild_configs == {}
    assert manager.get_rolls(1).attack.die == "1d20"
    assert path.read_text(encoding="utf-8") == "[]"


def test_config_file_with_non_dict_guilds_uses_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"guilds": ["1"]}), encoding="utf-8")
    assert ConfigManager(config_path=str(path)).guild_configs == {}


def test_malformed_guild_entries_are_skipped(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"guilds": {
        "1": None,
        "abc": {"rolls": {"attack": {"die": "2d10"}}},
        "2": {"rolls": {"attack": {"die": "2d10"}, "weaponTypes": "bad"}},
        "3": {"rolls": ["bad"]},
    }}), encoding="utf-8")
    manager = ConfigManager(config_path=str(path))

    assert set(manager.guild_configs) == {2, 3}
    assert manager.get_rolls(1).attack.die == "1d20"
    assert manager.get_rolls(2).attack.die == "2d10"
    assert manager.get_rolls(2).weapon_types == {}
    assert manager.get_guild_config(3).rolls == {}


class FakePermissions:
    def __init__(self, manage_guild):
        self.manage_guild = manage_guild


class FakeRole:
    def __init__(self, role_id):
        self.id = role_id


class FakeMember:
    def __init__(self, manage_guild=False, roles=()):
        self.guild_permissions = FakePermissions(manage_guild)
        self.roles = [FakeRole(role_id) for role_id in roles]


def test_is_gm():
    assert is_gm(FakeMember(manage_guild=True), GuildConfig())
    assert not is_gm(FakeMember(), GuildConfig())
    assert is_gm(FakeMember(roles=[5]), GuildConfig(gm_role=5))
    assert not is_gm(FakeMember(roles=[6]), GuildConfig(gm_role=5))
