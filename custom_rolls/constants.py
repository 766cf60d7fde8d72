# 擲骰流程的 hook 名稱
HOOK_CONCENTRATION = "concentration"
HOOK_INITIATIVE = "initiativeDialog"
HOOK_ATTACK = "attack"
HOOK_SKILL = "skill"
HOOK_TOOL = "tool"
HOOK_ABILITY_CHECK = "AbilityCheck"
HOOK_SAVING_THROW = "SavingThrow"

# 擲骰類別對應的 hook 名稱
CATEGORY_HOOK_NAMES = {
    "ability": ["d20Test", "abilityCheck", HOOK_ABILITY_CHECK],
    "attack": ["d20Test", HOOK_ATTACK],
    "concentration": ["d20Test", "savingThrow", HOOK_CONCENTRATION],
    "initiative": ["d20Test", "abilityCheck", HOOK_INITIATIVE],
    "savingThrow": ["d20Test", "savingThrow", HOOK_SAVING_THROW],
    "skill": ["d20Test", "abilityCheck", HOOK_SKILL],
    "tool": ["d20Test", "abilityCheck", HOOK_TOOL],
}

WEAPON_TYPES = {
    "simpleM": "簡易近戰",
    "simpleR": "簡易遠程",
    "martialM": "軍用近戰",
    "martialR": "軍用遠程",
    "natural": "天生武器",
    "improv": "臨時武器",
    "siege": "攻城武器",
}

CATEGORY_LABELS = {
    "ability": "屬性檢定",
    "attack": "攻擊",
    "concentration": "專注",
    "initiative": "先攻",
    "savingThrow": "豁免",
    "skill": "技能",
    "tool": "工具",
}

ROLL_MODE_CHOICES = {
    "default": "預設",
    "blindroll": "盲骰",
    "gmroll": "私骰（GM 可見）",
    "publicroll": "公開",
    "selfroll": "僅自己可見",
}

CRITICAL_RULE_CHOICES = {
    "normal": "一般",
    "equalDice": "同點暴擊（僅 2d10）",
    "window": "暴擊區間",
}

# 只有發送者（和 GM）能看到的擲骰模式
PRIVATE_ROLL_MODES = ("blindroll", "gmroll", "selfroll")

COLOR_DEFAULT = 0x7289da
COLOR_CRITICAL = 0x2ecc71
COLOR_FUMBLE = 0xe74c3c
COLOR_ERROR = 0xff0000
COLOR_WARNING = 0xf39c12

CRITICAL_ICONS = "✅✅"
CRITICAL_MARKER = "✨ 暴擊!"
FUMBLE_MARKER = "💥 大失敗!"
