"""Built-in mini-games.

The text is opaque content as far as the engine is concerned.
"""

from __future__ import annotations

from backend.models.items import LabelSpec
from backend.models.level import GameDefinition, KnowledgeCard, Level, RegionSpec
from backend.models.rules import GameRules, ReturnPolicy, TimeoutScope

ARCHIVE = "archive"

# -- word cloud ---------------------------------------------------------------

CLOUD_LEVELS: tuple[Level, ...] = (
    Level.from_phrase(
        1,
        "領事保護",
        ["旅遊", "購物", "簽證", "學習", "代購", "糾紛", "天氣",
         "導遊", "機票", "酒店", "美食", "打卡", "領事", "保衛"],
        hint="指中國公民在海外合法權益受侵害時，駐外使領館提供的協助。",
        card=KnowledgeCard(
            "領事保護是國家主權在海外的延伸，核心是維護本國公民和法人的正當權益。"
            "但請記住，領事保護不能凌駕於駐在國法律之上。",
            "《維也納領事關係公約》",
        ),
    ),
    Level.from_phrase(
        2,
        "國民待遇",
        ["VIP", "特權", "外交", "豁免", "優先", "免費", "特殊",
         "綠卡", "永居", "移民", "國籍", "居民", "福利", "稅收"],
        hint="在民事權利方面，外國人享有與本國人同等的待遇。",
        card=KnowledgeCard(
            "在海外，我們不能要求享有比當地人更高的「超國民待遇」。"
            "遵守當地法律是獲得尊重的基礎。",
            "國際私法原則",
        ),
    ),
    Level.from_phrase(
        3,
        "人身安全",
        ["財產", "自由", "名譽", "隱私", "健康", "保險", "理賠",
         "醫療", "報警", "意外", "風險", "安全", "人身"],
        hint="生命與身體不受非法侵害的權利，是領事保護的首要任務。",
        card=KnowledgeCard(
            "當人身安全受到嚴重威脅（如戰亂、自然災害）時，國家會啟動撤僑等應急機制。"
            "記住全球領保熱線：12308。",
            "《中華人民共和國領事保護與協助條例》",
        ),
    ),
)


def _cloud_classes(levels: tuple[Level, ...]) -> dict[str, str]:
    """Every target glyph belongs in the archive tray."""
    return {key: ARCHIVE for level in levels for key in level.target_sequence}


CLOUD = GameDefinition(
    name="cloud",
    title="詞雲探秘者 Cloud Explorer",
    description="在詞雲中找出組成目標詞的所有字，拖入檔案夾。小心干擾詞！",
    rules=GameRules(),
    levels=CLOUD_LEVELS,
    regions=(RegionSpec(ARCHIVE, "檔案夾", tone="amber"),),
    classification=_cloud_classes(CLOUD_LEVELS),
)

SPRINT = GameDefinition(
    name="sprint",
    title="詞雲衝刺 Cloud Sprint",
    description="同樣的詞雲，但每關只有 45 秒與 3 次機會。",
    rules=GameRules(lives=3, countdown_seconds=45, timeout_scope=TimeoutScope.LEVEL),
    levels=CLOUD_LEVELS,
    regions=CLOUD.regions,
    classification=CLOUD.classification,
)

# -- mailroom -----------------------------------------------------------------

RED, YELLOW, BLUE = "red", "yellow", "blue"

# (key, text, category, explanation)
_LETTERS: tuple[tuple[str, str, str, str], ...] = (
    ("mail-01", "護照被偷，急需回國", RED, "補辦緊急旅行證件是領事館的核心職能。"),
    ("mail-02", "遭遇地震，請求撤離", RED, "重大突發事件撤離協助屬於領事保護範圍。"),
    ("mail-03", "被當地警方拘留", RED, "你有權要求領事探視，保障人道待遇。"),
    ("mail-04", "家人在海外失蹤", RED, "使領館可提供尋人渠道建議並協助聯絡。"),
    ("mail-05", "遭遇嚴重車禍受傷", RED, "使領館可協助聯繫家人及提供當地醫療名單。"),
    ("mail-06", "餐廳結帳糾紛", YELLOW, "商業糾紛應報警或向當地消保機構投訴，領館不介入仲裁。"),
    ("mail-07", "違章停車罰單", YELLOW, "違反當地法規需自行處理，領館不能干預司法。"),
    ("mail-08", "房東扣押租金", YELLOW, "屬民事糾紛，應通過當地法律途徑或律師解決。"),
    ("mail-09", "錢包在街上被搶", YELLOW, "涉及刑事案件，第一步必須先向當地警方報案。"),
    ("mail-10", "航班延誤索賠", YELLOW, "屬商業合同糾紛，應與航空公司協商。"),
    ("mail-11", "預訂回程機票", BLUE, "個人行程安排需自行處理。"),
    ("mail-12", "尋找網紅餐廳", BLUE, "吃喝玩樂資訊請查詢旅遊攻略。"),
    ("mail-13", "手機摔壞買新的", BLUE, "個人財物損壞需自行解決。"),
    ("mail-14", "辦理其他國家簽證", BLUE, "前往第三國簽證應諮詢該國使領館。"),
    ("mail-15", "兌換當地貨幣", BLUE, "請前往銀行或兌換店辦理。"),
)

MAIL_FONT = 15.0


def _mail_level(index: int, keys: tuple[str, ...], tip: str) -> Level:
    by_key = {key: text for key, text, _, _ in _LETTERS}
    return Level(
        id=index,
        item_pool=tuple(LabelSpec(by_key[k], key=k, font_size=MAIL_FONT) for k in keys),
        target_sequence=keys,
        hint="紅色：領事職責　黃色：當地部門　藍色：自行處理",
        title=f"第 {index} 批信件",
        card=KnowledgeCard(tip, "《中國領事保護和協助指南》"),
    )


MAILROOM = GameDefinition(
    name="mailroom",
    title="領保郵差 Consular Mailroom",
    description="把每封求助信拖進正確的信箱。錯三次或超時就結束。",
    rules=GameRules(
        lives=3,
        countdown_seconds=120,
        timeout_scope=TimeoutScope.SESSION,
        feedback_card=True,
        return_policy=ReturnPolicy.RESUME,
        vertical_probability=0.0,
        margin=8.0,
    ),
    levels=(
        _mail_level(1, ("mail-01", "mail-06", "mail-11", "mail-02", "mail-12"),
                    "證件、撤離、拘留探視，都是領事館可以出手的範圍。"),
        _mail_level(2, ("mail-07", "mail-03", "mail-13", "mail-08", "mail-04"),
                    "民事與商業糾紛，應先找當地警方、法院或消保機構。"),
        _mail_level(3, ("mail-09", "mail-14", "mail-05", "mail-10", "mail-15"),
                    "訂票、購物、換匯等個人事務，請自行安排。"),
    ),
    regions=(
        RegionSpec(RED, "領事職責", tone="red"),
        RegionSpec(YELLOW, "當地部門", tone="yellow"),
        RegionSpec(BLUE, "自行處理", tone="blue"),
    ),
    classification={key: category for key, _, category, _ in _LETTERS},
    explanations={key: why for key, _, _, why in _LETTERS},
)

GAMES: dict[str, GameDefinition] = {g.name: g for g in (CLOUD, SPRINT, MAILROOM)}
