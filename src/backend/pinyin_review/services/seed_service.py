"""
基础数据初始化服务

- 拼音符号表：23 个声母、24 个韵母、16 个整体认读音节，每次初始化都覆盖更新
- 起步题库：一年级常用字，题目ID由内容派生，重复执行不会产生重复数据
"""
import logging
import uuid
from typing import Dict

from sqlalchemy.orm import Session

from pinyin_review.models import PinyinSymbol, Question

logger = logging.getLogger(__name__)

CATEGORY_GROUPS = {
    "initial": "声母",
    "final": "韵母",
    "overall": "整体认读音节",
}

# (拼音, 分类, emoji, 口诀, 例词, 例词拼音)
PINYIN_SYMBOLS = [
    ("b", "initial", "👄", "听广播 b b b", "爸爸", "bà ba"),
    ("p", "initial", "💦", "泼泼水 p p p", "爬山", "pá shān"),
    ("m", "initial", "🚪", "两个门洞 m m m", "妈妈", "mā ma"),
    ("f", "initial", "🗽", "一根拐棍 f f f", "飞机", "fēi jī"),
    ("d", "initial", "🥁", "小马蹄 d d d", "大象", "dà xiàng"),
    ("t", "initial", "⛱️", "伞把儿 t t t", "兔子", "tù zi"),
    ("n", "initial", "🚪", "一个门洞 n n n", "奶奶", "nǎi nai"),
    ("l", "initial", "🪵", "一根小棍 l l l", "老虎", "lǎo hǔ"),
    ("g", "initial", "🕊️", "九字加弯 g g g", "哥哥", "gē ge"),
    ("k", "initial", "🐸", "蝌蚪 k k k", "可乐", "kě lè"),
    ("h", "initial", "🪑", "一把椅子 h h h", "喝水", "hē shuǐ"),
    ("j", "initial", "🐔", "母鸡 j j j", "鸡蛋", "jī dàn"),
    ("q", "initial", "🎈", "气球 q q q", "汽车", "qì chē"),
    ("x", "initial", "🍉", "切西瓜 x x x", "西瓜", "xī guā"),
    ("zh", "initial", "🕷️", "蜘蛛织网 zh zh zh", "蜘蛛", "zhī zhū"),
    ("ch", "initial", "🥄", "小孩吃饭 ch ch ch", "吃饭", "chī fàn"),
    ("sh", "initial", "🦁", "狮子 sh sh sh", "狮子", "shī zi"),
    ("r", "initial", "☀️", "红太阳 r r r", "日出", "rì chū"),
    ("z", "initial", "💜", "写字 z z z", "写字", "xiě zì"),
    ("c", "initial", "🦔", "刺猬 c c c", "刺猬", "cì wei"),
    ("s", "initial", "🐍", "蚕丝 s s s", "蚕丝", "cán sī"),
    ("y", "initial", "👔", "树杈 y y y", "衣服", "yī fu"),
    ("w", "initial", "🏠", "屋顶 w w w", "乌鸦", "wū yā"),
    ("a", "final", "😮", "张大嘴巴 a a a", "阿姨", "ā yí"),
    ("o", "final", "🐔", "公鸡打鸣 o o o", "喔喔", "ō ō"),
    ("e", "final", "🦆", "白鹅倒影 e e e", "白鹅", "bái é"),
    ("i", "final", "👕", "牙齿对齐 i i i", "衣服", "yī fu"),
    ("u", "final", "🐢", "乌鸦 u u u", "乌龟", "wū guī"),
    ("ü", "final", "🐟", "小鱼吐泡泡 ü ü ü", "金鱼", "jīn yú"),
    ("ai", "final", "👵", "挨着坐 ai ai ai", "爱心", "ài xīn"),
    ("ei", "final", "🔨", "捶背 ei ei ei", "杯子", "bēi zi"),
    ("ui", "final", "🐢", "围巾 ui ui ui", "喝水", "hē shuǐ"),
    ("ao", "final", "🧥", "棉袄 ao ao ao", "棉袄", "mián ǎo"),
    ("ou", "final", "🐦", "海鸥 ou ou ou", "海鸥", "hǎi ōu"),
    ("iu", "final", "🏊", "游泳 iu iu iu", "游泳", "yóu yǒng"),
    ("ie", "final", "🥥", "椰子 ie ie ie", "椰子", "yē zi"),
    ("üe", "final", "🌙", "月亮 üe üe üe", "月亮", "yuè liang"),
    ("er", "final", "👂", "耳朵 er er er", "耳朵", "ěr duo"),
    ("an", "final", "⛩️", "天安门 an an an", "天安门", "tiān ān mén"),
    ("en", "final", "👋", "摁门铃 en en en", "门铃", "mén líng"),
    ("in", "final", "🥤", "饮料 in in in", "音乐", "yīn yuè"),
    ("un", "final", "☁️", "蚊子 un un un", "春天", "chūn tiān"),
    ("ün", "final", "☁️", "白云 ün ün ün", "白云", "bái yún"),
    ("ang", "final", "🐑", "山羊 ang ang ang", "山羊", "shān yáng"),
    ("eng", "final", "💡", "台灯 eng eng eng", "台灯", "tái dēng"),
    ("ing", "final", "🦅", "老鹰 ing ing ing", "老鹰", "lǎo yīng"),
    ("ong", "final", "⏰", "闹钟 ong ong ong", "闹钟", "nào zhōng"),
    ("zhi", "overall", "🕷️", "蜘蛛 zhi zhi zhi", "蜘蛛", "zhī zhū"),
    ("chi", "overall", "🥄", "吃饭 chi chi chi", "吃饭", "chī fàn"),
    ("shi", "overall", "🦁", "狮子 shi shi shi", "狮子", "shī zi"),
    ("ri", "overall", "☀️", "日出 ri ri ri", "日出", "rì chū"),
    ("zi", "overall", "💜", "写字 zi zi zi", "写字", "xiě zì"),
    ("ci", "overall", "🦔", "刺猬 ci ci ci", "刺猬", "cì wei"),
    ("si", "overall", "🐍", "蚕丝 si si si", "蚕丝", "cán sī"),
    ("yi", "overall", "👔", "衣服 yi yi yi", "衣服", "yī fu"),
    ("wu", "overall", "🏠", "乌鸦 wu wu wu", "乌鸦", "wū yā"),
    ("yu", "overall", "🐟", "金鱼 yu yu yu", "金鱼", "jīn yú"),
    ("ye", "overall", "🥥", "椰子 ye ye ye", "椰子", "yē zi"),
    ("yue", "overall", "🌙", "月亮 yue yue yue", "月亮", "yuè liang"),
    ("yuan", "overall", "⭕", "圆圈 yuan yuan yuan", "圆圈", "yuán quān"),
    ("yin", "overall", "🎵", "音乐 yin yin yin", "音乐", "yīn yuè"),
    ("yun", "overall", "☁️", "白云 yun yun yun", "白云", "bái yún"),
    ("ying", "overall", "🦅", "老鹰 ying ying ying", "老鹰", "lǎo yīng"),
]

# 一年级常用字 (汉字, 拼音)
STARTER_CHARACTERS = [
    ("天", "tiān"), ("地", "dì"), ("人", "rén"), ("你", "nǐ"), ("我", "wǒ"),
    ("他", "tā"), ("一", "yī"), ("二", "èr"), ("三", "sān"), ("四", "sì"),
    ("五", "wǔ"), ("上", "shàng"), ("下", "xià"), ("口", "kǒu"), ("耳", "ěr"),
    ("目", "mù"), ("手", "shǒu"), ("足", "zú"), ("站", "zhàn"), ("坐", "zuò"),
    ("日", "rì"), ("月", "yuè"), ("水", "shuǐ"), ("火", "huǒ"), ("山", "shān"),
    ("石", "shí"), ("田", "tián"), ("禾", "hé"), ("对", "duì"), ("云", "yún"),
    ("雨", "yǔ"), ("风", "fēng"), ("花", "huā"), ("鸟", "niǎo"), ("虫", "chóng"),
]

_QUESTION_NAMESPACE = uuid.UUID("6f1c2a44-93a7-4f5e-9a51-2f0c6c1d7b10")


def starter_question_id(content: str) -> str:
    return str(uuid.uuid5(_QUESTION_NAMESPACE, content))


def seed_pinyin_symbols(db: Session) -> int:
    """写入/覆盖拼音符号表，返回符号数量"""
    for order, (pinyin, category, emoji, mnemonic, word, word_pinyin) in enumerate(PINYIN_SYMBOLS):
        db.merge(PinyinSymbol(
            id=pinyin,
            category=category,
            group_name=CATEGORY_GROUPS[category],
            pinyin=pinyin,
            mnemonic=mnemonic,
            emoji=emoji,
            example_word=word,
            example_pinyin=word_pinyin,
            sort_order=order,
        ))
    db.commit()
    return len(PINYIN_SYMBOLS)


def seed_starter_questions(db: Session, level_id: int = 1) -> int:
    """写入起步题库（已存在的题目跳过），返回新增数量"""
    added = 0
    for content, pinyin in STARTER_CHARACTERS:
        question_id = starter_question_id(content)
        if db.get(Question, question_id) is not None:
            continue
        db.add(Question(
            id=question_id,
            level_id=level_id,
            question_type="character",
            content=content,
            pinyin=pinyin,
            source="bank",
        ))
        added += 1
    db.commit()
    return added


def seed_all(db: Session) -> Dict[str, int]:
    """初始化全部基础数据"""
    result = {
        "symbols": seed_pinyin_symbols(db),
        "questions_added": seed_starter_questions(db),
    }
    logger.info(f"基础数据初始化完成: {result}")
    return result
