"""
拼音声调工具

- 数字声调 -> 声调符号（zhong1 guo2 -> zhōng guó），委托给 pypinyin
- 答案比对：忽略大小写与空白的精确匹配
"""
import re
import unicodedata

from pypinyin.contrib.tone_convert import to_tone

# 一个带数字声调的音节，例如 zhong1 / lv4 / ma5
_NUMBERED_SYLLABLE = re.compile(r"[a-zü]+[0-5]")
_WHITESPACE = re.compile(r"\s+")
_CJK = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff]")


def _convert_syllable(match: re.Match) -> str:
    syllable = match.group(0)
    body, tone = syllable[:-1], syllable[-1]
    if tone in ("0", "5"):
        # 轻声不标调
        return body.replace("v", "ü")
    return to_tone(syllable)


def numeric_to_diacritic(pinyin: str) -> str:
    """
    将数字声调拼音转换为带声调符号的拼音

    已经是声调符号形式（或不含数字）的输入原样返回（仅做 NFC 归一化和首尾去空白）。

    Args:
        pinyin: 例如 "ni3 hao3"、"ni3hao3"、"lv4"

    Returns:
        str: 例如 "nǐ hǎo"
    """
    text = unicodedata.normalize("NFC", pinyin).strip().lower()
    if not any(ch.isdigit() for ch in text):
        return text
    return _NUMBERED_SYLLABLE.sub(_convert_syllable, text)


def canonical_answer(text: str) -> str:
    """答案比对用的规范形式：声调符号、小写、去掉所有空白"""
    return _WHITESPACE.sub("", numeric_to_diacritic(text or ""))


def answers_match(user_input: str, correct_pinyin: str) -> bool:
    """忽略大小写与空白的精确匹配（数字声调输入先转换）"""
    expected = canonical_answer(correct_pinyin)
    return bool(expected) and canonical_answer(user_input) == expected


def contains_chinese(text: str) -> bool:
    return bool(_CJK.search(text or ""))


def question_type_for(content: str) -> str:
    """按字数推断题型：单字 / 词语（<5字）/ 句子"""
    length = len(content.strip())
    if length == 1:
        return "character"
    if length < 5:
        return "word"
    return "sentence"
