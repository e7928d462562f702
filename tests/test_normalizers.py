from datetime import datetime
from decimal import Decimal

import pytest

from bill_import import OTHER_CATEGORY, Direction
from bill_import.normalizers import (
    build_note,
    is_excluded_status,
    map_category,
    parse_amount,
    parse_date,
    resolve_direction,
)
from bill_import.sources import DirectionRule, ImportSource, get_format

# ---- dates -------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-03-01 12:30:45", datetime(2024, 3, 1, 12, 30, 45)),
        ("2024/03/01 12:30:45", datetime(2024, 3, 1, 12, 30, 45)),
        ("2024-03-01 08:15", datetime(2024, 3, 1, 8, 15)),
        ("2024/3/1 8:15", datetime(2024, 3, 1, 8, 15)),
        ("2024-03-01", datetime(2024, 3, 1)),
        ("2024/03/01", datetime(2024, 3, 1)),
        ("  2024-03-01  ", datetime(2024, 3, 1)),
    ],
)
def test_parse_date_patterns(raw, expected):
    assert parse_date(raw) == expected


def test_ambiguous_slash_date_is_month_first():
    assert parse_date("03/04/2024") == datetime(2024, 3, 4)


def test_day_first_when_month_first_impossible():
    assert parse_date("25/12/2024") == datetime(2024, 12, 25)


@pytest.mark.parametrize("raw", [None, "", "   ", "not-a-date", "2024-13-01", "yesterday"])
def test_parse_date_failures_return_none(raw):
    assert parse_date(raw) is None


# ---- amounts -----------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, magnitude, negative",
    [
        ("88.50", Decimal("88.50"), False),
        ("¥88.50", Decimal("88.50"), False),
        ("￥1,234.56", Decimal("1234.56"), False),
        ("-42.00", Decimal("42.00"), True),
        ("+12", Decimal("12"), False),
        ("(15.5)", Decimal("15.5"), True),
        ("15.5-", Decimal("15.5"), True),
        ("$ 1 000.10", Decimal("1000.10"), False),
        ("100元", Decimal("100"), False),
        ("-¥3.20", Decimal("3.20"), True),
    ],
)
def test_parse_amount(raw, magnitude, negative):
    parsed = parse_amount(raw)
    assert parsed.magnitude == magnitude
    assert parsed.negative is negative
    assert parsed.magnitude > 0


@pytest.mark.parametrize("raw", [None, "", "  ", "abc", "0", "0.00", "-0", "¥", "NaN", "inf"])
def test_parse_amount_rejects(raw):
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_decimal_amounts_keep_exact_cents():
    assert parse_amount("0.1").magnitude + parse_amount("0.2").magnitude == Decimal("0.3")


# ---- direction ---------------------------------------------------------------

STRICT = DirectionRule(income_keywords=("收入",))
SIGNED = DirectionRule(income_keywords=("收入",), sign_fallback=True)
BILINGUAL = DirectionRule(
    income_keywords=("收入", "income"), expense_keywords=("支出", "expense"), sign_fallback=True
)
TRANSFERS = DirectionRule(income_keywords=("收入",), transfer_keywords=("转账",))


def test_strict_flag_decides():
    assert resolve_direction("收入", False, STRICT) is Direction.INCOME
    assert resolve_direction("支出", False, STRICT) is Direction.EXPENSE
    # Anything that is not income is an expense, whatever the sign.
    assert resolve_direction("/", False, STRICT) is Direction.EXPENSE
    assert resolve_direction("不计收支", True, STRICT) is Direction.EXPENSE


def test_missing_flag_uses_sign_when_enabled():
    assert resolve_direction(None, True, SIGNED) is Direction.EXPENSE
    assert resolve_direction(None, False, SIGNED) is Direction.INCOME
    assert resolve_direction(None, False, STRICT) is Direction.EXPENSE


def test_unrecognized_flag_falls_back_to_sign_with_expense_keywords():
    assert resolve_direction("其他", False, BILINGUAL) is Direction.INCOME
    assert resolve_direction("其他", True, BILINGUAL) is Direction.EXPENSE
    assert resolve_direction("支出", False, BILINGUAL) is Direction.EXPENSE


def test_case_insensitive_flags():
    def resolve(flag, negative):
        return resolve_direction(flag, negative, BILINGUAL, case_insensitive=True)

    assert resolve("Income", True) is Direction.INCOME
    assert resolve("EXPENSE", False) is Direction.EXPENSE


def test_transfer_returns_none():
    assert resolve_direction("转账", False, TRANSFERS) is None
    assert resolve_direction("收入", False, TRANSFERS) is Direction.INCOME


# ---- categories, status, notes -----------------------------------------------


def test_alipay_mapping_uses_containment():
    fmt = get_format(ImportSource.ALIPAY)
    assert map_category("餐饮美食", fmt) == "餐饮"
    assert map_category("餐饮美食/外卖", fmt) == "餐饮"
    assert map_category("交通出行", fmt) == "交通"
    assert map_category("转账红包", fmt) == OTHER_CATEGORY
    assert map_category("投资理财", fmt) == OTHER_CATEGORY
    assert map_category("", fmt) == OTHER_CATEGORY
    assert map_category(None, fmt) == OTHER_CATEGORY


def test_wechat_mapping():
    fmt = get_format(ImportSource.WECHAT)
    assert map_category("商户消费", fmt) == "购物"
    assert map_category("微信红包（单发）", fmt) == OTHER_CATEGORY
    assert map_category("二维码收款", fmt) == OTHER_CATEGORY


def test_passthrough_and_subcategory_modes():
    qianji = get_format(ImportSource.QIANJI)
    assert map_category(" 早餐 ", qianji) == "早餐"
    assert map_category("", qianji) == OTHER_CATEGORY

    ssj = get_format(ImportSource.SUISHOUJI)
    assert map_category("食品酒水", ssj, "早午晚餐") == "早午晚餐"
    assert map_category("食品酒水", ssj, "") == "食品酒水"
    assert map_category("", ssj, None) == OTHER_CATEGORY


def test_status_filter():
    alipay = get_format(ImportSource.ALIPAY)
    assert is_excluded_status("交易关闭", alipay)
    assert is_excluded_status("退款成功", alipay)
    assert not is_excluded_status("交易成功", alipay)
    assert not is_excluded_status(None, alipay)
    # Sources without a status column never filter.
    assert not is_excluded_status("交易关闭", get_format(ImportSource.QIANJI))


def test_build_note():
    assert build_note("星巴克", "拿铁") == "星巴克 - 拿铁"
    assert build_note("星巴克", "") == "星巴克"
    assert build_note("", "拿铁") == "拿铁"
    assert build_note("/", "拿铁", ("/",)) == "拿铁"
    assert build_note(None, None) == ""


def test_common_export_dates_agree_on_the_day():
    raws = ["2024-01-15 10:30", "2024/01/15 10:30", "2024-01-15", "01/15/2024"]
    assert {parse_date(r).date() for r in raws} == {datetime(2024, 1, 15).date()}
    assert parse_date("2024-01-15 10:30") == parse_date("2024/01/15 10:30")


def test_halfwidth_yen_with_thousands():
    assert parse_amount("¥1,234.56") == (Decimal("1234.56"), False)
