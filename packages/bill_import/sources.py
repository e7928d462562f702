"""Known export sources and their format descriptors.

Every supported finance app is one :class:`ImportSource` member. Its parsing
behaviour is pure data, a :class:`SourceFormat`, so a single pipeline in
:mod:`bill_import.parsers` serves all of them.

Header keywords and default column positions follow the exports as observed
in the wild:

- Alipay: ``交易时间,交易分类,交易对方,商品说明,收/支,金额,收/付款方式,交易状态,...``
  preceded by a multi-line preamble.
- WeChat Pay: ``交易时间,交易类型,交易对方,商品,收/支,金额(元),支付方式,当前状态,...``
  also with a preamble.
- Qianji: ``时间,分类,金额,账户,备注,账单类型``; older exports drop the type
  column and encode direction in the amount sign.
- Suishouji: ``交易类型,日期,分类,子分类,账户1,账户2,金额,手续费,...,备注,货币,账本``.
- Moze: ``Date,Category,Subcategory,Amount,Currency,Account,Project,Merchant,Note,Tags``
  with negative amounts for expenses.

Apps without a dedicated descriptor (NetEase Youqian, Shark/Youyu/Tutu
bookkeeping) and unspecified uploads use the generic bilingual format.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from .errors import UnknownSourceError
from .models import OTHER_CATEGORY


class ImportSource(StrEnum):
    ALIPAY = "alipay"
    WECHAT = "wechat"
    WANGYIYOUQIAN = "wangyiyouqian"
    QIANJI = "qianji"
    SUISHOUJI = "suishouji"
    MOZE = "moze"
    SHAYUJIZHAN = "shayujizhan"
    YOUYUJIZHAN = "youyujizhan"
    TUTUJIZHAN = "tutujizhan"
    GENERIC = "generic"

    @property
    def info(self) -> SourceInfo:
        return SOURCE_INFO[self]

    @property
    def display_name(self) -> str:
        return SOURCE_INFO[self].display_name

    @classmethod
    def parse(cls, value: ImportSource | str | None) -> ImportSource:
        """Resolve a user-supplied identifier to a member.

        ``None`` and blank strings mean "unspecified" and resolve to
        :attr:`GENERIC`. Matching ignores case, surrounding whitespace and
        ``-``/``_``/space differences.
        """

        if value is None:
            return cls.GENERIC
        if isinstance(value, cls):
            return value
        key = value.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
        if not key:
            return cls.GENERIC
        try:
            return cls(key)
        except ValueError as exc:
            known = ", ".join(m.value for m in cls)
            raise UnknownSourceError(f"unknown source {value!r}; expected one of: {known}") from exc


@dataclass(frozen=True, slots=True)
class SourceInfo:
    """Presentation metadata for a source (name, icon reference, accent)."""

    display_name: str
    icon_name: str
    icon_color: str


SOURCE_INFO: Mapping[ImportSource, SourceInfo] = {
    ImportSource.ALIPAY: SourceInfo("支付宝", "a.circle.fill", "#1677FF"),
    ImportSource.WECHAT: SourceInfo("微信", "message.fill", "#07C160"),
    ImportSource.WANGYIYOUQIAN: SourceInfo("网易有钱", "yensign.circle.fill", "#E60012"),
    ImportSource.QIANJI: SourceInfo("钱迹", "dollarsign.circle.fill", "#FFB800"),
    ImportSource.SUISHOUJI: SourceInfo("随手记", "hand.point.up.fill", "#FF6B6B"),
    ImportSource.MOZE: SourceInfo("Moze", "m.circle.fill", "#5856D6"),
    ImportSource.SHAYUJIZHAN: SourceInfo("鲨鱼记账", "fish.fill", "#34C759"),
    ImportSource.YOUYUJIZHAN: SourceInfo("有鱼记账", "fish.circle.fill", "#FF3B30"),
    ImportSource.TUTUJIZHAN: SourceInfo("图图记账", "photo.circle.fill", "#FF9500"),
    ImportSource.GENERIC: SourceInfo("通用 CSV", "doc.text.fill", "#8E8E93"),
}


# ---------------------------------------------------------------------------
# Format descriptors
# ---------------------------------------------------------------------------


class SemanticField(StrEnum):
    DATE = "date"
    AMOUNT = "amount"
    DIRECTION = "direction"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    NOTE = "note"
    COUNTERPARTY = "counterparty"
    STATUS = "status"


@dataclass(frozen=True, slots=True)
class ColumnRule:
    """How to find one semantic column in a header row.

    ``match="exact"`` tries ``keywords`` in priority order, each against the
    whole header (first keyword that equals some header wins).
    ``match="contains"`` walks the headers left to right and takes the first
    one containing any keyword. ``default`` is used when nothing matches;
    ``None`` marks the column optional.
    """

    keywords: tuple[str, ...]
    match: Literal["exact", "contains"] = "exact"
    default: int | None = None


@dataclass(frozen=True, slots=True)
class DirectionRule:
    """Per-source policy for deciding expense vs income.

    ``expense_keywords=None`` means the flag column is authoritative: any
    value without an income keyword is an expense. With explicit expense
    keywords, unrecognized flag values fall through to the amount sign.
    ``sign_fallback`` enables the sign when the flag column is missing from a
    row (or undecided); otherwise such rows default to expense.
    """

    income_keywords: tuple[str, ...] = ()
    expense_keywords: tuple[str, ...] | None = None
    transfer_keywords: tuple[str, ...] = ()
    sign_fallback: bool = False


type CategoryMode = Literal["mapped", "passthrough", "subcategory"]


@dataclass(frozen=True, slots=True)
class SourceFormat:
    """Read-only parsing descriptor for one export source."""

    source: ImportSource
    # Every group must have at least one keyword present in the header line.
    header_groups: tuple[tuple[str, ...], ...]
    columns: Mapping[SemanticField, ColumnRule]
    direction: DirectionRule
    # Rows too short to hold these columns are dropped as truncated.
    required: tuple[SemanticField, ...] = (SemanticField.DATE, SemanticField.AMOUNT)
    category_mode: CategoryMode = "passthrough"
    category_map: tuple[tuple[str, str], ...] = ()
    status_excluded: tuple[str, ...] = ()
    counterparty_placeholders: tuple[str, ...] = ()
    case_insensitive: bool = False
    locale: str = "zh_CN"


_F = SemanticField

ALIPAY_CATEGORY_MAP: tuple[tuple[str, str], ...] = (
    ("餐饮美食", "餐饮"),
    ("交通出行", "交通"),
    ("日用百货", "购物"),
    ("服饰装扮", "购物"),
    ("充值缴费", OTHER_CATEGORY),
    ("转账红包", OTHER_CATEGORY),
    ("医疗健康", "医疗"),
    ("文化休闲", "娱乐"),
    ("教育培训", "教育"),
    ("住房物业", "住房"),
)

WECHAT_CATEGORY_MAP: tuple[tuple[str, str], ...] = (
    ("商户消费", "购物"),
    ("扫二维码付款", "购物"),
    ("转账", OTHER_CATEGORY),
    ("微信红包", OTHER_CATEGORY),
    ("群收款", OTHER_CATEGORY),
)

_ALIPAY = SourceFormat(
    source=ImportSource.ALIPAY,
    header_groups=(("交易时间",), ("金额",)),
    columns={
        _F.DATE: ColumnRule(("交易时间",), default=0),
        _F.DIRECTION: ColumnRule(("收/支",), match="contains", default=4),
        _F.AMOUNT: ColumnRule(("金额",), default=5),
        _F.CATEGORY: ColumnRule(("交易分类",), default=1),
        _F.NOTE: ColumnRule(("商品说明",), default=3),
        _F.COUNTERPARTY: ColumnRule(("交易对方",), default=2),
        _F.STATUS: ColumnRule(("交易状态",), default=7),
    },
    direction=DirectionRule(income_keywords=("收入",)),
    required=(_F.DATE, _F.DIRECTION, _F.AMOUNT),
    category_mode="mapped",
    category_map=ALIPAY_CATEGORY_MAP,
    status_excluded=("关闭", "退款"),
)

_WECHAT = SourceFormat(
    source=ImportSource.WECHAT,
    header_groups=(("交易时间",), ("金额",)),
    columns={
        _F.DATE: ColumnRule(("交易时间",), default=0),
        _F.DIRECTION: ColumnRule(("收/支",), match="contains", default=4),
        _F.AMOUNT: ColumnRule(("金额",), match="contains", default=5),
        _F.CATEGORY: ColumnRule(("交易类型",), default=1),
        _F.NOTE: ColumnRule(("商品",), default=3),
        _F.COUNTERPARTY: ColumnRule(("交易对方",), default=2),
        _F.STATUS: ColumnRule(("当前状态",), default=7),
    },
    direction=DirectionRule(income_keywords=("收入",)),
    required=(_F.DATE, _F.DIRECTION, _F.AMOUNT),
    category_mode="mapped",
    category_map=WECHAT_CATEGORY_MAP,
    status_excluded=("已退款", "已关闭"),
    counterparty_placeholders=("/",),
)

_QIANJI = SourceFormat(
    source=ImportSource.QIANJI,
    header_groups=(("时间",), ("分类", "金额")),
    columns={
        _F.DATE: ColumnRule(("时间",), default=0),
        _F.CATEGORY: ColumnRule(("分类",), default=1),
        _F.AMOUNT: ColumnRule(("金额",), default=2),
        _F.NOTE: ColumnRule(("备注",), default=4),
        _F.DIRECTION: ColumnRule(("账单类型", "类型"), default=5),
    },
    direction=DirectionRule(income_keywords=("收入",), sign_fallback=True),
)

_SUISHOUJI = SourceFormat(
    source=ImportSource.SUISHOUJI,
    header_groups=(("日期",), ("分类",)),
    columns={
        _F.DIRECTION: ColumnRule(("交易类型",), default=0),
        _F.DATE: ColumnRule(("日期",), default=1),
        _F.CATEGORY: ColumnRule(("分类",), default=2),
        _F.SUBCATEGORY: ColumnRule(("子分类",), default=3),
        _F.AMOUNT: ColumnRule(("金额",), default=6),
        _F.NOTE: ColumnRule(("备注",), default=10),
    },
    direction=DirectionRule(income_keywords=("收入",), transfer_keywords=("转账",)),
    category_mode="subcategory",
)

_MOZE = SourceFormat(
    source=ImportSource.MOZE,
    header_groups=(("date",), ("amount",)),
    columns={
        _F.DATE: ColumnRule(("date",), default=0),
        _F.CATEGORY: ColumnRule(("category",), default=1),
        _F.AMOUNT: ColumnRule(("amount",), default=3),
        _F.NOTE: ColumnRule(("note",), default=8),
        _F.COUNTERPARTY: ColumnRule(("merchant",), default=7),
    },
    direction=DirectionRule(sign_fallback=True),
    case_insensitive=True,
    locale="en_US",
)

_GENERIC = SourceFormat(
    source=ImportSource.GENERIC,
    header_groups=(("日期", "date", "时间", "time"),),
    columns={
        _F.DATE: ColumnRule(("日期", "时间", "date", "time"), match="contains", default=0),
        _F.AMOUNT: ColumnRule(("金额", "amount", "money"), match="contains", default=1),
        _F.CATEGORY: ColumnRule(("分类", "类别", "category"), match="contains"),
        _F.NOTE: ColumnRule(("备注", "说明", "note", "memo"), match="contains"),
        _F.DIRECTION: ColumnRule(("收/支", "类型", "type"), match="contains"),
    },
    direction=DirectionRule(
        income_keywords=("收入", "income"),
        expense_keywords=("支出", "expense"),
        sign_fallback=True,
    ),
    case_insensitive=True,
)

FORMATS: Mapping[ImportSource, SourceFormat] = {
    ImportSource.ALIPAY: _ALIPAY,
    ImportSource.WECHAT: _WECHAT,
    ImportSource.QIANJI: _QIANJI,
    ImportSource.SUISHOUJI: _SUISHOUJI,
    ImportSource.MOZE: _MOZE,
    ImportSource.GENERIC: _GENERIC,
    # No dedicated layouts known for these apps yet.
    **{
        s: dataclasses.replace(_GENERIC, source=s)
        for s in (
            ImportSource.WANGYIYOUQIAN,
            ImportSource.SHAYUJIZHAN,
            ImportSource.YOUYUJIZHAN,
            ImportSource.TUTUJIZHAN,
        )
    },
}


def get_format(source: ImportSource | str | None) -> SourceFormat:
    """Return the descriptor for ``source`` (``None`` → generic)."""

    return FORMATS[ImportSource.parse(source)]


__all__ = [
    "ImportSource",
    "SourceInfo",
    "SOURCE_INFO",
    "SemanticField",
    "ColumnRule",
    "DirectionRule",
    "SourceFormat",
    "FORMATS",
    "ALIPAY_CATEGORY_MAP",
    "WECHAT_CATEGORY_MAP",
    "get_format",
]
