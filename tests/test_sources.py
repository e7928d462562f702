import pytest

from bill_import import UnknownSourceError
from bill_import.sources import FORMATS, SOURCE_INFO, ImportSource, get_format


def test_every_source_has_format_and_info():
    assert set(FORMATS) == set(ImportSource)
    assert set(SOURCE_INFO) == set(ImportSource)
    for src in ImportSource:
        assert FORMATS[src].source is src
        assert src.display_name


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, ImportSource.GENERIC),
        ("", ImportSource.GENERIC),
        ("  ", ImportSource.GENERIC),
        (" ALIPAY ", ImportSource.ALIPAY),
        ("WeChat", ImportSource.WECHAT),
        ("wang-yi_you qian", ImportSource.WANGYIYOUQIAN),
        (ImportSource.MOZE, ImportSource.MOZE),
    ],
)
def test_parse_identifier(raw, expected):
    assert ImportSource.parse(raw) is expected


def test_unknown_identifier_raises():
    with pytest.raises(UnknownSourceError, match="unknown source 'paypal'"):
        ImportSource.parse("paypal")
    # Also usable as a plain ValueError by callers that don't know the taxonomy.
    with pytest.raises(ValueError):
        get_format("paypal")


def test_apps_without_layout_share_generic_rules():
    generic = get_format(None)
    for src in (
        ImportSource.WANGYIYOUQIAN,
        ImportSource.SHAYUJIZHAN,
        ImportSource.YOUYUJIZHAN,
        ImportSource.TUTUJIZHAN,
    ):
        fmt = get_format(src)
        assert fmt.source is src
        assert fmt.columns == generic.columns
        assert fmt.direction == generic.direction


def test_generic_display_metadata():
    info = ImportSource.GENERIC.info
    assert info.display_name == "通用 CSV"
    assert info.icon_color.startswith("#")
