import io

import pytest

from live_config.loaders import (
    ConfigLoader,
    FileFormat,
    PropertiesLoader,
    YamlLoader,
    load_file,
)


def test_file_format_by_extension():
    assert FileFormat.of("app.yaml") is FileFormat.YAML
    assert FileFormat.of("APP.YML") is FileFormat.YAML
    assert FileFormat.of("app.properties") is FileFormat.PROPERTIES
    assert FileFormat.of("app.conf") is FileFormat.PROPERTIES


def test_loaders_satisfy_protocol():
    assert isinstance(PropertiesLoader(), ConfigLoader)
    assert isinstance(YamlLoader(), ConfigLoader)


def test_properties_separators_and_comments():
    text = (
        "# comment\n"
        "! also a comment\n"
        "\n"
        "a=1\n"
        "b : two\n"
        "c three\n"
        "   d=  padded\n"
        "empty=\n"
        "url=jdbc:postgresql://localhost:7432/app\n"
    )
    assert PropertiesLoader().parse(text) == {
        "a": "1",
        "b": "two",
        "c": "three",
        "d": "padded",
        "empty": "",
        "url": "jdbc:postgresql://localhost:7432/app",
    }


def test_properties_continuation_and_escapes():
    text = "list=a,\\\n    b,\\\n    c\nkey\\=with\\:sep=v\ntab=x\\ty\nuni=\\u0041\n"
    assert PropertiesLoader().parse(text) == {
        "list": "a,b,c",
        "key=with:sep": "v",
        "tab": "x\ty",
        "uni": "A",
    }


def test_properties_only_cr_and_lf_end_lines():
    text = "feed=a\fb\r\nsep=x\u2028y\rnel=p\x85q\nvt=1\x0b2\n"
    assert PropertiesLoader().parse(text) == {
        "feed": "a\fb",
        "sep": "x\u2028y",
        "nel": "p\x85q",
        "vt": "1\x0b2",
    }


def test_properties_later_duplicates_win():
    assert PropertiesLoader().parse("a=1\na=2\n") == {"a": "2"}


def test_properties_malformed_unicode_escape():
    with pytest.raises(ValueError):
        PropertiesLoader().parse("bad=\\u00zz\n")


def test_yaml_flattening():
    text = (
        "app:\n"
        "  name: demo\n"
        "  port: 8080\n"
        "  active: true\n"
        "  ratio: 0.5\n"
        "  hosts:\n"
        "    - a\n"
        "    - b\n"
        "  nothing: ~\n"
        "top: value\n"
    )
    assert YamlLoader().load(io.StringIO(text)) == {
        "app.name": "demo",
        "app.port": "8080",
        "app.active": "true",
        "app.ratio": "0.5",
        "app.hosts": "a,b",
        "top": "value",
    }


def test_yaml_empty_and_non_mapping():
    assert YamlLoader().load(io.StringIO("")) == {}
    with pytest.raises(ValueError):
        YamlLoader().load(io.StringIO("- a\n- b\n"))


def test_load_file_picks_loader(watch_dir):
    assert load_file(watch_dir / "a.properties") == {"one": "a", "my.size": "17"}
    assert load_file(watch_dir / "b.yaml") == {"b.name": "bee", "b.count": "3"}
    assert load_file(watch_dir / "c.yml") == {"c.active": "true"}


def test_load_file_without_loader(watch_dir):
    with pytest.raises(ValueError):
        load_file(watch_dir / "b.yaml", {FileFormat.PROPERTIES: PropertiesLoader()})
