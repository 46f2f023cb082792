import pytest

from live_config import Configuration, MappingEnvironment


@pytest.fixture
def env():
    return MappingEnvironment()


@pytest.fixture
def config(env):
    cfg = Configuration(
        {"config.watch.delay": "1", "config.watch.period": "1"},
        environment=env,
    )
    yield cfg
    cfg.shutdown()


@pytest.fixture
def watch_dir(tmp_path):
    (tmp_path / "a.properties").write_text("one=a\nmy.size=17\n", encoding="utf-8")
    (tmp_path / "b.yaml").write_text("b:\n  name: bee\n  count: 3\n", encoding="utf-8")
    (tmp_path / "c.yml").write_text("c:\n  active: true\n", encoding="utf-8")
    return tmp_path
