from live_config.environment import (
    Environment,
    MappingEnvironment,
    ProcessEnvironment,
    env_var_name,
)


def test_env_var_name():
    assert env_var_name("db.url") == "DB_URL"
    assert env_var_name("my-app.port") == "MY_APP_PORT"


def test_process_environment_lookup_and_publish(monkeypatch):
    monkeypatch.setenv("DB_URL", "jdbc:h2:mem")
    monkeypatch.delenv("db.url", raising=False)
    env = ProcessEnvironment()
    assert env.lookup("db.url") == "jdbc:h2:mem"
    assert env.lookup("not.defined.anywhere.xyz") is None


def test_process_environment_exact_key_wins():
    environ = {"db.url": "exact", "DB_URL": "var"}
    env = ProcessEnvironment(environ)
    assert env.lookup("db.url") == "exact"
    env.publish("new.key", "v")
    assert environ["new.key"] == "v"


def test_mapping_environment_counts_lookups():
    env = MappingEnvironment({"a": "1"})
    assert env.lookup("a") == "1"
    assert env.lookup("b") is None
    assert env.lookup("b") is None
    assert env.lookup_count("a") == 1
    assert env.lookup_count("b") == 2
    env.publish("b", "2")
    assert env.values == {"a": "1", "b": "2"}


def test_environments_satisfy_protocol():
    assert isinstance(ProcessEnvironment({}), Environment)
    assert isinstance(MappingEnvironment(), Environment)
