from live_config.exceptions import (
    ConfigError,
    InvalidNumericFormatError,
    MissingConfigurationKeyError,
    ReloadError,
)


def test_missing_key_error_message_and_attrs():
    err = MissingConfigurationKeyError("db.url")
    assert err.key == "db.url"
    assert str(err) == "Missing required configuration parameter [db.url]"
    assert isinstance(err, KeyError)


def test_invalid_numeric_format_message_and_attrs():
    err = InvalidNumericFormatError("size", "12a", "int")
    assert err.key == "size"
    assert err.value == "12a"
    assert err.kind == "int"
    assert "'12a' is not a valid int" in str(err)
    assert isinstance(err, ValueError)


def test_reload_error_message():
    err = ReloadError("/etc/app.properties", "boom")
    assert str(err.path) == "/etc/app.properties"
    assert str(err).endswith(": boom")


def test_custom_exceptions_are_subclasses():
    assert issubclass(MissingConfigurationKeyError, ConfigError)
    assert issubclass(InvalidNumericFormatError, ConfigError)
    assert issubclass(ReloadError, ConfigError)
