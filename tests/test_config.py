import pytest

from customdata.config import CustomDataConfig

ENV_VARS = [
    "CUSTOMDATA_DOCUMENT",
    "CUSTOMDATA_DEFAULT_KEY",
    "CUSTOMDATA_PLUGINS",
    "DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = CustomDataConfig.from_env()
    assert config.document_path == "customdata.yaml"
    assert config.default_key == "NewKey"
    assert config.plugins == []
    assert config.debug is False


def test_from_env(monkeypatch):
    monkeypatch.setenv("CUSTOMDATA_DOCUMENT", "level.json")
    monkeypatch.setenv("CUSTOMDATA_DEFAULT_KEY", "Key")
    monkeypatch.setenv("CUSTOMDATA_PLUGINS", "game.payloads, ,tools.extra ")
    monkeypatch.setenv("DEBUG", "TRUE")

    config = CustomDataConfig.from_env()

    assert config.document_path == "level.json"
    assert config.default_key == "Key"
    assert config.plugins == ["game.payloads", "tools.extra"]
    assert config.debug is True


def test_empty_document_path():
    with pytest.raises(ValueError):
        CustomDataConfig(document_path="")
