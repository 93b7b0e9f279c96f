import pytest

from env_loader import get_host, get_log_level, get_port, get_todos_file, load_env_from_dotenv


def test_port_defaults(clean_env):
    assert get_port() == 3000
    clean_env["PORT"] = ""
    assert get_port() == 3000


def test_port_from_env(clean_env):
    clean_env["PORT"] = "8080"
    assert get_port() == 8080


def test_bad_port(clean_env):
    clean_env["PORT"] = "http"
    with pytest.raises(ValueError):
        get_port()


def test_other_defaults(clean_env):
    assert get_host() == "0.0.0.0"
    assert get_todos_file().endswith("data.json")
    assert get_log_level() == "INFO"
    clean_env["LOG_LEVEL"] = "debug"
    assert get_log_level() == "DEBUG"


def test_load_env_from_dotenv(clean_env, tmp_path):
    dotenv = tmp_path / ".env"
    dotenv.write_text(
        '# comment\nPORT="4000"\nTODOS_FILE=\'/tmp/todos.json\'\nnot a pair\nHOST=127.0.0.1\n',
        encoding="utf-8",
    )
    clean_env["HOST"] = "localhost"
    load_env_from_dotenv(str(dotenv))
    assert get_port() == 4000
    assert get_todos_file() == "/tmp/todos.json"
    assert get_host() == "localhost"


def test_missing_dotenv_is_ignored(clean_env, tmp_path):
    load_env_from_dotenv(str(tmp_path / ".env"))
    assert get_port() == 3000
