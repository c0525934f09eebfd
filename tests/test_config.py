import sys
import threading

import pytest

from dbguard import DBConfig, QueryCounter, build_dsn, load_config


# ----------------------------------------------------------------------
# DBConfig
# ----------------------------------------------------------------------

def test_defaults():
    cfg = DBConfig()
    assert cfg.driver == "mysql"
    assert cfg.port == 3306
    assert cfg.timeout == 5
    assert cfg.encoding == sys.getdefaultencoding()
    assert cfg.unix_socket == ""


def test_from_options_overlays_defaults():
    cfg = DBConfig.from_options({"host": "db.local", "dbname": "shop", "port": "3307"})
    assert cfg.host == "db.local"
    assert cfg.dbname == "shop"
    assert cfg.port == 3307
    assert cfg.driver == "mysql"


def test_from_options_ignores_none_values():
    cfg = DBConfig.from_options({"encoding": None, "timeout": None})
    assert cfg.encoding == sys.getdefaultencoding()
    assert cfg.timeout == 5


def test_from_options_rejects_unknown_keys():
    with pytest.raises(ValueError, match="charset"):
        DBConfig.from_options({"charset": "utf8"})


def test_from_options_returns_config_unchanged():
    cfg = DBConfig(host="x")
    assert DBConfig.from_options(cfg) is cfg


def test_effective_encoding_falls_back_to_default():
    assert DBConfig(encoding="").effective_encoding() == sys.getdefaultencoding()
    assert DBConfig(encoding="ISO-8859-2").effective_encoding() == "ISO-8859-2"


def test_password_is_not_in_repr():
    assert "s3cret" not in repr(DBConfig(password="s3cret"))


def test_load_config_from_env(monkeypatch):
    monkeypatch.setenv("DBGUARD_DRIVER", "sqlite")
    monkeypatch.setenv("DBGUARD_PORT", "3310")
    monkeypatch.setenv("DBGUARD_DBNAME", "/tmp/x.db")
    monkeypatch.setenv("DBGUARD_TIMEOUT", "9")
    monkeypatch.setenv("DBGUARD_ENABLE_LOGGING", "yes")

    cfg = load_config()

    assert cfg.driver == "sqlite"
    assert cfg.port == 3310
    assert cfg.dbname == "/tmp/x.db"
    assert cfg.timeout == 9
    assert cfg.enable_logging is True


def test_load_config_defaults(monkeypatch):
    for name in ("DBGUARD_DRIVER", "DBGUARD_PORT", "DBGUARD_ENABLE_LOGGING"):
        monkeypatch.delenv(name, raising=False)

    cfg = load_config()

    assert cfg.driver == "mysql"
    assert cfg.port == 3306
    assert cfg.enable_logging is False


# ----------------------------------------------------------------------
# DSN
# ----------------------------------------------------------------------

def test_dsn_host_port():
    cfg = DBConfig(host="db.local", encoding="ascii")
    assert build_dsn(cfg) == "mysql:host=db.local;port=3306"


def test_dsn_full():
    cfg = DBConfig(host="db.local", port=3307, dbname="shop", encoding="UTF-8")
    assert build_dsn(cfg) == "mysql:host=db.local;port=3307;dbname=shop;charset=utf8"


def test_dsn_unix_socket_takes_precedence():
    cfg = DBConfig(
        host="ignored",
        unix_socket="/var/run/mysqld/mysqld.sock",
        dbname="shop",
        encoding="cp1252",
    )
    assert build_dsn(cfg) == (
        "mysql:unix_socket=/var/run/mysqld/mysqld.sock;dbname=shop;charset=latin1"
    )


def test_dsn_uses_default_encoding_when_empty():
    cfg = DBConfig(driver="pgsql", host="pg", port=5432, encoding="")
    # The interpreter default is utf-8.
    assert build_dsn(cfg) == "pgsql:host=pg;port=5432;charset=utf8"


# ----------------------------------------------------------------------
# QueryCounter
# ----------------------------------------------------------------------

def test_counter_increment_and_reset():
    counter = QueryCounter()
    assert counter.value == 0
    assert counter.increment() == 1
    assert counter.increment(3) == 4
    counter.reset()
    assert counter.value == 0


def test_counter_is_thread_safe():
    counter = QueryCounter()

    def work():
        for _ in range(1000):
            counter.increment()

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert counter.value == 8000
