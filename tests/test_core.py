import pytest
from pydantic import ValidationError

from contact_book.core import Settings
from contact_book.schemas import count_pages

DB_VARS = ("DATABASE_URL", "DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_NAME")


@pytest.fixture()
def clean_env(monkeypatch):
    for name in DB_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_missing_database_variables_abort(clean_env):
    clean_env.setenv("DB_HOST", "db")
    with pytest.raises(ValidationError, match="DB_PORT, DB_NAME"):
        Settings(_env_file=None)


def test_database_url_from_parts(clean_env):
    clean_env.setenv("DB_HOST", "db")
    clean_env.setenv("DB_PORT", "3306")
    clean_env.setenv("DB_USER", "book")
    clean_env.setenv("DB_PASSWORD", "pw")
    clean_env.setenv("DB_NAME", "contacts")
    settings = Settings(_env_file=None)
    assert settings.database_url == (
        "mysql+pymysql://book:pw@db:3306/contacts?charset=utf8mb4"
    )


def test_database_url_overrides_parts(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite:///./book.db")
    settings = Settings(_env_file=None)
    assert settings.database_url == "sqlite:///./book.db"


@pytest.mark.parametrize(
    "total, limit, pages",
    [(0, 10, 0), (5, 2, 3), (4, 2, 2), (1, 10, 1), (10, 10, 1), (11, 10, 2)],
)
def test_count_pages(total, limit, pages):
    assert count_pages(total, limit) == pages
