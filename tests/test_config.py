import pytest
from pydantic import ValidationError

from snaptrade.config import Settings


def test_defaults(settings):
    assert settings.OPENAI_MODEL == "gpt-4o"
    assert settings.NEWS_API_PAGE_SIZE == 10
    assert settings.MAX_PATTERNS == 3
    assert settings.USAGE_TIER == "standard"
    assert settings.LOG_LEVEL == "INFO"


@pytest.mark.parametrize(
    "url",
    [
        "mysql://user:pw@localhost/db",
        "postgresql://user:pw@localhost/db",
    ],
)
def test_database_url_must_be_async_postgres(url):
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL=url)


def test_page_size_bounds():
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="postgresql+asyncpg://u:p@localhost/db", NEWS_API_PAGE_SIZE=0)
