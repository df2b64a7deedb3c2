"""Настройки конфигурации приложения."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Загружает настройки из файла .env.

    Все поля имеют значения по умолчанию, поэтому приложение и тесты
    запускаются без .env файла.

    Атрибуты:
        model_config: Конфигурация для Pydantic моделей.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Приложение
    APP_ENV: str = "development"
    HOST: str = "0.0.0.0"  # noqa: S104
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"
    # Разрешенный источник для CORS
    FRONTEND_URL: str = "http://localhost:8081"

    # База данных
    # Если задан DATABASE_URL, он имеет приоритет над POSTGRES_*
    DATABASE_URL: str | None = None
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "products"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    # Ограничение частоты запросов: не более N запросов за окно
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_MAX_REQUESTS: int = 100

    # Redis (необязателен: без него используется хранилище в памяти)
    REDIS_HOST: str | None = None
    REDIS_PORT: int = 6379

    # Telegram Bot (клиент каталога)
    BOT_TOKEN: str = ""
    # URL, на который будет установлен вебхук (например, https://your.domain)
    BASE_WEBHOOK_URL: str = ""
    # Секретный ключ для проверки подлинности запросов от Telegram
    WEBHOOK_SECRET: str = ""
    # Адрес REST API каталога, с которым работает клиент
    API_BASE_URL: str = "http://localhost:3000/api"
    SEARCH_DEBOUNCE_MS: int = 300
    HTTP_TIMEOUT_SECONDS: float = 10.0

    @property
    def is_development(self) -> bool:
        """
        Признак режима разработки.

        Returns:
            True, если детали внутренних ошибок можно отдавать клиенту.
        """
        return self.APP_ENV.lower() == "development"

    @property
    def webhook_url(self) -> str:
        """
        Собирает полный URL для вебхука.

        Returns:
            Полный URL вебхука.
        """
        return f"{self.BASE_WEBHOOK_URL}/telegram/webhook/{self.BOT_TOKEN}"

    @property
    def database_url(self) -> str:
        """
        Собирает строку подключения к PostgreSQL.

        Returns:
            Строка подключения для SQLAlchemy.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def search_debounce_seconds(self) -> float:
        return self.SEARCH_DEBOUNCE_MS / 1000


settings = Settings()
