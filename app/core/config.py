from typing import List, Literal, Optional, Union
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = Field(default='sqlite+aiosqlite:///./app.db')
    sql_echo: bool = Field(default=False)
    create_tables_on_startup: bool = Field(default=True)
    redis_url: str = Field(default='redis://localhost:6379/0')
    redis_health_check: bool = Field(default=False)
    cors_origins: Union[List[str], str] = Field(
        default=['http://localhost:5173']
    )
    jwt_secret: Optional[SecretStr] = Field(default=None)
    jwt_algorithm: str = Field(default='HS256')
    log_level: str = Field(default='INFO')
    worker_concurrency: int = Field(default=4)

    default_page_size: int = Field(default=20)
    max_page_size: int = Field(default=100)
    max_bookmark_folders: int = Field(default=20)
    rating_comment_max_length: int = Field(default=1000)
    sanitize_empty_fallback: Literal['escape', 'empty'] = Field(default='escape')
    notification_read_retention_days: int = Field(default=30)
    notification_unread_retention_days: int = Field(default=90)
    notification_cleanup_interval_seconds: float = Field(default=60 * 60 * 24)

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    @field_validator('redis_url')
    @classmethod
    def validate_redis_url(cls, v):
        if not v.startswith(('redis://', 'rediss://')):
            raise ValueError('Redis URL must start with redis:// or rediss://')
        return v

    @field_validator('worker_concurrency')
    @classmethod
    def validate_worker_concurrency(cls, v):
        if v < 1 or v > 100:
            raise ValueError('Worker concurrency must be between 1 and 100')
        return v

    @field_validator('default_page_size', 'max_page_size', 'max_bookmark_folders')
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError('Value must be at least 1')
        return v

    model_config = {
        'env_file': '.env',
        'case_sensitive': False,
        'extra': 'ignore',
        'json_schema_extra': {
            'fields': {
                'cors_origins': {
                    'description': 'Comma-separated list of allowed CORS origins'
                },
                'redis_url': {
                    'description': 'Redis URL used as the Celery broker'
                },
                'sanitize_empty_fallback': {
                    'description': 'What to store when sanitizing a non-blank comment leaves nothing: '
                                   '"escape" keeps the escaped original text, "empty" drops the comment'
                },
            }
        }
    }


Settings.DATABASE_URL = property(lambda self: self.database_url)
Settings.WORKER_CONCURRENCY = property(lambda self: self.worker_concurrency)
Settings.REDIS_URL = property(lambda self: self.redis_url)
Settings.CORS_ORIGINS = property(lambda self: self.cors_origins)
settings = Settings()
