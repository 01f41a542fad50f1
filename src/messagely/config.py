from dataclasses import dataclass, field
from environs import Env

from messagely.core.exceptions import ConfigurationError

@dataclass
class JWTConfig:
    secret_key: str
    algorithm: str = "HS256"
    ttl_minutes: int = 1440

@dataclass
class SecurityConfig:
    bcrypt_rounds: int = 12

@dataclass
class DBConfig:
    """ PostgreSQL """
    host: str | None = None
    port: int | None = None
    name: str | None = None
    user: str | None = None
    password: str | None = None

    """ SQLite """
    path: str | None = None

    @property
    def url(self) -> str:
        if self.host:
            return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"
        return f"sqlite+aiosqlite:///{self.path}"

@dataclass
class Config:
    """ Config """
    jwt: JWTConfig
    db: DBConfig
    security: SecurityConfig = field(default_factory=SecurityConfig)
    log_level: str = "INFO"

def load_config(path: str | None) -> Config:
    env = Env()
    env.read_env(path)

    rounds = env.int('BCRYPT_WORK_FACTOR', 12)
    if not 4 <= rounds <= 31:
        raise ConfigurationError(f"BCRYPT_WORK_FACTOR must be between 4 and 31, got {rounds}")

    return Config(
        jwt=JWTConfig(
            secret_key=env('SECRET_KEY'),
            algorithm=env('JWT_ALGORITHM', 'HS256'),
            ttl_minutes=env.int('TOKEN_TTL_MINUTES', 1440),
        ),
        db=DBConfig(
            host=env('DB_HOST', None),
            port=env.int('DB_PORT', None),
            name=env('DB_NAME', None),
            user=env('DB_USER', None),
            password=env('DB_PASSWORD', None),
            path=env('DB_PATH', 'data/messagely.db')
        ),
        security=SecurityConfig(
            bcrypt_rounds=rounds,
        ),
        log_level=env('LOG_LEVEL', 'INFO').upper(),
    )
