from pydantic import BaseModel, Field, field_validator

from messagely.core.security import password_fits, MAX_PASSWORD_BYTES

class UserRegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50, pattern="^[a-zA-Z0-9_.-]+$")
    password: str = Field(..., min_length=1)
    first_name: str
    last_name: str
    phone: str

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        if not password_fits(value):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value

class LoginRequest(BaseModel):
    username: str
    password: str

class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
