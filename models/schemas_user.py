from datetime import datetime
from pydantic import BaseModel, constr, field_validator


class UserRegister(BaseModel):
    student_id: constr(pattern=r"^\d{9}$")
    username: constr(min_length=3, max_length=64)
    password: constr(min_length=6)

    @field_validator("student_id")
    @classmethod
    def admission_year_is_plausible(cls, value: str) -> str:
        # first four digits are the admission year
        year = int(value[:4])
        if year < 2020 or year > datetime.utcnow().year + 1:
            raise ValueError("the first four digits of the student id must be a valid admission year")
        return value


class UserLogin(BaseModel):
    username: constr(min_length=1)
    password: constr(min_length=1)


class UserOut(BaseModel):
    id: str
    student_id: str
    username: str
    created_at: datetime
    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegisterResponse(BaseModel):
    user: UserOut
    access_token: str
    token_type: str = "bearer"
