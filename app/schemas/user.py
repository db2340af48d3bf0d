from pydantic import BaseModel, Field


class CreateUserResult(BaseModel):
    id: int
    email: str
    password: str
    name: str
    gender: str
    age: int

    model_config = {"from_attributes": True}


class CreateUserResponse(BaseModel):
    result: CreateUserResult


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    token: str
