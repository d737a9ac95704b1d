from pydantic import BaseModel, EmailStr, Field

class Login(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class AdminLogin(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"

class MessageResponse(BaseModel):
    message: str
