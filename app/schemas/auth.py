from pydantic import BaseModel

class LoginRequest(BaseModel):
    # Empty defaults so missing fields get the console's messages instead of a 422
    email: str = ""
    password: str = ""

class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
