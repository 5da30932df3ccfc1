from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, constr
from typing import List, Literal
from quizgen.core.auth import create_token
from quizgen.core.config import settings

router = APIRouter()

Role = Literal["student", "author", "admin"]

class MockLogin(BaseModel):
    user_id: constr(min_length=1, max_length=36)
    roles: List[Role]

@router.post("/mock-login")
def mock_login(payload: MockLogin):
    """Issue a bearer token for any user id. Development helper; disabled in production."""
    if settings.is_production():
        raise HTTPException(404, "Not found")
    token = create_token(payload.user_id, list(payload.roles))
    return {"access_token": token, "token_type": "bearer", "user_id": payload.user_id, "roles": payload.roles}
