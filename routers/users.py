from fastapi import APIRouter, HTTPException

from dependencies import CurrentUser, DbSession
from repository import users_repo
from schemas import user_schema

user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.get("/me", response_model=user_schema.UserMeResponse)
async def read_users_me(current_user: CurrentUser):
    return current_user


@user_router.put("/me/team", response_model=user_schema.UserMeResponse)
def update_my_team(body: user_schema.TeamUpdate, current_user: CurrentUser, db: DbSession):
    """The team decides which player of the day the user plays."""
    try:
        return users_repo.update_team(db, current_user.id, body.team_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
