from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from app.api.deps import get_user_service
from app.models.user import UserRole
from app.schemas.base import Message, to_local_naive
from app.schemas.user import User, UserCreate, UserUpdate, UserLogin, RoleUpdate
from app.services.users import UserService

router = APIRouter()


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(user_in: UserCreate, users: UserService = Depends(get_user_service)):
    """Sign up a new account"""
    return users.create(user_in)


@router.get("", response_model=List[User])
def list_active_users(users: UserService = Depends(get_user_service)):
    """List all active accounts"""
    return users.list_active()


@router.post(
    "/validate",
    response_model=Message,
    responses={status.HTTP_401_UNAUTHORIZED: {"model": Message}},
)
def validate_credentials(credentials: UserLogin, users: UserService = Depends(get_user_service)):
    """Check a username/password pair without issuing any token"""
    if users.validate_credentials(credentials.username, credentials.password):
        return Message(message="Credentials are valid")
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"message": "Invalid credentials"},
    )


@router.get("/username/{username}", response_model=User)
def read_user_by_username(username: str, users: UserService = Depends(get_user_service)):
    user = users.get_by_username(username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/role/{role}", response_model=List[User])
def list_active_users_by_role(role: UserRole, users: UserService = Depends(get_user_service)):
    return users.list_active_by_role(role)


@router.get("/created-after", response_model=List[User])
def list_users_created_after(
    since: datetime = Query(..., description="Exclusive lower bound on the creation time"),
    users: UserService = Depends(get_user_service),
):
    """Accounts created after a moment, newest first"""
    return users.list_created_after(to_local_naive(since))


@router.get("/{user_id}", response_model=User)
def read_user(user_id: int, users: UserService = Depends(get_user_service)):
    user = users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("/{user_id}", response_model=User)
def update_user(user_id: int, user_in: UserUpdate, users: UserService = Depends(get_user_service)):
    """Replace account details; password is re-hashed only when a new one is given"""
    return users.update(user_id, user_in)


@router.delete("/{user_id}", response_model=Message)
def deactivate_user(user_id: int, users: UserService = Depends(get_user_service)):
    """Soft delete: the account is deactivated, not removed"""
    users.deactivate(user_id)
    return Message(message="User deactivated successfully")


@router.put("/{user_id}/activate", response_model=Message)
def activate_user(user_id: int, users: UserService = Depends(get_user_service)):
    users.activate(user_id)
    return Message(message="User activated successfully")


@router.put("/{user_id}/role", response_model=Message)
def update_user_role(user_id: int, role_in: RoleUpdate, users: UserService = Depends(get_user_service)):
    users.update_role(user_id, role_in.role)
    return Message(message="User role updated successfully")
