"""
Users API routes

The router only parses path and body parameters and hands them to the
service; NotFoundError and store failures reach the centralized handlers.
"""

from typing import List
from fastapi import APIRouter, Depends, Response, status

from models.user import User, UserCreateRequest, UserUpdateRequest
from services.users_service import UsersService, get_users_service

router = APIRouter()


@router.get("", response_model=List[User])
async def list_users(
    users_service: UsersService = Depends(get_users_service)
):
    """List all users"""
    return await users_service.find_all()


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreateRequest,
    users_service: UsersService = Depends(get_users_service)
):
    """Create a new user"""
    return await users_service.create(request.model_dump())


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: int,
    users_service: UsersService = Depends(get_users_service)
):
    """Get user details"""
    return await users_service.find_one(user_id)


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: int,
    request: UserUpdateRequest,
    users_service: UsersService = Depends(get_users_service)
):
    """Update the fields sent in the request body"""
    return await users_service.update(user_id, request.model_dump(exclude_unset=True))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    users_service: UsersService = Depends(get_users_service)
):
    """Delete a user"""
    await users_service.remove(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
