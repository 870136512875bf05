# app/domains/usr/routers.py

"""
'usr' 도메인 (인증, 테넌트, 부서, 역할, 사용자 관리)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List, Optional
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.database import get_session
from app.core import dependencies as deps
from app.core.security import create_access_token, create_refresh_token

from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas


router = APIRouter(
    tags=["User & Tenant Management (사용자 및 테넌트 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트
# =============================================================================

@router.post("/auth/token", response_model=usr_schemas.Token, summary="Access Token 획득")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session),
):
    user = await usr_crud.user.authenticate(
        db, username=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")

    await usr_crud.user.record_login(db, db_obj=user)

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(data={"sub": user.username}, expires_delta=access_token_expires)
    refresh_token = create_refresh_token(data={"sub": user.username})
    return {"access_token": access_token, "token_type": "bearer", "refresh_token": refresh_token}


@router.get("/auth/me", response_model=usr_schemas.UserReadWithRoles, summary="현재 사용자 정보 조회")
async def read_users_me(
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await usr_crud.user.get_with_roles(db, id=current_user.id)


@router.post("/users/{user_id}/change-password", status_code=status.HTTP_204_NO_CONTENT, summary="비밀번호 변경")
async def change_password(
    user_id: int,
    password_in: usr_schemas.PasswordChange,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """로그인한 사용자 본인의 비밀번호만 변경할 수 있습니다."""
    if user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions to change other user's password."
        )
    await usr_crud.user.change_password(
        db,
        db_obj=current_user,
        current_password=password_in.current_password,
        new_password=password_in.new_password,
    )
    return None


# =============================================================================
# 2. 테넌트 (Tenant) 관리 엔드포인트
# =============================================================================

@router.post("/tenants", response_model=usr_schemas.TenantRead, status_code=status.HTTP_201_CREATED, summary="새 테넌트 생성")
async def create_tenant(
    tenant_in: usr_schemas.TenantCreate,
    db: AsyncSession = Depends(get_session),
    current_superuser: usr_models.User = Depends(deps.get_current_superuser),
):
    return await usr_crud.tenant.create(db, obj_in=tenant_in)


@router.get("/tenants", response_model=List[usr_schemas.TenantRead], summary="모든 테넌트 조회")
async def read_tenants(
    db: AsyncSession = Depends(get_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.tenant.get_multi(db, skip=skip, limit=limit)


@router.get("/tenants/{tenant_id}", response_model=usr_schemas.TenantRead, summary="특정 테넌트 조회")
async def read_tenant(
    tenant_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    tenant = await usr_crud.tenant.get(db, id=tenant_id)
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return tenant


@router.put("/tenants/{tenant_id}", response_model=usr_schemas.TenantRead, summary="테넌트 업데이트")
async def update_tenant(
    tenant_id: int,
    tenant_in: usr_schemas.TenantUpdate,
    db: AsyncSession = Depends(get_session),
    current_superuser: usr_models.User = Depends(deps.get_current_superuser),
):
    db_tenant = await usr_crud.tenant.get(db, id=tenant_id)
    if not db_tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return await usr_crud.tenant.update(db, db_obj=db_tenant, obj_in=tenant_in)


@router.delete("/tenants/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT, summary="테넌트 삭제")
async def delete_tenant(
    tenant_id: int,
    db: AsyncSession = Depends(get_session),
    current_superuser: usr_models.User = Depends(deps.get_current_superuser),
):
    await usr_crud.tenant.remove(db, id=tenant_id)
    return None


# =============================================================================
# 3. 부서 (Department) 관리 엔드포인트
# =============================================================================

@router.post("/departments", response_model=usr_schemas.DepartmentRead, status_code=status.HTTP_201_CREATED, summary="새 부서 생성")
async def create_department(
    department: usr_schemas.DepartmentCreate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.department.create(db, obj_in=department)


@router.get("/departments", response_model=List[usr_schemas.DepartmentRead], summary="부서 목록 조회")
async def read_departments(
    tenant_id: Optional[int] = Query(None, description="테넌트 ID로 필터링"),
    db: AsyncSession = Depends(get_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    filters = {"tenant_id": tenant_id} if tenant_id is not None else {}
    return await usr_crud.department.get_multi(db, skip=skip, limit=limit, **filters)


@router.get("/departments/{department_id}", response_model=usr_schemas.DepartmentRead, summary="특정 부서 조회")
async def read_department(
    department_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    department = await usr_crud.department.get(db, id=department_id)
    if not department:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    return department


@router.put("/departments/{department_id}", response_model=usr_schemas.DepartmentRead, summary="부서 업데이트")
async def update_department(
    department_id: int,
    department_in: usr_schemas.DepartmentUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    db_department = await usr_crud.department.get(db, id=department_id)
    if not db_department:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    return await usr_crud.department.update(db, db_obj=db_department, obj_in=department_in)


@router.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT, summary="부서 삭제")
async def delete_department(
    department_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await usr_crud.department.remove(db, id=department_id)
    return None


# =============================================================================
# 4. 역할 (Role) 관리 엔드포인트
# =============================================================================

@router.post("/roles", response_model=usr_schemas.RoleRead, status_code=status.HTTP_201_CREATED, summary="새 역할 생성")
async def create_role(
    role_in: usr_schemas.RoleCreate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.role.create(db, obj_in=role_in)


@router.get("/roles", response_model=List[usr_schemas.RoleRead], summary="역할 목록 조회")
async def read_roles(
    tenant_id: Optional[int] = Query(None, description="테넌트 ID로 필터링"),
    db: AsyncSession = Depends(get_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    filters = {"tenant_id": tenant_id} if tenant_id is not None else {}
    return await usr_crud.role.get_multi(db, skip=skip, limit=limit, **filters)


@router.put("/roles/{role_id}", response_model=usr_schemas.RoleRead, summary="역할 업데이트")
async def update_role(
    role_id: int,
    role_in: usr_schemas.RoleUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    db_role = await usr_crud.role.get(db, id=role_id)
    if not db_role:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")
    return await usr_crud.role.update(db, db_obj=db_role, obj_in=role_in)


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT, summary="역할 삭제")
async def delete_role(
    role_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await usr_crud.role.remove(db, id=role_id)
    return None


# =============================================================================
# 5. 사용자 (User) 관리 엔드포인트
# =============================================================================
@router.post("/users", response_model=usr_schemas.UserReadWithRoles, status_code=status.HTTP_201_CREATED, summary="새 사용자 생성")
async def create_user(
    user: usr_schemas.UserCreate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    if user.access_level == usr_models.AccessLevel.SUPERUSER and \
            current_admin_user.access_level != usr_models.AccessLevel.SUPERUSER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a superuser can create another superuser."
        )
    return await usr_crud.user.create(db, obj_in=user)


@router.get("/users", response_model=List[usr_schemas.UserRead], summary="사용자 목록 조회")
async def read_users(
    tenant_id: Optional[int] = Query(None, description="테넌트 ID로 필터링"),
    db: AsyncSession = Depends(get_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """
    사용자 목록을 조회합니다.
    - 관리자(SUPERUSER, ADMIN)는 모든 사용자를 조회할 수 있습니다.
    - 그 외 사용자는 자신의 정보만 조회합니다.
    """
    if not current_user.is_admin:
        return [current_user]

    filters = {"tenant_id": tenant_id} if tenant_id is not None else {}
    return await usr_crud.user.get_multi(db, skip=skip, limit=limit, **filters)


@router.get("/users/{user_id}", response_model=usr_schemas.UserReadWithRoles, summary="특정 사용자 조회")
async def read_user(
    user_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """
    ID로 특정 사용자 정보를 조회합니다.
    일반 사용자는 자신의 정보만 조회할 수 있습니다.
    """
    if not current_user.is_admin and user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions to view other user's information."
        )
    user = await usr_crud.user.get_with_roles(db, id=user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("/users/{user_id}", response_model=usr_schemas.UserReadWithRoles, summary="사용자 업데이트")
async def update_user(
    user_id: int,
    user_in: usr_schemas.UserUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """
    ID로 사용자 정보를 업데이트합니다.
    일반 사용자는 자신의 정보만 수정할 수 있으며 접근 레벨/역할/활성 상태는 변경할 수 없습니다.
    """
    db_user = await usr_crud.user.get(db, user_id)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if not current_user.is_admin:
        if db_user.id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions to update other user's information."
            )
        if user_in.access_level is not None or user_in.role_ids is not None or user_in.is_active is not None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions to change access level, roles or status."
            )
    return await usr_crud.user.update(db, db_obj=db_user, obj_in=user_in)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="사용자 삭제")
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    """
    ID로 사용자를 삭제합니다. 관리자 권한이 필요하며 자기 자신은 삭제할 수 없습니다.
    """
    if user_id == current_admin_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account.")
    await usr_crud.user.remove(db, id=user_id)
    return None
