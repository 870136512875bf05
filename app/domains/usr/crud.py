# app/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업을 담당하는 모듈입니다.
테넌트/부서/역할/사용자의 생성 시 소속 테넌트와 중복 여부를 먼저 검사합니다.
"""

import logging
from datetime import datetime, UTC
from typing import List, Optional

from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import HTTPException, status

from app.core.crud_base import CRUDBase
from app.core.security import get_password_hash, verify_password
from . import models as usr_models
from . import schemas as usr_schemas

logger = logging.getLogger(__name__)


# =============================================================================
# 1. usr.tenants 테이블 CRUD
# =============================================================================
class CRUDTenant(CRUDBase[usr_models.Tenant, usr_schemas.TenantCreate, usr_schemas.TenantUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.Tenant)

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[usr_models.Tenant]:
        return await self.get_by_attribute(db, attribute="code", value=code)

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.TenantCreate) -> usr_models.Tenant:
        if await self.get_by_code(db, code=obj_in.code):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tenant with this code already exists")
        return await super().create(db, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, id: int) -> usr_models.Tenant:
        """
        테넌트를 삭제합니다. 소속 사용자나 부서가 남아 있으면 삭제를 거부합니다.
        """
        tenant = await self.get(db, id=id)
        if not tenant:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")

        if await user.count(db, tenant_id=id) or await department.count(db, tenant_id=id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete tenant: associated users or departments exist."
            )
        return await super().delete(db, id=id)


tenant = CRUDTenant()


# =============================================================================
# 2. usr.departments 테이블 CRUD
# =============================================================================
class CRUDDepartment(CRUDBase[usr_models.Department, usr_schemas.DepartmentCreate, usr_schemas.DepartmentUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.Department)

    async def get_by_code(self, db: AsyncSession, *, tenant_id: int, code: str) -> Optional[usr_models.Department]:
        """테넌트 내에서 부서 코드로 부서를 조회합니다."""
        return await self.get_one_filtered(db, filters={"tenant_id": tenant_id, "code": code})

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.DepartmentCreate) -> usr_models.Department:
        if not await tenant.get(db, id=obj_in.tenant_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tenant not found")
        if await self.get_by_code(db, tenant_id=obj_in.tenant_id, code=obj_in.code):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department with this code already exists")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: usr_models.Department, obj_in: usr_schemas.DepartmentUpdate
    ) -> usr_models.Department:
        if obj_in.code and obj_in.code != db_obj.code:
            if await self.get_by_code(db, tenant_id=db_obj.tenant_id, code=obj_in.code):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department with this code already exists")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, id: int) -> usr_models.Department:
        """
        부서를 삭제합니다. 관련된 사용자가 있다면 삭제를 거부합니다.
        """
        department_to_delete = await self.get(db, id=id)
        if not department_to_delete:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")

        if await user.count(db, department_id=id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete department: associated users exist. "
                       "Please reassign or delete associated users first."
            )
        return await super().delete(db, id=id)


department = CRUDDepartment()


# =============================================================================
# 3. usr.roles 테이블 CRUD
# =============================================================================
class CRUDRole(CRUDBase[usr_models.Role, usr_schemas.RoleCreate, usr_schemas.RoleUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.Role)

    async def get_by_name(self, db: AsyncSession, *, tenant_id: int, name: str) -> Optional[usr_models.Role]:
        return await self.get_one_filtered(db, filters={"tenant_id": tenant_id, "name": name})

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.RoleCreate) -> usr_models.Role:
        if not await tenant.get(db, id=obj_in.tenant_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tenant not found")
        if await self.get_by_name(db, tenant_id=obj_in.tenant_id, name=obj_in.name):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Role with this name already exists")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: usr_models.Role, obj_in: usr_schemas.RoleUpdate
    ) -> usr_models.Role:
        if obj_in.name and obj_in.name != db_obj.name:
            if await self.get_by_name(db, tenant_id=db_obj.tenant_id, name=obj_in.name):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Role with this name already exists")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, id: int) -> usr_models.Role:
        """역할을 삭제합니다. 해당 역할이 할당된 사용자가 있다면 삭제를 거부합니다."""
        role_to_delete = await self.get(db, id=id)
        if not role_to_delete:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")

        links = await db.execute(select(usr_models.UserRoleLink).where(usr_models.UserRoleLink.role_id == id))
        if links.scalars().first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete role: it is assigned to users."
            )
        return await super().delete(db, id=id)


role = CRUDRole()


# =============================================================================
# 4. usr.users 테이블 CRUD
# =============================================================================
class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[usr_models.User]:
        """사용자명으로 사용자를 조회합니다."""
        return await self.get_by_attribute(db, attribute="username", value=username)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        """이메일로 사용자를 조회합니다."""
        return await self.get_by_attribute(db, attribute="email", value=email)

    async def get_with_roles(self, db: AsyncSession, *, id: int) -> Optional[usr_models.User]:
        """역할(roles) 컬렉션을 미리 로드한 상태로 사용자를 조회합니다."""
        statement = (
            select(usr_models.User)
            .where(usr_models.User.id == id)
            .options(selectinload(usr_models.User.roles))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().first()

    async def _resolve_roles(self, db: AsyncSession, *, tenant_id: int, role_ids: List[int]) -> List[usr_models.Role]:
        """
        role_ids에 해당하는 역할을 조회합니다.
        존재하지 않거나 다른 테넌트의 역할이 포함되면 400 오류를 발생시킵니다.
        """
        if not role_ids:
            return []
        unique_ids = sorted(set(role_ids))
        result = await db.execute(
            select(usr_models.Role).where(
                usr_models.Role.id.in_(unique_ids),
                usr_models.Role.tenant_id == tenant_id,
            )
        )
        roles = result.scalars().all()
        missing = set(unique_ids) - {r.id for r in roles}
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Roles not found: {sorted(missing)}"
            )
        return list(roles)

    async def _validate_department(self, db: AsyncSession, *, tenant_id: int, department_id: Optional[int]) -> None:
        if department_id is None:
            return
        db_department = await department.get(db, id=department_id)
        if not db_department or db_department.tenant_id != tenant_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department not found")

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱하고 중복을 검사합니다."""
        if not await tenant.get(db, id=obj_in.tenant_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tenant not found")
        if await self.get_by_username(db, username=obj_in.username):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already registered")
        if await self.get_by_email(db, email=obj_in.email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
        await self._validate_department(db, tenant_id=obj_in.tenant_id, department_id=obj_in.department_id)
        roles = await self._resolve_roles(db, tenant_id=obj_in.tenant_id, role_ids=obj_in.role_ids)

        user_data = obj_in.model_dump(exclude={"password", "role_ids"})
        db_user = usr_models.User(**user_data, password_hash=get_password_hash(obj_in.password))
        db_user.roles = roles

        db.add(db_user)
        await db.commit()
        logger.info("사용자 생성: %s (tenant_id=%s)", db_user.username, db_user.tenant_id)
        return await self.get_with_roles(db, id=db_user.id)

    async def update(self, db: AsyncSession, *, db_obj: usr_models.User, obj_in: usr_schemas.UserUpdate) -> usr_models.User:
        """
        사용자 정보를 업데이트합니다. 최고 관리자 계정의 권한 변경 및 비활성화를 방지합니다.
        role_ids가 주어지면 역할 할당을 통째로 교체합니다.
        """
        if db_obj.access_level == usr_models.AccessLevel.SUPERUSER:
            if obj_in.access_level is not None and obj_in.access_level != usr_models.AccessLevel.SUPERUSER:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot change the access level of a superuser account."
                )
            if obj_in.is_active is False:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot deactivate a superuser account."
                )
        elif obj_in.access_level == usr_models.AccessLevel.SUPERUSER:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Promotion to superuser is not allowed."
            )

        if obj_in.email is not None and obj_in.email != db_obj.email:
            existing = await self.get_by_email(db, email=obj_in.email)
            if existing and existing.id != db_obj.id:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
        if obj_in.department_id is not None:
            await self._validate_department(db, tenant_id=db_obj.tenant_id, department_id=obj_in.department_id)

        user_id = db_obj.id
        db_obj = await self.get_with_roles(db, id=user_id)
        update_data = obj_in.model_dump(exclude_unset=True, exclude={"role_ids"})
        for key, value in update_data.items():
            setattr(db_obj, key, value)
        if obj_in.role_ids is not None:
            db_obj.roles = await self._resolve_roles(db, tenant_id=db_obj.tenant_id, role_ids=obj_in.role_ids)

        db.add(db_obj)
        await db.commit()
        return await self.get_with_roles(db, id=user_id)

    async def authenticate(self, db: AsyncSession, *, username: str, password: str) -> Optional[usr_models.User]:
        """사용자명과 비밀번호를 사용하여 사용자를 인증합니다."""
        db_user = await self.get_by_username(db, username=username)
        if not db_user:
            return None
        if not verify_password(password, db_user.password_hash):
            return None
        return db_user

    async def record_login(self, db: AsyncSession, *, db_obj: usr_models.User) -> usr_models.User:
        """마지막 로그인 시각을 현재 시각으로 갱신합니다."""
        db_obj.last_login = datetime.now(UTC)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def change_password(
        self, db: AsyncSession, *, db_obj: usr_models.User, current_password: str, new_password: str
    ) -> usr_models.User:
        """현재 비밀번호를 확인한 뒤 새 비밀번호로 교체합니다."""
        if not verify_password(current_password, db_obj.password_hash):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
        db_obj.password_hash = get_password_hash(new_password)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def remove(self, db: AsyncSession, *, id: int) -> usr_models.User:
        """
        사용자를 삭제합니다. 최고 관리자 계정은 삭제를 허용하지 않습니다.
        """
        user_to_delete = await self.get(db, id=id)
        if not user_to_delete:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        if user_to_delete.access_level == usr_models.AccessLevel.SUPERUSER:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a superuser account directly."
            )

        links = await db.execute(select(usr_models.UserRoleLink).where(usr_models.UserRoleLink.user_id == id))
        for link in links.scalars().all():
            await db.delete(link)
        await db.flush()
        return await super().delete(db, id=id)


user = CRUDUser()
