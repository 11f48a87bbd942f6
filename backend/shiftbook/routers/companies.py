"""勤務先（公司）CRUD：僅能存取自己的公司。"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.database import get_db
from shiftbook.deps import get_current_user
from shiftbook.models import User
from shiftbook import crud, schemas
from shiftbook.crud import CompanyNameConflictError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/companies", tags=["companies"])

COMPANY_NOT_FOUND = "会社が見つかりません"

RESPONSE_404 = {
    404: {
        "description": "資源不存在",
        "content": {"application/json": {"example": {"detail": COMPANY_NOT_FOUND}}},
    }
}

RESPONSE_409 = {
    409: {
        "description": "名稱重複",
        "content": {"application/json": {"example": {"detail": "同じ名前の会社がすでに存在します"}}},
    }
}


@router.get("", response_model=List[schemas.CompanyRead], summary="公司列表（依名稱排序）")
async def list_companies(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items = await crud.list_companies(db, user.id)
    return [schemas.CompanyRead.model_validate(c) for c in items]


@router.get("/{company_id}", response_model=schemas.CompanyRead, summary="取得單一公司", responses=RESPONSE_404)
async def get_company(
    company_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    c = await crud.get_company(db, user.id, company_id)
    if not c:
        raise HTTPException(status_code=404, detail=COMPANY_NOT_FOUND)
    return schemas.CompanyRead.model_validate(c)


@router.post("", response_model=schemas.CompanyRead, status_code=201, summary="新增公司", responses=RESPONSE_409)
async def create_company(
    data: schemas.CompanyCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        c = await crud.create_company(db, user.id, data)
    except CompanyNameConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except IntegrityError:
        logger.exception("create company failed for user %s", user.id)
        raise HTTPException(status_code=409, detail="同じ名前の会社がすでに存在します")
    return schemas.CompanyRead.model_validate(c)


@router.patch("/{company_id}", response_model=schemas.CompanyRead, summary="更新公司", responses={**RESPONSE_404, **RESPONSE_409})
async def update_company(
    company_id: int,
    data: schemas.CompanyUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    c = await crud.get_company(db, user.id, company_id)
    if not c:
        raise HTTPException(status_code=404, detail=COMPANY_NOT_FOUND)
    try:
        c = await crud.update_company(db, c, data)
    except CompanyNameConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except IntegrityError:
        logger.exception("update company %s failed", company_id)
        raise HTTPException(status_code=409, detail="同じ名前の会社がすでに存在します")
    return schemas.CompanyRead.model_validate(c)


@router.delete("/{company_id}", status_code=204, summary="刪除公司（シフト保留，顯示為 Unknown）", responses=RESPONSE_404)
async def delete_company(
    company_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    c = await crud.get_company(db, user.id, company_id)
    if not c:
        raise HTTPException(status_code=404, detail=COMPANY_NOT_FOUND)
    await crud.delete_company(db, c)
