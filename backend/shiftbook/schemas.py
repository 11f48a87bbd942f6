"""API 請求/回應結構 - Pydantic（使用者、公司、シフト與衍生統計）"""
from datetime import date, datetime, time
from decimal import Decimal

# 別名：欄位名 date 與型別 date 會觸發 Pydantic 的 field name clashing，改用 DateType 註解
DateType = date
from typing import Optional, List, Dict, Any
import re
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from shiftbook.models import COMPANY_COLORS
from shiftbook.services.wage_calc import ensure_valid_shift_times


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_email(v: str) -> str:
    v = (v or "").strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("メールアドレスの形式が正しくありません")
    return v


def validate_company_color(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    v = v.strip().lower()
    if v not in COMPANY_COLORS:
        raise ValueError(f"色は次のいずれかを指定してください: {list(COMPANY_COLORS)}")
    return v


# ---------- 認證 ----------
class SignUpRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


class SignInRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


class UserRead(BaseModel):
    id: int
    email: str
    user_metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

    @field_validator("user_metadata", mode="before")
    @classmethod
    def metadata_default(cls, v):
        return v or {}


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserRead


class ProfileUpdate(BaseModel):
    """個人資料更新：只更新有傳的 key，與既有 user_metadata 合併。"""
    name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)


class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("新しいパスワードが一致しません")
        return self


# ---------- 公司 ----------
class CompanyBase(BaseModel):
    name: str = Field(..., max_length=100, description="公司名稱")
    hourly_wage: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="時給（須大於 0）")
    color: Optional[str] = Field(None, description="emerald / red / blue / orange / purple / yellow")

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("会社名を入力してください")
        return v

    @field_validator("color")
    @classmethod
    def check_color(cls, v: Optional[str]) -> Optional[str]:
        return validate_company_color(v)


class CompanyCreate(CompanyBase):
    pass


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    hourly_wage: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("会社名を入力してください")
        return v

    @field_validator("color")
    @classmethod
    def check_color(cls, v: Optional[str]) -> Optional[str]:
        return validate_company_color(v)


class CompanyRead(CompanyBase):
    id: int
    user_id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- シフト ----------
class ShiftBase(BaseModel):
    company_id: int = Field(..., description="公司 ID")
    date: DateType = Field(..., description="勤務日")
    start_time: time = Field(..., description="開始時間 HH:MM")
    end_time: time = Field(..., description="結束時間 HH:MM（須晚於開始，不支援跨日）")
    memo: Optional[str] = Field(None, max_length=1000, description="備註")


class ShiftCreate(ShiftBase):
    @model_validator(mode="after")
    def end_after_start(self):
        ensure_valid_shift_times(self.start_time, self.end_time)
        return self


class ShiftUpdate(BaseModel):
    """部分更新；與既有資料合併後的時間區間由 router 再檢查。"""
    company_id: Optional[int] = None
    date: Optional[DateType] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    memo: Optional[str] = Field(None, max_length=1000)


class ShiftRead(ShiftBase):
    id: int
    user_id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class WageEstimateRequest(BaseModel):
    """シフト入力時的預估收入"""
    company_id: int
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def end_after_start(self):
        ensure_valid_shift_times(self.start_time, self.end_time)
        return self


class WageEstimate(BaseModel):
    hours: float = Field(..., description="工時（小時）")
    pay: int = Field(..., description="收入（四捨五入到整數）")


# ---------- 衍生資料（不落表） ----------
class CalendarEvent(BaseModel):
    """月曆事件：start/end 為 date + 時間組成的本地時間（naive）。"""
    id: int
    title: str
    start: datetime
    end: datetime
    company_id: int
    color_class: str


class CompanyStats(BaseModel):
    """公司別月統計：出勤日數（相異日期數）、工時合計。"""
    company_id: int
    name: str
    working_days: int = 0
    working_hours: float = 0.0
    color_class: str


class MonthlyStats(BaseModel):
    total_hours: float = Field(0.0, description="總工時（小數一位）")
    total_salary: int = Field(0, description="總收入（整數）")


class MonthlyShiftSummary(BaseModel):
    """某月統計：全體 + 公司別"""
    year: int
    month: int
    stats: MonthlyStats
    companies: List[CompanyStats] = Field(default_factory=list)


class ShiftLedgerEntry(BaseModel):
    """シフト一覧的一列：工時與收入"""
    id: int
    date: DateType
    company_id: int
    company_name: str
    start_time: time
    end_time: time
    hours: float
    pay: int
    memo: Optional[str] = None


class ShiftLedger(BaseModel):
    entries: List[ShiftLedgerEntry] = Field(default_factory=list)
    total_hours: float = 0.0
    total_pay: int = 0
