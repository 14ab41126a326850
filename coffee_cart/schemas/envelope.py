from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

class RsData(BaseModel, Generic[T]):
    """백엔드 공통 응답 포맷: {resultCode, msg, data}"""
    model_config = ConfigDict(populate_by_name=True)

    result_code: str = Field(alias="resultCode")
    msg: str | None = None
    data: T

    @property
    def is_success(self) -> bool:
        # "200-1", "201-1" 처럼 HTTP 상태코드 접두 형태
        return self.result_code.startswith("2")
