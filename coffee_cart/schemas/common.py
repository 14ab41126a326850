from pydantic import BaseModel, ConfigDict

class WireModel(BaseModel):
    """백엔드(camelCase) JSON과 파이썬 필드명을 alias로 매핑하는 공통 베이스"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)
