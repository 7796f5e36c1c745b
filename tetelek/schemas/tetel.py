"""Wire shapes for study items, shared by the API routes and the client."""

from pydantic import BaseModel, field_validator


class TetelSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class Subsection(BaseModel):
    id: int
    title: str | None = None
    description: str | None = None

    class Config:
        from_attributes = True


class Section(BaseModel):
    id: int
    content: str = ''
    subsections: list[Subsection] | None = None

    @field_validator('content', mode='before')
    @classmethod
    def default_content(cls, value: str | None) -> str:
        return value or ''

    class Config:
        from_attributes = True


class Osszegzes(BaseModel):
    id: int | None = None
    content: str | None = None

    class Config:
        from_attributes = True


class TetelDetailsResponse(BaseModel):
    tetel: TetelSummary
    sections: list[Section] = []
    osszegzes: Osszegzes | None = None


class UpdateTetelRequest(BaseModel):
    name: str
    osszegzes: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('A tétel neve nem lehet üres.')
        return normalized

    @field_validator('osszegzes')
    @classmethod
    def normalize_osszegzes(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None
