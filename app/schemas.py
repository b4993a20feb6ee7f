from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.settings import get_settings

settings = get_settings()


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    keyword: str | None = None
    start_time: str | None = Field(default=None, alias='startTime')
    end_time: str | None = Field(default=None, alias='endTime')
    index: str | None = None
    size: int = settings.SEARCH_DEFAULT_SIZE
    namespace: str | None = None
    container: str | None = None

    @field_validator('size', mode='before')
    @classmethod
    def clamp_size(cls, value):
        if value is None or int(value) <= 0:
            return settings.SEARCH_DEFAULT_SIZE
        return min(int(value), settings.SEARCH_MAX_SIZE)


class LogSearchRequest(SearchRequest):
    cookie: str | None = None


class RequestContext(BaseModel):
    cookie: str | None = None
    namespace: str | None = None
    container: str | None = None


class TimeRange(BaseModel):
    start: str
    end: str


class ParsedHits(BaseModel):
    hits: list[dict]
    total: int


class SearchHit(BaseModel):
    timestamp: str | None = None
    message: str | None = None
    level: str | None = None


class SearchResult(BaseModel):
    total: int
    entries: list[SearchHit]
    truncated: bool = False


class SearchOutcome(BaseModel):
    text: str
    ok: bool


class SearchResponse(BaseModel):
    result: str


class ChatRequest(BaseModel):
    message: str = Field(..., max_length=4000)
    cookie: str | None = None
    namespace: str | None = None
    container: str | None = None


class AgentResponse(BaseModel):
    answer: str
