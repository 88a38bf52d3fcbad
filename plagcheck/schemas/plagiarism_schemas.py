from pydantic import BaseModel, ConfigDict, Field
from typing import List

from plagcheck.config import MIN_TEXT_LENGTH


class CheckTextRequest(BaseModel):
    # length is measured after stripping surrounding whitespace
    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(..., min_length=MIN_TEXT_LENGTH)


class SourceMatch(BaseModel):
    url: str
    similarity: int  # percent (0–100)


class SentenceResult(BaseModel):
    sentence: str
    similarity: int  # best source, percent (0–100)
    sources: List[SourceMatch] = Field(default_factory=list)
    isPlagiarized: bool = False


class PlagiarismReport(BaseModel):
    overallScore: int
    plagiarismPercentage: int
    totalSentences: int
    plagiarizedSentences: int
    results: List[SentenceResult] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
