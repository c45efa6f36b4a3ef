from typing import List, Literal, Optional

from pydantic import BaseModel, Field

RowStatus = Literal["processed", "skipped", "failed"]


class RowResult(BaseModel):
  id: str
  status: RowStatus
  message: Optional[str] = None
  createdId: Optional[str] = None


class BatchResult(BaseModel):
  success: bool
  processedCount: int = 0
  succeeded: int = 0
  skipped: int = 0
  failed: int = 0
  results: List[RowResult] = Field(default_factory=list)
  error: Optional[str] = None

  @classmethod
  def from_rows(cls, results: List[RowResult]) -> "BatchResult":
    return cls(
      success=True,
      processedCount=len(results),
      succeeded=sum(1 for r in results if r.status == "processed"),
      skipped=sum(1 for r in results if r.status == "skipped"),
      failed=sum(1 for r in results if r.status == "failed"),
      results=results,
    )

  @classmethod
  def fatal(cls, error: str) -> "BatchResult":
    return cls(success=False, error=error)

  def summary(self) -> str:
    if not self.success:
      return f"failed: {self.error}"
    return f"{self.processedCount} rows, {self.succeeded} processed, {self.skipped} skipped, {self.failed} failed"


class CycleReport(BaseModel):
  startedAt: str
  finishedAt: Optional[str] = None
  reminders: Optional[BatchResult] = None
  recurring: Optional[BatchResult] = None
  error: Optional[str] = None
