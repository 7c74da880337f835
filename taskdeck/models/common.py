from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error_code: str
    message: str


class StatusResponse(BaseModel):
    tasks_file: str
    task_count: int
    zip_table_entries: int
