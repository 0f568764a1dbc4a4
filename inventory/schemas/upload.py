from pydantic import BaseModel


class UploadedFile(BaseModel):
    """Metadata of a stored upload."""
    filename: str
    originalName: str
    mimetype: str
    size: int
    url: str


class UploadResponse(BaseModel):
    success: bool = True
    message: str = "File uploaded successfully"
    file: UploadedFile


class FileDeleteResponse(BaseModel):
    success: bool = True
    message: str = "File deleted successfully"
    filename: str
