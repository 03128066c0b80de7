"""Request models for the clip-extractor API."""

from pydantic import BaseModel, ConfigDict, Field

from clip_extractor.domain import ExtractionJob


class ExtractionRequest(BaseModel):
    """Body of a clip extraction request."""

    model_config = ConfigDict(populate_by_name=True)

    source_file_id: str = Field(alias="sourceFileId")
    clip_start_time: str = Field(alias="clipStartTime", examples=["00:01:23"])
    clip_end_time: str = Field(alias="clipEndTime", examples=["00:02:34"])
    destination_folder_id: str = Field(alias="destinationFolderId")

    def to_job(self) -> ExtractionJob:
        return ExtractionJob(
            source_id=self.source_file_id,
            clip_start=self.clip_start_time,
            clip_end=self.clip_end_time,
            destination=self.destination_folder_id,
        )
